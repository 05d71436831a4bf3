"""User model"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, Index, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from storefront.core.database import Base


class User(Base):
    """Customer or administrator identity"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    bio = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    phone_number = Column(String(50), nullable=True)
    gender = Column(String(10), nullable=True)
    birthday = Column(Date, nullable=True)
    role = Column(String(20), default="user", nullable=False, index=True)
    is_banned = Column(Boolean, default=False, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    auth_provider = Column(String(20), default="local", nullable=False)
    auth_provider_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")
    password_resets = relationship("PasswordResetToken", back_populates="user", cascade="all, delete-orphan")
    addresses = relationship("Address", back_populates="user", cascade="all, delete-orphan")
    wishlist = relationship("WishlistEntry", back_populates="user", cascade="all, delete-orphan")
    recently_viewed = relationship("RecentlyViewed", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_provider', 'auth_provider', 'auth_provider_id'),
        CheckConstraint("role IN ('user', 'admin')", name="chk_users_role"),
        CheckConstraint("auth_provider IN ('local', 'google', 'apple')", name="chk_users_auth_provider"),
        CheckConstraint("gender IS NULL OR gender IN ('male', 'female', 'other')", name="chk_users_gender"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
