"""Wishlist and browsing history models"""

from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from storefront.core.database import Base
from storefront.core.security import utcnow


class WishlistEntry(Base):
    """Product saved by a user"""

    __tablename__ = "wishlists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="wishlist")
    product = relationship("Item")

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_wishlist_user_product'),
    )


class RecentlyViewed(Base):
    """Last time a user opened a product page"""

    __tablename__ = "recently_viewed"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    viewed_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="recently_viewed")
    product = relationship("Item")

    __table_args__ = (
        UniqueConstraint('user_id', 'product_id', name='uq_recently_viewed_user_product'),
        Index('idx_recently_viewed_user_viewed_at', 'user_id', 'viewed_at'),
    )
