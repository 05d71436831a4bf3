"""Catalogue item model"""

from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from storefront.core.database import Base


class Item(Base):
    """Product that can be wishlisted or viewed"""

    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Item(id={self.id}, name='{self.name}')>"
