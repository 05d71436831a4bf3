"""Catalogue item, wishlist and browsing history schemas"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from storefront.schemas.base import CamelModel


class ItemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)


class ItemUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)


class ItemResponse(CamelModel):
    id: int
    name: str
    description: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WishlistEntryResponse(CamelModel):
    id: int
    product_id: int
    created_at: Optional[datetime] = None
    product: Optional[ItemResponse] = None


class RecentlyViewedResponse(CamelModel):
    id: int
    product_id: int
    viewed_at: datetime
    product: Optional[ItemResponse] = None
