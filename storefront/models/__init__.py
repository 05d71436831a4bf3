"""Database models"""

from storefront.models.user import User
from storefront.models.security import RefreshToken, PasswordResetToken
from storefront.models.address import Address
from storefront.models.item import Item
from storefront.models.customer import WishlistEntry, RecentlyViewed
from storefront.models.audit import AuditEvent

__all__ = [
    "User", "RefreshToken", "PasswordResetToken", "Address", "Item",
    "WishlistEntry", "RecentlyViewed", "AuditEvent",
]
