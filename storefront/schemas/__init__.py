"""Pydantic schemas for API validation"""

from storefront.schemas.user import (
    RegisterRequest,
    LoginRequest,
    UpdateProfileRequest,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    UpdateUserRoleRequest,
    UserResponse,
    UserRole,
)
from storefront.schemas.address import AddressCreate, AddressUpdate, AddressResponse
from storefront.schemas.item import ItemCreate, ItemUpdate, ItemResponse, WishlistEntryResponse, RecentlyViewedResponse
from storefront.schemas.response import api_response, error_response

__all__ = [
    "RegisterRequest", "LoginRequest", "UpdateProfileRequest", "ChangePasswordRequest",
    "ForgotPasswordRequest", "ResetPasswordRequest", "UpdateUserRoleRequest", "UserResponse", "UserRole",
    "AddressCreate", "AddressUpdate", "AddressResponse",
    "ItemCreate", "ItemUpdate", "ItemResponse", "WishlistEntryResponse", "RecentlyViewedResponse",
    "api_response", "error_response",
]
