"""User and authentication schemas"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr, Field, HttpUrl, field_validator

from storefront.schemas.base import CamelModel


class UserRole(str, Enum):
    """User role enumeration"""
    USER = "user"
    ADMIN = "admin"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


def _check_password_bytes(value: str) -> str:
    # bcrypt only looks at the first 72 bytes
    if len(value.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes")
    return value


class RegisterRequest(CamelModel):
    """Local account registration"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _check_password_bytes(v)


class LoginRequest(CamelModel):
    """User login schema"""
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class UpdateProfileRequest(CamelModel):
    """Partial profile update; omitted fields are left untouched"""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    bio: Optional[str] = None
    avatar_url: Optional[HttpUrl] = None
    phone_number: Optional[str] = Field(None, max_length=50)
    gender: Optional[Gender] = None
    birthday: Optional[date] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if v else v


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(..., min_length=6)

    @field_validator("new_password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _check_password_bytes(v)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)

    @field_validator("new_password")
    @classmethod
    def password_fits_bcrypt(cls, v):
        return _check_password_bytes(v)


class UpdateUserRoleRequest(CamelModel):
    role: UserRole


class UserResponse(CamelModel):
    """Public view of a user; never includes the password hash"""
    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[date] = None
    role: str
    is_banned: bool
    is_verified: bool
    auth_provider: str
    auth_provider_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
