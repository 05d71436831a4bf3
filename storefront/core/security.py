"""Security utilities - JWT codec, password hashing, opaque token helpers"""

from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Optional, Dict, Any
import hashlib
import secrets
import uuid

import bcrypt
from jose import JWTError, jwt

from storefront.config import settings
from storefront.core.exceptions import InvalidOrExpiredTokenError


class TokenKind(str, Enum):
    """Bearer token classes, each signed with its own secret"""
    ACCESS = "access"
    REFRESH = "refresh"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how expiry columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        bool: True if password matches
    """
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    ).decode('utf-8')


@lru_cache()
def _dummy_password_hash() -> str:
    return get_password_hash(secrets.token_urlsafe(16))


def burn_password_check(plain_password: str) -> None:
    """Spend one bcrypt comparison so unknown emails take as long as wrong passwords"""
    verify_password(plain_password, _dummy_password_hash())


def generate_unusable_password() -> str:
    """Random local password for accounts created through an OAuth provider"""
    return secrets.token_urlsafe(32)


def generate_reset_token() -> str:
    """Raw password-reset token, shown to the user exactly once"""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """Digest used as the lookup key for persisted tokens"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _secret_for(kind: TokenKind) -> str:
    if kind is TokenKind.ACCESS:
        return settings.JWT_ACCESS_SECRET
    return settings.JWT_REFRESH_SECRET


def _default_lifetime(kind: TokenKind) -> timedelta:
    if kind is TokenKind.ACCESS:
        return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)


def _create_token(kind: TokenKind, data: Dict[str, Any], expires_delta: Optional[timedelta]) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else _default_lifetime(kind))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "jti": str(uuid.uuid4()),
        "typ": kind.value,
    })

    return jwt.encode(to_encode, _secret_for(kind), algorithm=settings.ALGORITHM)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Claims to encode (sub, email, role)
        expires_delta: Token lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        str: Encoded JWT token
    """
    return _create_token(TokenKind.ACCESS, data, expires_delta)


def create_refresh_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT refresh token

    Args:
        data: Claims to encode (sub, email, role)
        expires_delta: Token lifetime, defaults to REFRESH_TOKEN_EXPIRE_DAYS

    Returns:
        str: Encoded JWT token
    """
    return _create_token(TokenKind.REFRESH, data, expires_delta)


def decode_token(token: str, kind: TokenKind) -> Dict[str, Any]:
    """
    Verify a JWT against the secret of its kind

    Expired, forged, malformed and wrong-kind tokens all raise the same
    error so callers cannot tell them apart.

    Args:
        token: JWT token string
        kind: Expected token kind

    Returns:
        Dict: Verified claims

    Raises:
        InvalidOrExpiredTokenError: If verification fails for any reason
    """
    try:
        payload = jwt.decode(token, _secret_for(kind), algorithms=[settings.ALGORITHM])
    except JWTError:
        raise InvalidOrExpiredTokenError()

    if payload.get("typ") != kind.value or not payload.get("sub"):
        raise InvalidOrExpiredTokenError()
    return payload


def token_expires_at(token: str) -> datetime:
    """Expiry of a token this process just signed, as naive UTC"""
    exp = jwt.get_unverified_claims(token)["exp"]
    return datetime.fromtimestamp(exp, tz=timezone.utc).replace(tzinfo=None)
