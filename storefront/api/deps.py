"""API dependencies - authentication and authorization"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from storefront.core.database import get_db
from storefront.core.exceptions import AuthenticationError, AuthorizationError, InvalidOrExpiredTokenError
from storefront.core.security import TokenKind, decode_token
from storefront.services.auth_service import AuthService
from storefront.services.oauth_service import OAuthAdapter, OAuthProvider, build_oauth_adapter

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

# Bearer header is optional; browsers authenticate with the access cookie
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AccessClaims:
    """Verified access-token claims"""

    user_id: int
    email: str
    role: str
    jti: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


async def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    access_cookie: Optional[str] = Cookie(None, alias=ACCESS_COOKIE),
) -> AccessClaims:
    """
    Verify the caller's access token

    The Authorization header wins over the cookie. Claims are trusted
    until the token expires; the database is not consulted.

    Raises:
        AuthenticationError: If no token was sent or it does not verify
    """
    token = credentials.credentials if credentials else access_cookie
    if not token:
        raise AuthenticationError("Access token is required")

    payload = decode_token(token, TokenKind.ACCESS)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidOrExpiredTokenError()

    return AccessClaims(
        user_id=user_id,
        email=payload.get("email", ""),
        role=payload.get("role", "user"),
        jti=payload.get("jti"),
    )


async def get_current_admin(
    claims: AccessClaims = Depends(get_current_claims)
) -> AccessClaims:
    """
    Require the admin role

    Raises:
        AuthorizationError: If the caller is not an admin
    """
    if not claims.is_admin:
        raise AuthorizationError("Admin access required")
    return claims


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService.for_session(db)


def get_oauth_adapter_factory() -> Callable[[OAuthProvider], OAuthAdapter]:
    """Builds provider adapters; tests swap in fakes through dependency_overrides"""
    return build_oauth_adapter
