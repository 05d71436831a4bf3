"""OAuth sign-in routes (Google, Apple)"""

import secrets
from typing import Callable, Optional

from fastapi import APIRouter, Cookie, Depends, Response
from fastapi.responses import RedirectResponse

from storefront.api.deps import get_auth_service, get_oauth_adapter_factory
from storefront.api.v1.auth import session_payload, set_session_cookies
from storefront.config import settings
from storefront.core.exceptions import OAuthError
from storefront.schemas.response import api_response
from storefront.services.auth_service import AuthService
from storefront.services.oauth_service import OAuthAdapter, OAuthProvider

router = APIRouter()

STATE_COOKIE = "oauthState"
STATE_COOKIE_PATH = "/auth"


def _begin(provider: OAuthProvider, factory: Callable[[OAuthProvider], OAuthAdapter]) -> RedirectResponse:
    adapter = factory(provider)
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(adapter.authorization_url(state))
    # Lax so the cookie survives the top-level redirect back from the provider
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=settings.OAUTH_STATE_TTL_SECONDS,
        path=STATE_COOKIE_PATH,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return response


def _complete(
    provider: OAuthProvider,
    response: Response,
    code: Optional[str],
    state: Optional[str],
    error: Optional[str],
    expected_state: Optional[str],
    factory: Callable[[OAuthProvider], OAuthAdapter],
    auth: AuthService,
) -> dict:
    if error:
        raise OAuthError(f"{provider.label} sign-in failed: {error}")
    if not code:
        raise OAuthError("Authorization code is required")
    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        raise OAuthError("Invalid OAuth state")

    identity = factory(provider).fetch_identity(code)
    session = auth.oauth_login(identity)

    set_session_cookies(response, session.access_token, session.refresh_token)
    response.delete_cookie(STATE_COOKIE, path=STATE_COOKIE_PATH)
    return api_response(f"{provider.label} login successful", session_payload(session))


@router.get("/google")
def google_login(factory: Callable = Depends(get_oauth_adapter_factory)):
    """Redirect to Google's consent screen"""
    return _begin(OAuthProvider.GOOGLE, factory)


@router.get("/google/callback")
def google_callback(
    response: Response,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    expected_state: Optional[str] = Cookie(None, alias=STATE_COOKIE),
    factory: Callable = Depends(get_oauth_adapter_factory),
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange Google's authorization code and start a session"""
    return _complete(OAuthProvider.GOOGLE, response, code, state, error, expected_state, factory, auth)


@router.get("/apple")
def apple_login(factory: Callable = Depends(get_oauth_adapter_factory)):
    """Redirect to Sign in with Apple"""
    return _begin(OAuthProvider.APPLE, factory)


@router.get("/apple/callback")
def apple_callback(
    response: Response,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    expected_state: Optional[str] = Cookie(None, alias=STATE_COOKIE),
    factory: Callable = Depends(get_oauth_adapter_factory),
    auth: AuthService = Depends(get_auth_service),
):
    """Exchange Apple's authorization code and start a session"""
    return _complete(OAuthProvider.APPLE, response, code, state, error, expected_state, factory, auth)
