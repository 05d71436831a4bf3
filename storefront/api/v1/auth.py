"""Authentication routes"""

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response, status

from storefront.api.deps import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    AccessClaims,
    get_auth_service,
    get_current_claims,
)
from storefront.config import settings
from storefront.schemas.base import dump
from storefront.schemas.response import api_response
from storefront.schemas.user import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateProfileRequest,
    UserResponse,
)
from storefront.services.auth_service import AuthService, AuthSession

router = APIRouter()


def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key,
        value,
        max_age=max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )


def set_session_cookies(response: Response, access_token: str, refresh_token: Optional[str] = None) -> None:
    """Attach the access cookie, and the refresh cookie when one was minted"""
    _set_cookie(response, ACCESS_COOKIE, access_token, settings.access_cookie_max_age)
    if refresh_token:
        _set_cookie(response, REFRESH_COOKIE, refresh_token, settings.refresh_cookie_max_age)


def clear_session_cookies(response: Response) -> None:
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            key,
            path="/",
            httponly=True,
            secure=settings.cookie_secure,
            samesite="strict",
        )


def session_payload(session: AuthSession) -> dict:
    return {
        "user": dump(UserResponse.model_validate(session.user)),
        "accessToken": session.access_token,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Create a local account and start a session

    Returns:
        User and access token; both session cookies are set
    """
    session = auth.register(data)
    set_session_cookies(response, session.access_token, session.refresh_token)
    return api_response("User registered successfully", session_payload(session))


@router.post("/login")
def login(
    credentials: LoginRequest,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Login endpoint - authenticate user and start a session

    Returns:
        User and access token; both session cookies are set
    """
    session = auth.login(credentials.email, credentials.password)
    set_session_cookies(response, session.access_token, session.refresh_token)
    return api_response("Login successful", session_payload(session))


@router.post("/refresh")
def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    auth: AuthService = Depends(get_auth_service),
):
    """Mint a new access token from the refresh cookie"""
    access_token = auth.refresh(refresh_token)
    set_session_cookies(response, access_token)
    return api_response("Token refreshed successfully", {"accessToken": access_token})


@router.post("/logout")
def logout(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    auth: AuthService = Depends(get_auth_service),
):
    """Revoke the current session's refresh token"""
    auth.logout(refresh_token)
    clear_session_cookies(response)
    return api_response("Logged out successfully")


@router.post("/logout-all")
def logout_all(
    response: Response,
    claims: AccessClaims = Depends(get_current_claims),
    auth: AuthService = Depends(get_auth_service),
):
    """Revoke every session of the current user"""
    count = auth.logout_all(claims.user_id)
    clear_session_cookies(response)
    return api_response(f"Logged out from {count} device(s) successfully", {"count": count})


@router.get("/profile")
def get_profile(
    claims: AccessClaims = Depends(get_current_claims),
    auth: AuthService = Depends(get_auth_service),
):
    user = auth.get_profile(claims.user_id)
    return api_response(data=dump(UserResponse.model_validate(user)))


@router.put("/profile")
def update_profile(
    data: UpdateProfileRequest,
    claims: AccessClaims = Depends(get_current_claims),
    auth: AuthService = Depends(get_auth_service),
):
    user = auth.update_profile(claims.user_id, data)
    return api_response("Profile updated successfully", dump(UserResponse.model_validate(user)))


@router.post("/change-password")
def change_password(
    data: ChangePasswordRequest,
    response: Response,
    claims: AccessClaims = Depends(get_current_claims),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Change the password of the current user

    Every refresh token of the user is revoked, so the caller must log in again.
    """
    auth.change_password(claims.user_id, data.current_password, data.new_password)
    clear_session_cookies(response)
    return api_response("Password changed successfully. Please login again with your new password.")


@router.post("/forgot-password")
def forgot_password(
    data: ForgotPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    return api_response(auth.forgot_password(data.email))


@router.post("/reset-password")
def reset_password(
    data: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
):
    auth.reset_password(data.token, data.new_password)
    return api_response("Password reset successfully")
