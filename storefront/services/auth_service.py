"""Session lifecycle - register, login, refresh, logout and credential changes

The service composes the user, refresh-token and password-reset repositories.
Repositories only flush; every public operation here ends in exactly one
commit (or rollback), so a user row and its first refresh token are written
together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.core.exceptions import (
    AccountBannedError,
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    OAuthError,
    ResourceNotFoundError,
    ValidationError,
)
from storefront.core.metrics import AUTH_EVENTS
from storefront.core.security import (
    TokenKind,
    burn_password_check,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_reset_token,
    generate_unusable_password,
    token_expires_at,
    verify_password,
)
from storefront.models.user import User
from storefront.repositories.password_resets import PasswordResetRepository
from storefront.repositories.refresh_tokens import RefreshTokenRepository
from storefront.repositories.users import UserRepository
from storefront.schemas.user import RegisterRequest, UpdateProfileRequest
from storefront.services.mailer import LoggingMailer, mailer as default_mailer
from storefront.services.oauth_service import OAuthIdentity

logger = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If an account exists, a password reset email has been sent."
INVALID_REFRESH_MESSAGE = "Invalid or expired refresh token"

# Columns that cannot be cleared through a profile update
_REQUIRED_PROFILE_FIELDS = ("first_name", "last_name", "email")


@dataclass
class AuthSession:
    """Tokens minted for a freshly authenticated user"""

    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """Orchestrates the authentication lifecycle over injected repositories"""

    def __init__(
        self,
        db: Session,
        users: UserRepository,
        refresh_tokens: RefreshTokenRepository,
        password_resets: PasswordResetRepository,
        mailer: LoggingMailer = default_mailer,
    ):
        self.db = db
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.password_resets = password_resets
        self.mailer = mailer

    @classmethod
    def for_session(cls, db: Session, mailer: Optional[LoggingMailer] = None) -> "AuthService":
        """Service wired to the default SQLAlchemy repositories"""
        return cls(
            db,
            users=UserRepository(db),
            refresh_tokens=RefreshTokenRepository(db),
            password_resets=PasswordResetRepository(db),
            mailer=mailer or default_mailer,
        )

    @staticmethod
    def _claims(user: User) -> Dict[str, Any]:
        return {"sub": str(user.id), "email": user.email, "role": user.role}

    def _start_session(self, user: User) -> AuthSession:
        """Mint an access/refresh pair and record the refresh token; no commit"""
        claims = self._claims(user)
        access_token = create_access_token(claims)
        refresh_token = create_refresh_token(claims)
        self.refresh_tokens.create(refresh_token, user.id, token_expires_at(refresh_token))
        return AuthSession(user=user, access_token=access_token, refresh_token=refresh_token)

    def _issue_session(self, user: User) -> AuthSession:
        session = self._start_session(user)
        self.db.commit()
        self.db.refresh(user)
        return session

    def _get_user_or_404(self, user_id: int) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User")
        return user

    def register(self, data: RegisterRequest) -> AuthSession:
        """
        Create a local account and sign it in

        Raises:
            ConflictError: If the email is already registered
        """
        if self.users.get_by_email(data.email):
            AUTH_EVENTS.labels("register", "conflict").inc()
            raise ConflictError("User with this email already exists")

        try:
            user = self.users.create(
                email=data.email,
                password=data.password,
                first_name=data.first_name,
                last_name=data.last_name,
            )
            session = self._issue_session(user)
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            self.db.rollback()
            AUTH_EVENTS.labels("register", "conflict").inc()
            raise ConflictError("User with this email already exists")

        AUTH_EVENTS.labels("register", "success").inc()
        logger.info(f"Registered user id={user.id}")
        return session

    def login(self, email: str, password: str) -> AuthSession:
        """
        Authenticate with email and password

        Unknown email and wrong password produce the same error.

        Raises:
            InvalidCredentialsError: If the credentials do not match
            AccountBannedError: If the account is banned
        """
        user = self.users.get_by_email(email)
        if user is None:
            burn_password_check(password)
            AUTH_EVENTS.labels("login", "failure").inc()
            raise InvalidCredentialsError()

        if not verify_password(password, user.password_hash):
            AUTH_EVENTS.labels("login", "failure").inc()
            logger.warning(f"Failed login for user id={user.id}")
            raise InvalidCredentialsError()

        if user.is_banned:
            AUTH_EVENTS.labels("login", "banned").inc()
            raise AccountBannedError()

        session = self._issue_session(user)
        AUTH_EVENTS.labels("login", "success").inc()
        logger.info(f"User id={user.id} logged in")
        return session

    def refresh(self, refresh_token: Optional[str]) -> str:
        """
        Mint a new access token from a living refresh token

        The refresh token itself is not rotated.

        Raises:
            ValidationError: If no refresh token was presented
            AuthenticationError: If the token, its ledger entry or its user is not usable
        """
        if not refresh_token:
            raise ValidationError("Refresh token is required")

        try:
            claims = decode_token(refresh_token, TokenKind.REFRESH)
            user_id = int(claims["sub"])
        except (InvalidOrExpiredTokenError, ValueError):
            AUTH_EVENTS.labels("refresh", "failure").inc()
            raise AuthenticationError(INVALID_REFRESH_MESSAGE)

        if not self.refresh_tokens.is_valid(refresh_token):
            AUTH_EVENTS.labels("refresh", "failure").inc()
            raise AuthenticationError(INVALID_REFRESH_MESSAGE)

        user = self.users.get_by_id(user_id)
        if user is None or user.is_banned:
            AUTH_EVENTS.labels("refresh", "failure").inc()
            raise AuthenticationError(INVALID_REFRESH_MESSAGE)

        AUTH_EVENTS.labels("refresh", "success").inc()
        return create_access_token(self._claims(user))

    def logout(self, refresh_token: Optional[str]) -> None:
        """
        Revoke the presented refresh token

        Raises:
            ValidationError: If no refresh token was presented
            ResourceNotFoundError: If the token is unknown or already revoked
        """
        if not refresh_token:
            raise ValidationError("Refresh token is required")

        record = self.refresh_tokens.get(refresh_token)
        if record is None or record.revoked:
            raise ResourceNotFoundError("Refresh token")

        self.refresh_tokens.revoke(refresh_token)
        self.db.commit()
        AUTH_EVENTS.labels("logout", "success").inc()
        logger.info(f"User id={record.user_id} logged out")

    def logout_all(self, user_id: int) -> int:
        """Revoke every living refresh token of a user; returns how many"""
        count = self.refresh_tokens.revoke_all(user_id)
        self.db.commit()
        AUTH_EVENTS.labels("logout_all", "success").inc()
        logger.info(f"Revoked {count} session(s) for user id={user_id}")
        return count

    def get_profile(self, user_id: int) -> User:
        return self._get_user_or_404(user_id)

    def update_profile(self, user_id: int, data: UpdateProfileRequest) -> User:
        """
        Apply a partial profile update

        Raises:
            ResourceNotFoundError: If the user no longer exists
            ConflictError: If the new email belongs to another user
        """
        user = self._get_user_or_404(user_id)

        fields = data.model_dump(exclude_unset=True)
        for name in _REQUIRED_PROFILE_FIELDS:
            if name in fields and fields[name] is None:
                del fields[name]
        if fields.get("avatar_url") is not None:
            fields["avatar_url"] = str(fields["avatar_url"])
        if isinstance(fields.get("gender"), Enum):
            fields["gender"] = fields["gender"].value

        new_email = fields.get("email")
        if new_email and new_email != user.email:
            owner = self.users.get_by_email(new_email)
            if owner is not None and owner.id != user.id:
                raise ConflictError("Email already in use")

        try:
            self.users.update(user, **fields)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Email already in use")

        self.db.refresh(user)
        return user

    def change_password(self, user_id: int, current_password: str, new_password: str) -> int:
        """
        Replace the password and end every session of the user

        Returns:
            Number of refresh tokens revoked

        Raises:
            ResourceNotFoundError: If the user no longer exists
            AuthenticationError: If the current password is wrong
        """
        user = self._get_user_or_404(user_id)
        if not verify_password(current_password, user.password_hash):
            AUTH_EVENTS.labels("change_password", "failure").inc()
            raise AuthenticationError("Current password is incorrect")

        self.users.set_password(user, new_password)
        revoked = self.refresh_tokens.revoke_all(user.id)
        self.db.commit()

        AUTH_EVENTS.labels("change_password", "success").inc()
        logger.info(f"Password changed for user id={user.id}; revoked {revoked} session(s)")
        return revoked

    def forgot_password(self, email: str) -> str:
        """
        Start a password reset

        Answers the same way whether or not the account exists.
        """
        user = self.users.get_by_email(email)
        if user is None:
            AUTH_EVENTS.labels("forgot_password", "unknown").inc()
            return FORGOT_PASSWORD_MESSAGE

        token = generate_reset_token()
        self.password_resets.create(user.id, token, settings.RESET_TOKEN_EXPIRE_MINUTES)
        self.db.commit()

        try:
            self.mailer.send_password_reset(user.email, token)
        except Exception as e:
            logger.error(f"Failed to deliver password reset for user id={user.id}: {e}")

        AUTH_EVENTS.labels("forgot_password", "sent").inc()
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, token: str, new_password: str) -> None:
        """
        Complete a password reset and end every session of the user

        Raises:
            ValidationError: If the token is unknown or expired
        """
        record = self.password_resets.get(token)
        if record is None:
            AUTH_EVENTS.labels("reset_password", "failure").inc()
            raise ValidationError("Invalid or expired token")

        if self.password_resets.is_expired(record):
            self.password_resets.delete(record)
            self.db.commit()
            AUTH_EVENTS.labels("reset_password", "expired").inc()
            raise ValidationError("Token expired")

        user = self.users.get_by_id(record.user_id)
        if user is None:
            raise ValidationError("Invalid or expired token")

        self.users.set_password(user, new_password)
        self.password_resets.delete(record)
        revoked = self.refresh_tokens.revoke_all(user.id)
        self.db.commit()

        AUTH_EVENTS.labels("reset_password", "success").inc()
        logger.info(f"Password reset for user id={user.id}; revoked {revoked} session(s)")

    def oauth_login(self, identity: OAuthIdentity) -> AuthSession:
        """
        Sign in with a provider identity

        Resolution order: provider id, then email (linking the existing
        account to the provider), then a new verified account.

        Raises:
            OAuthError: If a new account is needed but the provider sent no email
            AccountBannedError: If the resolved account is banned
        """
        provider = identity.provider.value
        user = self.users.get_by_provider(provider, identity.external_id)

        if user is None:
            if not identity.email:
                AUTH_EVENTS.labels("oauth_login", "failure").inc()
                raise OAuthError(f"Email required from {identity.provider.label}")

            user = self.users.get_by_email(identity.email)
            if user is not None:
                self.users.update(user, auth_provider=provider, auth_provider_id=identity.external_id)
                logger.info(f"Linked user id={user.id} to {provider}")
            else:
                user = self.users.create(
                    email=identity.email,
                    password=generate_unusable_password(),
                    first_name=identity.first_name or identity.provider.label,
                    last_name=identity.last_name or "User",
                    auth_provider=provider,
                    auth_provider_id=identity.external_id,
                    is_verified=True,
                    avatar_url=identity.avatar_url,
                )
                logger.info(f"Created user id={user.id} from {provider}")

        if user.is_banned:
            self.db.rollback()
            AUTH_EVENTS.labels("oauth_login", "banned").inc()
            raise AccountBannedError()

        session = self._issue_session(user)
        AUTH_EVENTS.labels("oauth_login", "success").inc()
        return session
