"""OAuth provider adapters.

Each adapter turns an authorization code into a provider-neutral
``OAuthIdentity`` so the session lifecycle never sees provider payloads.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union
from urllib.parse import urlencode

import httpx
from jose import JWTError, jwt

from storefront.config import settings
from storefront.core.exceptions import OAuthError

logger = logging.getLogger(__name__)


class OAuthProvider(str, Enum):
    GOOGLE = "google"
    APPLE = "apple"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class OAuthIdentity:
    """Identity asserted by an OAuth provider"""

    provider: OAuthProvider
    external_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None


class _BaseAdapter:
    provider: OAuthProvider
    auth_url: str
    token_url: str

    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.client_id)

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, follow_redirects=False, transport=self._transport)

    def _authorization_params(self, state: str) -> Dict[str, str]:
        return {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "state": state,
        }

    def authorization_url(self, state: str) -> str:
        if not self.configured:
            raise OAuthError(f"{self.provider.label} sign-in is not configured")
        return f"{self.auth_url}?{urlencode(self._authorization_params(state))}"

    def _fail(self, reason: str, exc: Optional[BaseException] = None) -> OAuthError:
        logger.error("OAuth %s exchange failed: %s (%s)", self.provider.value, reason, exc)
        return OAuthError(f"Failed to fetch {self.provider.label} profile")


class GoogleOAuthAdapter(_BaseAdapter):
    """Authorization-code flow against Google's OAuth 2.0 endpoints"""

    provider = OAuthProvider.GOOGLE
    auth_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    userinfo_url = "https://www.googleapis.com/oauth2/v2/userinfo"

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str, **kwargs: Any) -> None:
        super().__init__(client_id, redirect_uri, **kwargs)
        self.client_secret = client_secret

    def _authorization_params(self, state: str) -> Dict[str, str]:
        params = super()._authorization_params(state)
        params["scope"] = "openid email profile"
        return params

    def fetch_identity(self, code: str) -> OAuthIdentity:
        try:
            with self._client() as client:
                token_response = client.post(
                    self.token_url,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                    headers={"Accept": "application/json"},
                )
                token_response.raise_for_status()
                access_token = token_response.json().get("access_token")
                if not access_token:
                    raise self._fail("no access_token in token response")

                userinfo_response = client.get(
                    self.userinfo_url,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                userinfo_response.raise_for_status()
                profile = userinfo_response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise self._fail("provider request failed", exc) from exc

        return self.parse_profile(profile)

    def parse_profile(self, profile: Dict[str, Any]) -> OAuthIdentity:
        if not isinstance(profile, dict):
            raise self._fail("userinfo is not an object")
        external_id = profile.get("id") or profile.get("sub")
        if not external_id:
            raise self._fail("userinfo has no subject")
        return OAuthIdentity(
            provider=self.provider,
            external_id=str(external_id),
            email=profile.get("email"),
            display_name=profile.get("name"),
            first_name=profile.get("given_name"),
            last_name=profile.get("family_name"),
            avatar_url=profile.get("picture"),
        )


class AppleOAuthAdapter(_BaseAdapter):
    """Sign in with Apple; the identity comes from the id_token claims

    The id_token is taken straight from Apple's token endpoint over TLS, so
    its claims are read without re-verifying the signature.
    """

    provider = OAuthProvider.APPLE
    auth_url = "https://appleid.apple.com/auth/authorize"
    token_url = "https://appleid.apple.com/auth/token"
    issuer = "https://appleid.apple.com"

    def __init__(
        self,
        client_id: str,
        team_id: str,
        key_id: str,
        private_key: str,
        redirect_uri: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(client_id, redirect_uri, **kwargs)
        self.team_id = team_id
        self.key_id = key_id
        self.private_key = private_key

    def _authorization_params(self, state: str) -> Dict[str, str]:
        params = super()._authorization_params(state)
        params["response_mode"] = "query"
        return params

    def client_secret(self) -> str:
        """Short-lived ES256 client secret signed with the team key"""
        now = int(time.time())
        return jwt.encode(
            {
                "iss": self.team_id,
                "iat": now,
                "exp": now + 300,
                "aud": self.issuer,
                "sub": self.client_id,
            },
            self.private_key,
            algorithm="ES256",
            headers={"kid": self.key_id},
        )

    def fetch_identity(self, code: str) -> OAuthIdentity:
        try:
            with self._client() as client:
                token_response = client.post(
                    self.token_url,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret(),
                        "code": code,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                    headers={"Accept": "application/json"},
                )
                token_response.raise_for_status()
                id_token = token_response.json().get("id_token")
        except (httpx.HTTPError, ValueError, JWTError) as exc:
            raise self._fail("provider request failed", exc) from exc

        if not id_token:
            raise self._fail("no id_token in token response")
        try:
            claims = jwt.get_unverified_claims(id_token)
        except JWTError as exc:
            raise self._fail("malformed id_token", exc) from exc
        return self.parse_claims(claims)

    def parse_claims(self, claims: Dict[str, Any]) -> OAuthIdentity:
        if claims.get("iss") != self.issuer or claims.get("aud") != self.client_id:
            raise self._fail("id_token issued for another audience")
        if not claims.get("sub"):
            raise self._fail("id_token has no subject")
        return OAuthIdentity(
            provider=self.provider,
            external_id=str(claims["sub"]),
            email=claims.get("email"),
        )


OAuthAdapter = Union[GoogleOAuthAdapter, AppleOAuthAdapter]


def build_oauth_adapter(provider: OAuthProvider) -> OAuthAdapter:
    """Adapter configured from application settings"""
    if provider is OAuthProvider.GOOGLE:
        return GoogleOAuthAdapter(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
            timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS,
        )
    return AppleOAuthAdapter(
        client_id=settings.APPLE_CLIENT_ID,
        team_id=settings.APPLE_TEAM_ID,
        key_id=settings.APPLE_KEY_ID,
        private_key=settings.get_apple_private_key(),
        redirect_uri=settings.APPLE_REDIRECT_URI,
        timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS,
    )
