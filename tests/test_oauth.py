import httpx
import pytest
from jose import jwt

from storefront.api.deps import get_oauth_adapter_factory
from storefront.core.exceptions import OAuthError
from storefront.main import app
from storefront.models.security import RefreshToken
from storefront.models.user import User
from storefront.services.oauth_service import (
    AppleOAuthAdapter,
    GoogleOAuthAdapter,
    OAuthIdentity,
    OAuthProvider,
)


class FakeAdapter:
    def __init__(self, identity):
        self.identity = identity
        self.codes = []

    def authorization_url(self, state):
        return f"https://provider.example.com/authorize?state={state}"

    def fetch_identity(self, code):
        self.codes.append(code)
        return self.identity


@pytest.fixture
def use_identity(client):
    def _use(identity):
        adapter = FakeAdapter(identity)
        app.dependency_overrides[get_oauth_adapter_factory] = lambda: (lambda provider: adapter)
        return adapter

    return _use


def _sign_in(client, provider="google", code="auth-code"):
    start = client.get(f"/auth/{provider}", follow_redirects=False)
    assert start.status_code == 307
    state = start.cookies["oauthState"]
    assert start.headers["location"].endswith(f"state={state}")
    return client.get(f"/auth/{provider}/callback", params={"code": code, "state": state})


GOOGLE_IDENTITY = OAuthIdentity(
    provider=OAuthProvider.GOOGLE,
    external_id="google-123",
    email="grace@example.com",
    display_name="Grace Hopper",
    first_name="Grace",
    last_name="Hopper",
    avatar_url="https://example.com/grace.png",
)


def test_first_oauth_login_creates_verified_user(client, db, use_identity):
    adapter = use_identity(GOOGLE_IDENTITY)

    response = _sign_in(client)

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["message"] == "Google login successful"
    assert body["data"]["user"]["authProvider"] == "google"
    assert body["data"]["user"]["isVerified"] is True
    assert "refreshToken" in response.cookies
    assert adapter.codes == ["auth-code"]

    user = db.query(User).one()
    assert user.auth_provider_id == "google-123"
    assert user.first_name == "Grace"


def test_repeat_oauth_login_reuses_account(client, db, use_identity):
    use_identity(GOOGLE_IDENTITY)

    first = _sign_in(client).json()["data"]["user"]["id"]
    second = _sign_in(client).json()["data"]["user"]["id"]

    assert first == second
    assert db.query(User).count() == 1


def test_oauth_email_links_existing_local_account(client, db, create_user, use_identity):
    user_id = create_user("grace@example.com")
    use_identity(GOOGLE_IDENTITY)

    response = _sign_in(client)

    assert response.status_code == 200
    assert response.json()["data"]["user"]["id"] == user_id
    linked = db.query(User).one()
    assert linked.auth_provider == "google"
    assert linked.auth_provider_id == "google-123"


def test_apple_user_without_name_gets_defaults(client, db, use_identity):
    use_identity(OAuthIdentity(provider=OAuthProvider.APPLE, external_id="apple-1", email="tim@example.com"))

    response = _sign_in(client, "apple")

    assert response.status_code == 200
    user = db.query(User).one()
    assert (user.first_name, user.last_name) == ("Apple", "User")


def test_oauth_without_email_is_rejected(client, use_identity):
    use_identity(OAuthIdentity(provider=OAuthProvider.APPLE, external_id="apple-2"))

    response = _sign_in(client, "apple")

    assert response.status_code == 400
    assert response.json()["message"] == "Email required from Apple"


def test_callback_with_mismatched_state_is_rejected(client, use_identity):
    adapter = use_identity(GOOGLE_IDENTITY)
    client.get("/auth/google", follow_redirects=False)

    response = client.get("/auth/google/callback", params={"code": "auth-code", "state": "forged"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid OAuth state"
    assert adapter.codes == []


def test_unconfigured_provider_is_rejected(client):
    response = client.get("/auth/google", follow_redirects=False)
    assert response.status_code == 400
    assert response.json()["message"] == "Google sign-in is not configured"


def _google_adapter(handler):
    return GoogleOAuthAdapter(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:8000/auth/google/callback",
        transport=httpx.MockTransport(handler),
    )


def test_google_adapter_exchanges_code_for_profile():
    def handler(request):
        if request.url.path == "/token":
            assert b"code=the-code" in request.content
            return httpx.Response(200, json={"access_token": "provider-token"})
        assert request.headers["Authorization"] == "Bearer provider-token"
        return httpx.Response(
            200,
            json={"id": "g-9", "email": "ada@example.com", "given_name": "Ada", "family_name": "King"},
        )

    identity = _google_adapter(handler).fetch_identity("the-code")

    assert identity == OAuthIdentity(
        provider=OAuthProvider.GOOGLE,
        external_id="g-9",
        email="ada@example.com",
        first_name="Ada",
        last_name="King",
    )


def test_google_adapter_wraps_provider_failures():
    adapter = _google_adapter(lambda request: httpx.Response(500, json={"error": "boom"}))

    with pytest.raises(OAuthError) as exc_info:
        adapter.fetch_identity("the-code")

    assert exc_info.value.message == "Failed to fetch Google profile"
    assert exc_info.value.status_code == 400


def test_google_authorization_url_carries_state_and_scope():
    url = httpx.URL(_google_adapter(lambda request: httpx.Response(200)).authorization_url("xyz"))

    assert url.host == "accounts.google.com"
    assert url.params["state"] == "xyz"
    assert url.params["scope"] == "openid email profile"


def test_apple_adapter_reads_identity_from_id_token():
    id_token = jwt.encode(
        {"iss": "https://appleid.apple.com", "aud": "com.example.web", "sub": "apple-77", "email": "a@example.com"},
        "unused-key",
        algorithm="HS256",
    )

    def handler(request):
        return httpx.Response(200, json={"id_token": id_token, "access_token": "x"})

    adapter = AppleOAuthAdapter(
        client_id="com.example.web",
        team_id="TEAM",
        key_id="KEY",
        private_key="unused",
        redirect_uri="http://localhost:8000/auth/apple/callback",
        transport=httpx.MockTransport(handler),
    )
    adapter.client_secret = lambda: "signed-client-secret"

    identity = adapter.fetch_identity("apple-code")

    assert identity.provider is OAuthProvider.APPLE
    assert identity.external_id == "apple-77"
    assert identity.email == "a@example.com"


def test_apple_adapter_rejects_token_for_another_audience():
    adapter = AppleOAuthAdapter("com.example.web", "TEAM", "KEY", "unused", "http://localhost/cb")

    with pytest.raises(OAuthError):
        adapter.parse_claims({"iss": "https://appleid.apple.com", "aud": "com.other.app", "sub": "x"})


def test_banned_account_cannot_sign_in_with_oauth(client, db, create_user, use_identity):
    create_user("grace@example.com", is_banned=True)
    use_identity(GOOGLE_IDENTITY)

    response = _sign_in(client)

    assert response.status_code == 403
    assert "refreshToken" not in response.cookies
    assert db.query(RefreshToken).count() == 0
    assert db.query(User).one().auth_provider_id is None


def test_apple_authorization_url_uses_query_response_mode():
    adapter = AppleOAuthAdapter("com.example.web", "TEAM", "KEY", "unused", "http://localhost/cb")

    url = httpx.URL(adapter.authorization_url("xyz"))

    assert url.host == "appleid.apple.com"
    assert url.params["response_mode"] == "query"
    assert "scope" not in url.params
