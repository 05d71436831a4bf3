from conftest import bearer, refresh_cookie

from storefront.core.security import TokenKind, decode_token
from storefront.models.security import RefreshToken
from storefront.models.user import User

REGISTER_BODY = {
    "email": "a@example.com",
    "password": "password123",
    "firstName": "Ada",
    "lastName": "Lovelace",
}


def _register(client, **overrides):
    return client.post("/auth/register", json={**REGISTER_BODY, **overrides})


def test_register_sets_cookies_and_returns_verifiable_token(client, db):
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "a@example.com"
    assert user["fullName"] == "Ada Lovelace"
    assert "passwordHash" not in user and "password" not in user

    assert "accessToken" in response.cookies
    assert "refreshToken" in response.cookies
    set_cookie = ",".join(response.headers.get_list("set-cookie")).lower()
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie

    claims = decode_token(body["data"]["accessToken"], TokenKind.ACCESS)
    stored = db.query(User).filter(User.email == "a@example.com").one()
    assert claims["sub"] == str(stored.id)
    assert claims["role"] == "user"

    # User row and first session are written together
    assert db.query(RefreshToken).filter(RefreshToken.user_id == stored.id).count() == 1


def test_duplicate_registration_conflicts_without_new_row(client, db):
    assert _register(client).status_code == 201

    response = _register(client, email="A@Example.com", firstName="Other")

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "User with this email already exists"}
    assert db.query(User).count() == 1


def test_register_validation_error_is_400(client):
    response = _register(client, email="not-an-email")

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert any(d["field"] == "email" for d in body["details"])


def test_unknown_email_and_wrong_password_look_the_same(client):
    _register(client)

    wrong_password = client.post("/auth/login", json={"email": "a@example.com", "password": "nope-nope"})
    unknown_user = client.post("/auth/login", json={"email": "ghost@example.com", "password": "nope-nope"})

    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json() == {
        "success": False,
        "message": "Invalid email or password",
    }


def test_end_to_end_session_lifecycle(client):
    registered = _register(client)
    assert registered.status_code == 201
    register_jti = decode_token(registered.json()["data"]["accessToken"], TokenKind.ACCESS)["jti"]

    assert client.post("/auth/login", json={"email": "a@example.com", "password": "wrong-pass"}).status_code == 401

    logged_in = client.post("/auth/login", json={"email": "a@example.com", "password": "password123"})
    assert logged_in.status_code == 200
    login_access = logged_in.json()["data"]["accessToken"]
    assert decode_token(login_access, TokenKind.ACCESS)["jti"] != register_jti
    refresh_token = logged_in.cookies["refreshToken"]

    refreshed = client.post("/auth/refresh", headers=refresh_cookie(refresh_token))
    assert refreshed.status_code == 200
    new_access = refreshed.json()["data"]["accessToken"]
    assert new_access != login_access
    assert "accessToken" in refreshed.cookies
    assert "refreshToken" not in refreshed.cookies

    logged_out = client.post("/auth/logout", headers=refresh_cookie(refresh_token))
    assert logged_out.status_code == 200
    assert logged_out.json()["message"] == "Logged out successfully"

    again = client.post("/auth/logout", headers=refresh_cookie(refresh_token))
    assert again.status_code == 404
    assert again.json()["message"] == "Refresh token not found"

    assert client.post("/auth/refresh", headers=refresh_cookie(refresh_token)).status_code == 401


def test_refresh_and_logout_require_cookie(client):
    client.cookies.clear()

    refresh = client.post("/auth/refresh")
    logout = client.post("/auth/logout")

    assert refresh.status_code == 400
    assert refresh.json()["message"] == "Refresh token is required"
    assert logout.status_code == 400


def test_logout_with_unknown_token_is_404(client):
    response = client.post("/auth/logout", headers=refresh_cookie("never-issued"))
    assert response.status_code == 404


def test_access_token_cannot_be_used_to_refresh(client):
    access = _register(client).json()["data"]["accessToken"]

    response = client.post("/auth/refresh", headers=refresh_cookie(access))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired refresh token"


def test_refresh_token_cannot_be_used_as_access(client):
    refresh_token = _register(client).cookies["refreshToken"]

    response = client.get("/auth/profile", headers=bearer(refresh_token))

    assert response.status_code == 401


def test_logout_all_revokes_every_device(client, login):
    _register(client)
    phone = login("a@example.com")
    laptop = login("a@example.com")

    response = client.post("/auth/logout-all", headers=bearer(laptop["accessToken"]))

    assert response.status_code == 200
    # register + two logins
    assert response.json()["message"] == "Logged out from 3 device(s) successfully"
    assert response.json()["data"]["count"] == 3
    for session in (phone, laptop):
        assert client.post("/auth/refresh", headers=refresh_cookie(session["refreshToken"])).status_code == 401


def test_protected_route_requires_access_token(client):
    client.cookies.clear()
    response = client.get("/auth/profile")
    assert response.status_code == 401


def test_access_cookie_authenticates_without_header(client):
    _register(client)

    response = client.get("/auth/profile")

    assert response.status_code == 200
    assert response.json()["data"]["email"] == "a@example.com"


def test_profile_update(client):
    access = _register(client).json()["data"]["accessToken"]

    response = client.put(
        "/auth/profile",
        json={"firstName": "Augusta", "bio": "Analyst", "gender": "female", "birthday": "1815-12-10"},
        headers=bearer(access),
    )

    assert response.status_code == 200
    user = response.json()["data"]
    assert user["firstName"] == "Augusta"
    assert user["lastName"] == "Lovelace"
    assert user["bio"] == "Analyst"
    assert user["gender"] == "female"
    assert user["birthday"] == "1815-12-10"


def test_profile_email_taken_by_another_user(client, create_user):
    create_user("taken@example.com")
    access = _register(client).json()["data"]["accessToken"]

    response = client.put("/auth/profile", json={"email": "taken@example.com"}, headers=bearer(access))

    assert response.status_code == 409
    assert response.json()["message"] == "Email already in use"


def test_profile_of_deleted_user_is_404(client, db):
    access = _register(client).json()["data"]["accessToken"]
    db.query(User).delete()
    db.commit()

    assert client.get("/auth/profile", headers=bearer(access)).status_code == 404


def test_change_password_invalidates_all_sessions(client, login):
    _register(client)
    other_device = login("a@example.com")
    current = login("a@example.com")

    wrong = client.post(
        "/auth/change-password",
        json={"currentPassword": "not-it", "newPassword": "brand-new-pass"},
        headers=bearer(current["accessToken"]),
    )
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Current password is incorrect"

    changed = client.post(
        "/auth/change-password",
        json={"currentPassword": "password123", "newPassword": "brand-new-pass"},
        headers=bearer(current["accessToken"]),
    )
    assert changed.status_code == 200

    for session in (other_device, current):
        assert client.post("/auth/refresh", headers=refresh_cookie(session["refreshToken"])).status_code == 401

    assert login("a@example.com", "brand-new-pass")["user"]["email"] == "a@example.com"


def test_banned_user_cannot_log_in(client, create_user):
    create_user("banned@example.com", is_banned=True)

    response = client.post("/auth/login", json={"email": "banned@example.com", "password": "password123"})

    assert response.status_code == 403


def test_response_carries_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Request-ID"]


def test_refresh_for_deleted_user_is_401(client, db):
    refresh = _register(client).cookies["refreshToken"]
    db.query(User).delete()
    db.commit()
    assert db.query(RefreshToken).filter(RefreshToken.revoked.is_(False)).count() == 1

    response = client.post("/auth/refresh", headers=refresh_cookie(refresh))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired refresh token"


def test_refresh_for_banned_user_with_live_token_is_401(client, db):
    refresh = _register(client).cookies["refreshToken"]
    db.query(User).update({User.is_banned: True})
    db.commit()
    assert db.query(RefreshToken).filter(RefreshToken.revoked.is_(False)).count() == 1

    response = client.post("/auth/refresh", headers=refresh_cookie(refresh))

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired refresh token"
