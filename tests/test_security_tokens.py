from datetime import timedelta

import pytest
from jose import jwt

from storefront.config import settings
from storefront.core.exceptions import InvalidOrExpiredTokenError
from storefront.core.security import (
    TokenKind,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    hash_token,
    token_expires_at,
    utcnow,
    verify_password,
)


def test_access_token_round_trip():
    token = create_access_token({"sub": "7", "email": "alice@example.com", "role": "user"})
    payload = decode_token(token, TokenKind.ACCESS)
    assert payload["sub"] == "7"
    assert payload["email"] == "alice@example.com"
    assert payload["typ"] == "access"
    assert payload["jti"]


def test_access_token_rejected_as_refresh():
    token = create_access_token({"sub": "1", "role": "user"})
    with pytest.raises(InvalidOrExpiredTokenError):
        decode_token(token, TokenKind.REFRESH)


def test_refresh_token_rejected_as_access():
    token = create_refresh_token({"sub": "1", "role": "user"})
    with pytest.raises(InvalidOrExpiredTokenError):
        decode_token(token, TokenKind.ACCESS)


def test_refresh_signed_with_access_secret_is_rejected():
    # Right typ claim, wrong key
    forged = jwt.encode(
        {"sub": "1", "typ": "refresh"},
        settings.JWT_ACCESS_SECRET,
        algorithm=settings.ALGORITHM,
    )
    with pytest.raises(InvalidOrExpiredTokenError):
        decode_token(forged, TokenKind.REFRESH)


def test_expired_and_forged_tokens_fail_identically():
    expired = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-5))
    forged = create_access_token({"sub": "1"})[:-4] + "abcd"

    messages = []
    for token in (expired, forged, "not-a-jwt"):
        with pytest.raises(InvalidOrExpiredTokenError) as exc_info:
            decode_token(token, TokenKind.ACCESS)
        messages.append(exc_info.value.message)
        assert exc_info.value.status_code == 401

    assert messages == ["Invalid or expired token"] * 3


def test_each_issuance_gets_a_fresh_jti():
    claims = {"sub": "3", "role": "user"}
    first = decode_token(create_access_token(claims), TokenKind.ACCESS)
    second = decode_token(create_access_token(claims), TokenKind.ACCESS)
    assert first["jti"] != second["jti"]


def test_refresh_expiry_matches_configured_lifetime():
    token = create_refresh_token({"sub": "5"})
    expected = utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    assert abs((token_expires_at(token) - expected).total_seconds()) < 5


def test_password_hash_verifies_and_hides_plaintext():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_verify_password_tolerates_non_bcrypt_hash():
    assert verify_password("anything", "plain-text-not-a-hash") is False


def test_hash_token_is_stable_sha256():
    assert hash_token("abc") == hash_token("abc")
    assert len(hash_token("abc")) == 64
    assert hash_token("abc") != hash_token("abd")
