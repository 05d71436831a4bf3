import pytest

from storefront.config import Settings


def test_health_reports_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["readiness"]["database"]["ok"] is True


def test_metrics_expose_auth_events(client):
    client.post("/auth/login", json={"email": "ghost@example.com", "password": "password123"})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "storefront_auth_events_total" in response.text
    assert "storefront_http_requests_total" in response.text


def test_root(client):
    assert client.get("/").json()["status"] == "running"


def test_cors_origins_accept_comma_list():
    settings = Settings(CORS_ORIGINS="http://a.example.com, http://b.example.com", _env_file=None)
    assert settings.CORS_ORIGINS == ["http://a.example.com", "http://b.example.com"]


def test_production_rejects_default_secrets():
    settings = Settings(ENVIRONMENT="production", _env_file=None)
    with pytest.raises(ValueError):
        settings.validate_security_settings()


def test_production_rejects_shared_secret():
    secret = "x" * 40
    settings = Settings(
        ENVIRONMENT="production",
        JWT_ACCESS_SECRET=secret,
        JWT_REFRESH_SECRET=secret,
        ADMIN_PASSWORD="a-very-strong-password",
        _env_file=None,
    )
    with pytest.raises(ValueError, match="must differ"):
        settings.validate_security_settings()


def test_cookies_are_secure_only_in_production():
    assert Settings(ENVIRONMENT="production", _env_file=None).cookie_secure is True
    assert Settings(ENVIRONMENT="development", _env_file=None).cookie_secure is False
