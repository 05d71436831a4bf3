"""Application configuration management"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, List
from urllib.parse import quote_plus

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

# Base directory: repository root
_BASE_DIR = Path(__file__).resolve().parent.parent

_DEFAULT_ACCESS_SECRET = "access-secret-key-change-in-production"
_DEFAULT_REFRESH_SECRET = "refresh-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Storefront API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    WORKERS: int = 4

    # Database (PostgreSQL)
    DATABASE_URL: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "storefront_db"
    POSTGRES_USER: str = "storefront"
    POSTGRES_PASSWORD: str = "storefront"
    DATABASE_POOL_SIZE: int = 30
    DATABASE_MAX_OVERFLOW: int = 20

    # Tokens
    JWT_ACCESS_SECRET: str = _DEFAULT_ACCESS_SECRET
    JWT_REFRESH_SECRET: str = _DEFAULT_REFRESH_SECRET
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    RESET_TOKEN_EXPIRE_MINUTES: int = 15
    BCRYPT_ROUNDS: int = 12

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:3000"]

    # Admin seed
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: str = "admin123"

    # Links sent by email
    FRONTEND_BASE_URL: str = "http://localhost:3000"

    # OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/auth/google/callback"
    APPLE_CLIENT_ID: str = ""
    APPLE_TEAM_ID: str = ""
    APPLE_KEY_ID: str = ""
    APPLE_PRIVATE_KEY: str = ""
    APPLE_REDIRECT_URI: str = "http://localhost:8000/auth/apple/callback"
    OAUTH_HTTP_TIMEOUT_SECONDS: float = 10.0
    OAUTH_STATE_TTL_SECONDS: int = 600

    # Customer features
    RECENTLY_VIEWED_LIMIT: int = 20

    # Database initialization discipline
    DB_INIT_MODE: str = "migrate"  # migrate | create_all | off
    DB_REQUIRE_HEAD: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: Any) -> Any:
        """
        Accept JSON array or comma-separated origins from env.

        Examples:
            CORS_ORIGINS=["http://localhost:3000","http://example.com"]
            CORS_ORIGINS=http://localhost:3000,http://example.com
        """
        if not isinstance(value, str):
            return value

        raw = value.strip()
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None

        if isinstance(parsed, str):
            return [parsed]
        if isinstance(parsed, list):
            return [str(origin).strip() for origin in parsed if str(origin).strip()]

        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @property
    def cookie_secure(self) -> bool:
        """Session cookies carry the Secure flag only in production"""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def access_cookie_max_age(self) -> int:
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    @property
    def refresh_cookie_max_age(self) -> int:
        return self.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    def get_log_file(self) -> str:
        p = self.LOG_FILE
        if not p or p.startswith(".."):
            return str(_BASE_DIR / "logs" / "app.log")
        return p

    def get_apple_private_key(self) -> str:
        """Private keys pasted into .env usually carry literal \\n sequences"""
        return self.APPLE_PRIVATE_KEY.replace("\\n", "\n")

    def get_database_url(self) -> str:
        """
        Resolve database URL.

        Priority:
          1) Explicit DATABASE_URL
          2) Construct from POSTGRES_* parts with safe URL encoding
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        user = quote_plus(self.POSTGRES_USER)
        password = quote_plus(self.POSTGRES_PASSWORD)
        return (
            f"postgresql://{user}:{password}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def validate_security_settings(self) -> None:
        """
        Validate runtime security defaults in production.

        Raises:
            ValueError: If insecure defaults are detected.
        """
        if self.ENVIRONMENT.lower() != "production":
            return

        insecure_secret_markers = {
            "",
            _DEFAULT_ACCESS_SECRET,
            _DEFAULT_REFRESH_SECRET,
            "change-me",
        }
        insecure_admin_passwords = {
            "",
            "admin123",
            "change_this_password_immediately",
        }

        for name in ("JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET"):
            secret = getattr(self, name)
            if secret in insecure_secret_markers or len(secret) < 32:
                raise ValueError(
                    f"Insecure {name} for production. Use a strong key (e.g. `openssl rand -hex 32`)."
                )

        if self.JWT_ACCESS_SECRET == self.JWT_REFRESH_SECRET:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ.")

        if self.ADMIN_PASSWORD in insecure_admin_passwords or len(self.ADMIN_PASSWORD) < 10:
            raise ValueError(
                "Insecure ADMIN_PASSWORD for production. Set a strong admin password before startup."
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
