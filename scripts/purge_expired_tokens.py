"""
Delete expired refresh and password-reset tokens.

Meant for cron or a scheduled job: python scripts/purge_expired_tokens.py
"""

import logging

from storefront.core.database import SessionLocal
from storefront.repositories.password_resets import PasswordResetRepository
from storefront.repositories.refresh_tokens import RefreshTokenRepository

logger = logging.getLogger("storefront.purge")


def purge(db) -> dict:
    """Run both sweeps in one transaction and return per-table counts"""
    counts = {
        "refresh_tokens": RefreshTokenRepository(db).purge_expired(),
        "password_reset_tokens": PasswordResetRepository(db).purge_expired(),
    }
    db.commit()
    return counts


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    db = SessionLocal()
    try:
        counts = purge(db)
    finally:
        db.close()
    logger.info(
        "Purged %d refresh token(s) and %d password reset token(s)",
        counts["refresh_tokens"],
        counts["password_reset_tokens"],
    )


if __name__ == "__main__":
    main()
