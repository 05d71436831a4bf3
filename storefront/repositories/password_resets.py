"""Password reset token repository"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from storefront.core.security import hash_token, utcnow
from storefront.models.security import PasswordResetToken


class PasswordResetRepository:
    """One live reset token per user; callers own the commit"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, token: str, expires_in_minutes: int) -> PasswordResetToken:
        """Store a new reset token, deleting any earlier ones for the user"""
        self.db.query(PasswordResetToken).filter(
            PasswordResetToken.user_id == user_id
        ).delete(synchronize_session=False)

        record = PasswordResetToken(
            user_id=user_id,
            token_hash=hash_token(token),
            expires_at=utcnow() + timedelta(minutes=expires_in_minutes),
        )
        self.db.add(record)
        self.db.flush()
        return record

    def get(self, token: str) -> Optional[PasswordResetToken]:
        return (
            self.db.query(PasswordResetToken)
            .filter(PasswordResetToken.token_hash == hash_token(token))
            .first()
        )

    @staticmethod
    def is_expired(record: PasswordResetToken, now: Optional[datetime] = None) -> bool:
        expires_at = record.expires_at
        if expires_at.tzinfo:
            expires_at = expires_at.replace(tzinfo=None)
        return (now or utcnow()) > expires_at

    def delete(self, record: PasswordResetToken) -> None:
        self.db.delete(record)
        self.db.flush()

    def purge_expired(self) -> int:
        count = (
            self.db.query(PasswordResetToken)
            .filter(PasswordResetToken.expires_at < utcnow())
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return count
