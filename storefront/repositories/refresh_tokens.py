"""Refresh-token ledger

Rows are keyed by a digest of the signed token. A row is living while it is
not revoked and its expiry lies in the future; only living rows can mint new
access tokens.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from storefront.core.security import hash_token, utcnow
from storefront.models.security import RefreshToken


def _naive_utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=None) if dt and dt.tzinfo else dt


class RefreshTokenRepository:
    """Ledger of issued refresh tokens; callers own the commit"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, token: str, user_id: int, expires_at: datetime) -> RefreshToken:
        record = RefreshToken(
            token_hash=hash_token(token),
            user_id=user_id,
            expires_at=_naive_utc(expires_at),
            revoked=False,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def get(self, token: str) -> Optional[RefreshToken]:
        return (
            self.db.query(RefreshToken)
            .filter(RefreshToken.token_hash == hash_token(token))
            .first()
        )

    def is_valid(self, token: str) -> bool:
        record = self.get(token)
        if record is None or record.revoked:
            return False
        return utcnow() < _naive_utc(record.expires_at)

    def revoke(self, token: str) -> bool:
        """
        Revoke one token

        Returns:
            False if the token is unknown. Revoking an already-revoked
            token succeeds without changing the row.
        """
        record = self.get(token)
        if record is None:
            return False
        if not record.revoked:
            record.revoked = True
            record.revoked_at = utcnow()
            self.db.flush()
        return True

    def revoke_all(self, user_id: int) -> int:
        """Revoke every non-revoked token of a user; returns how many changed"""
        count = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id, RefreshToken.revoked == False)  # noqa: E712
            .update(
                {RefreshToken.revoked: True, RefreshToken.revoked_at: utcnow()},
                synchronize_session="fetch",
            )
        )
        self.db.flush()
        return count

    def purge_expired(self) -> int:
        """Physically delete rows whose expiry has passed"""
        count = (
            self.db.query(RefreshToken)
            .filter(RefreshToken.expires_at < utcnow())
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return count
