"""Audit event model for admin-sensitive actions."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from storefront.core.database import Base


class AuditEvent(Base):
    """Immutable audit events (bans, role changes)."""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(64), nullable=False, index=True)
    target_user_id = Column(Integer, nullable=True, index=True)
    ip_address = Column(String(64), nullable=True)
    metadata_json = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    actor = relationship("User")

    __table_args__ = (
        Index("idx_audit_events_created_at", "created_at"),
    )
