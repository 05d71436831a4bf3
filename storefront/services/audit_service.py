"""Audit service for sensitive admin events."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from storefront.models.audit import AuditEvent
from storefront.schemas.audit import AuditEventResponse


class AuditService:
    """Persist immutable audit trail entries."""

    @staticmethod
    def log_event(
        db: Session,
        *,
        actor_id: Optional[int],
        action: str,
        target_user_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        event = AuditEvent(
            actor_id=actor_id,
            action=action,
            target_user_id=target_user_id,
            ip_address=ip_address,
            metadata_json=json.dumps(metadata or {}, ensure_ascii=False),
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    @staticmethod
    def list_events(
        db: Session,
        *,
        limit: int = 100,
        action: Optional[str] = None,
        target_user_id: Optional[int] = None,
    ) -> List[AuditEventResponse]:
        """Most recent events first, metadata decoded"""
        query = db.query(AuditEvent).order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc())
        if action:
            query = query.filter(AuditEvent.action == action)
        if target_user_id is not None:
            query = query.filter(AuditEvent.target_user_id == target_user_id)

        rows = []
        for ev in query.limit(max(1, min(limit, 500))).all():
            try:
                metadata = json.loads(ev.metadata_json) if ev.metadata_json else {}
            except ValueError:
                metadata = {"raw": ev.metadata_json}
            rows.append(
                AuditEventResponse(
                    id=ev.id,
                    actor_id=ev.actor_id,
                    actor_email=ev.actor.email if ev.actor else None,
                    action=ev.action,
                    target_user_id=ev.target_user_id,
                    ip_address=ev.ip_address,
                    metadata=metadata,
                    created_at=ev.created_at,
                )
            )
        return rows


audit_service = AuditService()
