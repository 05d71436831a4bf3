"""Audit event schemas."""

from datetime import datetime
from typing import Any, Dict, Optional

from storefront.schemas.base import CamelModel


class AuditEventResponse(CamelModel):
    id: int
    actor_id: Optional[int] = None
    actor_email: Optional[str] = None
    action: str
    target_user_id: Optional[int] = None
    ip_address: Optional[str] = None
    metadata: Dict[str, Any] = {}
    created_at: Optional[datetime] = None
