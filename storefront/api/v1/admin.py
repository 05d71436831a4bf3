"""Admin routes - user moderation and audit trail"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.deps import AccessClaims, get_current_admin
from storefront.core.database import get_db
from storefront.schemas.base import dump
from storefront.schemas.response import api_response
from storefront.schemas.user import UpdateUserRoleRequest, UserResponse
from storefront.services.audit_service import audit_service
from storefront.services.user_service import user_service

router = APIRouter()


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.get("/users")
def get_all_users(
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """List every user (admin only)"""
    users = user_service.get_all_users(db)
    return api_response(data=[dump(UserResponse.model_validate(u)) for u in users])


@router.put("/users/{user_id}/ban")
def ban_user(
    user_id: int,
    request: Request,
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """
    Ban a user

    The user's refresh tokens are revoked; access tokens already issued stay
    usable until they expire.
    """
    revoked = user_service.ban_user(db, user_id, actor_id=admin.user_id)
    audit_service.log_event(
        db,
        actor_id=admin.user_id,
        action="ban_user",
        target_user_id=user_id,
        ip_address=_client_ip(request),
        metadata={"revoked_sessions": revoked},
    )
    return api_response("User banned successfully")


@router.put("/users/{user_id}/unban")
def unban_user(
    user_id: int,
    request: Request,
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    user_service.unban_user(db, user_id)
    audit_service.log_event(
        db,
        actor_id=admin.user_id,
        action="unban_user",
        target_user_id=user_id,
        ip_address=_client_ip(request),
    )
    return api_response("User unbanned successfully")


@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: int,
    data: UpdateUserRoleRequest,
    request: Request,
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    user = user_service.update_role(db, user_id, data.role)
    audit_service.log_event(
        db,
        actor_id=admin.user_id,
        action="update_user_role",
        target_user_id=user_id,
        ip_address=_client_ip(request),
        metadata={"role": user.role},
    )
    return api_response("User role updated successfully", {"id": user.id, "role": user.role})


@router.get("/audit-events")
def get_audit_events(
    limit: int = 100,
    action: Optional[str] = None,
    user_id: Optional[int] = None,
    admin: AccessClaims = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """List recent audit trail entries."""
    events = audit_service.list_events(db, limit=limit, action=action, target_user_id=user_id)
    return api_response(data=[dump(e) for e in events])
