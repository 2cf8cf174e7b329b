"""
Admin API Endpoints.

Lists the shop's users and exposes the sign-in and review audit trail.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from ledger_backend.app.db.session import get_db
from ledger_backend.app.models.user import User
from ledger_backend.app.schemas.admin import (
    UserListItem, UserListResponse, AuditLogResponse, AuditTrailResponse
)
from ledger_backend.app.core.guards import require_admin
from ledger_backend.app.services.audit import get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin"])


def _list_item(user: User) -> UserListItem:
    return UserListItem(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        is_active=user.is_active,
        has_pin=user.hashed_pin is not None,
        created_at=user.created_at,
    )


@router.get("/users", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Every user, newest first (admin-only)."""
    total = (await db.execute(select(func.count(User.id)))).scalar()

    result = await db.execute(
        select(User)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return UserListResponse(
        users=[_list_item(user) for user in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    actor_id: Optional[int] = Query(None, description="Only events by this user"),
    action: Optional[str] = Query(None, description="Only this action, e.g. LOGIN_FAILED"),
    limit: int = Query(100, ge=1, le=500),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Recent sign-in and review events, newest first (admin-only)."""
    logs = await get_audit_trail(db, actor_id=actor_id, action=action, limit=limit)
    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
