"""
Audit trail of sign-in activity and review decisions.

Balance changes are not audited here; the balance is derived from the
entries themselves.
"""

import logging
from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from ledger_backend.app.models.audit_log import AuditLog

logger = logging.getLogger("shop_ledger.audit")


class AuditAction:
    USER_REGISTERED = "USER_REGISTERED"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    PIN_SET = "PIN_SET"
    ENTRY_REVIEWED = "ENTRY_REVIEWED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_username: Optional[str] = None,
    target_entry_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None
) -> AuditLog:
    """
    Record one event and commit it.

    Args:
        db: Database session
        action: One of the AuditAction constants
        actor_id: User performing the action (None for an unknown login email)
        actor_username: Username, or the attempted email on failed logins
        target_entry_id: Reviewed entry, if any
        metadata: Extra JSON context (failure reason, review status)
        ip_address: Client address for login events
    """
    event = AuditLog(
        actor_id=actor_id,
        actor_username=actor_username,
        action=action,
        target_entry_id=target_entry_id,
        meta_data=metadata,
        ip_address=ip_address
    )
    db.add(event)
    await db.commit()

    if action == AuditAction.LOGIN_FAILED:
        logger.warning("Failed login for %s from %s", actor_username, ip_address)
    return event


async def get_audit_trail(
    db: AsyncSession,
    actor_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> List[AuditLog]:
    """Most recent events first, optionally filtered by actor and action."""
    query = select(AuditLog)
    if actor_id is not None:
        query = query.where(AuditLog.actor_id == actor_id)
    if action is not None:
        query = query.where(AuditLog.action == action)

    result = await db.execute(
        query.order_by(desc(AuditLog.timestamp), desc(AuditLog.id)).limit(limit)
    )
    return list(result.scalars().all())
