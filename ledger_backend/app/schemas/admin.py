"""
Admin schemas: user listing and the audit trail.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List
from ledger_backend.app.models.enums import UserRole


class UserListItem(BaseModel):
    """A user as an admin sees it. Password and PIN hashes are never exposed."""
    id: int
    username: str
    email: str
    role: UserRole
    is_active: bool
    has_pin: bool
    created_at: datetime


class UserListResponse(BaseModel):
    users: List[UserListItem]
    total: int
    page: int
    page_size: int


class AuditLogResponse(BaseModel):
    id: int
    actor_id: Optional[int]
    actor_username: Optional[str]
    action: str
    target_entry_id: Optional[int]
    meta_data: Optional[dict]
    ip_address: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True


class AuditTrailResponse(BaseModel):
    logs: List[AuditLogResponse]
    total: int
