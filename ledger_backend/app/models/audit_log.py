"""
Audit Log Database Model.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.entry import utc_now


class AuditLog(Base):
    """
    One sign-in or review event (see services.audit.AuditAction).

    actor_id and target_entry_id are plain columns, not foreign keys, so the
    trail survives deletion of the user or the reviewed entry.
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(255), nullable=True)
    action = Column(String(50), nullable=False, index=True)
    target_entry_id = Column(Integer, index=True, nullable=True)
    meta_data = Column(JSON, nullable=True)
    ip_address = Column(String(50), nullable=True)
    timestamp = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username})>"
