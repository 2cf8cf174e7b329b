"""
User database model.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.entry import utc_now
from ledger_backend.app.models.enums import UserRole


class User(Base):
    """
    A person who signs in to the ledger.

    Login is by email. Every entry records its creator in created_by_id;
    only that user may edit or delete it, and only someone else may review it.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    # Optional 6 digit quick-unlock PIN, hashed like the password
    hashed_pin = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    role = Column(Enum(UserRole), default=UserRole.ADMIN, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"
