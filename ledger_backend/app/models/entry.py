"""
Ledger Entry database model.

One row per money-movement event (sale, purchase, expense, partial payment,
delivery charge).
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey, Enum
from ledger_backend.app.db.session import Base
from ledger_backend.app.models.entry_enums import (
    EntryKind, CompletionState, ReviewState, ProfitKind, DeliveryType
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Entry(Base):
    """
    Entry model.

    A SELL is a root entry. PURCHASE, REST_MONEY and DELIVERY entries point at
    their sell through linked_sell_id and are deleted with it.
    kind and linked_sell_id never change after creation.
    """
    __tablename__ = "entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(String(32), unique=True, nullable=False, index=True)
    kind = Column(Enum(EntryKind), nullable=False, index=True)

    # Descriptive fields
    name = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    note = Column(String(500), nullable=True)
    address = Column(String(500), nullable=True)
    gst_included = Column(Boolean, default=False, nullable=False)
    has_delivery = Column(Boolean, default=False, nullable=False)

    # Financials
    total_amount = Column(Numeric(14, 2), nullable=False, default=0)
    advance = Column(Numeric(14, 2), nullable=False, default=0)
    rest_money = Column(Numeric(14, 2), nullable=False, default=0)
    delivery_charge = Column(Numeric(14, 2), nullable=False, default=0)
    delivery_type = Column(Enum(DeliveryType), nullable=True)

    # Linkage
    linked_sell_id = Column(Integer, ForeignKey("entries.id"), nullable=True, index=True)

    # Derived state (sell only)
    completion_state = Column(Enum(CompletionState), default=CompletionState.COMPLETED, nullable=False)
    profit_or_loss = Column(Numeric(14, 2), nullable=False, default=0)
    profit_kind = Column(Enum(ProfitKind), default=ProfitKind.NEUTRAL, nullable=False)

    # Review workflow
    review_state = Column(Enum(ReviewState), default=ReviewState.PENDING, nullable=False, index=True)
    reviewed_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    review_note = Column(String(500), nullable=False, default="")

    # Ownership
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    @property
    def is_completed(self) -> bool:
        return self.completion_state == CompletionState.COMPLETED

    def __repr__(self):
        return f"<Entry(id={self.id}, order_id='{self.order_id}', kind='{self.kind.value}', total={self.total_amount})>"
