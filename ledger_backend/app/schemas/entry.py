"""
Entry Pydantic schemas.

Defines request and response models for ledger entries.
"""

from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from ledger_backend.app.models.entry_enums import (
    EntryKind, CompletionState, ReviewState, ProfitKind, DeliveryType
)


class EntryCreate(BaseModel):
    """
    Schema for recording a new entry.

    linked_sell_id is required for purchase, restMoney and delivery and
    rejected for sell, expense and other. Deliveries take delivery_type and
    delivery_amount. Amounts carry at most two decimal places, matching
    the Numeric(14, 2) columns they are stored in.
    """
    kind: EntryKind = Field(..., description="Kind of event")
    total_amount: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2, description="Nominal value of the event")
    advance: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2, description="Amount paid up front (sell)")
    rest_money: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2, description="Remaining payment received")
    delivery_charge: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2, description="Delivery charge (purchase)")
    linked_sell_id: Optional[int] = Field(None, description="Sell this entry belongs to")
    delivery_type: Optional[DeliveryType] = Field(None, description="customer or own (delivery)")
    delivery_amount: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2, description="Delivery fee (delivery)")

    name: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    note: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=500)
    gst_included: bool = False
    has_delivery: bool = False

    class Config:
        extra = "forbid"


class EntryUpdate(BaseModel):
    """
    Schema for editing an entry.

    kind and linked_sell_id are immutable and therefore not accepted.
    Which amount fields are editable depends on the entry kind.
    """
    total_amount: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2)
    advance: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2)
    rest_money: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2)
    delivery_charge: Optional[Decimal] = Field(None, max_digits=14, decimal_places=2)

    name: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    note: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = Field(None, max_length=500)
    gst_included: Optional[bool] = None
    has_delivery: Optional[bool] = None

    class Config:
        extra = "forbid"


class EntryReview(BaseModel):
    """Schema for a review decision."""
    status: ReviewState = Field(..., description="correct or incorrect")
    note: Optional[str] = Field(None, max_length=500)


class EntryResponse(BaseModel):
    """Schema for entry response."""
    id: int
    order_id: str
    kind: EntryKind
    name: Optional[str]
    company: Optional[str]
    phone: Optional[str]
    note: Optional[str]
    address: Optional[str]
    gst_included: bool
    has_delivery: bool
    total_amount: Decimal
    advance: Decimal
    rest_money: Decimal
    delivery_charge: Decimal
    delivery_type: Optional[DeliveryType]
    linked_sell_id: Optional[int]
    completion_state: CompletionState
    profit_or_loss: Decimal
    profit_kind: ProfitKind
    review_state: ReviewState
    reviewed_by_id: Optional[int]
    review_note: str
    created_by_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EntryMutationResponse(BaseModel):
    """Entries written by a create/edit plus the balance afterwards."""
    success: bool = True
    entries: List[EntryResponse]
    balance: Decimal


class EntryDeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted_ids: List[int]
    balance: Decimal


class SellSummary(BaseModel):
    """Compact sell listing used to pick a sell to link against."""
    id: int
    order_id: str
    name: Optional[str]
    company: Optional[str]
    total_amount: Decimal
    completion_state: CompletionState

    class Config:
        from_attributes = True
