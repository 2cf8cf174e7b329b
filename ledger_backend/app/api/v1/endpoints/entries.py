"""
Ledger Entry API Endpoints.

Thin HTTP layer over the ledger transition engine. Every route is
admin-only; edits and deletes are further restricted to the entry's creator.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.ext.asyncio import AsyncSession
from ledger_backend.app.db.session import get_db
from ledger_backend.app.core.dependencies import get_ledger_engine
from ledger_backend.app.core.guards import require_admin
from ledger_backend.app.domain.ledger.transition_engine import LedgerTransitionEngine
from ledger_backend.app.models.entry_enums import EntryKind, ReviewState
from ledger_backend.app.schemas.entry import (
    EntryCreate, EntryUpdate, EntryReview, EntryResponse,
    EntryMutationResponse, EntryDeleteResponse, SellSummary
)
from ledger_backend.app.services.entry_store import EntryStore
from ledger_backend.app.services.entry_review import review_entry
from ledger_backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/entries", tags=["Ledger Entries"])


@router.post("", response_model=EntryMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_data: EntryCreate,
    current_user: dict = Depends(require_admin),
    engine: LedgerTransitionEngine = Depends(get_ledger_engine)
):
    """
    Record a new entry.

    Validates:
    - purchase / restMoney / delivery link to an existing sell
    - sell / expense / other carry no link
    - deliveries have a delivery_type and a positive amount
    """
    created = await engine.create_entry(entry_data, actor_id=current_user["user_id"])
    balance = await engine.ledger.get()

    return EntryMutationResponse(
        entries=[EntryResponse.model_validate(e) for e in created],
        balance=balance
    )


@router.get("", response_model=List[EntryResponse])
async def list_entries(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List all entries, newest first."""
    entries = await EntryStore(db).list_all()
    return [EntryResponse.model_validate(e) for e in entries]


@router.get("/sells", response_model=List[SellSummary])
async def list_sells(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List sells (for linking purchases, rest money and deliveries), newest first."""
    sells = await EntryStore(db).list_by_kind(EntryKind.SELL)
    return [SellSummary.model_validate(s) for s in sells]


@router.get("/assigned-to-me", response_model=List[EntryResponse])
async def list_assigned_to_me(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Entries the current user created that a reviewer marked incorrect."""
    entries = await EntryStore(db).list_for_creator(current_user["user_id"], ReviewState.INCORRECT)
    return [EntryResponse.model_validate(e) for e in entries]


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Get a single entry."""
    entry = await EntryStore(db).get(entry_id)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Entry not found"
        )
    return EntryResponse.model_validate(entry)


@router.get("/{entry_id}/rest-money", response_model=List[EntryResponse])
async def list_rest_money(
    entry_id: int = Path(..., description="Sell entry ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Rest money payments received against a sell."""
    entries = await EntryStore(db).find_linked(entry_id, kind=EntryKind.REST_MONEY)
    return [EntryResponse.model_validate(e) for e in entries]


@router.put("/{entry_id}", response_model=EntryMutationResponse)
async def edit_entry(
    entry_id: int = Path(..., description="Entry ID"),
    entry_data: EntryUpdate = ...,
    current_user: dict = Depends(require_admin),
    engine: LedgerTransitionEngine = Depends(get_ledger_engine)
):
    """
    Edit an entry (creator only).

    Resets the review state to pending.
    """
    entry = await engine.edit_entry(entry_id, entry_data, actor_id=current_user["user_id"])
    balance = await engine.ledger.get()

    return EntryMutationResponse(
        entries=[EntryResponse.model_validate(entry)],
        balance=balance
    )


@router.delete("/{entry_id}", response_model=EntryDeleteResponse)
async def delete_entry(
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_admin),
    engine: LedgerTransitionEngine = Depends(get_ledger_engine)
):
    """
    Delete an entry (creator only).

    Deleting a sell also deletes every entry linked to it.
    """
    deleted_ids = await engine.delete_entry(entry_id, actor_id=current_user["user_id"])
    balance = await engine.ledger.get()

    return EntryDeleteResponse(
        message="Entry and its linked records deleted successfully",
        deleted_ids=deleted_ids,
        balance=balance
    )


@router.post("/{entry_id}/review", response_model=EntryResponse)
async def review(
    entry_id: int = Path(..., description="Entry ID"),
    review_data: EntryReview = ...,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Mark someone else's entry correct or incorrect."""
    entry = await review_entry(
        db,
        entry_id=entry_id,
        reviewer_id=current_user["user_id"],
        status=review_data.status,
        note=review_data.note
    )

    await log_event(
        db=db,
        action=AuditAction.ENTRY_REVIEWED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_entry_id=entry.id,
        metadata={"status": entry.review_state.value}
    )

    return EntryResponse.model_validate(entry)
