"""
Entry review workflow.

A second user marks an entry correct or incorrect. Independent of the
ledger: reviews never touch the balance.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.core.exceptions import (
    LedgerValidationError, ResourceNotFoundError, InsufficientPermissionsError
)
from ledger_backend.app.models.entry import Entry
from ledger_backend.app.models.entry_enums import ReviewState
from ledger_backend.app.services.entry_store import EntryStore


async def review_entry(
    db: AsyncSession,
    entry_id: int,
    reviewer_id: int,
    status: ReviewState,
    note: Optional[str] = None
) -> Entry:
    """
    Record a review decision on an entry.

    Args:
        db: Database session
        entry_id: Entry being reviewed
        reviewer_id: Reviewing user (must not be the creator)
        status: ReviewState.CORRECT or ReviewState.INCORRECT
        note: Optional reviewer note

    Returns:
        Updated entry

    Raises:
        LedgerValidationError: status is not correct/incorrect
        ResourceNotFoundError: entry doesn't exist
        InsufficientPermissionsError: reviewer created the entry
    """
    if status not in (ReviewState.CORRECT, ReviewState.INCORRECT):
        raise LedgerValidationError("Invalid status value, expected correct or incorrect")

    store = EntryStore(db)
    entry = await store.get(entry_id)
    if entry is None:
        raise ResourceNotFoundError("Entry", entry_id)

    if entry.created_by_id == reviewer_id:
        raise InsufficientPermissionsError("You cannot review your own entry")

    await store.update(
        entry,
        review_state=status,
        review_note=note or "",
        reviewed_by_id=reviewer_id
    )
    await db.commit()

    return entry
