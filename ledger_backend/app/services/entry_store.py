"""
Entry Store.

Persistence for ledger entries. No business rules live here; the
transition engine enforces the ledger invariants.
"""

from typing import Any, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, desc

from ledger_backend.app.models.entry import Entry, utc_now
from ledger_backend.app.models.entry_enums import EntryKind, ReviewState, DeliveryType


class EntryStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, entry_id: int, refresh: bool = False) -> Optional[Entry]:
        """Load an entry; refresh=True overwrites an already loaded instance with the row's current values."""
        query = select(Entry).where(Entry.id == entry_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_sell(self, sell_id: int, for_update: bool = False) -> Optional[Entry]:
        """
        Load a SELL entry by id.

        Args:
            sell_id: Entry id expected to be a sell
            for_update: Lock the row until the transaction ends (no-op on SQLite)

        Returns:
            The sell, or None if missing or not a sell
        """
        query = select(Entry).where(Entry.id == sell_id, Entry.kind == EntryKind.SELL)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Entry]:
        result = await self.db.execute(
            select(Entry).order_by(desc(Entry.created_at), desc(Entry.id))
        )
        return list(result.scalars().all())

    async def list_by_kind(self, kind: EntryKind) -> List[Entry]:
        result = await self.db.execute(
            select(Entry).where(Entry.kind == kind).order_by(desc(Entry.created_at), desc(Entry.id))
        )
        return list(result.scalars().all())

    async def find_linked(
        self,
        sell_id: int,
        kind: Optional[EntryKind] = None,
        delivery_type: Optional[DeliveryType] = None
    ) -> List[Entry]:
        """Entries linked to a sell, optionally filtered by kind and delivery type."""
        query = select(Entry).where(Entry.linked_sell_id == sell_id)
        if kind is not None:
            query = query.where(Entry.kind == kind)
        if delivery_type is not None:
            query = query.where(Entry.delivery_type == delivery_type)
        result = await self.db.execute(query.order_by(Entry.created_at, Entry.id))
        return list(result.scalars().all())

    async def list_for_creator(self, user_id: int, review_state: ReviewState) -> List[Entry]:
        result = await self.db.execute(
            select(Entry).where(
                Entry.created_by_id == user_id,
                Entry.review_state == review_state
            ).order_by(desc(Entry.created_at), desc(Entry.id))
        )
        return list(result.scalars().all())

    async def order_ids_like(self, pattern: str) -> List[str]:
        result = await self.db.execute(
            select(Entry.order_id).where(Entry.order_id.like(pattern))
        )
        return [order_id for order_id in result.scalars().all() if order_id]

    async def add(self, entry: Entry) -> Entry:
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def update(self, entry: Entry, **fields: Any) -> Entry:
        """Field-level merge onto an existing entry."""
        for field, value in fields.items():
            setattr(entry, field, value)
        entry.updated_at = utc_now()
        await self.db.flush()
        return entry

    async def delete(self, entry: Entry) -> None:
        await self.db.delete(entry)
        await self.db.flush()

    async def delete_linked(self, sell_id: int) -> int:
        """Bulk delete every entry linked to a sell. Returns the number removed."""
        result = await self.db.execute(
            delete(Entry)
            .where(Entry.linked_sell_id == sell_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0
