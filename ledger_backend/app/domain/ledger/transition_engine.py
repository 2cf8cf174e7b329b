"""
Ledger Transition Engine (Domain Logic).

Orchestrates every create / edit / delete of a ledger entry so that the
running balance, each sell's completion and profit state, and the
sell -> child links stay consistent.

Each transition:
1. Validates the request and the actor (no mutation yet)
2. Takes the lock of the sell group it touches
3. Applies Entry Store writes and Balance Ledger adjustments in one
   database transaction
4. Commits, or rolls everything back on failure

Reconciliation rule: every completed -> processing edge debits exactly the
profit/loss the resolver credited before, and every recomputation of a
completed sell's profit is reverse() followed by resolve().
"""

import logging
from contextlib import asynccontextmanager, nullcontext
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_backend.app.core.exceptions import (
    AppException, LedgerValidationError, ResourceNotFoundError,
    InsufficientPermissionsError, StorageError
)
from ledger_backend.app.domain.ledger.effects import (
    AMOUNT_FIELDS, EDITABLE_AMOUNTS, ZERO,
    balance_effect, affects_cost_basis, completion_for
)
from ledger_backend.app.domain.ledger.locks import SellLockRegistry
from ledger_backend.app.domain.ledger.profit_loss import ProfitLossResolver
from ledger_backend.app.models.entry import Entry
from ledger_backend.app.models.entry_enums import (
    EntryKind, CompletionState, ReviewState, ProfitKind, DeliveryType,
    LINKED_KINDS, ROOT_KINDS
)
from ledger_backend.app.schemas.entry import EntryCreate, EntryUpdate
from ledger_backend.app.services.balance_ledger import BalanceLedger
from ledger_backend.app.services.entry_store import EntryStore
from ledger_backend.app.services.sequence import SequenceAllocator

logger = logging.getLogger("shop_ledger.transitions")

OWN_DELIVERY_NOTE = "Delivery Charge (Own)"
CUSTOMER_DELIVERY_NOTES = (
    "Delivery Charge (Customer) - collected from customer",
    "Delivery Charge (Customer) - paid to courier",
)

DESCRIPTIVE_FIELDS = ("name", "company", "phone", "note", "address", "gst_included", "has_delivery")


class LedgerTransitionEngine:

    def __init__(
        self,
        db: AsyncSession,
        locks: SellLockRegistry,
        store: Optional[EntryStore] = None,
        ledger: Optional[BalanceLedger] = None,
        allocator: Optional[SequenceAllocator] = None,
        resolver: Optional[ProfitLossResolver] = None,
    ):
        self.db = db
        self.locks = locks
        self.store = store or EntryStore(db)
        self.ledger = ledger or BalanceLedger(db)
        self.allocator = allocator or SequenceAllocator(self.store)
        self.resolver = resolver or ProfitLossResolver(self.store, self.ledger)

        self._create_handlers = {
            EntryKind.SELL: self._create_sell,
            EntryKind.PURCHASE: self._create_purchase,
            EntryKind.EXPENSE: self._create_root_expense,
            EntryKind.OTHER: self._create_root_expense,
            EntryKind.REST_MONEY: self._create_rest_money,
            EntryKind.DELIVERY: self._create_delivery,
        }

    # ------------------------------------------------------------------
    # Transaction scope
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _transition(self, sell_id: Optional[int], action: str):
        lock = self.locks.hold(sell_id) if sell_id is not None else nullcontext()
        async with lock:
            try:
                yield
                await self.db.commit()
            except AppException:
                await self.db.rollback()
                raise
            except SQLAlchemyError as exc:
                await self.db.rollback()
                logger.error("%s failed for sell group %s: %s", action, sell_id, exc)
                raise StorageError() from exc

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_entry(self, data: EntryCreate, actor_id: int) -> List[Entry]:
        """
        Record a new entry and apply its balance effect.

        Returns:
            The persisted entries (two for a customer-paid delivery, otherwise one)

        Raises:
            LedgerValidationError: Missing/invalid fields or linkage
            ResourceNotFoundError: linked_sell_id doesn't resolve to a sell
            StorageError: Database failure, nothing applied
        """
        self._validate_create(data)
        group = data.linked_sell_id if data.kind in LINKED_KINDS else None

        async with self._transition(group, f"create {data.kind.value}"):
            sell = None
            if data.kind in LINKED_KINDS:
                sell = await self.store.get_sell(data.linked_sell_id, for_update=True)
                if sell is None:
                    raise ResourceNotFoundError("Sell entry", data.linked_sell_id)
            created = await self._create_handlers[data.kind](data, actor_id, sell)

        for entry in created:
            logger.info(
                "Created %s %s (id=%s) by user %s",
                entry.kind.value, entry.order_id, entry.id, actor_id
            )
        return created

    def _validate_create(self, data: EntryCreate) -> None:
        kind = data.kind

        if kind in LINKED_KINDS and data.linked_sell_id is None:
            raise LedgerValidationError(f"{kind.value} must link to a sell entry (linked_sell_id missing)")
        if kind in ROOT_KINDS and data.linked_sell_id is not None:
            raise LedgerValidationError(f"{kind.value} entries cannot link to a sell")
        if kind != EntryKind.DELIVERY and (data.delivery_type is not None or data.delivery_amount is not None):
            raise LedgerValidationError("delivery_type and delivery_amount apply to delivery entries only")

        if kind in (EntryKind.SELL, EntryKind.PURCHASE, EntryKind.EXPENSE, EntryKind.OTHER):
            if data.total_amount is None:
                raise LedgerValidationError(f"total_amount is required for {kind.value}")

        if kind == EntryKind.REST_MONEY and data.rest_money is None and data.total_amount is None:
            raise LedgerValidationError("rest_money amount is required")

        if kind == EntryKind.DELIVERY:
            if data.delivery_type is None:
                raise LedgerValidationError("delivery_type is required (customer or own)")
            amount = data.delivery_amount if data.delivery_amount is not None else data.total_amount
            if amount is None or amount <= ZERO:
                raise LedgerValidationError(
                    "delivery_amount must be a positive number",
                    details={"delivery_amount": str(amount) if amount is not None else None}
                )

    def _new_entry(self, data: EntryCreate, kind: EntryKind, actor_id: int, order_id: str, **fields: Any) -> Entry:
        values: Dict[str, Any] = {
            "total_amount": ZERO,
            "advance": ZERO,
            "rest_money": ZERO,
            "delivery_charge": ZERO,
            "completion_state": CompletionState.COMPLETED,
            "profit_or_loss": ZERO,
            "profit_kind": ProfitKind.NEUTRAL,
            "review_state": ReviewState.PENDING,
            "review_note": "",
        }
        values.update({name: getattr(data, name) for name in DESCRIPTIVE_FIELDS})
        values.update(fields)
        return Entry(kind=kind, order_id=order_id, created_by_id=actor_id, **values)

    async def _create_sell(self, data: EntryCreate, actor_id: int, sell: None) -> List[Entry]:
        advance = data.advance or ZERO
        rest_money = data.rest_money or ZERO
        entry = self._new_entry(
            data, EntryKind.SELL, actor_id, await self.allocator.next_root_id(),
            total_amount=data.total_amount,
            advance=advance,
            rest_money=rest_money,
            delivery_charge=data.delivery_charge or ZERO,
            completion_state=completion_for(advance, rest_money, data.total_amount),
        )
        await self.store.add(entry)
        await self.ledger.adjust(balance_effect(entry))

        if entry.is_completed:
            await self.resolver.resolve(entry.id)
        return [entry]

    async def _create_purchase(self, data: EntryCreate, actor_id: int, sell: Entry) -> List[Entry]:
        entry = self._new_entry(
            data, EntryKind.PURCHASE, actor_id, await self.allocator.next_child_id(sell),
            total_amount=data.total_amount,
            delivery_charge=data.delivery_charge or ZERO,
            linked_sell_id=sell.id,
        )
        await self.store.add(entry)
        await self.ledger.adjust(balance_effect(entry))
        await self._settle_sell(sell, was_completed=sell.is_completed, basis_changed=True)
        return [entry]

    async def _create_root_expense(self, data: EntryCreate, actor_id: int, sell: None) -> List[Entry]:
        entry = self._new_entry(
            data, data.kind, actor_id, await self.allocator.next_root_id(),
            total_amount=data.total_amount,
        )
        await self.store.add(entry)
        await self.ledger.adjust(balance_effect(entry))
        return [entry]

    async def _create_rest_money(self, data: EntryCreate, actor_id: int, sell: Entry) -> List[Entry]:
        amount = data.rest_money if data.rest_money is not None else data.total_amount
        entry = self._new_entry(
            data, EntryKind.REST_MONEY, actor_id, await self.allocator.next_child_id(sell),
            total_amount=amount,
            rest_money=amount,
            linked_sell_id=sell.id,
        )
        await self.store.add(entry)
        await self.ledger.adjust(balance_effect(entry))
        await self._accrue_rest_money(sell, amount)
        return [entry]

    async def _create_delivery(self, data: EntryCreate, actor_id: int, sell: Entry) -> List[Entry]:
        amount = data.delivery_amount if data.delivery_amount is not None else data.total_amount

        if data.delivery_type == DeliveryType.OWN:
            entry = self._new_entry(
                data, EntryKind.DELIVERY, actor_id, await self.allocator.next_child_id(sell),
                total_amount=amount,
                delivery_type=DeliveryType.OWN,
                linked_sell_id=sell.id,
                note=OWN_DELIVERY_NOTE,
            )
            await self.store.add(entry)
            await self.ledger.adjust(balance_effect(entry))
            await self._settle_sell(sell, was_completed=sell.is_completed, basis_changed=True)
            return [entry]

        # Customer pays: the charge collected equals the charge paid out
        created = []
        for note in CUSTOMER_DELIVERY_NOTES:
            entry = self._new_entry(
                data, EntryKind.DELIVERY, actor_id, await self.allocator.next_child_id(sell),
                total_amount=amount,
                delivery_type=DeliveryType.CUSTOMER,
                linked_sell_id=sell.id,
                note=note,
            )
            created.append(await self.store.add(entry))
        return created

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    async def edit_entry(self, entry_id: int, data: EntryUpdate, actor_id: int) -> Entry:
        """
        Apply a creator's edit and propagate its balance/completion effects.

        Raises:
            ResourceNotFoundError: Entry doesn't exist
            InsufficientPermissionsError: Actor is not the creator
            LedgerValidationError: Field not editable for this kind
            StorageError: Database failure, nothing applied
        """
        changes = data.model_dump(exclude_unset=True)
        entry = await self._get_owned_entry(entry_id, actor_id, "edit")
        self._validate_edit(entry, changes)
        group = entry.id if entry.kind == EntryKind.SELL else entry.linked_sell_id

        async with self._transition(group, f"edit {entry.kind.value}"):
            entry = await self._reload(entry_id)
            sell = None
            if entry.linked_sell_id is not None:
                sell = await self.store.get_sell(entry.linked_sell_id, for_update=True)

            old_effect = balance_effect(entry)
            old_total = entry.total_amount
            old_rest = entry.rest_money
            was_completed = entry.is_completed

            if entry.kind == EntryKind.REST_MONEY and "rest_money" in changes:
                changes["total_amount"] = changes["rest_money"]

            await self.store.update(entry, review_state=ReviewState.PENDING, **changes)

            delta = balance_effect(entry) - old_effect
            await self.ledger.adjust(delta)

            if entry.kind == EntryKind.SELL:
                entry.completion_state = completion_for(entry.advance, entry.rest_money, entry.total_amount)
                await self.store.update(entry)
                await self._settle_sell(
                    entry, was_completed, basis_changed=entry.total_amount != old_total
                )
            elif entry.kind == EntryKind.REST_MONEY and sell is not None:
                await self._accrue_rest_money(sell, entry.rest_money - old_rest)
            elif sell is not None and affects_cost_basis(entry):
                await self._settle_sell(
                    sell, sell.is_completed, basis_changed=entry.total_amount != old_total
                )

        logger.info(
            "Edited %s %s (fields=%s, balance delta=%s) by user %s",
            entry.kind.value, entry.order_id, sorted(changes), delta, actor_id
        )
        return entry

    def _validate_edit(self, entry: Entry, changes: Dict[str, Any]) -> None:
        amounts = {name for name in changes if name in AMOUNT_FIELDS}
        not_editable = amounts - EDITABLE_AMOUNTS[entry.kind]
        if not_editable:
            raise LedgerValidationError(
                f"Fields not editable on a {entry.kind.value} entry: {', '.join(sorted(not_editable))}",
                details={"fields": sorted(not_editable)}
            )
        nulls = sorted(name for name in changes if changes[name] is None)
        if nulls:
            raise LedgerValidationError(
                f"Fields cannot be null: {', '.join(nulls)}",
                details={"fields": nulls}
            )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_entry(self, entry_id: int, actor_id: int) -> List[int]:
        """
        Delete an entry and reverse its balance effect. Deleting a sell
        cascades to every entry linked to it.

        Returns:
            Ids of all deleted entries
        """
        entry = await self._get_owned_entry(entry_id, actor_id, "delete")
        group = entry.id if entry.kind == EntryKind.SELL else entry.linked_sell_id

        async with self._transition(group, f"delete {entry.kind.value}"):
            entry = await self._reload(entry_id)
            if entry.kind == EntryKind.SELL:
                deleted = await self._delete_sell(entry)
            else:
                deleted = await self._delete_single(entry)

        logger.info("Deleted %s %s and %d linked entries", entry.kind.value, entry.order_id, len(deleted) - 1)
        return deleted

    async def _delete_sell(self, sell: Entry) -> List[int]:
        children = await self.store.find_linked(sell.id)

        await self.ledger.adjust(-balance_effect(sell))
        if sell.is_completed:
            await self.resolver.reverse(sell)

        children_effect = sum((balance_effect(child) for child in children), ZERO)
        await self.ledger.adjust(-children_effect)

        child_ids = [child.id for child in children]
        await self.store.delete_linked(sell.id)
        sell_id = sell.id
        await self.store.delete(sell)
        return [sell_id] + child_ids

    async def _delete_single(self, entry: Entry) -> List[int]:
        sell = None
        if entry.linked_sell_id is not None:
            sell = await self.store.get_sell(entry.linked_sell_id, for_update=True)

        entry_id = entry.id
        await self.ledger.adjust(-balance_effect(entry))
        await self.store.delete(entry)

        if sell is not None:
            if entry.kind == EntryKind.REST_MONEY:
                await self._accrue_rest_money(sell, -Decimal(entry.rest_money))
            elif affects_cost_basis(entry):
                await self._settle_sell(sell, sell.is_completed, basis_changed=True)
        return [entry_id]

    # ------------------------------------------------------------------
    # Sell state propagation
    # ------------------------------------------------------------------

    async def _accrue_rest_money(self, sell: Entry, delta: Decimal) -> None:
        """Add delta to the sell's accrued rest money and re-derive its completion."""
        was_completed = sell.is_completed
        rest_money = Decimal(sell.rest_money or ZERO) + delta
        await self.store.update(
            sell,
            rest_money=rest_money,
            completion_state=completion_for(sell.advance, rest_money, sell.total_amount),
        )
        await self._settle_sell(sell, was_completed, basis_changed=False)

    async def _settle_sell(self, sell: Entry, was_completed: bool, basis_changed: bool) -> None:
        """
        Bring the sell's profit/loss in line with its completion state.

            processing -> completed            resolve once
            completed  -> processing           reverse the credited profit/loss
            completed, cost basis/total moved  reverse then resolve
        """
        if sell.is_completed and not was_completed:
            await self.resolver.resolve(sell.id)
        elif was_completed and not sell.is_completed:
            await self.resolver.reverse(sell)
        elif sell.is_completed and basis_changed:
            await self.resolver.recompute(sell)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_owned_entry(self, entry_id: int, actor_id: int, action: str) -> Entry:
        entry = await self.store.get(entry_id)
        if entry is None:
            raise ResourceNotFoundError("Entry", entry_id)
        if entry.created_by_id != actor_id:
            raise InsufficientPermissionsError(
                f"Only the creator can {action} this entry",
                details={"entry_id": entry_id}
            )
        return entry

    async def _reload(self, entry_id: int) -> Entry:
        # Another transition may have changed or deleted the entry while we waited for the lock
        entry = await self.store.get(entry_id, refresh=True)
        if entry is None:
            raise ResourceNotFoundError("Entry", entry_id)
        return entry
