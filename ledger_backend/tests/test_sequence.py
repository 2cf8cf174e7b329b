"""
Order id allocation tests.

Root ids count up per prefix, child ids take the lowest free letter.
"""

import pytest

from ledger_backend.app.core.exceptions import LedgerValidationError
from ledger_backend.app.models.entry import Entry
from ledger_backend.app.models.entry_enums import EntryKind
from ledger_backend.app.services.entry_store import EntryStore
from ledger_backend.app.services.sequence import SequenceAllocator


async def _add(store, owner, order_id, kind=EntryKind.SELL, linked_sell_id=None):
    return await store.add(Entry(
        order_id=order_id,
        kind=kind,
        linked_sell_id=linked_sell_id,
        created_by_id=owner.id
    ))


@pytest.mark.asyncio
async def test_first_root_id(db_session):
    allocator = SequenceAllocator(EntryStore(db_session), prefix="ORD")
    assert await allocator.next_root_id() == "ORD000001"


@pytest.mark.asyncio
async def test_root_ids_strictly_increase(db_session, owner):
    store = EntryStore(db_session)
    allocator = SequenceAllocator(store, prefix="ORD")

    seen = []
    for _ in range(4):
        order_id = await allocator.next_root_id()
        seen.append(order_id)
        await _add(store, owner, order_id)

    assert seen == ["ORD000001", "ORD000002", "ORD000003", "ORD000004"]


@pytest.mark.asyncio
async def test_root_id_ignores_child_ids(db_session, owner):
    store = EntryStore(db_session)
    allocator = SequenceAllocator(store, prefix="ORD")
    sell = await _add(store, owner, "ORD000007")
    await _add(store, owner, "ORD000007A", kind=EntryKind.PURCHASE, linked_sell_id=sell.id)

    assert await allocator.next_root_id() == "ORD000008"


@pytest.mark.asyncio
async def test_root_id_uses_configured_prefix(db_session, owner):
    store = EntryStore(db_session)
    await _add(store, owner, "ORD000005")

    allocator = SequenceAllocator(store, prefix="INV")
    assert await allocator.next_root_id() == "INV000001"


@pytest.mark.asyncio
async def test_child_ids_in_letter_order(db_session, owner):
    store = EntryStore(db_session)
    allocator = SequenceAllocator(store, prefix="ORD")
    sell = await _add(store, owner, "ORD000001")

    letters = []
    for _ in range(3):
        order_id = await allocator.next_child_id(sell)
        letters.append(order_id)
        await _add(store, owner, order_id, kind=EntryKind.PURCHASE, linked_sell_id=sell.id)

    assert letters == ["ORD000001A", "ORD000001B", "ORD000001C"]


@pytest.mark.asyncio
async def test_child_letters_are_scoped_per_sell(db_session, owner):
    store = EntryStore(db_session)
    allocator = SequenceAllocator(store, prefix="ORD")
    first = await _add(store, owner, "ORD000001")
    second = await _add(store, owner, "ORD000002")
    await _add(store, owner, "ORD000001A", kind=EntryKind.PURCHASE, linked_sell_id=first.id)

    assert await allocator.next_child_id(second) == "ORD000002A"


@pytest.mark.asyncio
async def test_child_letter_not_reused_while_sibling_exists(db_session, owner):
    store = EntryStore(db_session)
    allocator = SequenceAllocator(store, prefix="ORD")
    sell = await _add(store, owner, "ORD000001")
    a = await _add(store, owner, "ORD000001A", kind=EntryKind.PURCHASE, linked_sell_id=sell.id)
    await _add(store, owner, "ORD000001B", kind=EntryKind.PURCHASE, linked_sell_id=sell.id)

    await store.delete(a)

    # A is free again, B is still held
    assert await allocator.next_child_id(sell) == "ORD000001A"
    await _add(store, owner, "ORD000001A", kind=EntryKind.PURCHASE, linked_sell_id=sell.id)
    assert await allocator.next_child_id(sell) == "ORD000001C"


@pytest.mark.asyncio
async def test_child_letters_exhausted(db_session, owner):
    store = EntryStore(db_session)
    allocator = SequenceAllocator(store, prefix="ORD")
    sell = await _add(store, owner, "ORD000001")
    for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ":
        await _add(store, owner, f"ORD000001{letter}", kind=EntryKind.PURCHASE, linked_sell_id=sell.id)

    with pytest.raises(LedgerValidationError) as exc_info:
        await allocator.next_child_id(sell)

    assert exc_info.value.error_code == "ERR_VALIDATION_001"
