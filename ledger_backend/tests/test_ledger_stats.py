"""
Dashboard statistics tests.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ledger_backend.app.models.entry_enums import EntryKind, DeliveryType
from ledger_backend.app.schemas.entry import EntryCreate
from ledger_backend.app.services.ledger_stats import LedgerStatsService, window_starts


def test_window_starts():
    now = datetime(2024, 3, 17, 15, 42, 9, tzinfo=timezone.utc)

    today, month = window_starts(now)

    assert today == datetime(2024, 3, 17, tzinfo=timezone.utc)
    assert month == datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_empty_dashboard(db_session):
    stats = await LedgerStatsService.get_dashboard(db_session)

    assert stats.totals.sale_total == Decimal("0")
    assert stats.today.profit_total == Decimal("0")
    assert stats.balance == Decimal("0")


@pytest.mark.asyncio
async def test_dashboard_sums_by_kind_and_profit(db_session, ledger_engine, owner):
    [profitable] = await ledger_engine.create_entry(
        EntryCreate(kind=EntryKind.SELL, total_amount=Decimal("1000"), advance=Decimal("1000")), owner.id
    )
    [losing] = await ledger_engine.create_entry(
        EntryCreate(kind=EntryKind.SELL, total_amount=Decimal("100"), advance=Decimal("100")), owner.id
    )
    await ledger_engine.create_entry(
        EntryCreate(kind=EntryKind.PURCHASE, total_amount=Decimal("300"), linked_sell_id=profitable.id), owner.id
    )
    await ledger_engine.create_entry(
        EntryCreate(kind=EntryKind.PURCHASE, total_amount=Decimal("130"), linked_sell_id=losing.id), owner.id
    )
    await ledger_engine.create_entry(
        EntryCreate(
            kind=EntryKind.DELIVERY, delivery_type=DeliveryType.CUSTOMER,
            delivery_amount=Decimal("20"), linked_sell_id=profitable.id
        ),
        owner.id
    )
    await ledger_engine.create_entry(EntryCreate(kind=EntryKind.EXPENSE, total_amount=Decimal("45")), owner.id)
    await ledger_engine.create_entry(EntryCreate(kind=EntryKind.OTHER, total_amount=Decimal("5")), owner.id)

    stats = await LedgerStatsService.get_dashboard(db_session)

    for window in (stats.totals, stats.today, stats.this_month):
        assert window.sale_total == Decimal("1100")
        assert window.purchase_total == Decimal("430")
        assert window.expense_total == Decimal("45")
        assert window.other_total == Decimal("5")
        assert window.delivery_total == Decimal("40")
        assert window.rest_money_total == Decimal("0")
        assert window.profit_total == Decimal("700")
        assert window.loss_total == Decimal("-30")

    assert stats.balance == await ledger_engine.ledger.get()


@pytest.mark.asyncio
async def test_old_entries_only_count_in_totals(db_session, ledger_engine, owner):
    [old] = await ledger_engine.create_entry(
        EntryCreate(kind=EntryKind.EXPENSE, total_amount=Decimal("80")), owner.id
    )
    old.created_at = datetime(2000, 1, 15, tzinfo=timezone.utc)
    await db_session.commit()
    await ledger_engine.create_entry(EntryCreate(kind=EntryKind.EXPENSE, total_amount=Decimal("20")), owner.id)

    stats = await LedgerStatsService.get_dashboard(db_session)

    assert stats.totals.expense_total == Decimal("100")
    assert stats.this_month.expense_total == Decimal("20")
    assert stats.today.expense_total == Decimal("20")
