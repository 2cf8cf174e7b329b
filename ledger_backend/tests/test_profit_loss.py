"""
Profit/loss resolver tests.
"""

from decimal import Decimal

import pytest

from ledger_backend.app.domain.ledger.profit_loss import ProfitLossResolver, classify
from ledger_backend.app.models.entry import Entry
from ledger_backend.app.models.entry_enums import EntryKind, ProfitKind, DeliveryType
from ledger_backend.app.services.balance_ledger import BalanceLedger
from ledger_backend.app.services.entry_store import EntryStore


@pytest.fixture
def store(db_session):
    return EntryStore(db_session)


@pytest.fixture
def resolver(db_session, store):
    return ProfitLossResolver(store, BalanceLedger(db_session))


async def _sell(store, owner, total):
    return await store.add(Entry(
        order_id="ORD000001", kind=EntryKind.SELL,
        total_amount=Decimal(total), advance=Decimal(total),
        created_by_id=owner.id
    ))


async def _child(store, owner, sell, order_id, kind, total, delivery_type=None):
    return await store.add(Entry(
        order_id=order_id, kind=kind, total_amount=Decimal(total),
        delivery_type=delivery_type, linked_sell_id=sell.id,
        created_by_id=owner.id
    ))


def test_classify():
    assert classify(Decimal("0.01")) == ProfitKind.PROFIT
    assert classify(Decimal("-3")) == ProfitKind.LOSS
    assert classify(Decimal("0")) == ProfitKind.NEUTRAL


@pytest.mark.asyncio
async def test_resolve_subtracts_purchases_and_own_delivery(db_session, store, resolver, owner):
    sell = await _sell(store, owner, "1000")
    await _child(store, owner, sell, "ORD000001A", EntryKind.PURCHASE, "400")
    await _child(store, owner, sell, "ORD000001B", EntryKind.DELIVERY, "50", DeliveryType.OWN)
    before = await BalanceLedger(db_session).get()

    result = await resolver.resolve(sell.id)

    assert result.profit_or_loss == Decimal("550")
    assert result.profit_kind == ProfitKind.PROFIT
    assert result.balance - before == Decimal("550")
    assert sell.profit_or_loss == Decimal("550")
    assert sell.profit_kind == ProfitKind.PROFIT


@pytest.mark.asyncio
async def test_resolve_ignores_customer_delivery(store, resolver, owner):
    sell = await _sell(store, owner, "300")
    await _child(store, owner, sell, "ORD000001A", EntryKind.DELIVERY, "80", DeliveryType.CUSTOMER)

    result = await resolver.resolve(sell.id)

    assert result.profit_or_loss == Decimal("300")


@pytest.mark.asyncio
async def test_resolve_reports_loss(store, resolver, owner):
    sell = await _sell(store, owner, "100")
    await _child(store, owner, sell, "ORD000001A", EntryKind.PURCHASE, "160")

    result = await resolver.resolve(sell.id)

    assert result.profit_or_loss == Decimal("-60")
    assert result.profit_kind == ProfitKind.LOSS


@pytest.mark.asyncio
async def test_resolve_missing_sell_is_noop(db_session, resolver):
    assert await resolver.resolve(404) is None
    assert await BalanceLedger(db_session).get() == Decimal("0")


@pytest.mark.asyncio
async def test_resolve_rejects_non_sell_id(store, resolver, owner):
    sell = await _sell(store, owner, "100")
    purchase = await _child(store, owner, sell, "ORD000001A", EntryKind.PURCHASE, "10")

    assert await resolver.resolve(purchase.id) is None


@pytest.mark.asyncio
async def test_reverse_debits_what_was_credited(db_session, store, resolver, owner):
    sell = await _sell(store, owner, "500")
    await _child(store, owner, sell, "ORD000001A", EntryKind.PURCHASE, "200")
    await resolver.resolve(sell.id)

    balance = await resolver.reverse(sell)

    assert balance == Decimal("0")
    assert sell.profit_or_loss == Decimal("0")
    assert sell.profit_kind == ProfitKind.NEUTRAL


@pytest.mark.asyncio
async def test_recompute_nets_only_the_change(db_session, store, resolver, owner):
    sell = await _sell(store, owner, "500")
    await resolver.resolve(sell.id)
    await _child(store, owner, sell, "ORD000001A", EntryKind.PURCHASE, "120")

    result = await resolver.recompute(sell)

    assert result.profit_or_loss == Decimal("380")
    assert await BalanceLedger(db_session).get() == Decimal("380")
