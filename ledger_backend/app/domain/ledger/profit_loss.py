"""
Profit/Loss Resolver.

Computes a completed sell's profit or loss and folds it into the balance:

    profit_or_loss = sell.total_amount - sum(purchases) - sum(own deliveries)

resolve() credits the full amount every time it runs, so it must run exactly
once per processing -> completed edge. Any later recomputation goes through
recompute(), which first reverses what was credited before.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ledger_backend.app.models.entry import Entry
from ledger_backend.app.models.entry_enums import EntryKind, ProfitKind, DeliveryType
from ledger_backend.app.services.entry_store import EntryStore
from ledger_backend.app.services.balance_ledger import BalanceLedger

logger = logging.getLogger("shop_ledger.profit_loss")

ZERO = Decimal("0")


@dataclass
class ProfitLossResult:
    sell_id: int
    profit_or_loss: Decimal
    profit_kind: ProfitKind
    balance: Decimal


def classify(amount: Decimal) -> ProfitKind:
    if amount > ZERO:
        return ProfitKind.PROFIT
    if amount < ZERO:
        return ProfitKind.LOSS
    return ProfitKind.NEUTRAL


class ProfitLossResolver:

    def __init__(self, store: EntryStore, ledger: BalanceLedger):
        self.store = store
        self.ledger = ledger

    async def resolve(self, sell_id: int) -> Optional[ProfitLossResult]:
        """
        Compute, persist and credit the profit/loss of a sell.

        Args:
            sell_id: Sell entry id

        Returns:
            ProfitLossResult, or None when the sell doesn't exist
        """
        sell = await self.store.get_sell(sell_id)
        if sell is None:
            logger.debug("Sell %s not found, profit/loss skipped", sell_id)
            return None

        purchases = await self.store.find_linked(sell_id, kind=EntryKind.PURCHASE)
        own_deliveries = await self.store.find_linked(
            sell_id, kind=EntryKind.DELIVERY, delivery_type=DeliveryType.OWN
        )

        purchase_total = sum((Decimal(p.total_amount) for p in purchases), ZERO)
        own_delivery_total = sum((Decimal(d.total_amount) for d in own_deliveries), ZERO)

        profit_loss = Decimal(sell.total_amount) - purchase_total - own_delivery_total
        profit_kind = classify(profit_loss)

        await self.store.update(sell, profit_or_loss=profit_loss, profit_kind=profit_kind)
        balance = await self.ledger.adjust(profit_loss)

        logger.info(
            "Resolved sell %s: %s %s (purchases=%s, own_delivery=%s)",
            sell.order_id, profit_kind.value, profit_loss, purchase_total, own_delivery_total
        )
        return ProfitLossResult(
            sell_id=sell_id,
            profit_or_loss=profit_loss,
            profit_kind=profit_kind,
            balance=balance
        )

    async def reverse(self, sell: Entry) -> Decimal:
        """
        Debit the previously credited profit/loss and reset the sell to neutral.

        Returns:
            The balance after the reversal
        """
        previous = Decimal(sell.profit_or_loss or ZERO)
        await self.store.update(sell, profit_or_loss=ZERO, profit_kind=ProfitKind.NEUTRAL)
        balance = await self.ledger.adjust(-previous)
        if previous != ZERO:
            logger.info("Reversed profit/loss %s of sell %s", previous, sell.order_id)
        return balance

    async def recompute(self, sell: Entry) -> Optional[ProfitLossResult]:
        await self.reverse(sell)
        return await self.resolve(sell.id)
