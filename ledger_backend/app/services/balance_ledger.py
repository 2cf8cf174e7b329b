"""
Balance Ledger service.

Owns the running cash balance. Every balance change in the system goes
through adjust(), which increments the stored amount in a single UPDATE
statement so that two adjustments in sequence can never lose one another.
"""

import logging
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from ledger_backend.app.models.balance import Balance, BALANCE_ROW_ID

logger = logging.getLogger("shop_ledger.balance")

ZERO = Decimal("0")


class BalanceLedger:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _ensure_row(self) -> None:
        result = await self.db.execute(
            select(Balance.id).where(Balance.id == BALANCE_ROW_ID)
        )
        if result.scalar_one_or_none() is None:
            self.db.add(Balance(id=BALANCE_ROW_ID, amount=ZERO))
            await self.db.flush()
            logger.info("Balance row created")

    async def get(self) -> Decimal:
        """Current balance amount (creates the row with 0 if absent)."""
        await self._ensure_row()
        result = await self.db.execute(
            select(Balance.amount).where(Balance.id == BALANCE_ROW_ID)
        )
        return Decimal(result.scalar_one())

    async def adjust(self, delta: Decimal) -> Decimal:
        """
        Add delta to the balance (positive = credit, negative = debit).

        Returns:
            The balance after the adjustment.
        """
        delta = Decimal(delta)
        await self._ensure_row()
        if delta != ZERO:
            await self.db.execute(
                update(Balance)
                .where(Balance.id == BALANCE_ROW_ID)
                .values(amount=Balance.amount + delta)
                .execution_options(synchronize_session=False)
            )
        amount = await self.get()
        logger.debug("Balance adjusted by %s to %s", delta, amount)
        return amount
