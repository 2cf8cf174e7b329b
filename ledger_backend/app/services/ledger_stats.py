"""
Ledger Statistics Service.

Dashboard aggregation: sums of total_amount per entry kind and of
profit/loss per profit kind, over all time, today and this month.
Focused on READ-ONLY operations.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from ledger_backend.app.models.entry import Entry
from ledger_backend.app.models.entry_enums import EntryKind, ProfitKind
from ledger_backend.app.schemas.ledger import LedgerWindowStats, LedgerStatsResponse
from ledger_backend.app.services.balance_ledger import BalanceLedger

ZERO = Decimal("0")


def window_starts(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Start of today and start of the current month (UTC)."""
    now = now or datetime.now(timezone.utc)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    month = today.replace(day=1)
    return today, month


class LedgerStatsService:

    @staticmethod
    async def _sums_by_kind(db: AsyncSession, since: Optional[datetime]) -> Dict[EntryKind, Decimal]:
        query = select(Entry.kind, func.coalesce(func.sum(Entry.total_amount), 0)).group_by(Entry.kind)
        if since is not None:
            query = query.where(Entry.created_at >= since)
        rows = (await db.execute(query)).all()
        return {kind: Decimal(total) for kind, total in rows}

    @staticmethod
    async def _sums_by_profit_kind(db: AsyncSession, since: Optional[datetime]) -> Dict[ProfitKind, Decimal]:
        query = select(
            Entry.profit_kind, func.coalesce(func.sum(Entry.profit_or_loss), 0)
        ).where(Entry.kind == EntryKind.SELL).group_by(Entry.profit_kind)
        if since is not None:
            query = query.where(Entry.created_at >= since)
        rows = (await db.execute(query)).all()
        return {kind: Decimal(total) for kind, total in rows}

    @staticmethod
    async def get_window(db: AsyncSession, since: Optional[datetime] = None) -> LedgerWindowStats:
        """Totals for entries created at or after `since` (all time when None)."""
        by_kind = await LedgerStatsService._sums_by_kind(db, since)
        by_profit = await LedgerStatsService._sums_by_profit_kind(db, since)

        return LedgerWindowStats(
            sale_total=by_kind.get(EntryKind.SELL, ZERO),
            purchase_total=by_kind.get(EntryKind.PURCHASE, ZERO),
            expense_total=by_kind.get(EntryKind.EXPENSE, ZERO),
            other_total=by_kind.get(EntryKind.OTHER, ZERO),
            rest_money_total=by_kind.get(EntryKind.REST_MONEY, ZERO),
            delivery_total=by_kind.get(EntryKind.DELIVERY, ZERO),
            profit_total=by_profit.get(ProfitKind.PROFIT, ZERO),
            loss_total=by_profit.get(ProfitKind.LOSS, ZERO),
        )

    @staticmethod
    async def get_dashboard(db: AsyncSession, now: Optional[datetime] = None) -> LedgerStatsResponse:
        today_start, month_start = window_starts(now)

        totals = await LedgerStatsService.get_window(db)
        today = await LedgerStatsService.get_window(db, today_start)
        this_month = await LedgerStatsService.get_window(db, month_start)
        balance = await BalanceLedger(db).get()

        return LedgerStatsResponse(
            totals=totals,
            today=today,
            this_month=this_month,
            balance=balance
        )
