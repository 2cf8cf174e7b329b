"""
Ledger dashboard API Endpoints.

Read-only balance and statistics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from ledger_backend.app.db.session import get_db
from ledger_backend.app.core.guards import require_admin
from ledger_backend.app.schemas.ledger import BalanceResponse, LedgerStatsResponse
from ledger_backend.app.services.balance_ledger import BalanceLedger
from ledger_backend.app.services.ledger_stats import LedgerStatsService

router = APIRouter(prefix="/ledger", tags=["Ledger Dashboard"])


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Current running balance (created at 0 on first access)."""
    amount = await BalanceLedger(db).get()
    await db.commit()
    return BalanceResponse(amount=amount)


@router.get("/stats", response_model=LedgerStatsResponse)
async def get_stats(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Dashboard statistics.

    Sums of total_amount per kind and profit/loss per profit kind
    for all time, today and the current month.
    """
    stats = await LedgerStatsService.get_dashboard(db)
    await db.commit()
    return stats
