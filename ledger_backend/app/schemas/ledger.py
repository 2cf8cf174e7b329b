"""
Ledger dashboard schemas.
"""

from decimal import Decimal
from pydantic import BaseModel


class BalanceResponse(BaseModel):
    """Current running balance."""
    amount: Decimal


class LedgerWindowStats(BaseModel):
    """Sums for one time window."""
    sale_total: Decimal
    purchase_total: Decimal
    expense_total: Decimal
    other_total: Decimal
    rest_money_total: Decimal
    delivery_total: Decimal
    profit_total: Decimal
    loss_total: Decimal


class LedgerStatsResponse(BaseModel):
    """Dashboard statistics: all time, today and this month."""
    success: bool = True
    totals: LedgerWindowStats
    today: LedgerWindowStats
    this_month: LedgerWindowStats
    balance: Decimal
