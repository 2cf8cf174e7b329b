"""
Balance database model.

Single-row table holding the shop's running cash position.
"""

from sqlalchemy import Column, Integer, Numeric
from ledger_backend.app.db.session import Base

BALANCE_ROW_ID = 1


class Balance(Base):
    """
    Running balance singleton.

    Only ever one row (id=1), created lazily with amount 0 and mutated
    through BalanceLedger.adjust(). Never deleted.
    """
    __tablename__ = "balances"

    id = Column(Integer, primary_key=True, default=BALANCE_ROW_ID)
    amount = Column(Numeric(14, 2), nullable=False, default=0)

    def __repr__(self):
        return f"<Balance(amount={self.amount})>"
