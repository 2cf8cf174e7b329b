"""
Ledger entry enumerations.
"""

import enum


class EntryKind(str, enum.Enum):
    """
    Kind of financial event an entry records.

    SELL is the root of a sale; PURCHASE, REST_MONEY and DELIVERY entries
    hang off a sell through ``linked_sell_id``.
    """
    SELL = "sell"
    PURCHASE = "purchase"
    EXPENSE = "expense"
    OTHER = "other"
    REST_MONEY = "restMoney"
    DELIVERY = "delivery"


class CompletionState(str, enum.Enum):
    """
    Payment completion of a sell.

    PROCESSING -> COMPLETED once advance + rest money equals the total.
    Non-sell entries are always stored as COMPLETED.
    """
    PROCESSING = "processing"
    COMPLETED = "completed"


class ReviewState(str, enum.Enum):
    """Review workflow, independent of the ledger."""
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


class ProfitKind(str, enum.Enum):
    """Classification of a completed sell's profit/loss."""
    PROFIT = "profit"
    LOSS = "loss"
    NEUTRAL = "neutral"


class DeliveryType(str, enum.Enum):
    """Who pays for a delivery."""
    CUSTOMER = "customer"  # collected from the customer and paid out, balance neutral
    OWN = "own"  # absorbed by the shop


# Kinds that must reference an existing sell
LINKED_KINDS = frozenset({EntryKind.PURCHASE, EntryKind.REST_MONEY, EntryKind.DELIVERY})

# Kinds that get a root order id
ROOT_KINDS = frozenset({EntryKind.SELL, EntryKind.EXPENSE, EntryKind.OTHER})
