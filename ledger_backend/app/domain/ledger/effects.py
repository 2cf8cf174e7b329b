"""
Balance effect table.

Maps each entry kind to the signed amount its creation applies to the
running balance. Deleting an entry applies the negation; editing applies
effect(after) - effect(before).

    sell               +advance
    purchase           -(total_amount + delivery_charge)
    expense / other    -total_amount
    restMoney          +rest_money
    delivery (own)     -total_amount
    delivery (customer) 0
"""

from decimal import Decimal
from typing import Callable, Dict

from ledger_backend.app.models.entry import Entry
from ledger_backend.app.models.entry_enums import EntryKind, CompletionState, DeliveryType

ZERO = Decimal("0")


def _amount(value) -> Decimal:
    return Decimal(value) if value is not None else ZERO


def _delivery_effect(entry: Entry) -> Decimal:
    if entry.delivery_type == DeliveryType.OWN:
        return -_amount(entry.total_amount)
    return ZERO


BALANCE_EFFECTS: Dict[EntryKind, Callable[[Entry], Decimal]] = {
    EntryKind.SELL: lambda entry: _amount(entry.advance),
    EntryKind.PURCHASE: lambda entry: -(_amount(entry.total_amount) + _amount(entry.delivery_charge)),
    EntryKind.EXPENSE: lambda entry: -_amount(entry.total_amount),
    EntryKind.OTHER: lambda entry: -_amount(entry.total_amount),
    EntryKind.REST_MONEY: lambda entry: _amount(entry.rest_money),
    EntryKind.DELIVERY: _delivery_effect,
}


# Amount fields a creator may change after creation, per kind
EDITABLE_AMOUNTS: Dict[EntryKind, frozenset] = {
    EntryKind.SELL: frozenset({"total_amount", "advance"}),
    EntryKind.PURCHASE: frozenset({"total_amount", "delivery_charge"}),
    EntryKind.EXPENSE: frozenset({"total_amount"}),
    EntryKind.OTHER: frozenset({"total_amount"}),
    EntryKind.REST_MONEY: frozenset({"rest_money"}),
    EntryKind.DELIVERY: frozenset({"total_amount"}),
}

AMOUNT_FIELDS = frozenset({"total_amount", "advance", "rest_money", "delivery_charge"})


def balance_effect(entry: Entry) -> Decimal:
    return BALANCE_EFFECTS[entry.kind](entry)


def affects_cost_basis(entry: Entry) -> bool:
    """True for entries the profit/loss resolver subtracts from the sell total."""
    if entry.kind == EntryKind.PURCHASE:
        return True
    return entry.kind == EntryKind.DELIVERY and entry.delivery_type == DeliveryType.OWN


def completion_for(advance, rest_money, total_amount) -> CompletionState:
    """A sell is completed iff advance + rest money equals its total exactly."""
    if _amount(advance) + _amount(rest_money) == _amount(total_amount):
        return CompletionState.COMPLETED
    return CompletionState.PROCESSING
