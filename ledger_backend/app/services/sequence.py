"""
Sequence Allocator.

Human-readable order ids:
    root entries (sell, expense, other):   ORD000001, ORD000002, ...
    children of a sell:                     ORD000001A, ORD000001B, ...

Ids are computed from a fresh read of the existing ids at call time, so two
concurrent allocations for the same scope can race; the unique index on
entries.order_id rejects the loser.
"""

import logging
import re
import string
from typing import Optional

from ledger_backend.app.core.config import settings
from ledger_backend.app.core.exceptions import LedgerValidationError
from ledger_backend.app.models.entry import Entry
from ledger_backend.app.services.entry_store import EntryStore

logger = logging.getLogger("shop_ledger.sequence")

ROOT_DIGITS = 6


class SequenceAllocator:

    def __init__(self, store: EntryStore, prefix: Optional[str] = None):
        self.store = store
        self.prefix = prefix or settings.order_id_prefix
        self._root_pattern = re.compile(rf"^{re.escape(self.prefix)}(\d{{{ROOT_DIGITS}}})$")

    async def next_root_id(self) -> str:
        """Prefix + (highest existing root number + 1), zero padded to six digits."""
        existing = await self.store.order_ids_like(f"{self.prefix}%")
        numbers = [
            int(match.group(1))
            for match in (self._root_pattern.match(order_id) for order_id in existing)
            if match
        ]
        next_number = max(numbers, default=0) + 1
        return f"{self.prefix}{next_number:0{ROOT_DIGITS}d}"

    async def next_child_id(self, sell: Entry) -> str:
        """
        Sell's order id + the lowest unused uppercase letter.

        Letters freed by deleted children are reused once no sibling holds them.

        Raises:
            LedgerValidationError: All 26 letters are taken
        """
        base = sell.order_id
        if not base:
            base = await self.next_root_id()
            logger.warning("Sell %s has no order id, using fresh root %s as child base", sell.id, base)

        child_pattern = re.compile(rf"^{re.escape(base)}([A-Z])$")
        existing = await self.store.order_ids_like(f"{base}_")
        used = {
            match.group(1)
            for match in (child_pattern.match(order_id) for order_id in existing)
            if match
        }

        for letter in string.ascii_uppercase:
            if letter not in used:
                return f"{base}{letter}"

        raise LedgerValidationError(
            f"Sell {base} already has the maximum of {len(string.ascii_uppercase)} linked entries",
            details={"sell_id": sell.id, "order_id": base}
        )
