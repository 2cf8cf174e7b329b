"""
Per-sell transition serialization.

Every transition touching a sell group (the sell and the entries linked to
it) runs under that sell's lock, so two requests can't interleave their
read-modify-write steps on the same sell within this process.

A sell's lock only lives while someone holds or waits for it; the last
holder to leave removes it from the registry.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict


class _SellLock:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        # holders plus waiters
        self.users = 0


class SellLockRegistry:

    def __init__(self):
        self._locks: Dict[int, _SellLock] = {}

    @asynccontextmanager
    async def hold(self, sell_id: int):
        """Hold the sell group's lock for the duration of the block."""
        slot = self._locks.get(sell_id)
        if slot is None:
            slot = self._locks[sell_id] = _SellLock()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0 and self._locks.get(sell_id) is slot:
                del self._locks[sell_id]

    def is_held(self, sell_id: int) -> bool:
        slot = self._locks.get(sell_id)
        return slot is not None and slot.lock.locked()

    def users(self, sell_id: int) -> int:
        """Transitions holding or waiting for this sell's lock."""
        slot = self._locks.get(sell_id)
        return slot.users if slot is not None else 0

    def clear(self) -> None:
        self._locks.clear()

    def __len__(self) -> int:
        return len(self._locks)


# Process-wide registry used by the API layer
sell_locks = SellLockRegistry()
