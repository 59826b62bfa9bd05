"""Per-apartment serialization of state-changing operations."""
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Dict


@dataclass(slots=True)
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class ApartmentLocks:
    """Hand out one lock per apartment number, dropping it once nobody waits on it.

    Operations on different apartments never contend with each other.
    """

    def __init__(self) -> None:
        self._entries: Dict[int, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, apartment_number: int) -> AsyncIterator[None]:
        entry = self._entries.get(apartment_number)
        if entry is None:
            entry = self._entries[apartment_number] = _LockEntry()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._entries.pop(apartment_number, None)

    def active(self) -> int:
        """Number of apartments with a holder or waiter."""

        return len(self._entries)


apartment_locks = ApartmentLocks()
