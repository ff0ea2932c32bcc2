"""Per-user, per-day serialization of plan mutations."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date
from uuid import UUID


@dataclass
class _LockEntry:
    lock: asyncio.Lock
    holders: int = 0


class DayLocks:
    """Registry of asyncio locks keyed by ``(user_id, day)``.

    Entries are dropped once no task holds or waits on them.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[UUID, date], _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, user_id: UUID, day: date) -> AsyncIterator[None]:
        """Hold the lock for a user's day."""
        key = (user_id, day)
        entry = self._entries.get(key)
        if entry is None:
            entry = _LockEntry(lock=asyncio.Lock())
            self._entries[key] = entry
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._entries.pop(key, None)

    def is_locked(self, user_id: UUID, day: date) -> bool:
        """Return True while a task holds the lock for the day."""
        entry = self._entries.get((user_id, day))
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)
