"""Per-key mutual exclusion for workflow transitions."""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class _KeyedEntry:
    lock: asyncio.Lock
    users: int = 0


@dataclass
class KeyedLocks:
    """Hands out one asyncio lock per key; idle locks are dropped."""

    _entries: dict[Hashable, _KeyedEntry] = field(default_factory=dict)

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        entry = self._entries.get(key)
        if entry is None:
            entry = _KeyedEntry(lock=asyncio.Lock())
            self._entries[key] = entry
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)
