"""TTL cache used for rate counters and reputation lookups.

`TTLCache` is the contract; any shared store (Redis, memcached) can be
adapted to it. `InMemoryTTLCache` is the single-process implementation.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any, Protocol


class TTLCache(Protocol):
    """Async key-value store with per-key expiry."""

    async def get(self, key: str) -> tuple[Any, bool]: ...

    async def set(self, key: str, value: Any, ttl: float) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryTTLCache:
    """In-memory TTL store, safe for concurrent coroutines on one event loop.

    All operations are protected by asyncio.Lock. Expired entries are
    dropped lazily on read and by `purge_expired()`.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, key: str) -> tuple[Any, bool]:
        """Return (value, True), or (None, False) if missing/expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None, False
            return value, True

    async def set(self, key: str, value: Any, ttl: float) -> None:
        """Store a value for `ttl` seconds."""
        async with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> None:
        """Remove a key if present."""
        async with self._lock:
            self._entries.pop(key, None)

    async def purge_expired(self) -> int:
        """Remove expired entries. Returns count of removed entries."""
        async with self._lock:
            now = self._clock()
            expired = [k for k, (_, exp) in self._entries.items() if now >= exp]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
