"""In-memory cache service for development and tests."""

import time
from collections.abc import Callable

from frontdesk.cache.alerts import FailureMonitor
from frontdesk.cache.service import CacheService


class InMemoryCacheService(CacheService):
    """Dict-backed cache with TTL expiry on read.

    Not shared across processes; not suitable for production.
    """

    def __init__(
        self,
        monitor: FailureMonitor | None = None,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(monitor=monitor, enabled=enabled)
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def _get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    async def _set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = (value, self._clock() + ttl_seconds)

    async def _delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def _delete_prefix(self, prefix: str) -> int:
        doomed = [k for k in self._entries if k.startswith(prefix)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        """Drop every entry (test utility)."""
        self._entries.clear()
