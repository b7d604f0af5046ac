"""CacheService abstract interface.

Public operations never raise on backend failure. Backends implement the
underscored primitives and signal outages with CacheUnavailable; the base
class turns those into miss signals, logs, counts and alerts.
"""

from abc import ABC, abstractmethod

from frontdesk.cache.alerts import FailureMonitor
from frontdesk.errors import CacheUnavailable
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import CACHE_ERRORS, CACHE_HITS, CACHE_MISSES

logger = get_logger(__name__)


class CacheService(ABC):
    """Scoped string cache with graceful degradation."""

    def __init__(
        self,
        monitor: FailureMonitor | None = None,
        enabled: bool = True,
    ) -> None:
        self._monitor = monitor or FailureMonitor()
        self._enabled = enabled

    @property
    def monitor(self) -> FailureMonitor:
        return self._monitor

    async def get(self, key: str) -> str | None:
        """Return the cached value, or None on miss or backend failure."""
        if not self._enabled:
            return None
        try:
            value = await self._get(key)
        except CacheUnavailable as e:
            self._on_failure(e, key)
            return None
        self._monitor.record_success()
        if value is None:
            CACHE_MISSES.inc()
        else:
            CACHE_HITS.inc()
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        """Store a value with a TTL. Returns False if the write was lost."""
        if not self._enabled:
            return False
        try:
            await self._set(key, value, ttl_seconds)
        except CacheUnavailable as e:
            self._on_failure(e, key)
            return False
        self._monitor.record_success()
        return True

    async def invalidate(self, key: str) -> bool:
        """Delete one key. Returns False if the delete could not be issued."""
        if not self._enabled:
            return False
        try:
            await self._delete(key)
        except CacheUnavailable as e:
            self._on_failure(e, key)
            return False
        self._monitor.record_success()
        return True

    async def invalidate_pattern(self, prefix: str) -> int:
        """Delete every key starting with prefix. Returns the number deleted."""
        if not self._enabled:
            return 0
        try:
            deleted = await self._delete_prefix(prefix)
        except CacheUnavailable as e:
            self._on_failure(e, f"{prefix}*")
            return 0
        self._monitor.record_success()
        logger.info("cache_pattern_invalidated", prefix=prefix, deleted=deleted)
        return deleted

    def _on_failure(self, error: CacheUnavailable, key: str) -> None:
        CACHE_ERRORS.labels(operation=error.operation).inc()
        logger.warning(
            "cache_backend_error",
            operation=error.operation,
            key=key,
            error=error.message,
        )
        self._monitor.record_failure(error.operation, error.message)

    @abstractmethod
    async def _get(self, key: str) -> str | None:
        pass

    @abstractmethod
    async def _set(self, key: str, value: str, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    async def _delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def _delete_prefix(self, prefix: str) -> int:
        pass
