"""Redis-backed cache service."""

import redis.asyncio as redis
from redis.exceptions import RedisError

from frontdesk.cache.alerts import FailureMonitor
from frontdesk.cache.service import CacheService
from frontdesk.errors import CacheUnavailable

# decode_responses clients raise UnicodeDecodeError, not RedisError
_BACKEND_ERRORS = (RedisError, UnicodeError)


class RedisCacheService(CacheService):
    """Cache service on redis.asyncio.

    Pattern invalidation walks the keyspace with SCAN (never KEYS) and
    deletes in pipelined batches.
    """

    def __init__(
        self,
        client: redis.Redis,
        monitor: FailureMonitor | None = None,
        enabled: bool = True,
        scan_count: int = 100,
        delete_batch_size: int = 100,
    ) -> None:
        super().__init__(monitor=monitor, enabled=enabled)
        self._redis = client
        self._scan_count = scan_count
        self._batch_size = delete_batch_size

    async def _get(self, key: str) -> str | None:
        try:
            value = await self._redis.get(key)
            if isinstance(value, bytes):
                value = value.decode("utf-8")
        except _BACKEND_ERRORS as e:
            raise CacheUnavailable(f"{type(e).__name__}: {e}", operation="get") from e
        return value

    async def _set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._redis.setex(key, ttl_seconds, value)
        except _BACKEND_ERRORS as e:
            raise CacheUnavailable(str(e), operation="set") from e

    async def _delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except _BACKEND_ERRORS as e:
            raise CacheUnavailable(str(e), operation="delete") from e

    async def _delete_prefix(self, prefix: str) -> int:
        deleted = 0
        batch: list[str] = []
        try:
            async for key in self._redis.scan_iter(match=f"{prefix}*", count=self._scan_count):
                batch.append(key)
                if len(batch) >= self._batch_size:
                    deleted += await self._delete_batch(batch)
                    batch = []
            if batch:
                deleted += await self._delete_batch(batch)
        except _BACKEND_ERRORS as e:
            raise CacheUnavailable(str(e), operation="delete_pattern") from e
        return deleted

    async def _delete_batch(self, keys: list[str]) -> int:
        pipe = self._redis.pipeline(transaction=False)
        for key in keys:
            pipe.delete(key)
        results = await pipe.execute()
        return sum(int(r) for r in results)
