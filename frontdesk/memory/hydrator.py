"""Memory hydrator: parallel, best-effort reads of learning records."""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

from frontdesk.memory.models import MemorySnapshot, TurnClassification
from frontdesk.memory.store import LearningStore
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import MEMORY_READ_FAILURES
from frontdesk.text import caller_digest, utterance_hash

logger = get_logger(__name__)

T = TypeVar("T")


class MemoryHydrator:
    """Loads caller history, resolution paths and the response cache entry.

    Each read has its own timeout and fails independently; a failed read
    contributes nothing. With every read failed the snapshot equals an
    unknown caller.
    """

    def __init__(self, store: LearningStore, timeout_ms: int = 50) -> None:
        self._store = store
        self._timeout = timeout_ms / 1000

    async def hydrate(
        self,
        tenant_id: UUID,
        caller_id: str | None,
        classification: TurnClassification,
        utterance: str,
    ) -> MemorySnapshot:
        failed: list[str] = []
        digest = caller_digest(caller_id) if caller_id else None

        async def _no_history() -> None:
            return None

        history, paths, cached = await asyncio.gather(
            self._guard(
                "caller_history",
                self._store.get_caller_history(tenant_id, digest, classification.intent)
                if digest
                else _no_history(),
                failed,
            ),
            self._guard(
                "resolution_paths",
                self._store.get_resolution_paths(
                    tenant_id, classification.intent, classification.category
                ),
                failed,
            ),
            self._guard(
                "response_cache",
                self._store.get_cached_response(tenant_id, utterance_hash(utterance)),
                failed,
            ),
        )

        snapshot = MemorySnapshot(
            caller_history=history,
            resolution_paths=tuple(paths or ()),
            cached_response=cached,
            failed_queries=tuple(failed),
        )
        logger.debug(
            "memory_hydrated",
            tenant_id=str(tenant_id),
            intent=classification.intent,
            known_caller=history is not None,
            paths=len(snapshot.resolution_paths),
            cached=cached is not None,
            failed=failed,
        )
        return snapshot

    async def _guard(self, name: str, read: Awaitable[T], failed: list[str]) -> T | None:
        try:
            return await asyncio.wait_for(read, timeout=self._timeout)
        except TimeoutError:
            MEMORY_READ_FAILURES.labels(query=name).inc()
            logger.warning("memory_read_timeout", query=name, timeout_s=self._timeout)
        except Exception as e:
            MEMORY_READ_FAILURES.labels(query=name).inc()
            logger.warning("memory_read_failed", query=name, error=str(e))
        failed.append(name)
        return None
