"""LearningStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from frontdesk.memory.models import (
    CallerIntentHistory,
    IntentResolutionPath,
    ResponseCacheEntry,
    TurnOutcome,
)


class LearningStore(ABC):
    """Persistent learning records.

    Writes are atomic increments or last-write-wins upserts, so concurrent
    calls touching the same keys never lose counts.
    """

    @abstractmethod
    async def get_caller_history(
        self, tenant_id: UUID, caller_digest: str, intent: str
    ) -> CallerIntentHistory | None:
        pass

    @abstractmethod
    async def get_resolution_paths(
        self, tenant_id: UUID, intent: str, category: str
    ) -> list[IntentResolutionPath]:
        pass

    @abstractmethod
    async def get_cached_response(
        self, tenant_id: UUID, utterance_hash: str
    ) -> ResponseCacheEntry | None:
        pass

    @abstractmethod
    async def record_caller_outcome(
        self,
        tenant_id: UUID,
        caller_digest: str,
        intent: str,
        outcome: TurnOutcome,
        scenario_id: UUID | None,
    ) -> None:
        pass

    @abstractmethod
    async def record_path_outcome(
        self,
        tenant_id: UUID,
        intent: str,
        category: str,
        scenario_id: UUID,
        success: bool,
    ) -> None:
        pass

    @abstractmethod
    async def record_response(
        self,
        tenant_id: UUID,
        utterance_hash: str,
        *,
        text: str | None,
        scenario_id: UUID | None,
        success: bool,
        served_from_cache: bool = False,
    ) -> None:
        """Upsert a response cache entry.

        When text is None only the counters of an existing entry move.
        """
        pass
