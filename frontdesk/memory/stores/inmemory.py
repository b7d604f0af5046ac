"""In-memory implementation of LearningStore."""

from uuid import UUID

from frontdesk.memory.models import (
    CallerIntentHistory,
    IntentResolutionPath,
    ResponseCacheEntry,
    TurnOutcome,
)
from frontdesk.memory.store import LearningStore
from frontdesk.triage.models import utc_now


class InMemoryLearningStore(LearningStore):
    """Dict-backed learning store for tests and development.

    Each write completes without awaiting, so updates are atomic with
    respect to other tasks on the same event loop.
    """

    def __init__(self) -> None:
        self._callers: dict[tuple[UUID, str, str], CallerIntentHistory] = {}
        self._paths: dict[tuple[UUID, str, str], dict[UUID, IntentResolutionPath]] = {}
        self._responses: dict[tuple[UUID, str], ResponseCacheEntry] = {}

    async def get_caller_history(
        self, tenant_id: UUID, caller_digest: str, intent: str
    ) -> CallerIntentHistory | None:
        history = self._callers.get((tenant_id, caller_digest, intent))
        return history.model_copy() if history else None

    async def get_resolution_paths(
        self, tenant_id: UUID, intent: str, category: str
    ) -> list[IntentResolutionPath]:
        paths = self._paths.get((tenant_id, intent, category), {})
        return [p.model_copy() for p in paths.values()]

    async def get_cached_response(
        self, tenant_id: UUID, utterance_hash: str
    ) -> ResponseCacheEntry | None:
        entry = self._responses.get((tenant_id, utterance_hash))
        return entry.model_copy() if entry else None

    async def record_caller_outcome(
        self,
        tenant_id: UUID,
        caller_digest: str,
        intent: str,
        outcome: TurnOutcome,
        scenario_id: UUID | None,
    ) -> None:
        key = (tenant_id, caller_digest, intent)
        history = self._callers.setdefault(key, CallerIntentHistory(intent=intent))
        history.total += 1
        if outcome == TurnOutcome.RESOLVED:
            history.successes += 1
            history.last_success_scenario_id = scenario_id
        elif outcome == TurnOutcome.ESCALATED:
            history.failures += 1
        history.last_outcome = outcome
        history.last_scenario_id = scenario_id
        history.last_seen_at = utc_now()

    async def record_path_outcome(
        self,
        tenant_id: UUID,
        intent: str,
        category: str,
        scenario_id: UUID,
        success: bool,
    ) -> None:
        paths = self._paths.setdefault((tenant_id, intent, category), {})
        path = paths.setdefault(
            scenario_id,
            IntentResolutionPath(intent=intent, category=category, scenario_id=scenario_id),
        )
        path.samples += 1
        if success:
            path.successes += 1

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
        key = (tenant_id, utterance_hash)
        entry = self._responses.get(key)
        if entry is None:
            if text is None:
                return
            entry = ResponseCacheEntry(utterance_hash=utterance_hash, text=text)
            self._responses[key] = entry
        elif text is not None:
            entry.text = text
        if scenario_id is not None:
            entry.scenario_id = scenario_id
        if served_from_cache:
            entry.hits += 1
        if success:
            entry.successes += 1
        else:
            entry.failures += 1
