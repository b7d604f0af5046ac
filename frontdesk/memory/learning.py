"""Post-turn learning: detached, best-effort writes of turn outcomes."""

import asyncio

from frontdesk.errors import LearningWriteFailure
from frontdesk.memory.models import LearningRecord, TurnOutcome
from frontdesk.memory.store import LearningStore
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import LEARNING_WRITES

logger = get_logger(__name__)


class PostTurnLearner:
    """Records outcomes so later turns can skip expensive resolution.

    `schedule` returns immediately; the turn never awaits learning. Failures
    are logged and counted, then dropped.
    """

    def __init__(self, store: LearningStore) -> None:
        self._store = store
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, record: LearningRecord) -> asyncio.Task[bool]:
        task = asyncio.create_task(self.record(record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def record(self, record: LearningRecord) -> bool:
        """Apply every write for the record. Returns False if any was lost."""
        writes = []
        success = record.outcome == TurnOutcome.RESOLVED
        classification = record.classification

        if record.caller_digest and classification.specific:
            writes.append(
                self._store.record_caller_outcome(
                    record.tenant_id,
                    record.caller_digest,
                    classification.intent,
                    record.outcome,
                    record.scenario_id,
                )
            )

        if (
            record.scenario_id is not None
            and classification.specific
            and record.outcome != TurnOutcome.UNRESOLVED
        ):
            writes.append(
                self._store.record_path_outcome(
                    record.tenant_id,
                    classification.intent,
                    classification.category,
                    record.scenario_id,
                    success,
                )
            )

        if record.outcome != TurnOutcome.UNRESOLVED:
            writes.append(
                self._store.record_response(
                    record.tenant_id,
                    record.utterance_hash,
                    text=record.response_text if success else None,
                    scenario_id=record.scenario_id,
                    success=success,
                    served_from_cache=record.served_from_cache,
                )
            )

        results = await asyncio.gather(*writes, return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        for error in errors:
            failure = LearningWriteFailure(f"{type(error).__name__}: {error}")
            logger.warning(
                "learning_write_failed",
                tenant_id=str(record.tenant_id),
                intent=classification.intent,
                error=failure.message,
            )
        LEARNING_WRITES.labels(outcome="failed" if errors else "ok").inc()
        return not errors

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding writes, e.g. on shutdown."""
        if not self._pending:
            return
        done, pending = await asyncio.wait(set(self._pending), timeout=timeout)
        if pending:
            logger.warning("learning_drain_incomplete", pending=len(pending))
