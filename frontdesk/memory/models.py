"""Learning records and the per-turn memory snapshot.

Records are written only by post-turn learning and read only by the
hydrator and the optimization gate.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from frontdesk.triage.models import utc_now


class TurnOutcome(str, Enum):
    """How a resolved turn ended, as far as learning is concerned."""

    RESOLVED = "RESOLVED"
    UNRESOLVED = "UNRESOLVED"
    ESCALATED = "ESCALATED"


class TurnClassification(BaseModel):
    """Intent and category assigned to the turn by triage."""

    model_config = ConfigDict(frozen=True)

    intent: str
    category: str
    specific: bool = Field(
        default=True,
        description="False when only the fallback rule matched",
    )


class CallerIntentHistory(BaseModel):
    """Per caller and intent counts."""

    intent: str
    total: int = 0
    successes: int = 0
    failures: int = 0
    last_outcome: TurnOutcome | None = None
    last_scenario_id: UUID | None = None
    last_success_scenario_id: UUID | None = None
    last_seen_at: datetime | None = None


class IntentResolutionPath(BaseModel):
    """How well one scenario resolves an intent and category."""

    intent: str
    category: str
    scenario_id: UUID
    samples: int = 0
    successes: int = 0

    @property
    def success_rate(self) -> float:
        return self.successes / self.samples if self.samples else 0.0


class ResponseCacheEntry(BaseModel):
    """Answer previously given to an identical normalized utterance."""

    utterance_hash: str
    text: str
    scenario_id: UUID | None = None
    hits: int = 0
    successes: int = 0
    failures: int = 0

    @property
    def is_proven(self) -> bool:
        return self.successes > 0 and self.successes >= self.failures


class MemorySnapshot(BaseModel):
    """Immutable view of what memory knew when the turn started."""

    model_config = ConfigDict(frozen=True)

    caller_history: CallerIntentHistory | None = None
    resolution_paths: tuple[IntentResolutionPath, ...] = ()
    cached_response: ResponseCacheEntry | None = None
    failed_queries: tuple[str, ...] = ()
    hydrated_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def empty(cls, failed_queries: tuple[str, ...] = ()) -> "MemorySnapshot":
        """Equivalent to an unknown caller."""
        return cls(failed_queries=failed_queries)


class GateReason(str, Enum):
    CACHED_RESPONSE = "CACHED_RESPONSE"
    PROVEN_PATH = "PROVEN_PATH"
    KNOWN_CALLER_KNOWN_INTENT = "KNOWN_CALLER_KNOWN_INTENT"
    NOVEL = "NOVEL"


class GateDecision(BaseModel):
    """Whether the expensive tier may run this turn, and what to prefer."""

    model_config = ConfigDict(frozen=True)

    use_expensive_resolver: bool
    reason: GateReason
    forced_candidate_id: UUID | None = None
    cached_response: str | None = None
    cached_scenario_id: UUID | None = None
    evidence: str | None = Field(default=None, description="Human-readable basis")


class LearningRecord(BaseModel):
    """Everything post-turn learning needs from a finished turn."""

    tenant_id: UUID
    caller_digest: str | None
    classification: TurnClassification
    utterance_hash: str
    outcome: TurnOutcome
    scenario_id: UUID | None = None
    response_text: str | None = None
    served_from_cache: bool = False
