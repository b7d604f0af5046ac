"""Scenario candidates and resolution results."""

from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScenarioType(str, Enum):
    """What kind of exchange a scenario represents.

    - INFO_FAQ: factual answer (hours, prices, service area)
    - ACTION_FLOW: something to get done (book, dispatch, reschedule)
    - SYSTEM_ACK: short acknowledgement ("one moment")
    - SMALL_TALK: pleasantries
    """

    INFO_FAQ = "INFO_FAQ"
    ACTION_FLOW = "ACTION_FLOW"
    SYSTEM_ACK = "SYSTEM_ACK"
    SMALL_TALK = "SMALL_TALK"


class ReplyStrategy(str, Enum):
    """How quick and full replies are combined."""

    AUTO = "AUTO"
    FULL_ONLY = "FULL_ONLY"
    QUICK_ONLY = "QUICK_ONLY"
    QUICK_THEN_FULL = "QUICK_THEN_FULL"


class FollowUpAction(str, Enum):
    """What the agent does after replying."""

    NONE = "NONE"
    ASK_TO_BOOK = "ASK_TO_BOOK"
    TRANSFER = "TRANSFER"
    ASK_FOLLOW_UP_QUESTION = "ASK_FOLLOW_UP_QUESTION"


class ReplyVariant(BaseModel):
    """One phrasing of a reply.

    Weight None means the configured default; weight 0 switches the variant off.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1)
    weight: int | None = Field(default=None, ge=0)


def _coerce_variants(value: object) -> object:
    if isinstance(value, list):
        return [{"text": v} if isinstance(v, str) else v for v in value]
    return value


class ScenarioCandidate(BaseModel):
    """A tenant-configured unit of what to say for an intent."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    tenant_id: UUID
    name: str = Field(..., min_length=1)
    intent: str | None = Field(default=None, description="Intent label this answers")
    triggers: tuple[str, ...] = Field(default=(), description="Phrases that select it")
    negative_triggers: tuple[str, ...] = Field(
        default=(), description="Phrases that rule it out"
    )
    quick_replies: tuple[ReplyVariant, ...] = ()
    full_replies: tuple[ReplyVariant, ...] = ()
    follow_up_replies: tuple[ReplyVariant, ...] = ()
    reply_strategy: ReplyStrategy = ReplyStrategy.AUTO
    scenario_type: ScenarioType = ScenarioType.INFO_FAQ
    follow_up: FollowUpAction = FollowUpAction.NONE
    follow_up_question: str | None = None
    transfer_target: str | None = None
    priority: int = Field(default=0, description="Breaks score ties, higher first")
    enabled: bool = True

    @field_validator("quick_replies", "full_replies", "follow_up_replies", mode="before")
    @classmethod
    def _coerce_replies(cls, value: object) -> object:
        return _coerce_variants(value)

    @property
    def has_replies(self) -> bool:
        return any(v.weight != 0 for v in (*self.quick_replies, *self.full_replies))


class ResolutionTier(str, Enum):
    """Which stage produced the resolution."""

    CACHE = "CACHE"
    LEARNED_PATH = "LEARNED_PATH"
    TIER1 = "TIER1"
    TIER2 = "TIER2"
    TIER3 = "TIER3"
    NONE = "NONE"


class ScenarioScore(BaseModel):
    """Score of one candidate at one tier."""

    scenario_id: UUID
    score: float = Field(..., ge=0.0, le=1.0)


class TierAttempt(BaseModel):
    """Trace of one tier: skipped, missed, or matched."""

    tier: ResolutionTier
    matched: bool = False
    scenario_id: UUID | None = None
    confidence: float = 0.0
    threshold: float | None = None
    latency_ms: float = 0.0
    skipped_reason: str | None = None
    error: str | None = None
    tokens_used: int | None = None


class ResolutionResult(BaseModel):
    """Outcome of the cascade for one turn."""

    matched: bool
    tier: ResolutionTier = ResolutionTier.NONE
    scenario: ScenarioCandidate | None = None
    confidence: float = 0.0
    cached_response: str | None = None
    attempts: list[TierAttempt] = Field(default_factory=list)
    escalation_hint: bool = Field(
        default=False,
        description="Resolution was cut short; a human would likely do better",
    )
    error: str | None = Field(default=None, description="Error class that degraded the turn")


class Tier3Verdict(BaseModel):
    """Structured answer expected from the generative tier."""

    matched: bool = Field(..., description="Whether any candidate fits the utterance")
    scenario_id: str | None = Field(
        default=None, description="Id of the chosen candidate, copied verbatim"
    )
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="0 to 1")
    rationale: str = Field(default="", description="One short sentence")
