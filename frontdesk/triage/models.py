"""Triage rule models."""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from frontdesk.text import normalize_text


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class TriageAction(str, Enum):
    """What the call should do once a rule matches.

    - DIRECT_TO_RESOLVER: continue into knowledge resolution
    - EXPLAIN_AND_PUSH: explain the situation, then resolve if the caller agrees
    - ESCALATE_TO_HUMAN: transfer to a person
    - TAKE_MESSAGE: record a message for a callback
    - END_CALL_POLITE: close the call
    """

    DIRECT_TO_RESOLVER = "DIRECT_TO_RESOLVER"
    EXPLAIN_AND_PUSH = "EXPLAIN_AND_PUSH"
    ESCALATE_TO_HUMAN = "ESCALATE_TO_HUMAN"
    TAKE_MESSAGE = "TAKE_MESSAGE"
    END_CALL_POLITE = "END_CALL_POLITE"

    @property
    def defers_to_resolver(self) -> bool:
        return self in (TriageAction.DIRECT_TO_RESOLVER, TriageAction.EXPLAIN_AND_PUSH)


class ServiceType(str, Enum):
    """Kind of job a triage rule classifies the call as."""

    REPAIR = "REPAIR"
    MAINTENANCE = "MAINTENANCE"
    INSTALLATION = "INSTALLATION"
    EMERGENCY = "EMERGENCY"
    INQUIRY = "INQUIRY"
    OTHER = "OTHER"
    UNKNOWN = "UNKNOWN"


class RuleSource(str, Enum):
    """Origin of a rule. Higher rank wins ties on priority."""

    MANUAL = "MANUAL"
    AI_SUGGESTED = "AI_SUGGESTED"
    SYSTEM = "SYSTEM"

    @property
    def rank(self) -> int:
        return _SOURCE_RANK[self]


_SOURCE_RANK = {
    RuleSource.MANUAL: 3,
    RuleSource.AI_SUGGESTED: 2,
    RuleSource.SYSTEM: 1,
}


class MatchMethod(str, Enum):
    """How the winning rule's keywords were satisfied."""

    EXACT_KEYWORD = "EXACT_KEYWORD"
    AUXILIARY_KEYWORD = "AUXILIARY_KEYWORD"
    FALLBACK = "FALLBACK"


class TriageRule(BaseModel):
    """Keyword rule: all keywords required, any exclude keyword vetoes.

    Immutable once built; edits produce a new rule and a new compiled set.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4, description="Stable rule identifier")
    tenant_id: UUID = Field(..., description="Owning tenant")
    label: str = Field(..., min_length=1, description="Intent label, e.g. AC_REPAIR")
    category: str = Field(default="general", description="Issue category slug")
    keywords: frozenset[str] = Field(default_factory=frozenset, description="All required")
    exclude_keywords: frozenset[str] = Field(
        default_factory=frozenset, description="Any present vetoes the rule"
    )
    action: TriageAction = Field(default=TriageAction.DIRECT_TO_RESOLVER)
    service_type: ServiceType = Field(default=ServiceType.OTHER)
    priority: int = Field(default=100, description="Higher is evaluated first")
    source: RuleSource = Field(default=RuleSource.MANUAL)
    active: bool = Field(default=True, description="Inactive rules are not compiled")
    reply_text: str | None = Field(
        default=None,
        description="What the agent says for explain or terminal actions",
    )
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("keywords", "exclude_keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value: object) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        normalized = (normalize_text(str(k)) for k in value)  # type: ignore[union-attr]
        return frozenset(k for k in normalized if k)

    @property
    def is_fallback(self) -> bool:
        return self.source == RuleSource.SYSTEM and not self.keywords and not self.exclude_keywords


class CompiledRuleSet(BaseModel):
    """Ordered, immutable rule list for one tenant.

    Exactly one fallback rule, always last.
    """

    model_config = ConfigDict(frozen=True)

    tenant_id: UUID
    rules: tuple[TriageRule, ...]
    version: str = Field(..., description="Digest of rule ids and timestamps")
    compiled_at: datetime = Field(default_factory=utc_now)
    degraded: bool = Field(
        default=False,
        description="Built without the rule store; holds only the fallback",
    )

    @model_validator(mode="after")
    def _exactly_one_trailing_fallback(self) -> "CompiledRuleSet":
        if not self.rules:
            raise ValueError("compiled rule set is empty")
        fallbacks = [r for r in self.rules if r.is_fallback]
        if len(fallbacks) != 1 or not self.rules[-1].is_fallback:
            raise ValueError("compiled rule set needs exactly one fallback rule, last")
        return self

    @property
    def fallback(self) -> TriageRule:
        return self.rules[-1]

    def __len__(self) -> int:
        return len(self.rules)


class TriageMatch(BaseModel):
    """Result of one triage pass."""

    model_config = ConfigDict(frozen=True)

    rule: TriageRule
    match_method: MatchMethod
    matched_keywords: tuple[str, ...] = ()
    rule_index: int = Field(..., ge=0, description="Position in the compiled set")
    ruleset_version: str

    @property
    def action(self) -> TriageAction:
        return self.rule.action

    @property
    def is_fallback(self) -> bool:
        return self.match_method == MatchMethod.FALLBACK
