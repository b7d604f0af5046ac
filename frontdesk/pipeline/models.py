"""Turn request, result and trace models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from frontdesk.actions.models import ActionTransition, CallAction
from frontdesk.conversation.models import BookingHandoff, CallSession, Channel, TriageSummary
from frontdesk.knowledge.models import ResolutionResult
from frontdesk.memory.models import GateDecision
from frontdesk.responses.models import AssemblyStrategy


class PipelineStepTiming(BaseModel):
    """Timing information for a single pipeline step."""

    step: str = Field(..., description="Step name")
    started_at: datetime
    ended_at: datetime
    duration_ms: float = Field(ge=0)
    skipped: bool = False
    skip_reason: str | None = None


class TurnRequest(BaseModel):
    """One caller utterance, as delivered by the speech layer."""

    tenant_id: UUID
    call_id: str = Field(..., min_length=1)
    caller_id: str | None = Field(default=None, description="Caller phone number or handle")
    normalized_utterance: str = Field(
        default="", description="Transcript after upstream normalization"
    )
    raw_utterance: str = Field(default="", description="Transcript as heard")
    session_state: CallSession | None = Field(
        default=None, description="State returned by the previous turn; None starts a call"
    )
    channel: Channel = Channel.VOICE
    auxiliary_keywords: list[str] = Field(
        default_factory=list, description="Keywords from upstream classification"
    )


class TurnTrace(BaseModel):
    """Everything decided during a turn, for debugging and audit."""

    turn_index: int
    triage: TriageSummary | None = None
    matched_keywords: list[str] = Field(default_factory=list)
    ruleset_version: str | None = None
    ruleset_degraded: bool = False
    gate: GateDecision | None = None
    resolution: ResolutionResult | None = None
    response_strategy: AssemblyStrategy | None = None
    transitions: list[ActionTransition] = Field(default_factory=list)
    memory_failed_queries: list[str] = Field(default_factory=list)
    timings: list[PipelineStepTiming] = Field(default_factory=list)
    total_time_ms: float = 0.0
    failsafe_reason: str | None = Field(
        default=None, description="Error class that forced the safe fallback"
    )


class TurnResult(BaseModel):
    """What the speech layer says and does next."""

    response_text: str
    action: CallAction
    updated_session_state: CallSession
    booking_handoff: BookingHandoff | None = None
    trace: TurnTrace
