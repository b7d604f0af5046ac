"""Call session state, caller slots and the booking handoff payload."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from frontdesk.actions.models import ActionTransition, CallAction
from frontdesk.memory.models import MemorySnapshot
from frontdesk.triage.models import MatchMethod, TriageAction, utc_now


class Channel(str, Enum):
    """How the caller reaches us. Text channels never get filler phrases."""

    VOICE = "VOICE"
    TEXT = "TEXT"


class Urgency(str, Enum):
    EMERGENCY = "EMERGENCY"
    URGENT = "URGENT"
    NORMAL = "NORMAL"

    @property
    def rank(self) -> int:
        return {"EMERGENCY": 2, "URGENT": 1, "NORMAL": 0}[self.value]


class CallerSlots(BaseModel):
    """What the caller has told us about themselves so far."""

    first_name: str | None = None
    address: str | None = None
    urgency: Urgency = Urgency.NORMAL
    booking_requested: bool = False

    def merge(self, newer: "CallerSlots") -> "CallerSlots":
        """Newer values win; urgency only ever rises within a call."""
        return CallerSlots(
            first_name=newer.first_name or self.first_name,
            address=newer.address or self.address,
            urgency=max(self.urgency, newer.urgency, key=lambda u: u.rank),
            booking_requested=newer.booking_requested,
        )


class TurnEntry(BaseModel):
    """One processed turn in the session history."""

    index: int
    utterance: str
    response_text: str
    action: CallAction
    scenario_id: UUID | None = None
    at: datetime = Field(default_factory=utc_now)


class TriageSummary(BaseModel):
    """The parts of the last triage match the session keeps."""

    rule_id: UUID
    label: str
    category: str
    action: TriageAction
    match_method: MatchMethod
    is_fallback: bool


class CallerContext(BaseModel):
    """Caller summary sent to the booking collaborator."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str | None = Field(default=None, alias="firstName")
    issue_category: str = Field(..., alias="issueCategory")
    urgency: Urgency = Urgency.NORMAL
    is_return_customer: bool = Field(default=False, alias="isReturnCustomer")


class BookingHandoff(BaseModel):
    """Payload handed to the booking collaborator. The pipeline does not
    re-enter the call after this."""

    model_config = ConfigDict(populate_by_name=True)

    caller_context: CallerContext = Field(..., alias="callerContext")
    pre_filled_slots: dict[str, Any] = Field(default_factory=dict, alias="preFilledSlots")


class CallSession(BaseModel):
    """Per-call state carried between turns.

    Only one turn of a call is processed at a time; the pipeline returns an
    updated copy each turn and the caller of the pipeline stores it.
    """

    model_config = ConfigDict(validate_assignment=True)

    call_id: str
    tenant_id: UUID
    channel: Channel = Channel.VOICE
    state: CallAction = CallAction.CONTINUE
    closed: bool = False
    turns: list[TurnEntry] = Field(default_factory=list)
    slots: CallerSlots = Field(default_factory=CallerSlots)
    last_triage: TriageSummary | None = None
    # category of the latest non-fallback triage
    issue_category: str | None = None
    memory_snapshot: MemorySnapshot | None = None
    booking_offer_pending: bool = False
    unresolved_turns: int = 0
    is_return_customer: bool = False
    booking_handoff: BookingHandoff | None = None
    transitions: list[ActionTransition] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utc_now)

    @property
    def turn_count(self) -> int:
        return len(self.turns)
