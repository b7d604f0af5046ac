"""Call actions and transition records."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from frontdesk.triage.models import utc_now


class CallAction(str, Enum):
    """What the call does after this turn.

    CONTINUE loops to the next turn. BOOKING_HANDOFF passes the call to the
    booking collaborator. The rest end this pipeline's part in the call.
    """

    CONTINUE = "CONTINUE"
    ESCALATE_TO_HUMAN = "ESCALATE_TO_HUMAN"
    TAKE_MESSAGE = "TAKE_MESSAGE"
    END_CALL_POLITE = "END_CALL_POLITE"
    BOOKING_HANDOFF = "BOOKING_HANDOFF"

    @property
    def ends_pipeline(self) -> bool:
        return self is not CallAction.CONTINUE


class TransitionTrigger(str, Enum):
    """Component that caused a state transition."""

    TRIAGE = "TRIAGE"
    RESOLVER = "RESOLVER"
    FOLLOW_UP = "FOLLOW_UP"
    BOOKING_SIGNAL = "BOOKING_SIGNAL"
    UNRESOLVED_LIMIT = "UNRESOLVED_LIMIT"
    CONFIGURATION = "CONFIGURATION"
    FAILSAFE = "FAILSAFE"


class ActionTransition(BaseModel):
    """Audit record of one state change."""

    from_action: CallAction
    to_action: CallAction
    trigger: TransitionTrigger
    reason: str
    at: datetime = Field(default_factory=utc_now)
