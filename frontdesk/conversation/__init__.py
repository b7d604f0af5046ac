"""Call session state, slot extraction and the booking handoff payload."""

from frontdesk.conversation.models import (
    BookingHandoff,
    CallerContext,
    CallerSlots,
    CallSession,
    Channel,
    TriageSummary,
    TurnEntry,
    Urgency,
)
from frontdesk.conversation.slots import SlotExtractor

__all__ = [
    "BookingHandoff",
    "CallSession",
    "CallerContext",
    "CallerSlots",
    "Channel",
    "SlotExtractor",
    "TriageSummary",
    "TurnEntry",
    "Urgency",
]
