"""Caller slot extraction from raw utterances."""

import re

from frontdesk.conversation.models import CallerSlots, Urgency
from frontdesk.tenants.models import Trade
from frontdesk.text import STOPWORDS, contains_phrase, normalize_text
from frontdesk.triage.review import EMERGENCY_PHRASES

_NAME = re.compile(
    r"\b(?:my name is|my name's|this is|name is)\s+([A-Za-z][A-Za-z'\-]{1,30})",
    re.IGNORECASE,
)
_NOT_NAMES = STOPWORDS | {"calling", "about", "regarding", "just", "not", "really", "urgent"}

_ADDRESS = re.compile(
    r"\b(\d{1,6}\s+(?:[A-Za-z0-9'.]+\s+){0,4}?"
    r"(?:street|st|avenue|ave|road|rd|drive|dr|lane|ln|boulevard|blvd|court|ct|"
    r"way|place|pl|circle|cir|parkway|pkwy|terrace|ter|highway|hwy))\b\.?",
    re.IGNORECASE,
)

URGENT_PHRASES: tuple[str, ...] = (
    "urgent",
    "asap",
    "as soon as possible",
    "right away",
    "right now",
    "today",
    "no heat",
    "no ac",
    "no air",
    "no hot water",
    "leaking",
)

BOOKING_PHRASES: tuple[str, ...] = (
    "schedule",
    "book",
    "appointment",
    "send someone",
    "send a tech",
    "send a technician",
    "come out",
    "set up a visit",
)

AFFIRMATIONS: tuple[str, ...] = (
    "yes",
    "yeah",
    "yep",
    "sure",
    "ok",
    "okay",
    "please do",
    "sounds good",
    "let's do it",
    "go ahead",
    "absolutely",
    "that works",
)

NEGATIONS: tuple[str, ...] = ("no", "nope", "not now", "not yet", "don't", "no thanks")


def _all_emergency_phrases() -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for trade in Trade:
        for phrase in EMERGENCY_PHRASES[trade]:
            seen.setdefault(phrase, None)
    return tuple(seen)


class SlotExtractor:
    """Pattern-based extraction of name, address, urgency and booking intent."""

    def __init__(self) -> None:
        self._emergency_phrases = _all_emergency_phrases()

    def extract(self, raw_utterance: str) -> CallerSlots:
        normalized = normalize_text(raw_utterance)
        return CallerSlots(
            first_name=self._first_name(raw_utterance),
            address=self._address(raw_utterance),
            urgency=self.urgency(normalized),
            booking_requested=self.is_booking_request(normalized),
        )

    def urgency(self, normalized_utterance: str) -> Urgency:
        if any(contains_phrase(normalized_utterance, p) for p in self._emergency_phrases):
            return Urgency.EMERGENCY
        if any(contains_phrase(normalized_utterance, p) for p in URGENT_PHRASES):
            return Urgency.URGENT
        return Urgency.NORMAL

    @staticmethod
    def is_booking_request(normalized_utterance: str) -> bool:
        return any(contains_phrase(normalized_utterance, p) for p in BOOKING_PHRASES)

    @staticmethod
    def is_affirmation(normalized_utterance: str) -> bool:
        if any(contains_phrase(normalized_utterance, p) for p in NEGATIONS):
            return False
        return any(contains_phrase(normalized_utterance, p) for p in AFFIRMATIONS)

    @staticmethod
    def _first_name(raw_utterance: str) -> str | None:
        match = _NAME.search(raw_utterance)
        if match is None:
            return None
        name = match.group(1)
        if name.lower() in _NOT_NAMES:
            return None
        return name[0].upper() + name[1:].lower()

    @staticmethod
    def _address(raw_utterance: str) -> str | None:
        match = _ADDRESS.search(raw_utterance)
        return match.group(1).strip() if match else None
