"""Unit tests for caller slot extraction."""

import pytest

from frontdesk.conversation.models import CallerSlots, Urgency
from frontdesk.conversation.slots import SlotExtractor
from frontdesk.text import normalize_text


@pytest.fixture
def extractor() -> SlotExtractor:
    return SlotExtractor()


class TestExtract:
    """Tests for SlotExtractor.extract."""

    def test_name_and_address(self, extractor: SlotExtractor) -> None:
        """Name and street address are pulled from one sentence."""
        slots = extractor.extract("Hi, my name is maria and I'm at 123 Main Street.")

        assert slots.first_name == "Maria"
        assert slots.address == "123 Main Street"
        assert slots.urgency is Urgency.NORMAL

    def test_filler_words_are_not_names(self, extractor: SlotExtractor) -> None:
        """'this is just' does not produce a name."""
        assert extractor.extract("this is just a quick question").first_name is None

    def test_booking_request_flagged(self, extractor: SlotExtractor) -> None:
        """Asking for a visit sets booking_requested."""
        assert extractor.extract("Can you send someone out tomorrow?").booking_requested


class TestUrgency:
    """Tests for urgency classification."""

    @pytest.mark.parametrize(
        ("utterance", "expected"),
        [
            ("I smell gas in the kitchen", Urgency.EMERGENCY),
            ("there's raw sewage in the basement", Urgency.EMERGENCY),
            ("we have no heat", Urgency.URGENT),
            ("need someone ASAP", Urgency.URGENT),
            ("whenever is fine next week", Urgency.NORMAL),
        ],
    )
    def test_levels(self, extractor: SlotExtractor, utterance: str, expected: Urgency) -> None:
        """Emergency phrases beat urgent ones; everything else is normal."""
        assert extractor.urgency(normalize_text(utterance)) is expected

    def test_merge_never_lowers_urgency(self) -> None:
        """A calmer later turn keeps the earlier urgency."""
        earlier = CallerSlots(first_name="Maria", urgency=Urgency.EMERGENCY)
        later = CallerSlots(address="12 Oak Ave", urgency=Urgency.NORMAL)

        merged = earlier.merge(later)

        assert merged.urgency is Urgency.EMERGENCY
        assert merged.first_name == "Maria"
        assert merged.address == "12 Oak Ave"


class TestAffirmation:
    """Tests for booking-offer replies."""

    @pytest.mark.parametrize("utterance", ["yes please", "sure, that works", "Okay go ahead"])
    def test_affirmations(self, extractor: SlotExtractor, utterance: str) -> None:
        """Plain yeses are accepted."""
        assert extractor.is_affirmation(normalize_text(utterance))

    @pytest.mark.parametrize("utterance", ["no thanks", "yeah not now", "ok but don't book yet"])
    def test_negations_win(self, extractor: SlotExtractor, utterance: str) -> None:
        """Any negation overrides an affirmation."""
        assert not extractor.is_affirmation(normalize_text(utterance))
