"""Unit tests for utterance normalization helpers."""

from frontdesk.text import (
    caller_digest,
    contains_phrase,
    content_terms,
    normalize_text,
    tokenize,
    utterance_hash,
)


class TestNormalizeText:
    """Tests for normalize_text."""

    def test_lowercases_and_strips_punctuation(self) -> None:
        """Punctuation becomes whitespace and case is folded."""
        assert normalize_text("My AC isn't cooling!!") == "my ac isn't cooling"

    def test_strips_accents(self) -> None:
        """Accented characters lose their marks."""
        assert normalize_text("Café  Résumé") == "cafe resume"

    def test_empty_input(self) -> None:
        """Whitespace-only input normalizes to an empty string."""
        assert normalize_text("   ") == ""
        assert tokenize("  ") == []


class TestContainsPhrase:
    """Tests for whole-word phrase containment."""

    def test_whole_word_match(self) -> None:
        """A phrase matches on word boundaries."""
        assert contains_phrase("my ac is broken", "AC")

    def test_no_partial_word_match(self) -> None:
        """A keyword never matches inside another word."""
        assert not contains_phrase("the back door", "ac")

    def test_empty_phrase_never_matches(self) -> None:
        """An empty phrase is not contained in anything."""
        assert not contains_phrase("anything", "  ")


class TestDigests:
    """Tests for cache and caller digests."""

    def test_utterance_hash_ignores_formatting(self) -> None:
        """Equivalent utterances share a hash."""
        assert utterance_hash("AC not cooling!") == utterance_hash("ac  not cooling")

    def test_caller_digest_ignores_formatting(self) -> None:
        """Phone number formatting does not change the digest."""
        assert caller_digest("+1 (555) 010-0199") == caller_digest("15550100199")

    def test_caller_digest_hides_number(self) -> None:
        """The digest never contains the raw digits."""
        assert "5550100199" not in caller_digest("555-010-0199")


class TestContentTerms:
    """Tests for stopword filtering."""

    def test_drops_stopwords(self) -> None:
        """Stopwords and single characters are removed."""
        assert content_terms("I think my AC is not cooling") == ["think", "ac", "not", "cooling"]
