"""Utterance normalization shared by triage, resolution and learning."""

import hashlib
import re
import unicodedata

_PUNCTUATION = re.compile(r"[^\w\s']+")
_WHITESPACE = re.compile(r"\s+")

STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "but", "by", "can", "could",
    "do", "does", "for", "from", "had", "has", "have", "hi", "hello", "i",
    "i'm", "if", "in", "is", "it", "it's", "me", "my", "of", "on", "or",
    "our", "please", "so", "that", "the", "their", "there", "this", "to",
    "um", "uh", "was", "we", "what", "when", "where", "which", "will",
    "with", "would", "you", "your",
})


def normalize_text(text: str) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace."""
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


def tokenize(text: str) -> list[str]:
    """Split normalized text into tokens."""
    normalized = normalize_text(text)
    return normalized.split(" ") if normalized else []


def content_terms(text: str) -> list[str]:
    """Tokens minus stopwords and single characters."""
    return [t for t in tokenize(text) if t not in STOPWORDS and len(t) > 1]


def contains_phrase(normalized_text: str, phrase: str) -> bool:
    """Whole-word phrase containment on already normalized text."""
    needle = normalize_text(phrase)
    if not needle:
        return False
    return f" {needle} " in f" {normalized_text} "


def utterance_hash(text: str) -> str:
    """Stable digest of the normalized utterance, used as a cache key."""
    return hashlib.sha256(normalize_text(text).encode("utf-8")).hexdigest()[:32]


def caller_digest(caller_id: str) -> str:
    """Digest of a caller identifier so learning records never hold the raw number."""
    digits = re.sub(r"\D", "", caller_id) or caller_id
    return hashlib.sha256(digits.encode("utf-8")).hexdigest()[:24]
