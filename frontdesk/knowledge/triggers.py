"""Trigger helpers shared by the deterministic and approximate tiers."""

from frontdesk.knowledge.models import ScenarioCandidate, ScenarioScore
from frontdesk.text import contains_phrase, normalize_text


def is_blocked(candidate: ScenarioCandidate, normalized_utterance: str) -> bool:
    """True when any negative trigger appears in the utterance."""
    return any(contains_phrase(normalized_utterance, t) for t in candidate.negative_triggers)


def eligible(
    pool: list[ScenarioCandidate], normalized_utterance: str
) -> list[ScenarioCandidate]:
    """Enabled candidates with at least one trigger and no negative hit."""
    return [
        c
        for c in pool
        if c.enabled and c.triggers and not is_blocked(c, normalized_utterance)
    ]


def normalized_triggers(candidate: ScenarioCandidate) -> list[str]:
    return [n for n in (normalize_text(t) for t in candidate.triggers) if n]


def rank(
    scores: list[ScenarioScore], pool: list[ScenarioCandidate]
) -> list[ScenarioScore]:
    """Order by score desc, then candidate priority desc, then id asc."""
    priority = {c.id: c.priority for c in pool}
    return sorted(
        scores,
        key=lambda s: (-s.score, -priority.get(s.scenario_id, 0), str(s.scenario_id)),
    )
