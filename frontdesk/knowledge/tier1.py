"""Tier 1: deterministic trigger matching."""

from frontdesk.knowledge.models import ScenarioCandidate, ScenarioScore
from frontdesk.knowledge.triggers import eligible, normalized_triggers, rank


class Tier1Matcher:
    """Exact and whole-phrase trigger matching.

    A trigger equal to the utterance scores 1.0. A trigger contained in the
    utterance scores 0.85 plus up to 0.15 for how much of the utterance it
    covers, so longer triggers win over generic ones.
    """

    EXACT_SCORE = 1.0
    CONTAINED_BASE = 0.85
    COVERAGE_BONUS = 0.15

    def score(
        self, normalized_utterance: str, pool: list[ScenarioCandidate]
    ) -> list[ScenarioScore]:
        """Scores of every candidate with a trigger hit, best first."""
        if not normalized_utterance:
            return []
        utterance_len = len(normalized_utterance.split())
        padded = f" {normalized_utterance} "

        scores: list[ScenarioScore] = []
        for candidate in eligible(pool, normalized_utterance):
            best = 0.0
            for trigger in normalized_triggers(candidate):
                if trigger == normalized_utterance:
                    best = self.EXACT_SCORE
                    break
                if f" {trigger} " in padded:
                    coverage = len(trigger.split()) / utterance_len
                    best = max(best, self.CONTAINED_BASE + self.COVERAGE_BONUS * coverage)
            if best > 0.0:
                scores.append(ScenarioScore(scenario_id=candidate.id, score=min(best, 1.0)))
        return rank(scores, pool)
