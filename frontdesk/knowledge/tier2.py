"""Tier 2: approximate matching.

The primary score is term overlap between the utterance and the best
trigger, optionally blended with embedding similarity. BM25 over each
candidate's trigger text adds a pool-relative lexical signal, combined
through HybridScorer.
"""

from rank_bm25 import BM25Okapi

from frontdesk.config.models.pipeline import Tier2Config
from frontdesk.knowledge.models import ScenarioCandidate, ScenarioScore
from frontdesk.knowledge.triggers import eligible, normalized_triggers, rank
from frontdesk.observability.logging import get_logger
from frontdesk.providers.embedding import EmbeddingProvider
from frontdesk.text import content_terms
from frontdesk.utils.hybrid import HybridScorer
from frontdesk.utils.vector import cosine_similarity

logger = get_logger(__name__)

FORWARD_WEIGHT = 0.7
REVERSE_WEIGHT = 0.3


def term_overlap(utterance_terms: set[str], trigger: str) -> float:
    """Share of trigger terms heard, weighted with share of utterance explained."""
    trigger_terms = set(content_terms(trigger))
    if not trigger_terms or not utterance_terms:
        return 0.0
    shared = len(utterance_terms & trigger_terms)
    forward = shared / len(trigger_terms)
    reverse = shared / len(utterance_terms)
    return FORWARD_WEIGHT * forward + REVERSE_WEIGHT * reverse


class Tier2Matcher:
    """Lexical and optional semantic scoring against the scenario pool."""

    def __init__(
        self,
        config: Tier2Config | None = None,
        embedding_provider: EmbeddingProvider | None = None,
    ) -> None:
        self._config = config or Tier2Config()
        self._embedding_provider = embedding_provider
        self._hybrid_scorer = HybridScorer(
            primary_weight=self._config.lexical_weight,
            bm25_weight=self._config.bm25_weight,
            normalization=self._config.normalization,
        )
        self._trigger_embeddings: dict[str, list[float]] = {}

    async def score(
        self, normalized_utterance: str, pool: list[ScenarioCandidate]
    ) -> list[ScenarioScore]:
        candidates = eligible(pool, normalized_utterance)
        utterance_terms = set(content_terms(normalized_utterance))
        if not candidates or not utterance_terms:
            return []

        primary = [
            max((term_overlap(utterance_terms, t) for t in normalized_triggers(c)), default=0.0)
            for c in candidates
        ]
        if self._embedding_provider is not None:
            primary = await self._blend_semantic(normalized_utterance, candidates, primary)

        combined = self._hybrid_scorer.combine_scores(
            primary, self._bm25_scores(candidates, list(utterance_terms))
        )
        scores = [
            ScenarioScore(scenario_id=c.id, score=s)
            for c, s in zip(candidates, combined)
            if s > 0.0
        ]
        return rank(scores, pool)

    def _bm25_scores(self, candidates: list[ScenarioCandidate], query: list[str]) -> list[float]:
        corpus = [
            [term for t in normalized_triggers(c) for term in content_terms(t)]
            for c in candidates
        ]
        if not any(corpus):
            return [0.0] * len(candidates)
        bm25 = BM25Okapi(corpus)
        return [float(s) for s in bm25.get_scores(query)]

    async def _blend_semantic(
        self,
        normalized_utterance: str,
        candidates: list[ScenarioCandidate],
        primary: list[float],
    ) -> list[float]:
        assert self._embedding_provider is not None
        try:
            query_embedding = await self._embedding_provider.embed_single(normalized_utterance)
            await self._ensure_trigger_embeddings(candidates)
        except Exception as e:
            logger.warning("tier2_embedding_failed", error=str(e))
            return primary

        blend = self._config.semantic_blend
        blended = []
        for candidate, lexical in zip(candidates, primary):
            similarity = max(
                (
                    cosine_similarity(query_embedding, self._trigger_embeddings[t])
                    for t in normalized_triggers(candidate)
                    if t in self._trigger_embeddings
                ),
                default=0.0,
            )
            blended.append((1 - blend) * lexical + blend * max(0.0, similarity))
        return blended

    async def _ensure_trigger_embeddings(self, candidates: list[ScenarioCandidate]) -> None:
        assert self._embedding_provider is not None
        wanted = {t for c in candidates for t in normalized_triggers(c)}
        missing = sorted(wanted - self._trigger_embeddings.keys())
        if not missing:
            return
        response = await self._embedding_provider.embed(missing)
        self._trigger_embeddings.update(zip(missing, response.embeddings))
