"""Unit tests for the deterministic and approximate matching tiers."""

from typing import Any
from uuid import UUID

import pytest

from frontdesk.config.models.pipeline import Tier2Config
from frontdesk.knowledge.models import ScenarioScore
from frontdesk.knowledge.tier1 import Tier1Matcher
from frontdesk.knowledge.tier2 import Tier2Matcher, term_overlap
from frontdesk.knowledge.triggers import eligible, rank
from frontdesk.providers.embedding import EmbeddingProvider, EmbeddingResponse
from frontdesk.text import content_terms
from tests.factories import ScenarioFactory


class StubEmbeddingProvider(EmbeddingProvider):
    """Maps known texts to fixed vectors; everything else is orthogonal."""

    def __init__(self, vectors: dict[str, list[float]], fail: bool = False) -> None:
        self._vectors = vectors
        self._fail = fail
        self.calls = 0

    @property
    def provider_name(self) -> str:
        return "stub"

    @property
    def dimensions(self) -> int:
        return 3

    async def embed(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:
        self.calls += 1
        if self._fail:
            raise RuntimeError("model not loaded")
        return EmbeddingResponse(
            embeddings=[self._vectors.get(t, [0.0, 0.0, 1.0]) for t in texts],
            model="stub",
            dimensions=3,
        )


class TestTriggerHelpers:
    """Tests for eligibility and ranking."""

    def test_negative_trigger_blocks(self, tenant_id: UUID) -> None:
        """A negative trigger hit removes the candidate."""
        blocked = ScenarioFactory.create(tenant_id=tenant_id, negative_triggers=["furnace"])
        assert eligible([blocked], "my furnace ac is not cooling") == []

    def test_disabled_and_triggerless_ineligible(self, tenant_id: UUID) -> None:
        """Disabled candidates and ones without triggers are skipped."""
        disabled = ScenarioFactory.create(tenant_id=tenant_id, enabled=False)
        silent = ScenarioFactory.create(tenant_id=tenant_id, triggers=[])
        assert eligible([disabled, silent], "ac not cooling") == []

    def test_ties_break_on_priority_then_id(self, tenant_id: UUID) -> None:
        """Equal scores order by priority desc, then id asc."""
        low = ScenarioFactory.create(tenant_id=tenant_id, id=UUID(int=1), priority=0)
        high = ScenarioFactory.create(tenant_id=tenant_id, id=UUID(int=2), priority=5)
        other = ScenarioFactory.create(tenant_id=tenant_id, id=UUID(int=3), priority=0)
        scores = [ScenarioScore(scenario_id=c.id, score=0.9) for c in (other, low, high)]

        ranked = rank(scores, [low, high, other])

        assert [s.scenario_id for s in ranked] == [high.id, low.id, other.id]


class TestTier1Matcher:
    """Tests for exact and contained trigger matching."""

    def test_exact_trigger_scores_one(self, tenant_id: UUID) -> None:
        """A trigger equal to the utterance is a perfect match."""
        scenario = ScenarioFactory.create(tenant_id=tenant_id, triggers=["AC not cooling"])
        scores = Tier1Matcher().score("ac not cooling", [scenario])
        assert scores == [ScenarioScore(scenario_id=scenario.id, score=1.0)]

    def test_contained_trigger_scores_by_coverage(self, tenant_id: UUID) -> None:
        """Longer triggers covering more of the utterance score higher."""
        specific = ScenarioFactory.create(tenant_id=tenant_id, triggers=["ac not cooling"])
        generic = ScenarioFactory.create(tenant_id=tenant_id, triggers=["ac"])

        scores = Tier1Matcher().score("hi my ac not cooling", [generic, specific])

        assert scores[0].scenario_id == specific.id
        assert scores[0].score == pytest.approx(0.85 + 0.15 * 3 / 5)
        assert scores[1].score == pytest.approx(0.85 + 0.15 * 1 / 5)

    def test_no_hit_no_score(self, tenant_id: UUID) -> None:
        """Candidates without a trigger hit are omitted."""
        scenario = ScenarioFactory.create(tenant_id=tenant_id, triggers=["water heater"])
        assert Tier1Matcher().score("ac not cooling", [scenario]) == []

    def test_empty_utterance(self, tenant_id: UUID) -> None:
        """Nothing matches an empty utterance."""
        assert Tier1Matcher().score("", [ScenarioFactory.create(tenant_id=tenant_id)]) == []


class TestTermOverlap:
    """Tests for the primary lexical score."""

    def test_full_overlap(self) -> None:
        """Same content terms score 1."""
        terms = set(content_terms("thermostat blank"))
        assert term_overlap(terms, "thermostat blank") == pytest.approx(1.0)

    def test_partial_overlap_weighted(self) -> None:
        """Forward share outweighs reverse share."""
        terms = set(content_terms("thermostat screen blank today"))
        # 2 of 2 trigger terms heard, 2 of 4 utterance terms explained
        assert term_overlap(terms, "thermostat blank") == pytest.approx(0.7 + 0.3 * 0.5)


class TestTier2Matcher:
    """Tests for approximate scoring."""

    @pytest.mark.asyncio
    async def test_paraphrase_scores_above_unrelated(self, tenant_id: UUID) -> None:
        """The candidate sharing content terms outranks the rest."""
        thermostat = ScenarioFactory.create(
            tenant_id=tenant_id, triggers=["thermostat screen is blank"]
        )
        billing = ScenarioFactory.create(tenant_id=tenant_id, triggers=["question about my bill"])

        scores = await Tier2Matcher().score(
            "the thermostat display went blank", [billing, thermostat]
        )

        assert scores[0].scenario_id == thermostat.id
        assert all(s.scenario_id != billing.id for s in scores)

    @pytest.mark.asyncio
    async def test_stopword_only_utterance_scores_nothing(self, tenant_id: UUID) -> None:
        """No content terms means no approximate match."""
        scenario = ScenarioFactory.create(tenant_id=tenant_id)
        assert await Tier2Matcher().score("it is the", [scenario]) == []

    @pytest.mark.asyncio
    async def test_embeddings_blend_into_primary(self, tenant_id: UUID) -> None:
        """A semantically close trigger is lifted by the embedding score."""
        scenario = ScenarioFactory.create(tenant_id=tenant_id, triggers=["furnace won't ignite"])
        provider = StubEmbeddingProvider(
            {
                "furnace won't ignite": [1.0, 0.0, 0.0],
                "heater not starting up": [1.0, 0.0, 0.0],
            }
        )
        lexical = await Tier2Matcher(Tier2Config(bm25_weight=0.0, lexical_weight=1.0)).score(
            "heater not starting up", [scenario]
        )
        semantic = await Tier2Matcher(
            Tier2Config(bm25_weight=0.0, lexical_weight=1.0, semantic_blend=0.5), provider
        ).score("heater not starting up", [scenario])

        assert lexical == []
        assert semantic[0].score == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_trigger_embeddings_cached(self, tenant_id: UUID) -> None:
        """Trigger vectors are computed once per matcher."""
        scenario = ScenarioFactory.create(tenant_id=tenant_id)
        provider = StubEmbeddingProvider({})
        matcher = Tier2Matcher(embedding_provider=provider)

        await matcher.score("ac is warm", [scenario])
        await matcher.score("ac is warm", [scenario])

        # two utterance embeddings plus one batch of triggers
        assert provider.calls == 3

    @pytest.mark.asyncio
    async def test_embedding_failure_falls_back_to_lexical(self, tenant_id: UUID) -> None:
        """A failing provider leaves the lexical score in place."""
        scenario = ScenarioFactory.create(tenant_id=tenant_id, triggers=["ac not cooling"])
        failing = Tier2Matcher(embedding_provider=StubEmbeddingProvider({}, fail=True))
        plain = Tier2Matcher()

        assert await failing.score("ac not cooling well", [scenario]) == await plain.score(
            "ac not cooling well", [scenario]
        )
