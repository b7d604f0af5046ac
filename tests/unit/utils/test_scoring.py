"""Unit tests for hybrid scoring and vector helpers."""

import pytest

from frontdesk.utils.hybrid import HybridScorer
from frontdesk.utils.vector import cosine_similarity


class TestCosineSimilarity:
    """Tests for cosine_similarity."""

    def test_identical_vectors(self) -> None:
        """Identical vectors have similarity 1."""
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors(self) -> None:
        """Orthogonal vectors have similarity 0."""
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_zero_vector(self) -> None:
        """A zero vector scores 0 instead of dividing by zero."""
        assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0

    def test_length_mismatch(self) -> None:
        """Vectors of different length are rejected."""
        with pytest.raises(ValueError):
            cosine_similarity([1.0], [1.0, 2.0])


class TestHybridScorer:
    """Tests for HybridScorer.combine_scores."""

    def test_weights_applied(self) -> None:
        """Min-max BM25 is blended with the primary score."""
        scorer = HybridScorer(primary_weight=0.7, bm25_weight=0.3)
        combined = scorer.combine_scores([1.0, 0.5], [4.0, 2.0])
        assert combined == pytest.approx([1.0, 0.35])

    def test_absent_bm25_contributes_nothing(self) -> None:
        """All-zero BM25 leaves only the weighted primary score."""
        scorer = HybridScorer(primary_weight=0.7, bm25_weight=0.3)
        assert scorer.combine_scores([1.0, 0.0], [0.0, 0.0]) == pytest.approx([0.7, 0.0])

    def test_scores_clamped(self) -> None:
        """Results never leave [0, 1]."""
        scorer = HybridScorer(primary_weight=1.0, bm25_weight=1.0)
        assert max(scorer.combine_scores([1.0, 0.2], [3.0, 1.0])) == 1.0

    @pytest.mark.parametrize("normalization", ["min_max", "z_score", "softmax"])
    def test_normalizations_keep_order(self, normalization: str) -> None:
        """Every normalization preserves the BM25 ranking."""
        scorer = HybridScorer(primary_weight=0.0, bm25_weight=1.0, normalization=normalization)
        combined = scorer.combine_scores([0.0, 0.0, 0.0], [3.0, 1.0, 2.0])
        assert combined[0] > combined[2] > combined[1]

    def test_length_mismatch(self) -> None:
        """Score lists must line up."""
        with pytest.raises(ValueError):
            HybridScorer().combine_scores([1.0], [])
