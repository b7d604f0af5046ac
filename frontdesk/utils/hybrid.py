"""Combine a bounded primary score with raw BM25 scores.

The primary score (term overlap or embedding similarity) is already in
[0, 1]; BM25 is unbounded and gets normalized across the candidate set
before weighting.
"""

import numpy as np


class HybridScorer:
    """Weighted blend of primary and normalized BM25 scores."""

    def __init__(
        self,
        primary_weight: float = 0.7,
        bm25_weight: float = 0.3,
        normalization: str = "min_max",
    ) -> None:
        """Initialize hybrid scorer.

        Args:
            primary_weight: Weight for the bounded primary score
            bm25_weight: Weight for BM25 scores
            normalization: "min_max", "z_score" or "softmax"
        """
        self.primary_weight = primary_weight
        self.bm25_weight = bm25_weight
        self.normalization = normalization

    def combine_scores(
        self,
        primary_scores: list[float],
        bm25_scores: list[float],
    ) -> list[float]:
        """Combine scores into the [0, 1] range.

        When no candidate has a positive BM25 score the lexical signal is
        absent and BM25 contributes nothing.

        Raises:
            ValueError: If score lists have different lengths
        """
        if len(primary_scores) != len(bm25_scores):
            raise ValueError(
                f"Score lists must have same length: {len(primary_scores)} vs {len(bm25_scores)}"
            )
        if not primary_scores:
            return []

        if max(bm25_scores) <= 0.0:
            norm_bm25 = [0.0] * len(bm25_scores)
        else:
            norm_bm25 = self._normalize(bm25_scores)

        combined = [
            p * self.primary_weight + b * self.bm25_weight
            for p, b in zip(primary_scores, norm_bm25)
        ]
        return [min(1.0, max(0.0, c)) for c in combined]

    def _normalize(self, scores: list[float]) -> list[float]:
        if self.normalization == "z_score":
            return self._z_score_normalize(scores)
        if self.normalization == "softmax":
            return self._softmax_normalize(scores)
        return self._min_max_normalize(scores)

    def _min_max_normalize(self, scores: list[float]) -> list[float]:
        min_score = min(scores)
        max_score = max(scores)
        if max_score == min_score:
            return [1.0] * len(scores)
        return [(s - min_score) / (max_score - min_score) for s in scores]

    def _z_score_normalize(self, scores: list[float]) -> list[float]:
        arr = np.array(scores)
        std = np.std(arr)
        if std == 0:
            return [0.5] * len(scores)
        # tanh maps z-scores into (-1, 1), shifted into (0, 1)
        normalized = (np.tanh((arr - np.mean(arr)) / std) + 1) / 2
        return normalized.tolist()

    def _softmax_normalize(self, scores: list[float]) -> list[float]:
        arr = np.array(scores)
        exp_scores = np.exp(arr - np.max(arr))
        return (exp_scores / np.sum(exp_scores)).tolist()
