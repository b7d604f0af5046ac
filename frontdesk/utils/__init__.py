"""Scoring helpers shared by the resolver tiers."""

from frontdesk.utils.hybrid import HybridScorer
from frontdesk.utils.vector import cosine_similarity

__all__ = ["HybridScorer", "cosine_similarity"]
