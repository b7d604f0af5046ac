"""Embedding providers for semantic scenario scoring."""

from frontdesk.providers.embedding.base import EmbeddingProvider, EmbeddingResponse
from frontdesk.providers.embedding.sentence_transformers import SentenceTransformersProvider

__all__ = ["EmbeddingProvider", "EmbeddingResponse", "SentenceTransformersProvider"]
