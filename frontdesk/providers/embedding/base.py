"""Embedding provider interface used by tier 2 semantic scoring."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class EmbeddingResponse(BaseModel):
    """Vectors for a batch of utterances or triggers, in input order."""

    embeddings: list[list[float]]
    model: str
    dimensions: int


class EmbeddingProvider(ABC):
    """Turns utterances and scenario triggers into comparable vectors."""

    @property
    @abstractmethod
    def provider_name(self) -> str: ...

    @property
    @abstractmethod
    def dimensions(self) -> int: ...

    @abstractmethod
    async def embed(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:
        """Embed a batch of texts."""

    async def embed_single(self, text: str) -> list[float]:
        response = await self.embed([text])
        return response.embeddings[0]
