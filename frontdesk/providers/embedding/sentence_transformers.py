"""Local sentence-transformers embeddings for tier 2."""

import asyncio
from typing import Any

from frontdesk.providers.embedding.base import EmbeddingProvider, EmbeddingResponse


class SentenceTransformersProvider(EmbeddingProvider):
    """Runs a sentence-transformers model in-process.

    The model is loaded on first use, so services installed without the
    ``embeddings`` extra import fine and only fail if tier 2 asks for
    vectors. Vectors are unit-normalized.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", batch_size: int = 32):
        self._model_name = model_name
        self._batch_size = batch_size
        self._model: Any = None

    def _load(self) -> Any:
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            self._model = SentenceTransformer(self._model_name)
        return self._model

    @property
    def provider_name(self) -> str:
        return f"sentence_transformers/{self._model_name}"

    @property
    def dimensions(self) -> int:
        return self._load().get_sentence_embedding_dimension()

    async def embed(self, texts: list[str], **kwargs: Any) -> EmbeddingResponse:  # noqa: ARG002
        model = self._load()
        # encode is CPU bound
        vectors = await asyncio.to_thread(
            model.encode,
            texts,
            batch_size=self._batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return EmbeddingResponse(
            embeddings=vectors.tolist(),
            model=self._model_name,
            dimensions=self.dimensions,
        )
