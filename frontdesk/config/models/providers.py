"""Provider configuration models."""

from typing import Literal

from pydantic import BaseModel, Field


class EmbeddingProviderConfig(BaseModel):
    """Embedding provider used by approximate scenario matching."""

    provider: Literal["none", "sentence_transformers"] = Field(
        default="none",
        description="Embedding backend; 'none' keeps tier 2 purely lexical",
    )
    model: str = Field(default="all-MiniLM-L6-v2", description="Embedding model name")
    batch_size: int = Field(default=32, gt=0, description="Encoding batch size")


class ProvidersConfig(BaseModel):
    """External provider configuration."""

    embedding: EmbeddingProviderConfig = Field(default_factory=EmbeddingProviderConfig)
