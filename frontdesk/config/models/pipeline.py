"""Turn pipeline configuration models.

Every threshold here is a global default. Tenants may override the
resolver thresholds and budget on their profile.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

ProviderSortMode = Literal["price", "latency", "throughput"]
NormalizationMethod = Literal["min_max", "z_score", "softmax"]


class OpenRouterProviderConfig(BaseModel):
    """OpenRouter-specific provider routing configuration."""

    provider_order: list[str] | None = Field(
        default=None,
        description="Ordered list of provider names to try",
    )
    provider_sort: ProviderSortMode | None = Field(
        default=None,
        description="Sort providers by: 'price', 'latency', or 'throughput'",
    )
    allow_fallbacks: bool = Field(
        default=True,
        description="Allow fallback to other providers if specified ones fail",
    )

    def to_request_params(self) -> dict | None:
        """Convert to OpenRouter extra_body format."""
        provider: dict = {}

        if self.provider_order:
            provider["order"] = self.provider_order
        if self.provider_sort:
            provider["sort"] = self.provider_sort
        if not self.allow_fallbacks:
            provider["allow_fallbacks"] = False

        if provider:
            return {"provider": provider}
        return None


class TriageConfig(BaseModel):
    """Synthetic fallback rule appended to every compiled set."""

    fallback_category: str = Field(
        default="general-question",
        description="Category slug carried by the fallback rule",
    )
    fallback_label: str = Field(
        default="GENERAL_INQUIRY",
        description="Intent label carried by the fallback rule",
    )


class Tier2Config(BaseModel):
    """Approximate (lexical + semantic) matching."""

    lexical_weight: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Weight of the absolute term-overlap or semantic score",
    )
    bm25_weight: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Weight of the pool-relative BM25 score",
    )
    normalization: NormalizationMethod = Field(
        default="min_max", description="BM25 normalization method"
    )
    semantic_blend: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Share of embedding similarity in the primary score when embeddings exist",
    )


class Tier3Config(BaseModel):
    """Generative matching through an external LLM."""

    enabled: bool = Field(default=True, description="Allow tier 3 at all")
    model: str = Field(
        default="openrouter/openai/gpt-4o-mini",
        description="Primary model string",
    )
    fallback_models: list[str] = Field(default_factory=list, description="Fallback models")
    timeout_ms: int = Field(
        default=350,
        gt=0,
        description="Hard timeout for the whole tier-3 call",
    )
    max_candidates: int = Field(
        default=25,
        gt=0,
        description="Scenarios offered to the model",
    )
    cost_per_1k_tokens_usd: float = Field(
        default=0.0006,
        ge=0.0,
        description="Blended price used to charge the tenant budget",
    )
    openrouter: OpenRouterProviderConfig | None = Field(default=None)


class ResolverConfig(BaseModel):
    """Knowledge resolver thresholds and tier settings."""

    tier1_min_confidence: float = Field(default=0.80, ge=0.0, le=1.0)
    tier2_min_confidence: float = Field(default=0.60, ge=0.0, le=1.0)
    tier3_min_confidence: float = Field(default=0.70, ge=0.0, le=1.0)
    tier2: Tier2Config = Field(default_factory=Tier2Config)
    tier3: Tier3Config = Field(default_factory=Tier3Config)


class BudgetConfig(BaseModel):
    """Per-tenant rolling tier-3 budget and circuit breaker."""

    window_seconds: float = Field(default=3600.0, gt=0, description="Rolling window length")
    max_spend_usd: float = Field(default=2.0, ge=0.0, description="Spend allowed per window")
    max_latency_ms: float = Field(
        default=60000.0,
        ge=0.0,
        description="Cumulative tier-3 latency allowed per window",
    )
    failure_threshold: int = Field(
        default=3,
        gt=0,
        description="Consecutive failures that open the breaker",
    )
    cooldown_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="Seconds the breaker stays open",
    )


class OptimizationConfig(BaseModel):
    """Optimization gate thresholds."""

    path_min_samples: int = Field(default=5, gt=0)
    path_min_success_rate: float = Field(default=0.85, ge=0.0, le=1.0)
    caller_min_successes: int = Field(default=3, gt=0)


class MemoryConfig(BaseModel):
    """Memory hydration and learning record retention."""

    hydration_timeout_ms: int = Field(
        default=50,
        gt=0,
        description="Per-query budget for memory reads",
    )
    response_cache_ttl_seconds: int = Field(default=30 * 24 * 3600, gt=0)
    caller_history_ttl_seconds: int = Field(default=180 * 24 * 3600, gt=0)


class ResponseConfig(BaseModel):
    """Response assembly."""

    filler_probability: float = Field(
        default=0.25,
        ge=0.2,
        le=0.3,
        description="Chance of prepending a filler phrase on voice",
    )
    default_variant_weight: int = Field(default=3, gt=0)


class ActionConfig(BaseModel):
    """Turn state machine."""

    max_unresolved_turns: int = Field(
        default=2,
        gt=0,
        description="Unresolved turns tolerated before escalating",
    )
    safe_phrase: str = Field(
        default="I'm sorry, let me connect you with someone who can help.",
        description="Last-resort text when no response can be assembled",
    )

    @model_validator(mode="after")
    def _safe_phrase_not_blank(self) -> "ActionConfig":
        if not self.safe_phrase.strip():
            raise ValueError("safe_phrase must not be blank")
        return self
