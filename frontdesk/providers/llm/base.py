"""LLM request/response models and provider errors."""

from typing import Any

from pydantic import BaseModel, Field

# Rough characters-per-token ratio for providers that omit usage
CHARS_PER_TOKEN = 4


class LLMMessage(BaseModel):
    """A message in a prompt."""

    role: str = Field(..., description="Role: system, user, or assistant")
    content: str = Field(..., description="Message content")


class TokenUsage(BaseModel):
    """Token accounting for one model call."""

    prompt_tokens: int = Field(..., ge=0)
    completion_tokens: int = Field(..., ge=0)
    total_tokens: int = Field(..., ge=0)
    estimated: bool = Field(default=False, description="Derived from text length, not reported")

    @classmethod
    def estimate(cls, prompt: str, completion: str) -> "TokenUsage":
        prompt_tokens = max(1, len(prompt) // CHARS_PER_TOKEN)
        completion_tokens = max(1, len(completion) // CHARS_PER_TOKEN)
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            estimated=True,
        )

    def cost_usd(self, per_1k_tokens_usd: float) -> float:
        return self.total_tokens / 1000 * per_1k_tokens_usd


class LLMResponse(BaseModel):
    """Response from an LLM call."""

    content: str
    model: str
    finish_reason: str | None = None
    usage: TokenUsage | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProviderError(Exception):
    """Every configured model failed, or the reply was unusable."""


class RateLimitError(ProviderError):
    """The provider throttled the request; the next model is tried."""
