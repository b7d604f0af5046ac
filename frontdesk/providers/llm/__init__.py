"""LLM access for generative scenario matching.

Model string formats:
- openrouter/{provider}/{model} -> Agno OpenRouter
- openai/{model} -> Agno OpenAIChat
- mock/{name} -> canned responses for tests and local development
"""

from frontdesk.providers.llm.base import (
    LLMMessage,
    LLMResponse,
    ProviderError,
    RateLimitError,
    TokenUsage,
)
from frontdesk.providers.llm.executor import (
    ExecutionContext,
    LLMExecutor,
    clear_execution_context,
    create_executor,
    get_execution_context,
    set_execution_context,
)

__all__ = [
    "ExecutionContext",
    "LLMExecutor",
    "LLMMessage",
    "LLMResponse",
    "ProviderError",
    "RateLimitError",
    "TokenUsage",
    "clear_execution_context",
    "create_executor",
    "get_execution_context",
    "set_execution_context",
]
