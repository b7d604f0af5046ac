"""LLM Executor: runs prompts for a pipeline step using Agno.

Each executor is configured with:
- a primary model and optional fallback models
- a step name for logging

The executor handles model routing by model string prefix, the fallback
chain, structured (JSON schema) output and per-call context through
ExecutionContext.
"""

from __future__ import annotations

import json
import time
from collections import deque
from collections.abc import Iterable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError

from frontdesk.observability.logging import get_logger
from frontdesk.providers.llm.base import (
    LLMMessage,
    LLMResponse,
    ProviderError,
    RateLimitError,
    TokenUsage,
)

if TYPE_CHECKING:
    from agno.agent import Agent

    from frontdesk.config.models.pipeline import OpenRouterProviderConfig

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


@dataclass
class ExecutionContext:
    """Tenant and call identifiers for the current turn.

    Set once per turn, read by executors without parameter threading.
    """

    tenant_id: UUID
    call_id: str
    turn_index: int | None = None
    step: str | None = None


_execution_context: ContextVar[ExecutionContext | None] = ContextVar(
    "execution_context", default=None
)


def set_execution_context(ctx: ExecutionContext) -> None:
    """Set execution context for current async task."""
    _execution_context.set(ctx)


def get_execution_context() -> ExecutionContext | None:
    """Get execution context for current async task."""
    return _execution_context.get()


def clear_execution_context() -> None:
    """Clear execution context."""
    _execution_context.set(None)


class LLMExecutor:
    """Executes LLM calls for one pipeline step using Agno.

    Model string format:
        openrouter/openai/gpt-4o-mini -> OpenRouter(id="openai/gpt-4o-mini")
        openai/gpt-4o-mini -> OpenAIChat(id="gpt-4o-mini")
        mock/anything -> canned responses, no network

    Example:
        executor = LLMExecutor(model="openrouter/openai/gpt-4o-mini", step_name="tier3")
        verdict, response = await executor.generate_structured(prompt, Tier3Verdict)
    """

    def __init__(
        self,
        model: str,
        fallback_models: list[str] | None = None,
        step_name: str | None = None,
        openrouter_config: OpenRouterProviderConfig | None = None,
        mock_responses: Iterable[str] | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            model: Primary model string
            fallback_models: Models to try if primary fails
            step_name: Pipeline step name for logging
            openrouter_config: OpenRouter provider routing
            mock_responses: Contents returned, in order, by mock/ models
        """
        self._model = model
        self._fallback_models = fallback_models or []
        self._step_name = step_name
        self._openrouter_config = openrouter_config
        self._mock_responses: deque[str] = deque(mock_responses or ())
        self._agents: dict[str, Agent] = {}

    @property
    def model(self) -> str:
        return self._model

    @property
    def step_name(self) -> str | None:
        return self._step_name

    def queue_mock_response(self, content: str) -> None:
        """Append a canned response for mock/ models."""
        self._mock_responses.append(content)

    async def generate(
        self,
        messages: list[LLMMessage],
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate text, walking the fallback chain on failure.

        Raises:
            ProviderError: if every model failed
        """
        models_to_try = [self._model] + self._fallback_models
        last_error: Exception | None = None
        ctx = get_execution_context()

        for model in models_to_try:
            try:
                response = await self._generate_with_model(model, messages, **kwargs)
            except RateLimitError as e:
                logger.warning(
                    "executor_rate_limited", model=model, step=self._step_name, error=str(e)
                )
                last_error = e
                continue
            except ProviderError as e:
                logger.warning(
                    "executor_provider_error", model=model, step=self._step_name, error=str(e)
                )
                last_error = e
                continue

            if ctx:
                response.metadata["tenant_id"] = str(ctx.tenant_id)
                response.metadata["call_id"] = ctx.call_id
                response.metadata["step"] = self._step_name or ctx.step
            return response

        raise ProviderError(
            f"All models failed for step {self._step_name}. "
            f"Tried: {models_to_try}. Last error: {last_error}"
        )

    async def generate_structured(
        self,
        prompt: str,
        schema: type[T],
        *,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> tuple[T, LLMResponse]:
        """Generate output matching a Pydantic schema.

        The schema is appended to the prompt and the first JSON object in
        the reply is validated against it.

        Raises:
            ProviderError: if generation or parsing failed for every model
        """
        json_prompt = (
            f"{prompt}\n\nRespond with valid JSON matching this schema:\n```json\n"
            f"{json.dumps(schema.model_json_schema(), indent=2)}\n```\n\n"
            "Output only the JSON, no other text."
        )
        messages = []
        if system_prompt:
            messages.append(LLMMessage(role="system", content=system_prompt))
        messages.append(LLMMessage(role="user", content=json_prompt))

        response = await self.generate(messages, **kwargs)
        content = _strip_fences(response.content)
        try:
            parsed = schema.model_validate_json(content)
        except ValidationError as e:
            logger.warning(
                "structured_parse_failed",
                schema=schema.__name__,
                step=self._step_name,
                content_preview=content[:200],
                error=str(e),
            )
            raise ProviderError(f"Failed to parse structured response: {e}") from e
        return parsed, response

    def _get_or_create_agent(self, model: str) -> Agent:
        if model in self._agents:
            return self._agents[model]

        from agno.agent import Agent

        agent = Agent(
            model=self._create_agno_model(model),
            num_history_messages=0,
            markdown=False,
        )
        self._agents[model] = agent
        return agent

    def _create_agno_model(self, model: str) -> Any:
        provider_type, api_model = self._parse_model(model)

        if provider_type == "openrouter":
            from agno.models.openrouter import OpenRouter

            extra_body = (
                self._openrouter_config.to_request_params() if self._openrouter_config else None
            )
            return OpenRouter(id=api_model, extra_body=extra_body)

        if provider_type == "openai":
            from agno.models.openai import OpenAIChat

            return OpenAIChat(id=api_model)

        from agno.models.openrouter import OpenRouter

        logger.warning(
            "unknown_provider_defaulting_to_openrouter",
            model=model,
            provider_type=provider_type,
        )
        return OpenRouter(id=model)

    async def _generate_with_model(
        self,
        model: str,
        messages: list[LLMMessage],
        **kwargs: Any,  # noqa: ARG002
    ) -> LLMResponse:
        provider_type, _ = self._parse_model(model)
        if provider_type == "mock":
            return self._mock_response(model, messages)

        agent = self._get_or_create_agent(model)
        system_prompt = next((m.content for m in messages if m.role == "system"), None)
        if system_prompt:
            agent.instructions = [system_prompt]
        input_text = "\n\n".join(m.content for m in messages if m.role != "system")

        start_time = time.perf_counter()
        try:
            run_response = await agent.arun(input_text)
        except Exception as e:
            error_msg = str(e).lower()
            if "rate" in error_msg and "limit" in error_msg:
                raise RateLimitError(f"Rate limited: {e}") from e
            raise ProviderError(f"Agno execution failed: {e}") from e
        latency_ms = (time.perf_counter() - start_time) * 1000

        content = run_response.content if run_response.content else ""
        if not isinstance(content, str):
            content = str(content)

        logger.debug(
            "executor_generate_complete",
            model=model,
            step=self._step_name,
            latency_ms=round(latency_ms, 2),
            content_length=len(content),
        )
        return LLMResponse(
            content=content,
            model=model,
            finish_reason="stop",
            usage=_usage_from_metrics(getattr(run_response, "metrics", None)),
            metadata={"latency_ms": latency_ms, "provider": provider_type},
        )

    def _mock_response(self, model: str, messages: list[LLMMessage]) -> LLMResponse:
        if self._mock_responses:
            content = self._mock_responses.popleft()
        else:
            content = f"Mock response for {model}"
        prompt = "\n\n".join(m.content for m in messages)
        return LLMResponse(
            content=content,
            model=model,
            finish_reason="stop",
            usage=TokenUsage.estimate(prompt, content),
            metadata={"provider": "mock"},
        )

    def _parse_model(self, model: str) -> tuple[str, str]:
        """Parse model string into (provider_type, api_model).

        Examples:
            "openrouter/openai/gpt-4o-mini" -> ("openrouter", "openai/gpt-4o-mini")
            "openai/gpt-4o-mini" -> ("openai", "gpt-4o-mini")
            "mock/tier3" -> ("mock", "tier3")
        """
        parts = model.split("/")
        if len(parts) >= 3 and parts[0] == "openrouter":
            return "openrouter", "/".join(parts[1:])
        if len(parts) >= 2:
            return parts[0], "/".join(parts[1:])
        return "mock", model


def _strip_fences(content: str) -> str:
    content = content.strip()
    for fence in ("```json", "```"):
        if fence in content:
            start = content.find(fence) + len(fence)
            end = content.find("```", start)
            if end > start:
                return content[start:end].strip()
    return content


def _usage_from_metrics(metrics: Any) -> TokenUsage | None:
    """Token usage from Agno run metrics, which are an object or a dict."""
    if metrics is None:
        return None

    def _read(*names: str) -> int:
        for name in names:
            value = metrics.get(name) if isinstance(metrics, dict) else getattr(metrics, name, None)
            if isinstance(value, list):
                value = sum(v for v in value if isinstance(v, int))
            if isinstance(value, int):
                return value
        return 0

    prompt = _read("input_tokens", "prompt_tokens")
    completion = _read("output_tokens", "completion_tokens")
    total = _read("total_tokens") or prompt + completion
    if not total:
        return None
    return TokenUsage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)


def create_executor(
    model: str,
    fallback_models: list[str] | None = None,
    step_name: str | None = None,
    openrouter_config: OpenRouterProviderConfig | None = None,
) -> LLMExecutor:
    """Create an LLMExecutor with the given configuration."""
    return LLMExecutor(
        model=model,
        fallback_models=fallback_models,
        step_name=step_name,
        openrouter_config=openrouter_config,
    )
