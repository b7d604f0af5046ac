"""Tier 3: generative matching through an external LLM."""

import asyncio
import time
from pathlib import Path
from uuid import UUID

from pydantic import BaseModel

from frontdesk.config.models.pipeline import Tier3Config
from frontdesk.errors import ResolverTimeout
from frontdesk.knowledge.models import ScenarioCandidate, Tier3Verdict
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import TIER3_SPEND, TIER3_TIMEOUTS, TIER3_TOKENS
from frontdesk.providers.llm import LLMExecutor, TokenUsage
from frontdesk.tenants.models import TenantProfile

logger = get_logger(__name__)

_PROMPT_TEMPLATE_PATH = Path(__file__).parent / "prompts" / "tier3_match.txt"


class Tier3Outcome(BaseModel):
    """Verdict plus what it cost."""

    verdict: Tier3Verdict
    scenario_id: UUID | None = None
    tokens_used: int
    cost_usd: float
    latency_ms: float


class Tier3Resolver:
    """Asks an LLM to pick a scenario from the tenant pool.

    The whole call, fallback models included, runs under one hard timeout.
    A verdict naming a scenario outside the offered pool is treated as no
    match.
    """

    def __init__(
        self,
        llm_executor: LLMExecutor,
        config: Tier3Config | None = None,
        prompt_template: str | None = None,
    ) -> None:
        self._llm_executor = llm_executor
        self._config = config or Tier3Config()
        self._prompt_template = prompt_template or _PROMPT_TEMPLATE_PATH.read_text()

    @property
    def timeout_ms(self) -> int:
        return self._config.timeout_ms

    async def resolve(
        self,
        utterance: str,
        profile: TenantProfile,
        pool: list[ScenarioCandidate],
    ) -> Tier3Outcome:
        """Run the LLM call.

        Raises:
            ResolverTimeout: the call did not finish inside timeout_ms
            ProviderError: every model failed or the reply did not parse
        """
        offered = sorted(pool, key=lambda c: (-c.priority, str(c.id)))[
            : self._config.max_candidates
        ]
        prompt = self._prompt_template.format(
            company_name=profile.company_name,
            trade=profile.trade.value.lower(),
            utterance=utterance,
            candidates=self._format_candidates(offered),
        )

        start_time = time.perf_counter()
        try:
            verdict, response = await asyncio.wait_for(
                self._llm_executor.generate_structured(prompt, Tier3Verdict, temperature=0.0),
                timeout=self._config.timeout_ms / 1000,
            )
        except asyncio.TimeoutError as e:
            TIER3_TIMEOUTS.inc()
            logger.warning("tier3_timeout", timeout_ms=self._config.timeout_ms)
            raise ResolverTimeout(
                f"Tier 3 exceeded {self._config.timeout_ms}ms", self._config.timeout_ms
            ) from e
        latency_ms = (time.perf_counter() - start_time) * 1000

        usage = response.usage or TokenUsage.estimate(prompt, response.content)
        tokens = usage.total_tokens
        cost = usage.cost_usd(self._config.cost_per_1k_tokens_usd)
        TIER3_TOKENS.inc(tokens)
        TIER3_SPEND.inc(cost)

        offered_ids = {str(c.id): c.id for c in offered}
        scenario_id = offered_ids.get((verdict.scenario_id or "").strip())
        if verdict.matched and scenario_id is None:
            logger.warning("tier3_unknown_scenario", scenario_id=verdict.scenario_id)

        logger.info(
            "tier3_resolved",
            matched=verdict.matched and scenario_id is not None,
            confidence=verdict.confidence,
            tokens=tokens,
            latency_ms=round(latency_ms, 2),
        )
        return Tier3Outcome(
            verdict=verdict,
            scenario_id=scenario_id if verdict.matched else None,
            tokens_used=tokens,
            cost_usd=cost,
            latency_ms=latency_ms,
        )

    def _format_candidates(self, candidates: list[ScenarioCandidate]) -> str:
        lines = []
        for candidate in candidates:
            lines.append(f"- id: {candidate.id}")
            lines.append(f"  name: {candidate.name}")
            if candidate.intent:
                lines.append(f"  intent: {candidate.intent}")
            if candidate.triggers:
                lines.append(f"  examples: {'; '.join(candidate.triggers[:5])}")
        return "\n".join(lines)
