"""Knowledge resolver: the cache, learned path and three-tier cascade."""

import time
from uuid import UUID

from frontdesk.config.models.pipeline import ResolverConfig
from frontdesk.errors import BudgetExceeded, ConfigurationError, ResolverTimeout
from frontdesk.knowledge.budget import Tier3BudgetGuard
from frontdesk.knowledge.models import (
    ResolutionResult,
    ResolutionTier,
    ScenarioCandidate,
    ScenarioScore,
    TierAttempt,
)
from frontdesk.knowledge.tier1 import Tier1Matcher
from frontdesk.knowledge.tier2 import Tier2Matcher
from frontdesk.knowledge.tier3 import Tier3Resolver
from frontdesk.knowledge.triggers import is_blocked
from frontdesk.memory.models import GateDecision
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import RESOLVER_OUTCOMES
from frontdesk.providers.llm import ProviderError
from frontdesk.tenants.models import TenantProfile
from frontdesk.tenants.store import TenantConfigStore
from frontdesk.text import normalize_text

logger = get_logger(__name__)


class KnowledgeResolver:
    """Resolves an utterance to a scenario.

    Order:
    1. a proven cached response from the gate
    2. the gate's forced candidate, unless a negative trigger rules it out
    3. tier 1, then tier 2, each against its own minimum confidence
    4. tier 3, only when the gate allows it, tier 3 is configured and
       enabled for the tenant, and the budget guard passes

    A tier below its minimum is a miss, not an error. Nothing raised by a
    tier leaves `resolve`.
    """

    def __init__(
        self,
        config_store: TenantConfigStore,
        config: ResolverConfig | None = None,
        tier1: Tier1Matcher | None = None,
        tier2: Tier2Matcher | None = None,
        tier3: Tier3Resolver | None = None,
        budget: Tier3BudgetGuard | None = None,
    ) -> None:
        self._config_store = config_store
        self._config = config or ResolverConfig()
        self._tier1 = tier1 or Tier1Matcher()
        self._tier2 = tier2 or Tier2Matcher(self._config.tier2)
        self._tier3 = tier3
        self._budget = budget or Tier3BudgetGuard()

    async def resolve(
        self,
        tenant_id: UUID,
        utterance: str,
        gate: GateDecision,
        profile: TenantProfile | None = None,
    ) -> ResolutionResult:
        profile = profile or TenantProfile.default(tenant_id)
        normalized = normalize_text(utterance)

        try:
            pool = await self._load_pool(tenant_id)
        except ConfigurationError as e:
            logger.warning(
                "resolver_configuration_error", tenant_id=str(tenant_id), error=e.message
            )
            return self._finish(
                ResolutionResult(
                    matched=False,
                    escalation_hint=True,
                    error=type(e).__name__,
                )
            )

        if gate.cached_response:
            scenario = _find(pool, gate.cached_scenario_id)
            return self._finish(
                ResolutionResult(
                    matched=True,
                    tier=ResolutionTier.CACHE,
                    scenario=scenario,
                    confidence=1.0,
                    cached_response=gate.cached_response,
                    attempts=[
                        TierAttempt(
                            tier=ResolutionTier.CACHE,
                            matched=True,
                            scenario_id=gate.cached_scenario_id,
                            confidence=1.0,
                        )
                    ],
                )
            )

        attempts: list[TierAttempt] = []

        if gate.forced_candidate_id is not None:
            forced = _find(pool, gate.forced_candidate_id)
            if forced is not None and not is_blocked(forced, normalized):
                attempts.append(
                    TierAttempt(
                        tier=ResolutionTier.LEARNED_PATH,
                        matched=True,
                        scenario_id=forced.id,
                        confidence=1.0,
                    )
                )
                return self._finish(
                    ResolutionResult(
                        matched=True,
                        tier=ResolutionTier.LEARNED_PATH,
                        scenario=forced,
                        confidence=1.0,
                        attempts=attempts,
                    )
                )
            attempts.append(
                TierAttempt(
                    tier=ResolutionTier.LEARNED_PATH,
                    scenario_id=gate.forced_candidate_id,
                    skipped_reason="blocked" if forced is not None else "not_in_pool",
                )
            )

        overrides = profile.overrides
        tier1_min = _pick(overrides.tier1_min_confidence, self._config.tier1_min_confidence)
        tier2_min = _pick(overrides.tier2_min_confidence, self._config.tier2_min_confidence)
        tier3_min = _pick(overrides.tier3_min_confidence, self._config.tier3_min_confidence)

        start = time.perf_counter()
        tier1_scores = self._tier1.score(normalized, pool)
        result = self._accept(
            ResolutionTier.TIER1, tier1_scores[0] if tier1_scores else None, tier1_min,
            pool, attempts, start,
        )
        if result is not None:
            return self._finish(result)

        start = time.perf_counter()
        tier2_scores = await self._tier2.score(normalized, pool)
        result = self._accept(
            ResolutionTier.TIER2, tier2_scores[0] if tier2_scores else None, tier2_min,
            pool, attempts, start,
        )
        if result is not None:
            return self._finish(result)

        escalation_hint = False
        error: str | None = None
        skipped = self._tier3_skip_reason(gate, profile)
        if skipped is not None:
            attempts.append(TierAttempt(tier=ResolutionTier.TIER3, skipped_reason=skipped))
        else:
            try:
                self._budget.check(tenant_id, overrides)
            except BudgetExceeded as e:
                attempts.append(
                    TierAttempt(
                        tier=ResolutionTier.TIER3,
                        skipped_reason=f"budget:{e.reason}",
                        error=type(e).__name__,
                    )
                )
                escalation_hint = True
                error = type(e).__name__
            else:
                result = await self._run_tier3(
                    tenant_id, utterance, profile, pool, tier3_min, attempts
                )
                if result is not None:
                    return self._finish(result)
                last = attempts[-1]
                if last.error is not None:
                    error = last.error

        return self._finish(
            ResolutionResult(
                matched=False,
                attempts=attempts,
                escalation_hint=escalation_hint,
                error=error,
            )
        )

    async def _load_pool(self, tenant_id: UUID) -> list[ScenarioCandidate]:
        pool = await self._config_store.get_scenarios(tenant_id, enabled_only=True)
        pool = [c for c in pool if c.has_replies]
        if not pool:
            raise ConfigurationError(f"Tenant {tenant_id} has no usable scenarios")
        return pool

    def _tier3_skip_reason(self, gate: GateDecision, profile: TenantProfile) -> str | None:
        if not gate.use_expensive_resolver:
            return f"gate:{gate.reason.value}"
        if self._tier3 is None or not self._config.tier3.enabled:
            return "disabled"
        if not profile.tier3_enabled:
            return "tenant_disabled"
        return None

    async def _run_tier3(
        self,
        tenant_id: UUID,
        utterance: str,
        profile: TenantProfile,
        pool: list[ScenarioCandidate],
        threshold: float,
        attempts: list[TierAttempt],
    ) -> ResolutionResult | None:
        assert self._tier3 is not None
        start = time.perf_counter()
        try:
            outcome = await self._tier3.resolve(utterance, profile, pool)
        except ResolverTimeout as e:
            self._budget.record_failure(tenant_id, latency_ms=float(e.timeout_ms))
            attempts.append(
                TierAttempt(
                    tier=ResolutionTier.TIER3,
                    threshold=threshold,
                    latency_ms=_elapsed(start),
                    error=type(e).__name__,
                )
            )
            return None
        except ProviderError as e:
            self._budget.record_failure(tenant_id, latency_ms=_elapsed(start))
            logger.warning("tier3_provider_error", tenant_id=str(tenant_id), error=str(e))
            attempts.append(
                TierAttempt(
                    tier=ResolutionTier.TIER3,
                    threshold=threshold,
                    latency_ms=_elapsed(start),
                    error=type(e).__name__,
                )
            )
            return None
        except BaseException:
            # cancelled or crashed: no outcome to record
            self._budget.release(tenant_id)
            raise

        self._budget.record_success(tenant_id, outcome.cost_usd, outcome.latency_ms)
        scenario = _find(pool, outcome.scenario_id)
        confidence = outcome.verdict.confidence
        matched = scenario is not None and confidence >= threshold
        attempts.append(
            TierAttempt(
                tier=ResolutionTier.TIER3,
                matched=matched,
                scenario_id=outcome.scenario_id,
                confidence=confidence,
                threshold=threshold,
                latency_ms=outcome.latency_ms,
                tokens_used=outcome.tokens_used,
            )
        )
        if not matched:
            return None
        return ResolutionResult(
            matched=True,
            tier=ResolutionTier.TIER3,
            scenario=scenario,
            confidence=confidence,
            attempts=attempts,
        )

    def _accept(
        self,
        tier: ResolutionTier,
        best: ScenarioScore | None,
        threshold: float,
        pool: list[ScenarioCandidate],
        attempts: list[TierAttempt],
        start: float,
    ) -> ResolutionResult | None:
        confidence = best.score if best is not None else 0.0
        matched = best is not None and confidence >= threshold
        attempts.append(
            TierAttempt(
                tier=tier,
                matched=matched,
                scenario_id=best.scenario_id if best is not None else None,
                confidence=confidence,
                threshold=threshold,
                latency_ms=_elapsed(start),
            )
        )
        if not matched:
            return None
        return ResolutionResult(
            matched=True,
            tier=tier,
            scenario=_find(pool, best.scenario_id),
            confidence=confidence,
            attempts=attempts,
        )

    def _finish(self, result: ResolutionResult) -> ResolutionResult:
        RESOLVER_OUTCOMES.labels(tier=result.tier.value, matched=str(result.matched).lower()).inc()
        logger.info(
            "knowledge_resolved",
            matched=result.matched,
            tier=result.tier.value,
            scenario_id=str(result.scenario.id) if result.scenario else None,
            confidence=round(result.confidence, 3),
            escalation_hint=result.escalation_hint,
            error=result.error,
        )
        return result


def _find(pool: list[ScenarioCandidate], scenario_id: UUID | None) -> ScenarioCandidate | None:
    if scenario_id is None:
        return None
    return next((c for c in pool if c.id == scenario_id), None)


def _pick(override: float | None, default: float) -> float:
    return override if override is not None else default


def _elapsed(start: float) -> float:
    return (time.perf_counter() - start) * 1000
