"""Optimization gate: decides whether tier 3 may run this turn."""

from frontdesk.config.models.pipeline import OptimizationConfig
from frontdesk.memory.models import (
    GateDecision,
    GateReason,
    IntentResolutionPath,
    MemorySnapshot,
    TurnClassification,
)
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import GATE_DECISIONS
from frontdesk.tenants.models import ThresholdOverrides
from frontdesk.text import utterance_hash

logger = get_logger(__name__)


class OptimizationGate:
    """Deterministic function of (utterance, snapshot, classification).

    Decision order, first match wins:
    1. proven response cached for this exact normalized utterance
    2. a resolution path for intent+category with enough samples and success
    3. a caller who already succeeded often enough with this intent
    4. NOVEL: the expensive tier is allowed

    Rules 2 and 3 are skipped when triage only reached the fallback rule,
    since the fallback lumps unrelated utterances under one intent.
    """

    def __init__(self, config: OptimizationConfig | None = None) -> None:
        self._config = config or OptimizationConfig()

    def decide(
        self,
        utterance: str,
        snapshot: MemorySnapshot,
        classification: TurnClassification,
        overrides: ThresholdOverrides | None = None,
    ) -> GateDecision:
        decision = self._decide(utterance, snapshot, classification, overrides)
        GATE_DECISIONS.labels(reason=decision.reason.value).inc()
        logger.info(
            "gate_decided",
            reason=decision.reason.value,
            use_expensive_resolver=decision.use_expensive_resolver,
            forced_candidate_id=str(decision.forced_candidate_id)
            if decision.forced_candidate_id
            else None,
            intent=classification.intent,
        )
        return decision

    def _decide(
        self,
        utterance: str,
        snapshot: MemorySnapshot,
        classification: TurnClassification,
        overrides: ThresholdOverrides | None,
    ) -> GateDecision:
        overrides = overrides or ThresholdOverrides()
        min_samples = overrides.path_min_samples or self._config.path_min_samples
        min_rate = (
            overrides.path_min_success_rate
            if overrides.path_min_success_rate is not None
            else self._config.path_min_success_rate
        )
        min_caller = overrides.caller_min_successes or self._config.caller_min_successes

        cached = snapshot.cached_response
        if (
            cached is not None
            and cached.utterance_hash == utterance_hash(utterance)
            and cached.is_proven
        ):
            return GateDecision(
                use_expensive_resolver=False,
                reason=GateReason.CACHED_RESPONSE,
                cached_response=cached.text,
                cached_scenario_id=cached.scenario_id,
                evidence=f"{cached.successes} successes / {cached.failures} failures",
            )

        if classification.specific:
            path = _best_path(snapshot.resolution_paths, min_samples, min_rate)
            if path is not None:
                return GateDecision(
                    use_expensive_resolver=False,
                    reason=GateReason.PROVEN_PATH,
                    forced_candidate_id=path.scenario_id,
                    evidence=f"{path.successes}/{path.samples} resolved",
                )

            history = snapshot.caller_history
            if (
                history is not None
                and history.intent == classification.intent
                and history.successes >= min_caller
            ):
                return GateDecision(
                    use_expensive_resolver=False,
                    reason=GateReason.KNOWN_CALLER_KNOWN_INTENT,
                    forced_candidate_id=history.last_success_scenario_id,
                    evidence=f"caller resolved {history.successes} times",
                )

        return GateDecision(use_expensive_resolver=True, reason=GateReason.NOVEL)


def _best_path(
    paths: tuple[IntentResolutionPath, ...],
    min_samples: int,
    min_rate: float,
) -> IntentResolutionPath | None:
    qualified = [p for p in paths if p.samples >= min_samples and p.success_rate >= min_rate]
    if not qualified:
        return None
    return min(qualified, key=lambda p: (-p.success_rate, -p.samples, str(p.scenario_id)))
