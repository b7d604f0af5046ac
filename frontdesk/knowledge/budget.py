"""Per-tenant tier-3 budget and circuit breaker."""

import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import UUID

from frontdesk.config.models.pipeline import BudgetConfig
from frontdesk.errors import BudgetExceeded
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import BUDGET_REJECTIONS
from frontdesk.tenants.models import ThresholdOverrides

logger = get_logger(__name__)


@dataclass
class _Spend:
    at: float
    cost_usd: float
    latency_ms: float


@dataclass
class _TenantBudget:
    window: deque[_Spend] = field(default_factory=deque)
    consecutive_failures: int = 0
    open_until: float | None = None
    trial_in_flight: bool = False


class Tier3BudgetGuard:
    """Rolling spend and latency window plus a consecutive-failure breaker.

    `check` is synchronous and cheap so it can run before every tier-3
    attempt. Once the cooldown ends the breaker is half-open: the next
    passing check admits a single trial and every other check is rejected
    until that trial is recorded or released. State is per process.
    """

    def __init__(
        self,
        config: BudgetConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or BudgetConfig()
        self._clock = clock
        self._tenants: dict[UUID, _TenantBudget] = {}

    def check(self, tenant_id: UUID, overrides: ThresholdOverrides | None = None) -> None:
        """Raise BudgetExceeded if tier 3 must be skipped for this tenant."""
        overrides = overrides or ThresholdOverrides()
        state = self._state(tenant_id)
        now = self._clock()

        if state.trial_in_flight or (state.open_until is not None and now < state.open_until):
            self._reject(tenant_id, "circuit_open")

        self._expire(state, now)
        max_spend = (
            overrides.max_spend_usd
            if overrides.max_spend_usd is not None
            else self._config.max_spend_usd
        )
        max_latency = (
            overrides.max_latency_ms
            if overrides.max_latency_ms is not None
            else self._config.max_latency_ms
        )
        if sum(s.cost_usd for s in state.window) >= max_spend:
            self._reject(tenant_id, "spend")
        if sum(s.latency_ms for s in state.window) >= max_latency:
            self._reject(tenant_id, "latency")

        if state.open_until is not None:
            # half-open: this caller is the trial; one more failure reopens
            state.open_until = None
            state.consecutive_failures = self._config.failure_threshold - 1
            state.trial_in_flight = True
            logger.info("tier3_breaker_half_open", tenant_id=str(tenant_id))

    def record_success(self, tenant_id: UUID, cost_usd: float, latency_ms: float) -> None:
        state = self._state(tenant_id)
        state.window.append(_Spend(self._clock(), cost_usd, latency_ms))
        state.consecutive_failures = 0
        state.trial_in_flight = False

    def record_failure(self, tenant_id: UUID, latency_ms: float, cost_usd: float = 0.0) -> None:
        """Count a timeout or provider error; opens the breaker at the threshold."""
        state = self._state(tenant_id)
        now = self._clock()
        state.window.append(_Spend(now, cost_usd, latency_ms))
        state.consecutive_failures += 1
        state.trial_in_flight = False
        if state.consecutive_failures >= self._config.failure_threshold:
            state.open_until = now + self._config.cooldown_seconds
            logger.warning(
                "tier3_breaker_opened",
                tenant_id=str(tenant_id),
                failures=state.consecutive_failures,
                cooldown_seconds=self._config.cooldown_seconds,
            )

    def release(self, tenant_id: UUID) -> None:
        """Give back an admitted trial that ended without a result.

        The breaker returns to half-open so the next check runs a new trial.
        """
        state = self._state(tenant_id)
        if state.trial_in_flight:
            state.trial_in_flight = False
            state.open_until = self._clock()

    def spent(self, tenant_id: UUID) -> float:
        state = self._state(tenant_id)
        self._expire(state, self._clock())
        return sum(s.cost_usd for s in state.window)

    def is_open(self, tenant_id: UUID) -> bool:
        state = self._state(tenant_id)
        return state.open_until is not None and self._clock() < state.open_until

    def _state(self, tenant_id: UUID) -> _TenantBudget:
        return self._tenants.setdefault(tenant_id, _TenantBudget())

    def _expire(self, state: _TenantBudget, now: float) -> None:
        horizon = now - self._config.window_seconds
        while state.window and state.window[0].at <= horizon:
            state.window.popleft()

    def _reject(self, tenant_id: UUID, reason: str) -> None:
        BUDGET_REJECTIONS.labels(reason=reason).inc()
        logger.info("tier3_budget_rejected", tenant_id=str(tenant_id), reason=reason)
        raise BudgetExceeded(f"Tier 3 budget exhausted: {reason}", reason)
