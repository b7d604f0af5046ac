"""Call pipeline: processes one caller turn end to end.

Steps, in order:
1. triage against the compiled rule set; terminal actions stop here
2. an accepted booking offer hands off to booking
3. memory hydration and the optimization gate
4. knowledge resolution and response assembly
5. the action executor decides what the call does next
6. post-turn learning is scheduled, never awaited
"""

import asyncio
import random
import time
from collections import OrderedDict
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from frontdesk.actions.executor import ActionDecision, ActionExecutor
from frontdesk.actions.models import CallAction
from frontdesk.conversation.models import CallSession, TriageSummary, TurnEntry
from frontdesk.conversation.slots import SlotExtractor
from frontdesk.errors import CallClosedError
from frontdesk.knowledge.models import ResolutionResult
from frontdesk.knowledge.resolver import KnowledgeResolver
from frontdesk.memory.gate import OptimizationGate
from frontdesk.memory.hydrator import MemoryHydrator
from frontdesk.memory.learning import PostTurnLearner
from frontdesk.memory.models import LearningRecord, TurnClassification, TurnOutcome
from frontdesk.observability.logging import call_context, get_logger
from frontdesk.observability.metrics import (
    PIPELINE_STEP_LATENCY,
    TRIAGE_MATCHES,
    TURN_FAILSAFE,
    TURN_LATENCY,
    TURNS_PROCESSED,
)
from frontdesk.pipeline.models import PipelineStepTiming, TurnRequest, TurnResult, TurnTrace
from frontdesk.providers.llm import (
    ExecutionContext,
    clear_execution_context,
    set_execution_context,
)
from frontdesk.responses.assembler import ResponseAssembler
from frontdesk.responses.models import AssembledResponse
from frontdesk.tenants.models import TenantProfile
from frontdesk.tenants.store import TenantConfigStore
from frontdesk.text import caller_digest, normalize_text, utterance_hash
from frontdesk.triage.compiler import RuleCompiler
from frontdesk.triage.matcher import TriageMatcher
from frontdesk.triage.models import TriageMatch

logger = get_logger(__name__)

_CLOSED_CALLS_KEPT = 10_000


class CallPipeline:
    """Turn entry point.

    Turns of the same call are serialized by a per-call lock. Any error
    other than CallClosedError is turned into the safe phrase with an
    escalation, so the caller always hears something.
    """

    def __init__(
        self,
        config_store: TenantConfigStore,
        compiler: RuleCompiler,
        hydrator: MemoryHydrator,
        gate: OptimizationGate,
        resolver: KnowledgeResolver,
        assembler: ResponseAssembler,
        executor: ActionExecutor,
        learner: PostTurnLearner,
        matcher: TriageMatcher | None = None,
        slot_extractor: SlotExtractor | None = None,
    ) -> None:
        self._config_store = config_store
        self._compiler = compiler
        self._hydrator = hydrator
        self._gate = gate
        self._resolver = resolver
        self._assembler = assembler
        self._executor = executor
        self._learner = learner
        self._matcher = matcher or TriageMatcher()
        self._slots = slot_extractor or SlotExtractor()
        self._locks: dict[str, asyncio.Lock] = {}
        # turns running or queued per call; the lock goes when this hits zero
        self._pending: dict[str, int] = {}
        self._closed_calls: OrderedDict[str, None] = OrderedDict()

    @property
    def active_calls(self) -> int:
        """Calls with a turn running or waiting for its lock."""
        return len(self._locks)

    async def process_turn(
        self,
        request: TurnRequest,
        rng: random.Random | None = None,
    ) -> TurnResult:
        """Process one turn.

        Raises:
            CallClosedError: the call already reached a terminal action
        """
        call_id = request.call_id
        lock = self._locks.setdefault(call_id, asyncio.Lock())
        self._pending[call_id] = self._pending.get(call_id, 0) + 1
        try:
            async with lock:
                result = await self._process_locked(request, rng or random.Random())
                if result.updated_session_state.closed:
                    self._closed_calls[call_id] = None
                    while len(self._closed_calls) > _CLOSED_CALLS_KEPT:
                        self._closed_calls.popitem(last=False)
                return result
        finally:
            self._pending[call_id] -= 1
            if not self._pending[call_id]:
                del self._pending[call_id]
                del self._locks[call_id]

    async def _process_locked(self, request: TurnRequest, rng: random.Random) -> TurnResult:
        session = request.session_state or CallSession(
            call_id=request.call_id,
            tenant_id=request.tenant_id,
            channel=request.channel,
        )
        if session.closed or request.call_id in self._closed_calls:
            raise CallClosedError(
                f"Call {request.call_id} already ended with {session.state.value}",
                request.call_id,
            )
        if session.call_id != request.call_id or session.tenant_id != request.tenant_id:
            raise ValueError("session_state belongs to a different call")

        turn_index = session.turn_count
        start_time = time.perf_counter()
        trace = TurnTrace(turn_index=turn_index)

        with call_context(request.tenant_id, request.call_id, turn_index):
            set_execution_context(
                ExecutionContext(
                    tenant_id=request.tenant_id,
                    call_id=request.call_id,
                    turn_index=turn_index,
                )
            )
            try:
                try:
                    session, decision, scenario_id = await self._run(request, session, trace, rng)
                except CallClosedError:
                    raise
                except Exception as e:
                    TURN_FAILSAFE.inc()
                    logger.exception("turn_failed", error_type=type(e).__name__)
                    trace.failsafe_reason = type(e).__name__
                    decision = self._executor.failsafe(session, type(e).__name__)
                    scenario_id = None

                utterance = request.raw_utterance or request.normalized_utterance
                session = self._executor.apply(session, decision)
                session.turns = [
                    *session.turns,
                    TurnEntry(
                        index=turn_index,
                        utterance=utterance,
                        response_text=decision.text,
                        action=decision.action,
                        scenario_id=scenario_id,
                    ),
                ]
                trace.transitions = decision.transitions
                trace.total_time_ms = (time.perf_counter() - start_time) * 1000

                TURNS_PROCESSED.labels(action=decision.action.value).inc()
                TURN_LATENCY.observe(trace.total_time_ms / 1000)
                logger.info(
                    "turn_processed",
                    action=decision.action.value,
                    total_time_ms=round(trace.total_time_ms, 2),
                )
                return TurnResult(
                    response_text=decision.text,
                    action=decision.action,
                    updated_session_state=session,
                    booking_handoff=decision.booking_handoff,
                    trace=trace,
                )
            finally:
                clear_execution_context()

    async def _run(
        self,
        request: TurnRequest,
        session: CallSession,
        trace: TurnTrace,
        rng: random.Random,
    ) -> tuple[CallSession, ActionDecision, UUID | None]:
        utterance = normalize_text(request.normalized_utterance or request.raw_utterance)
        heard = self._slots.extract(request.raw_utterance or utterance)
        session = session.model_copy(update={"slots": session.slots.merge(heard)})
        profile = await self._config_store.get_profile(request.tenant_id) or TenantProfile.default(
            request.tenant_id
        )

        with self._timed("triage", trace):
            ruleset = await self._compiler.get_compiled(request.tenant_id)
            match = self._matcher.match(utterance, ruleset, request.auxiliary_keywords)
        self._record_triage(match, ruleset.degraded, trace)
        update: dict[str, Any] = {"last_triage": trace.triage}
        if not match.is_fallback:
            update["issue_category"] = match.rule.category
        session = session.model_copy(update=update)

        if not match.action.defers_to_resolver:
            return session, self._executor.from_triage(session, match, profile), None

        if self._executor.booking_accepted(session, utterance):
            return session, self._executor.handoff(session, profile), None

        classification = TurnClassification(
            intent=match.rule.label,
            category=match.rule.category,
            specific=not match.is_fallback,
        )
        with self._timed("memory", trace):
            snapshot = await self._hydrator.hydrate(
                request.tenant_id, request.caller_id, classification, utterance
            )
        trace.memory_failed_queries = list(snapshot.failed_queries)
        history = snapshot.caller_history
        session = session.model_copy(
            update={
                "memory_snapshot": snapshot,
                "is_return_customer": session.is_return_customer
                or (history is not None and history.total > 0),
            }
        )

        gate = self._gate.decide(utterance, snapshot, classification, profile.overrides)
        trace.gate = gate

        with self._timed("resolver", trace):
            resolution = await self._resolver.resolve(request.tenant_id, utterance, gate, profile)
        trace.resolution = resolution

        with self._timed("response", trace):
            response = self._assembler.assemble(
                resolution, profile, rng, channel=session.channel, slots=session.slots
            )
        trace.response_strategy = response.strategy

        decision = self._executor.from_resolution(session, match, resolution, response, profile)
        self._learn(request, classification, utterance, resolution, response, decision)
        return session, decision, response.scenario_id

    def _record_triage(self, match: TriageMatch, degraded: bool, trace: TurnTrace) -> None:
        rule = match.rule
        trace.triage = TriageSummary(
            rule_id=rule.id,
            label=rule.label,
            category=rule.category,
            action=rule.action,
            match_method=match.match_method,
            is_fallback=match.is_fallback,
        )
        trace.matched_keywords = list(match.matched_keywords)
        trace.ruleset_version = match.ruleset_version
        trace.ruleset_degraded = degraded
        TRIAGE_MATCHES.labels(
            match_method=match.match_method.value, action=rule.action.value
        ).inc()
        logger.info(
            "triage_matched",
            rule_id=str(rule.id),
            label=rule.label,
            match_method=match.match_method.value,
            action=rule.action.value,
            rule_index=match.rule_index,
            degraded=degraded,
        )

    def _learn(
        self,
        request: TurnRequest,
        classification: TurnClassification,
        utterance: str,
        resolution: ResolutionResult,
        response: AssembledResponse,
        decision: ActionDecision,
    ) -> None:
        if decision.action is CallAction.ESCALATE_TO_HUMAN:
            outcome = TurnOutcome.ESCALATED
        elif resolution.matched:
            outcome = TurnOutcome.RESOLVED
        else:
            outcome = TurnOutcome.UNRESOLVED

        self._learner.schedule(
            LearningRecord(
                tenant_id=request.tenant_id,
                caller_digest=caller_digest(request.caller_id) if request.caller_id else None,
                classification=classification,
                utterance_hash=utterance_hash(utterance),
                outcome=outcome,
                scenario_id=response.scenario_id,
                response_text=response.template,
                served_from_cache=resolution.cached_response is not None,
            )
        )

    @contextmanager
    def _timed(self, step: str, trace: TurnTrace) -> Iterator[None]:
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            PIPELINE_STEP_LATENCY.labels(step=step).observe(elapsed_ms / 1000)
            trace.timings.append(
                PipelineStepTiming(
                    step=step,
                    started_at=started_at,
                    ended_at=datetime.now(UTC),
                    duration_ms=elapsed_ms,
                )
            )
