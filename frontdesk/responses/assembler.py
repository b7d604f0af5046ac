"""Response assembler: turns a resolution into caller-facing text."""

import random

from frontdesk.config.models.pipeline import ResponseConfig
from frontdesk.conversation.models import CallerSlots, Channel
from frontdesk.knowledge.models import (
    FollowUpAction,
    ReplyStrategy,
    ReplyVariant,
    ResolutionResult,
    ScenarioCandidate,
    ScenarioType,
)
from frontdesk.observability.logging import get_logger
from frontdesk.responses.models import AssembledResponse, AssemblyStrategy
from frontdesk.responses.placeholders import PlaceholderValues, render
from frontdesk.tenants.models import TenantProfile

logger = get_logger(__name__)


class ResponseAssembler:
    """Selects reply variants, appends follow-ups and fills placeholders.

    All randomness comes from the `rng` passed to `assemble`, so a seeded
    generator reproduces the same text.
    """

    def __init__(self, config: ResponseConfig | None = None) -> None:
        self._config = config or ResponseConfig()

    def assemble(
        self,
        resolution: ResolutionResult,
        profile: TenantProfile,
        rng: random.Random,
        *,
        channel: Channel = Channel.VOICE,
        slots: CallerSlots | None = None,
    ) -> AssembledResponse:
        values = PlaceholderValues(
            name=slots.first_name if slots else None,
            company_name=profile.company_name,
            technician=profile.technician_name or "our technician",
            phone=profile.phone or "our main number",
        )
        scenario = resolution.scenario

        if resolution.cached_response:
            body = resolution.cached_response
            strategy = AssemblyStrategy.CACHED
            follow_up = None
        elif scenario is None or not scenario.has_replies:
            body = profile.default_reply
            strategy = AssemblyStrategy.FALLBACK
            follow_up = None
        else:
            strategy = self._strategy(scenario, channel)
            body = self._body(scenario, strategy, rng)
            follow_up = self._follow_up(scenario, strategy, profile, rng)

        filler = None
        if (
            channel is Channel.VOICE
            and profile.filler_phrases
            and strategy is not AssemblyStrategy.FALLBACK
            and rng.random() < self._config.filler_probability
        ):
            filler = rng.choice(profile.filler_phrases)

        template = " ".join(p for p in (body, follow_up) if p)
        text = render(" ".join(p for p in (filler, template) if p), values)
        if not text:
            template = profile.default_reply
            text = render(template, values)
            strategy = AssemblyStrategy.FALLBACK

        logger.debug(
            "response_assembled",
            strategy=strategy.value,
            scenario_id=str(scenario.id) if scenario else None,
            filler=filler is not None,
            follow_up=follow_up is not None,
        )
        return AssembledResponse(
            text=text,
            template=template,
            strategy=strategy,
            scenario_id=scenario.id if scenario else None,
            filler=filler,
            follow_up=follow_up,
        )

    def _strategy(self, scenario: ScenarioCandidate, channel: Channel) -> AssemblyStrategy:
        if scenario.reply_strategy is not ReplyStrategy.AUTO:
            return AssemblyStrategy(scenario.reply_strategy.value)
        if channel is Channel.TEXT:
            return AssemblyStrategy.FULL_ONLY
        if scenario.scenario_type is ScenarioType.ACTION_FLOW:
            return AssemblyStrategy.QUICK_THEN_FULL
        if scenario.scenario_type in (ScenarioType.SYSTEM_ACK, ScenarioType.SMALL_TALK):
            return AssemblyStrategy.QUICK_ONLY
        return AssemblyStrategy.FULL_ONLY

    def _body(
        self,
        scenario: ScenarioCandidate,
        strategy: AssemblyStrategy,
        rng: random.Random,
    ) -> str:
        quick, full = _live(scenario.quick_replies), _live(scenario.full_replies)

        if strategy is AssemblyStrategy.QUICK_THEN_FULL:
            if quick and full:
                return f"{self._pick(quick, rng)} {self._pick(full, rng)}"
            return self._pick(quick or full, rng)

        if strategy is AssemblyStrategy.QUICK_ONLY:
            if not quick:
                return self._pick(full, rng)
            if scenario.scenario_type is ScenarioType.SYSTEM_ACK:
                return min(quick, key=lambda v: (len(v.text), v.text)).text
            return self._pick(quick, rng)

        return self._pick(full or quick, rng)

    def _follow_up(
        self,
        scenario: ScenarioCandidate,
        strategy: AssemblyStrategy,
        profile: TenantProfile,
        rng: random.Random,
    ) -> str | None:
        question = scenario.follow_up_question
        replies = _live(scenario.follow_up_replies)
        if scenario.follow_up is FollowUpAction.ASK_FOLLOW_UP_QUESTION and question:
            return question
        if scenario.follow_up is FollowUpAction.ASK_TO_BOOK:
            if replies:
                return self._pick(replies, rng)
            return profile.phrases.booking_offer
        if replies and strategy is not AssemblyStrategy.QUICK_ONLY:
            return self._pick(replies, rng)
        return None

    def _pick(self, variants: tuple[ReplyVariant, ...], rng: random.Random) -> str:
        weights = [
            v.weight if v.weight is not None else self._config.default_variant_weight
            for v in variants
        ]
        return rng.choices(variants, weights=weights, k=1)[0].text


def _live(variants: tuple[ReplyVariant, ...]) -> tuple[ReplyVariant, ...]:
    return tuple(v for v in variants if v.weight != 0)
