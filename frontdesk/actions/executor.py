"""Action executor: the per-turn call state machine."""

from pydantic import BaseModel, Field

from frontdesk.actions.models import ActionTransition, CallAction, TransitionTrigger
from frontdesk.config.models.pipeline import ActionConfig
from frontdesk.conversation.models import (
    BookingHandoff,
    CallerContext,
    CallSession,
)
from frontdesk.conversation.slots import SlotExtractor
from frontdesk.knowledge.models import FollowUpAction, ResolutionResult
from frontdesk.observability.logging import get_logger
from frontdesk.responses.models import AssembledResponse
from frontdesk.responses.placeholders import PlaceholderValues, render
from frontdesk.tenants.models import TenantProfile
from frontdesk.triage.models import TriageAction, TriageMatch

logger = get_logger(__name__)

_TERMINAL_TRIAGE = {
    TriageAction.ESCALATE_TO_HUMAN: CallAction.ESCALATE_TO_HUMAN,
    TriageAction.TAKE_MESSAGE: CallAction.TAKE_MESSAGE,
    TriageAction.END_CALL_POLITE: CallAction.END_CALL_POLITE,
}


class ActionDecision(BaseModel):
    """Action and text for the turn, plus the session changes they imply."""

    action: CallAction
    text: str = Field(..., min_length=1)
    transitions: list[ActionTransition] = Field(default_factory=list)
    booking_handoff: BookingHandoff | None = None
    booking_offer_pending: bool = False
    unresolved_turns: int = 0


class ActionExecutor:
    """Maps triage and resolution results to a CallAction.

    Rules, first match wins:
    - a pending booking offer accepted this turn hands off to booking
    - a terminal triage action is taken as is
    - a configuration error, or a resolver escalation hint, escalates
    - a TRANSFER follow-up escalates after the reply
    - an unresolved turn at the unresolved limit escalates
    - otherwise the call continues; ASK_TO_BOOK arms the booking offer
    """

    def __init__(
        self,
        config: ActionConfig | None = None,
        slot_extractor: SlotExtractor | None = None,
    ) -> None:
        self._config = config or ActionConfig()
        self._slots = slot_extractor or SlotExtractor()

    def booking_accepted(self, session: CallSession, normalized_utterance: str) -> bool:
        if not session.booking_offer_pending:
            return False
        return self._slots.is_affirmation(normalized_utterance) or self._slots.is_booking_request(
            normalized_utterance
        )

    def handoff(self, session: CallSession, profile: TenantProfile) -> ActionDecision:
        slots = session.slots
        category = session.issue_category or "general-question"
        pre_filled = {
            key: value
            for key, value in (
                ("firstName", slots.first_name),
                ("address", slots.address),
                ("urgency", slots.urgency.value),
            )
            if value is not None
        }
        payload = BookingHandoff(
            caller_context=CallerContext(
                first_name=slots.first_name,
                issue_category=category,
                urgency=slots.urgency,
                is_return_customer=session.is_return_customer,
            ),
            pre_filled_slots=pre_filled,
        )
        return ActionDecision(
            action=CallAction.BOOKING_HANDOFF,
            text=self._phrase(profile.phrases.booking_handoff, profile, session),
            transitions=[
                self._transition(
                    session,
                    CallAction.BOOKING_HANDOFF,
                    TransitionTrigger.BOOKING_SIGNAL,
                    "booking_offer_accepted",
                )
            ],
            booking_handoff=payload,
        )

    def from_triage(
        self, session: CallSession, match: TriageMatch, profile: TenantProfile
    ) -> ActionDecision:
        """Decision for a terminal triage action.

        Raises:
            ValueError: if the matched action defers to the resolver
        """
        action = _TERMINAL_TRIAGE.get(match.action)
        if action is None:
            raise ValueError(f"{match.action.value} is not a terminal triage action")

        phrases = profile.phrases
        default_text = {
            CallAction.ESCALATE_TO_HUMAN: phrases.escalate,
            CallAction.TAKE_MESSAGE: phrases.take_message,
            CallAction.END_CALL_POLITE: phrases.end_call,
        }[action]
        text = match.rule.reply_text or default_text
        return ActionDecision(
            action=action,
            text=self._phrase(text, profile, session),
            transitions=[
                self._transition(
                    session, action, TransitionTrigger.TRIAGE, f"rule:{match.rule.label}"
                )
            ],
            unresolved_turns=session.unresolved_turns,
        )

    def from_resolution(
        self,
        session: CallSession,
        match: TriageMatch,
        resolution: ResolutionResult,
        response: AssembledResponse,
        profile: TenantProfile,
    ) -> ActionDecision:
        text = response.text
        if match.action is TriageAction.EXPLAIN_AND_PUSH and match.rule.reply_text:
            text = f"{self._phrase(match.rule.reply_text, profile, session)} {text}"

        if resolution.escalation_hint:
            trigger = (
                TransitionTrigger.CONFIGURATION
                if resolution.error == "ConfigurationError"
                else TransitionTrigger.RESOLVER
            )
            return self._escalate(
                session, profile, trigger, f"escalation_hint:{resolution.error or 'none'}"
            )

        if not resolution.matched:
            unresolved = session.unresolved_turns + 1
            if unresolved >= self._config.max_unresolved_turns:
                decision = self._escalate(
                    session,
                    profile,
                    TransitionTrigger.UNRESOLVED_LIMIT,
                    f"unresolved_turns:{unresolved}",
                )
                decision.unresolved_turns = unresolved
                return decision
            return ActionDecision(
                action=CallAction.CONTINUE,
                text=text,
                unresolved_turns=unresolved,
            )

        scenario = resolution.scenario
        follow_up = scenario.follow_up if scenario else FollowUpAction.NONE

        if follow_up is FollowUpAction.TRANSFER:
            escalation = self._phrase(profile.phrases.escalate, profile, session)
            return ActionDecision(
                action=CallAction.ESCALATE_TO_HUMAN,
                text=f"{text} {escalation}",
                transitions=[
                    self._transition(
                        session,
                        CallAction.ESCALATE_TO_HUMAN,
                        TransitionTrigger.FOLLOW_UP,
                        f"transfer:{scenario.transfer_target or 'default'}",
                    )
                ],
            )

        transitions = []
        armed = follow_up is FollowUpAction.ASK_TO_BOOK
        if armed:
            transitions.append(
                self._transition(
                    session, CallAction.CONTINUE, TransitionTrigger.FOLLOW_UP, "booking_offer_armed"
                )
            )
        return ActionDecision(
            action=CallAction.CONTINUE,
            text=text,
            transitions=transitions,
            booking_offer_pending=armed,
        )

    def failsafe(self, session: CallSession, reason: str) -> ActionDecision:
        """Last resort when the turn could not be processed."""
        return ActionDecision(
            action=CallAction.ESCALATE_TO_HUMAN,
            text=self._config.safe_phrase,
            transitions=[
                self._transition(
                    session, CallAction.ESCALATE_TO_HUMAN, TransitionTrigger.FAILSAFE, reason
                )
            ],
            unresolved_turns=session.unresolved_turns,
        )

    def apply(self, session: CallSession, decision: ActionDecision) -> CallSession:
        """Return the session as it stands after this decision."""
        for transition in decision.transitions:
            logger.info(
                "action_transition",
                from_action=transition.from_action.value,
                to_action=transition.to_action.value,
                trigger=transition.trigger.value,
                reason=transition.reason,
            )
        return session.model_copy(
            update={
                "state": decision.action,
                "closed": decision.action.ends_pipeline,
                "booking_offer_pending": decision.booking_offer_pending,
                "unresolved_turns": decision.unresolved_turns,
                "booking_handoff": decision.booking_handoff or session.booking_handoff,
                "transitions": [*session.transitions, *decision.transitions],
            }
        )

    def _escalate(
        self,
        session: CallSession,
        profile: TenantProfile,
        trigger: TransitionTrigger,
        reason: str,
    ) -> ActionDecision:
        return ActionDecision(
            action=CallAction.ESCALATE_TO_HUMAN,
            text=self._phrase(profile.phrases.escalate, profile, session),
            transitions=[
                self._transition(session, CallAction.ESCALATE_TO_HUMAN, trigger, reason)
            ],
        )

    @staticmethod
    def _transition(
        session: CallSession,
        to_action: CallAction,
        trigger: TransitionTrigger,
        reason: str,
    ) -> ActionTransition:
        return ActionTransition(
            from_action=session.state, to_action=to_action, trigger=trigger, reason=reason
        )

    @staticmethod
    def _phrase(text: str, profile: TenantProfile, session: CallSession) -> str:
        return render(
            text,
            PlaceholderValues(
                name=session.slots.first_name,
                company_name=profile.company_name,
                technician=profile.technician_name or "our technician",
                phone=profile.phone or "our main number",
            ),
        )
