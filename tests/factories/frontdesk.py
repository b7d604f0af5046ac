"""Test factories for triage rules and scenario candidates."""

from datetime import datetime
from uuid import UUID, uuid4

from frontdesk.knowledge.models import (
    FollowUpAction,
    ReplyStrategy,
    ScenarioCandidate,
    ScenarioType,
)
from frontdesk.triage.models import (
    RuleSource,
    ServiceType,
    TriageAction,
    TriageRule,
    utc_now,
)


class RuleFactory:
    """Factory for creating TriageRule instances for testing."""

    @staticmethod
    def create(
        *,
        tenant_id: UUID,
        id: UUID | None = None,
        label: str = "AC_REPAIR",
        category: str = "ac-repair",
        keywords: list[str] | None = None,
        exclude_keywords: list[str] | None = None,
        action: TriageAction = TriageAction.DIRECT_TO_RESOLVER,
        service_type: ServiceType = ServiceType.REPAIR,
        priority: int = 100,
        source: RuleSource = RuleSource.MANUAL,
        active: bool = True,
        reply_text: str | None = None,
        updated_at: datetime | None = None,
    ) -> TriageRule:
        """Create a TriageRule with sensible defaults.

        Args:
            tenant_id: Owning tenant
            id: Rule ID (auto-generated if not provided)
            label: Intent label
            category: Issue category slug
            keywords: Required keywords (defaults to ["ac"])
            exclude_keywords: Veto keywords
            action: Triage action
            service_type: Service type
            priority: Higher is evaluated first
            source: Rule origin
            active: Whether the rule is compiled
            reply_text: Explain or terminal text
            updated_at: Last edit time (now if not provided)

        Returns:
            Configured TriageRule instance
        """
        return TriageRule(
            id=id or uuid4(),
            tenant_id=tenant_id,
            label=label,
            category=category,
            keywords=keywords if keywords is not None else ["ac"],
            exclude_keywords=exclude_keywords or [],
            action=action,
            service_type=service_type,
            priority=priority,
            source=source,
            active=active,
            reply_text=reply_text,
            updated_at=updated_at or utc_now(),
        )


class ScenarioFactory:
    """Factory for creating ScenarioCandidate instances for testing."""

    @staticmethod
    def create(
        *,
        tenant_id: UUID,
        id: UUID | None = None,
        name: str = "AC not cooling",
        intent: str | None = "AC_REPAIR",
        triggers: list[str] | None = None,
        negative_triggers: list[str] | None = None,
        quick_replies: list[str] | None = None,
        full_replies: list[str] | None = None,
        follow_up_replies: list[str] | None = None,
        reply_strategy: ReplyStrategy = ReplyStrategy.AUTO,
        scenario_type: ScenarioType = ScenarioType.INFO_FAQ,
        follow_up: FollowUpAction = FollowUpAction.NONE,
        follow_up_question: str | None = None,
        transfer_target: str | None = None,
        priority: int = 0,
        enabled: bool = True,
    ) -> ScenarioCandidate:
        """Create a ScenarioCandidate with one trigger and one full reply by default."""
        return ScenarioCandidate(
            id=id or uuid4(),
            tenant_id=tenant_id,
            name=name,
            intent=intent,
            triggers=tuple(triggers if triggers is not None else ["ac not cooling"]),
            negative_triggers=tuple(negative_triggers or ()),
            quick_replies=quick_replies or [],
            full_replies=(
                full_replies
                if full_replies is not None
                else ["Sorry to hear your AC isn't cooling."]
            ),
            follow_up_replies=follow_up_replies or [],
            reply_strategy=reply_strategy,
            scenario_type=scenario_type,
            follow_up=follow_up,
            follow_up_question=follow_up_question,
            transfer_target=transfer_target,
            priority=priority,
            enabled=enabled,
        )
