"""Author-facing tooling over the live compiled rule set.

Uses the same compiler, comparator and matcher as production and never
touches call state.
"""

from collections.abc import Sequence
from uuid import UUID

from pydantic import BaseModel

from frontdesk.observability.logging import get_logger
from frontdesk.tenants.models import TenantProfile
from frontdesk.tenants.store import TenantConfigStore
from frontdesk.triage.compiler import RuleCompiler
from frontdesk.triage.matcher import TriageMatcher
from frontdesk.triage.models import MatchMethod, TriageAction, TriageRule
from frontdesk.triage.review import EmergencyGap, RuleConflict, detect_conflicts, emergency_gaps

logger = get_logger(__name__)

ACTION_EXPLANATIONS: dict[TriageAction, str] = {
    TriageAction.DIRECT_TO_RESOLVER: "Routes the caller into scenario resolution.",
    TriageAction.EXPLAIN_AND_PUSH: (
        "Explains the situation first, then routes to scenario resolution if the caller agrees."
    ),
    TriageAction.ESCALATE_TO_HUMAN: "Transfers the caller to a human.",
    TriageAction.TAKE_MESSAGE: "Takes a message for a callback.",
    TriageAction.END_CALL_POLITE: "Ends the call politely.",
}


def explain_action(action: TriageAction) -> str:
    return ACTION_EXPLANATIONS[action]


class MatchTrialResult(BaseModel):
    """What the live matcher decides for a candidate utterance."""

    rule: TriageRule
    match_method: MatchMethod
    matched_keywords: list[str]
    rule_index: int
    ruleset_version: str
    explanation: str


class RulePreview(BaseModel):
    """Compiled order plus authoring warnings."""

    tenant_id: UUID
    ruleset_version: str
    degraded: bool
    rules: list[TriageRule]
    conflicts: list[RuleConflict]
    emergency_gaps: list[EmergencyGap]


class TriagePreviewService:
    def __init__(
        self,
        compiler: RuleCompiler,
        config_store: TenantConfigStore,
        matcher: TriageMatcher | None = None,
    ) -> None:
        self._compiler = compiler
        self._store = config_store
        self._matcher = matcher or TriageMatcher()

    async def test_match(
        self,
        tenant_id: UUID,
        utterance: str,
        auxiliary_keywords: Sequence[str] | None = None,
    ) -> MatchTrialResult:
        ruleset = await self._compiler.get_compiled(tenant_id)
        result = self._matcher.match(utterance, ruleset, auxiliary_keywords)
        logger.info(
            "triage_test_match",
            tenant_id=str(tenant_id),
            rule_id=str(result.rule.id),
            match_method=result.match_method.value,
        )
        return MatchTrialResult(
            rule=result.rule,
            match_method=result.match_method,
            matched_keywords=list(result.matched_keywords),
            rule_index=result.rule_index,
            ruleset_version=result.ruleset_version,
            explanation=explain_action(result.action),
        )

    async def preview(self, tenant_id: UUID) -> RulePreview:
        ruleset = await self._compiler.get_compiled(tenant_id)
        profile = await self._store.get_profile(tenant_id) or TenantProfile.default(tenant_id)
        trade = profile.trade
        return RulePreview(
            tenant_id=tenant_id,
            ruleset_version=ruleset.version,
            degraded=ruleset.degraded,
            rules=list(ruleset.rules),
            conflicts=detect_conflicts(ruleset),
            emergency_gaps=emergency_gaps(ruleset, trade, self._matcher),
        )
