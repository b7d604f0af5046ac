"""Unit tests for authoring checks and the preview service."""

from uuid import UUID

import pytest

from frontdesk.cache import InMemoryCacheService
from frontdesk.tenants.models import TenantProfile, Trade
from frontdesk.tenants.stores import InMemoryTenantConfigStore
from frontdesk.triage.compiler import RuleCompiler
from frontdesk.triage.models import MatchMethod, TriageAction
from frontdesk.triage.preview import TriagePreviewService, explain_action
from frontdesk.triage.review import (
    EMERGENCY_PHRASES,
    ConflictSeverity,
    detect_conflicts,
    emergency_gaps,
)
from tests.factories import RuleFactory


@pytest.fixture
def compiler(config_store: InMemoryTenantConfigStore) -> RuleCompiler:
    return RuleCompiler(config_store, InMemoryCacheService())


class TestDetectConflicts:
    """Tests for keyword overlap detection."""

    def test_high_severity_for_majority_overlap(
        self, tenant_id: UUID, compiler: RuleCompiler
    ) -> None:
        """Overlap above half of a rule's keywords is HIGH."""
        first = RuleFactory.create(tenant_id=tenant_id, keywords=["ac", "noise"], priority=50)
        second = RuleFactory.create(tenant_id=tenant_id, keywords=["ac", "noise", "loud"])
        ruleset = compiler.compile_rules(tenant_id, [first, second])

        conflicts = detect_conflicts(ruleset)

        assert len(conflicts) == 1
        assert conflicts[0].severity == ConflictSeverity.HIGH
        assert conflicts[0].winner_id == second.id
        assert conflicts[0].overlapping_keywords == ["ac", "noise"]

    def test_low_severity_for_single_shared_keyword(
        self, tenant_id: UUID, compiler: RuleCompiler
    ) -> None:
        """One shared keyword among many is LOW."""
        first = RuleFactory.create(tenant_id=tenant_id, keywords=["ac", "a", "b"])
        second = RuleFactory.create(tenant_id=tenant_id, keywords=["ac", "c", "d"])
        ruleset = compiler.compile_rules(tenant_id, [first, second])
        assert detect_conflicts(ruleset)[0].severity == ConflictSeverity.LOW

    def test_disjoint_rules_do_not_conflict(
        self, tenant_id: UUID, compiler: RuleCompiler
    ) -> None:
        """Rules without shared keywords are fine."""
        ruleset = compiler.compile_rules(
            tenant_id,
            [
                RuleFactory.create(tenant_id=tenant_id, keywords=["ac"]),
                RuleFactory.create(tenant_id=tenant_id, keywords=["furnace"]),
            ],
        )
        assert detect_conflicts(ruleset) == []


class TestEmergencyGaps:
    """Tests for emergency phrase coverage."""

    def test_uncovered_phrases_reported(self, tenant_id: UUID, compiler: RuleCompiler) -> None:
        """Without escalation rules every emergency phrase is a gap."""
        ruleset = compiler.compile_rules(tenant_id, [])
        gaps = emergency_gaps(ruleset, Trade.HVAC)
        expected = len(EMERGENCY_PHRASES[Trade.HVAC]) + len(EMERGENCY_PHRASES[Trade.GENERAL])
        assert len(gaps) == expected

    def test_covered_phrase_not_reported(self, tenant_id: UUID, compiler: RuleCompiler) -> None:
        """A phrase that escalates is not a gap."""
        gas = RuleFactory.create(
            tenant_id=tenant_id,
            label="GAS",
            keywords=["gas"],
            action=TriageAction.ESCALATE_TO_HUMAN,
        )
        ruleset = compiler.compile_rules(tenant_id, [gas])
        phrases = {g.phrase for g in emergency_gaps(ruleset, Trade.HVAC)}
        assert "smell gas" not in phrases
        assert "carbon monoxide" in phrases


class TestTriagePreviewService:
    """Tests for test-match and preview."""

    @pytest.mark.asyncio
    async def test_test_match_uses_live_rules(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
    ) -> None:
        """Test-match reports the same rule production would pick."""
        rule = RuleFactory.create(
            tenant_id=tenant_id, keywords=["cancel"], action=TriageAction.END_CALL_POLITE
        )
        await config_store.save_rule(rule)
        service = TriagePreviewService(compiler, config_store)

        result = await service.test_match(tenant_id, "I want to cancel")

        assert result.rule.id == rule.id
        assert result.match_method == MatchMethod.EXACT_KEYWORD
        assert result.explanation == explain_action(TriageAction.END_CALL_POLITE)

    @pytest.mark.asyncio
    async def test_preview_uses_tenant_trade(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
    ) -> None:
        """Emergency gaps follow the tenant's trade."""
        await config_store.save_profile(TenantProfile(tenant_id=tenant_id, trade=Trade.PLUMBING))
        service = TriagePreviewService(compiler, config_store)

        preview = await service.preview(tenant_id)

        assert preview.rules[-1].is_fallback
        assert {g.phrase for g in preview.emergency_gaps} >= {"burst pipe", "sewage backup"}
        assert not preview.degraded
