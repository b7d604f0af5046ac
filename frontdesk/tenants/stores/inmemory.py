"""In-memory implementation of TenantConfigStore."""

from uuid import UUID

from frontdesk.knowledge.models import ScenarioCandidate
from frontdesk.tenants.models import TenantProfile
from frontdesk.tenants.store import TenantConfigStore
from frontdesk.triage.models import TriageRule


class InMemoryTenantConfigStore(TenantConfigStore):
    """Dict-backed tenant configuration for tests and development.

    The write helpers stand in for the authoring collaborator.
    """

    def __init__(self) -> None:
        self._profiles: dict[UUID, TenantProfile] = {}
        self._rules: dict[UUID, dict[UUID, TriageRule]] = {}
        self._scenarios: dict[UUID, dict[UUID, ScenarioCandidate]] = {}

    async def get_profile(self, tenant_id: UUID) -> TenantProfile | None:
        return self._profiles.get(tenant_id)

    async def get_triage_rules(self, tenant_id: UUID) -> list[TriageRule]:
        return list(self._rules.get(tenant_id, {}).values())

    async def get_scenarios(
        self, tenant_id: UUID, *, enabled_only: bool = True
    ) -> list[ScenarioCandidate]:
        scenarios = self._scenarios.get(tenant_id, {}).values()
        return [s for s in scenarios if s.enabled or not enabled_only]

    async def get_scenario(
        self, tenant_id: UUID, scenario_id: UUID
    ) -> ScenarioCandidate | None:
        return self._scenarios.get(tenant_id, {}).get(scenario_id)

    async def save_profile(self, profile: TenantProfile) -> None:
        self._profiles[profile.tenant_id] = profile

    async def save_rule(self, rule: TriageRule) -> None:
        self._rules.setdefault(rule.tenant_id, {})[rule.id] = rule

    async def delete_rule(self, tenant_id: UUID, rule_id: UUID) -> bool:
        return self._rules.get(tenant_id, {}).pop(rule_id, None) is not None

    async def save_scenario(self, scenario: ScenarioCandidate) -> None:
        self._scenarios.setdefault(scenario.tenant_id, {})[scenario.id] = scenario
