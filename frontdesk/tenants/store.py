"""TenantConfigStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from frontdesk.knowledge.models import ScenarioCandidate
from frontdesk.tenants.models import TenantProfile
from frontdesk.triage.models import TriageRule


class TenantConfigStore(ABC):
    """Read side of tenant configuration.

    Authoring (admin UI, AI suggestion service) writes elsewhere and calls
    the rule compiler's invalidation hook afterwards.
    """

    @abstractmethod
    async def get_profile(self, tenant_id: UUID) -> TenantProfile | None:
        """Get the tenant profile."""
        pass

    @abstractmethod
    async def get_triage_rules(self, tenant_id: UUID) -> list[TriageRule]:
        """Get manual and AI-suggested rules, active or not."""
        pass

    @abstractmethod
    async def get_scenarios(
        self, tenant_id: UUID, *, enabled_only: bool = True
    ) -> list[ScenarioCandidate]:
        """Get the tenant's scenario pool."""
        pass

    @abstractmethod
    async def get_scenario(
        self, tenant_id: UUID, scenario_id: UUID
    ) -> ScenarioCandidate | None:
        """Get one scenario by id."""
        pass
