"""Factory for a fully in-memory CallPipeline."""

from frontdesk.actions.executor import ActionExecutor
from frontdesk.cache import InMemoryCacheService
from frontdesk.config.models.pipeline import ActionConfig, BudgetConfig
from frontdesk.knowledge.budget import Tier3BudgetGuard
from frontdesk.knowledge.resolver import KnowledgeResolver
from frontdesk.knowledge.tier3 import Tier3Resolver
from frontdesk.memory.gate import OptimizationGate
from frontdesk.memory.hydrator import MemoryHydrator
from frontdesk.memory.learning import PostTurnLearner
from frontdesk.memory.store import LearningStore
from frontdesk.memory.stores import InMemoryLearningStore
from frontdesk.pipeline.engine import CallPipeline
from frontdesk.responses.assembler import ResponseAssembler
from frontdesk.tenants.stores import InMemoryTenantConfigStore
from frontdesk.triage.compiler import RuleCompiler


class PipelineFactory:
    """Factory for CallPipeline instances wired to in-memory stores."""

    @staticmethod
    def create(
        *,
        config_store: InMemoryTenantConfigStore,
        learning_store: LearningStore | None = None,
        cache: InMemoryCacheService | None = None,
        tier3: Tier3Resolver | None = None,
        budget: BudgetConfig | None = None,
        actions: ActionConfig | None = None,
        learner: PostTurnLearner | None = None,
        compiler: RuleCompiler | None = None,
    ) -> CallPipeline:
        """Create a CallPipeline; tier 3 is off unless a resolver is given."""
        learning_store = learning_store or InMemoryLearningStore()
        return CallPipeline(
            config_store=config_store,
            compiler=compiler or RuleCompiler(config_store, cache or InMemoryCacheService()),
            hydrator=MemoryHydrator(learning_store),
            gate=OptimizationGate(),
            resolver=KnowledgeResolver(
                config_store, tier3=tier3, budget=Tier3BudgetGuard(budget)
            ),
            assembler=ResponseAssembler(),
            executor=ActionExecutor(actions),
            learner=learner or PostTurnLearner(learning_store),
        )
