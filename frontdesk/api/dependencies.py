"""Dependency injection for API routes.

Components are built once from settings and reused. Tests swap them with
`app.dependency_overrides` or call `reset_dependencies()`.
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from frontdesk.actions.executor import ActionExecutor
from frontdesk.cache import (
    CacheKeys,
    CacheService,
    FailureMonitor,
    InMemoryCacheService,
    RedisCacheService,
)
from frontdesk.config import Settings, get_settings
from frontdesk.knowledge.budget import Tier3BudgetGuard
from frontdesk.knowledge.resolver import KnowledgeResolver
from frontdesk.knowledge.tier2 import Tier2Matcher
from frontdesk.knowledge.tier3 import Tier3Resolver
from frontdesk.memory.gate import OptimizationGate
from frontdesk.memory.hydrator import MemoryHydrator
from frontdesk.memory.learning import PostTurnLearner
from frontdesk.memory.store import LearningStore
from frontdesk.memory.stores import InMemoryLearningStore, RedisLearningStore
from frontdesk.observability.logging import get_logger
from frontdesk.pipeline.engine import CallPipeline
from frontdesk.providers.embedding import EmbeddingProvider
from frontdesk.providers.llm import create_executor
from frontdesk.responses.assembler import ResponseAssembler
from frontdesk.tenants.store import TenantConfigStore
from frontdesk.tenants.stores import InMemoryTenantConfigStore
from frontdesk.triage.compiler import RuleCompiler
from frontdesk.triage.preview import TriagePreviewService

logger = get_logger(__name__)

# Shared client and component instances
_redis_client: redis.Redis | None = None
_cache_service: CacheService | None = None
_config_store: TenantConfigStore | None = None
_learning_store: LearningStore | None = None
_rule_compiler: RuleCompiler | None = None
_learner: PostTurnLearner | None = None
_embedding_provider: EmbeddingProvider | None = None
_call_pipeline: CallPipeline | None = None


async def get_redis_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> redis.Redis:
    """Get the shared Redis client, created on first access."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(settings.storage.redis_url, decode_responses=True)
        # Log without credentials
        logger.info("redis_client_connected", url=settings.storage.redis_url.split("@")[-1])
    return _redis_client


def _keys(settings: Settings) -> CacheKeys:
    return CacheKeys(namespace=settings.storage.key_namespace)


async def get_cache_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> CacheService:
    global _cache_service
    if _cache_service is None:
        monitor = FailureMonitor(
            threshold=settings.cache.alert_failure_threshold,
            cooldown_seconds=settings.cache.alert_cooldown_seconds,
        )
        if settings.storage.backend == "redis":
            _cache_service = RedisCacheService(
                await get_redis_client(settings),
                monitor=monitor,
                enabled=settings.cache.enabled,
                scan_count=settings.cache.scan_count,
                delete_batch_size=settings.cache.delete_batch_size,
            )
        else:
            _cache_service = InMemoryCacheService(monitor=monitor, enabled=settings.cache.enabled)
        logger.info("cache_service_initialized", backend=settings.storage.backend)
    return _cache_service


async def get_config_store() -> TenantConfigStore:
    """Get the tenant configuration store.

    Tenant configuration is authored elsewhere; the in-memory store is the
    read side used by this service and its tests.
    """
    global _config_store
    if _config_store is None:
        _config_store = InMemoryTenantConfigStore()
        logger.info("config_store_initialized", store_type="inmemory")
    return _config_store


async def get_learning_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> LearningStore:
    global _learning_store
    if _learning_store is None:
        if settings.storage.backend == "redis":
            _learning_store = RedisLearningStore(
                await get_redis_client(settings),
                keys=_keys(settings),
                caller_ttl_seconds=settings.memory.caller_history_ttl_seconds,
                response_ttl_seconds=settings.memory.response_cache_ttl_seconds,
            )
        else:
            _learning_store = InMemoryLearningStore()
        logger.info("learning_store_initialized", store_type=settings.storage.backend)
    return _learning_store


def get_rule_compiler(
    settings: Annotated[Settings, Depends(get_settings)],
    config_store: Annotated[TenantConfigStore, Depends(get_config_store)],
    cache: Annotated[CacheService, Depends(get_cache_service)],
) -> RuleCompiler:
    global _rule_compiler
    if _rule_compiler is None:
        _rule_compiler = RuleCompiler(
            config_store,
            cache,
            keys=_keys(settings),
            ttl_seconds=settings.cache.compiled_rules_ttl_seconds,
            triage_config=settings.triage,
        )
        logger.info("rule_compiler_initialized")
    return _rule_compiler


def get_preview_service(
    compiler: Annotated[RuleCompiler, Depends(get_rule_compiler)],
    config_store: Annotated[TenantConfigStore, Depends(get_config_store)],
) -> TriagePreviewService:
    return TriagePreviewService(compiler, config_store)


def get_learner(
    store: Annotated[LearningStore, Depends(get_learning_store)],
) -> PostTurnLearner:
    global _learner
    if _learner is None:
        _learner = PostTurnLearner(store)
    return _learner


def get_embedding_provider(
    settings: Annotated[Settings, Depends(get_settings)],
) -> EmbeddingProvider | None:
    """Embedding provider for tier 2, or None for lexical-only scoring."""
    global _embedding_provider
    config = settings.providers.embedding
    if _embedding_provider is None and config.provider == "sentence_transformers":
        from frontdesk.providers.embedding.sentence_transformers import (
            SentenceTransformersProvider,
        )

        _embedding_provider = SentenceTransformersProvider(
            model_name=config.model, batch_size=config.batch_size
        )
        logger.info("embedding_provider_initialized", provider=config.provider, model=config.model)
    return _embedding_provider


def get_call_pipeline(
    settings: Annotated[Settings, Depends(get_settings)],
    config_store: Annotated[TenantConfigStore, Depends(get_config_store)],
    compiler: Annotated[RuleCompiler, Depends(get_rule_compiler)],
    learning_store: Annotated[LearningStore, Depends(get_learning_store)],
    learner: Annotated[PostTurnLearner, Depends(get_learner)],
    embedding_provider: Annotated[EmbeddingProvider | None, Depends(get_embedding_provider)],
) -> CallPipeline:
    """Get the CallPipeline, wired from settings on first use."""
    global _call_pipeline
    if _call_pipeline is None:
        resolver_config = settings.resolver
        tier3 = None
        if resolver_config.tier3.enabled:
            tier3 = Tier3Resolver(
                create_executor(
                    model=resolver_config.tier3.model,
                    fallback_models=resolver_config.tier3.fallback_models,
                    step_name="tier3",
                    openrouter_config=resolver_config.tier3.openrouter,
                ),
                config=resolver_config.tier3,
            )
        _call_pipeline = CallPipeline(
            config_store=config_store,
            compiler=compiler,
            hydrator=MemoryHydrator(
                learning_store, timeout_ms=settings.memory.hydration_timeout_ms
            ),
            gate=OptimizationGate(settings.optimization),
            resolver=KnowledgeResolver(
                config_store,
                config=resolver_config,
                tier2=Tier2Matcher(resolver_config.tier2, embedding_provider),
                tier3=tier3,
                budget=Tier3BudgetGuard(settings.budget),
            ),
            assembler=ResponseAssembler(settings.responses),
            executor=ActionExecutor(settings.actions),
            learner=learner,
        )
        logger.info("call_pipeline_initialized", tier3_enabled=tier3 is not None)
    return _call_pipeline


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
CacheServiceDep = Annotated[CacheService, Depends(get_cache_service)]
ConfigStoreDep = Annotated[TenantConfigStore, Depends(get_config_store)]
LearningStoreDep = Annotated[LearningStore, Depends(get_learning_store)]
RuleCompilerDep = Annotated[RuleCompiler, Depends(get_rule_compiler)]
PreviewServiceDep = Annotated[TriagePreviewService, Depends(get_preview_service)]
LearnerDep = Annotated[PostTurnLearner, Depends(get_learner)]
CallPipelineDep = Annotated[CallPipeline, Depends(get_call_pipeline)]


async def reset_dependencies() -> None:
    """Drain pending learning, close connections and drop cached instances."""
    global _redis_client, _cache_service, _config_store, _learning_store
    global _rule_compiler, _learner, _embedding_provider, _call_pipeline

    if _learner is not None:
        await _learner.drain(timeout=5.0)

    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None

    _cache_service = None
    _config_store = None
    _learning_store = None
    _rule_compiler = None
    _learner = None
    _embedding_provider = None
    _call_pipeline = None
    get_settings.cache_clear()
