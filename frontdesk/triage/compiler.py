"""Rule compiler: merges authored rules and the fallback into one ordered set.

Compiled sets are immutable and replaced wholesale, so a turn that already
holds a set keeps evaluating it even if an edit lands mid-turn.
"""

import asyncio
import hashlib
from datetime import UTC, datetime
from uuid import UUID, uuid5

from pydantic import ValidationError

from frontdesk.cache.keys import CacheKeys
from frontdesk.cache.service import CacheService
from frontdesk.config.models.pipeline import TriageConfig
from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import RULESET_REBUILDS
from frontdesk.tenants.store import TenantConfigStore
from frontdesk.triage.models import (
    CompiledRuleSet,
    RuleSource,
    ServiceType,
    TriageAction,
    TriageRule,
)
from frontdesk.triage.ordering import order_rules

logger = get_logger(__name__)

_FALLBACK_NAMESPACE = UUID("7d0c6f0e-3a51-4c9b-9a52-1f0f2f6a9b11")
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class RuleCompiler:
    """Builds, caches and invalidates per-tenant CompiledRuleSets.

    Lookup order: shared cache, then a rebuild from the tenant store. If the
    store fails, the last good set this process has seen is served; if there
    is none, a fallback-only set is served. A call is never blocked on a
    failing store.
    """

    def __init__(
        self,
        config_store: TenantConfigStore,
        cache: CacheService,
        keys: CacheKeys | None = None,
        ttl_seconds: int = 3600,
        triage_config: TriageConfig | None = None,
    ) -> None:
        self._store = config_store
        self._cache = cache
        self._keys = keys or CacheKeys()
        self._ttl = ttl_seconds
        self._config = triage_config or TriageConfig()
        self._last_good: dict[UUID, CompiledRuleSet] = {}
        self._generation: dict[UUID, int] = {}
        self._inflight: dict[UUID, asyncio.Task[CompiledRuleSet]] = {}

    async def get_compiled(self, tenant_id: UUID) -> CompiledRuleSet:
        """Return the tenant's compiled set, rebuilding on a cache miss."""
        cached = await self._read_cache(tenant_id)
        if cached is not None:
            self._last_good[tenant_id] = cached
            return cached

        task = self._inflight.get(tenant_id)
        if task is None:
            task = asyncio.create_task(self._rebuild(tenant_id))
            self._inflight[tenant_id] = task
            task.add_done_callback(lambda _t, t=tenant_id: self._drop_inflight(t, _t))
        return await asyncio.shield(task)

    async def invalidate(self, tenant_id: UUID) -> CompiledRuleSet:
        """Drop the cached set and rebuild it before returning.

        Called by the authoring side after any rule create, update, delete,
        activation or deactivation. Builds started before this call can no
        longer publish their result.
        """
        self._generation[tenant_id] = self._generation.get(tenant_id, 0) + 1
        await self._cache.invalidate(self._keys.compiled_rules(tenant_id))
        logger.info("compiled_rules_invalidated", tenant_id=str(tenant_id))
        return await self._rebuild(tenant_id)

    async def invalidate_all(self) -> int:
        """Drop every tenant's cached set. Sets are rebuilt lazily."""
        for tenant_id in list(self._generation) + list(self._last_good):
            self._generation[tenant_id] = self._generation.get(tenant_id, 0) + 1
        return await self._cache.invalidate_pattern(self._keys.compiled_rules_prefix())

    def build_fallback_rule(self, tenant_id: UUID) -> TriageRule:
        """The synthetic always-matching rule, identical on every compile."""
        return TriageRule(
            id=uuid5(_FALLBACK_NAMESPACE, str(tenant_id)),
            tenant_id=tenant_id,
            label=self._config.fallback_label,
            category=self._config.fallback_category,
            keywords=frozenset(),
            exclude_keywords=frozenset(),
            action=TriageAction.DIRECT_TO_RESOLVER,
            service_type=ServiceType.UNKNOWN,
            priority=0,
            source=RuleSource.SYSTEM,
            updated_at=_EPOCH,
        )

    def compile_rules(self, tenant_id: UUID, rules: list[TriageRule]) -> CompiledRuleSet:
        """Filter, order and seal a rule list. Pure; no I/O."""
        usable: list[TriageRule] = []
        for rule in rules:
            if rule.tenant_id != tenant_id or not rule.active:
                continue
            if rule.source == RuleSource.SYSTEM:
                continue
            if not rule.keywords:
                logger.warning(
                    "rule_skipped_no_keywords",
                    tenant_id=str(tenant_id),
                    rule_id=str(rule.id),
                )
                continue
            usable.append(rule)

        ordered = order_rules(usable, self.build_fallback_rule(tenant_id))
        return CompiledRuleSet(
            tenant_id=tenant_id,
            rules=ordered,
            version=_version_of(ordered),
        )

    async def _rebuild(self, tenant_id: UUID) -> CompiledRuleSet:
        generation = self._generation.get(tenant_id, 0)
        try:
            rules = await self._store.get_triage_rules(tenant_id)
        except Exception as e:
            return self._degraded(tenant_id, e)

        compiled = self.compile_rules(tenant_id, rules)
        for rank, rule in enumerate(compiled.rules):
            logger.info(
                "rule_ranked",
                tenant_id=str(tenant_id),
                rank=rank,
                rule_id=str(rule.id),
                label=rule.label,
                priority=rule.priority,
                source=rule.source.value,
                action=rule.action.value,
            )

        if self._generation.get(tenant_id, 0) != generation:
            logger.info("compiled_rules_superseded", tenant_id=str(tenant_id))
            RULESET_REBUILDS.labels(outcome="superseded").inc()
            return compiled

        self._last_good[tenant_id] = compiled
        await self._cache.set(
            self._keys.compiled_rules(tenant_id),
            compiled.model_dump_json(),
            self._ttl,
        )
        RULESET_REBUILDS.labels(outcome="ok").inc()
        logger.info(
            "rules_compiled",
            tenant_id=str(tenant_id),
            rule_count=len(compiled),
            version=compiled.version,
        )
        return compiled

    def _degraded(self, tenant_id: UUID, error: Exception) -> CompiledRuleSet:
        last_good = self._last_good.get(tenant_id)
        if last_good is not None:
            RULESET_REBUILDS.labels(outcome="stale").inc()
            logger.warning(
                "rules_compile_failed_serving_stale",
                tenant_id=str(tenant_id),
                error=str(error),
                version=last_good.version,
            )
            return last_good

        RULESET_REBUILDS.labels(outcome="fallback_only").inc()
        logger.error(
            "rules_compile_failed_fallback_only",
            tenant_id=str(tenant_id),
            error=str(error),
        )
        fallback = self.build_fallback_rule(tenant_id)
        return CompiledRuleSet(
            tenant_id=tenant_id,
            rules=(fallback,),
            version=_version_of((fallback,)),
            degraded=True,
        )

    async def _read_cache(self, tenant_id: UUID) -> CompiledRuleSet | None:
        raw = await self._cache.get(self._keys.compiled_rules(tenant_id))
        if raw is None:
            return None
        try:
            return CompiledRuleSet.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "compiled_rules_cache_corrupt",
                tenant_id=str(tenant_id),
                error=str(e),
            )
            return None

    def _drop_inflight(self, tenant_id: UUID, task: asyncio.Task[CompiledRuleSet]) -> None:
        if self._inflight.get(tenant_id) is task:
            del self._inflight[tenant_id]


def _version_of(rules: tuple[TriageRule, ...]) -> str:
    digest = hashlib.sha256()
    for rule in rules:
        digest.update(
            "|".join(
                (
                    str(rule.id),
                    rule.updated_at.isoformat(),
                    str(rule.priority),
                    rule.action.value,
                    ",".join(sorted(rule.keywords)),
                    ",".join(sorted(rule.exclude_keywords)),
                )
            ).encode()
        )
    return digest.hexdigest()[:16]
