"""Unit tests for the rule compiler, its cache and invalidation."""

import asyncio
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from frontdesk.cache import CacheKeys, InMemoryCacheService, RedisCacheService
from frontdesk.config.models.pipeline import TriageConfig
from frontdesk.tenants.stores import InMemoryTenantConfigStore
from frontdesk.triage.compiler import RuleCompiler
from frontdesk.triage.models import RuleSource
from tests.factories import RuleFactory


@pytest.fixture
def compiler(
    config_store: InMemoryTenantConfigStore, cache: InMemoryCacheService
) -> RuleCompiler:
    return RuleCompiler(config_store, cache, keys=CacheKeys("fd"), ttl_seconds=60)


class TestCompileRules:
    """Tests for the pure compile step."""

    def test_inactive_and_foreign_rules_dropped(
        self, tenant_id: UUID, compiler: RuleCompiler
    ) -> None:
        """Only active rules of the tenant are compiled."""
        active = RuleFactory.create(tenant_id=tenant_id)
        inactive = RuleFactory.create(tenant_id=tenant_id, active=False)
        foreign = RuleFactory.create(tenant_id=UUID(int=7))

        ruleset = compiler.compile_rules(tenant_id, [active, inactive, foreign])

        assert ruleset.rules[:-1] == (active,)

    def test_keywordless_and_system_rules_dropped(
        self, tenant_id: UUID, compiler: RuleCompiler
    ) -> None:
        """A rule without keywords never shadows the fallback."""
        empty = RuleFactory.create(tenant_id=tenant_id, keywords=[])
        system = RuleFactory.create(tenant_id=tenant_id, source=RuleSource.SYSTEM)

        ruleset = compiler.compile_rules(tenant_id, [empty, system])

        assert len(ruleset) == 1
        assert ruleset.rules[0].is_fallback

    def test_fallback_is_stable(self, tenant_id: UUID) -> None:
        """Two compilers produce the same fallback rule for a tenant."""
        config = TriageConfig(fallback_label="OTHER", fallback_category="misc")
        first, second = (
            RuleCompiler(InMemoryTenantConfigStore(), InMemoryCacheService(), triage_config=config)
            for _ in range(2)
        )

        fallback = first.build_fallback_rule(tenant_id)

        assert fallback == second.build_fallback_rule(tenant_id)
        assert fallback.label == "OTHER"
        assert fallback.category == "misc"

    def test_version_changes_with_rules(self, tenant_id: UUID, compiler: RuleCompiler) -> None:
        """Editing a rule changes the set version."""
        rule = RuleFactory.create(tenant_id=tenant_id, priority=10)
        edited = rule.model_copy(update={"priority": 20})
        assert (
            compiler.compile_rules(tenant_id, [rule]).version
            != compiler.compile_rules(tenant_id, [edited]).version
        )


class TestGetCompiled:
    """Tests for cached lookup and rebuild."""

    @pytest.mark.asyncio
    async def test_rebuild_populates_cache(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
        cache: InMemoryCacheService,
    ) -> None:
        """A miss rebuilds from the store and publishes to the cache."""
        await config_store.save_rule(RuleFactory.create(tenant_id=tenant_id))

        ruleset = await compiler.get_compiled(tenant_id)

        assert len(ruleset) == 2
        assert await cache.get(f"fd:triage:compiled:{tenant_id}") is not None

    @pytest.mark.asyncio
    async def test_cached_set_served_without_store(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
    ) -> None:
        """A cache hit does not touch the store."""
        await config_store.save_rule(RuleFactory.create(tenant_id=tenant_id))
        first = await compiler.get_compiled(tenant_id)

        config_store.get_triage_rules = AsyncMock(side_effect=AssertionError("store read"))
        second = await compiler.get_compiled(tenant_id)

        assert second.version == first.version

    @pytest.mark.asyncio
    async def test_corrupt_cache_entry_rebuilds(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        cache: InMemoryCacheService,
    ) -> None:
        """Unparseable cache content is treated as a miss."""
        await cache.set(f"fd:triage:compiled:{tenant_id}", "{not json", 60)
        ruleset = await compiler.get_compiled(tenant_id)
        assert ruleset.rules[-1].is_fallback

    @pytest.mark.asyncio
    async def test_undecodable_redis_entry_rebuilds(
        self, tenant_id: UUID, config_store: InMemoryTenantConfigStore
    ) -> None:
        """Corrupt bytes in Redis never reach the turn; the set is rebuilt."""
        await config_store.save_rule(RuleFactory.create(tenant_id=tenant_id))
        client = MagicMock()
        client.get = AsyncMock(return_value=b"\xff\xfe bad")
        client.setex = AsyncMock()
        compiler = RuleCompiler(config_store, RedisCacheService(client), keys=CacheKeys("fd"))

        ruleset = await compiler.get_compiled(tenant_id)

        assert ruleset.rules[0].label == "AC_REPAIR"
        assert not ruleset.degraded
        client.setex.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_rebuild(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
    ) -> None:
        """Simultaneous misses read the store once."""
        reads = 0
        original = config_store.get_triage_rules

        async def counting(tid: UUID):
            nonlocal reads
            reads += 1
            await asyncio.sleep(0.01)
            return await original(tid)

        config_store.get_triage_rules = counting  # type: ignore[method-assign]
        results = await asyncio.gather(*(compiler.get_compiled(tenant_id) for _ in range(5)))

        assert reads == 1
        assert len({r.version for r in results}) == 1


class TestDegradedCompile:
    """Tests for store failures."""

    @pytest.mark.asyncio
    async def test_store_failure_without_history_serves_fallback_only(
        self, tenant_id: UUID, compiler: RuleCompiler, config_store: InMemoryTenantConfigStore
    ) -> None:
        """No last good set means a degraded fallback-only set."""
        config_store.get_triage_rules = AsyncMock(side_effect=ConnectionError("db down"))

        ruleset = await compiler.get_compiled(tenant_id)

        assert ruleset.degraded
        assert len(ruleset) == 1
        assert ruleset.rules[0].is_fallback

    @pytest.mark.asyncio
    async def test_store_failure_serves_last_good(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
        cache: InMemoryCacheService,
    ) -> None:
        """After a good build, a failing store keeps serving it."""
        await config_store.save_rule(RuleFactory.create(tenant_id=tenant_id))
        good = await compiler.get_compiled(tenant_id)
        cache.clear()
        config_store.get_triage_rules = AsyncMock(side_effect=ConnectionError("db down"))

        ruleset = await compiler.get_compiled(tenant_id)

        assert ruleset == good
        assert not ruleset.degraded


class TestInvalidation:
    """Tests for the invalidation hook."""

    @pytest.mark.asyncio
    async def test_invalidate_publishes_edit_before_returning(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
    ) -> None:
        """The next lookup after invalidate sees the edited rules."""
        rule = RuleFactory.create(tenant_id=tenant_id, keywords=["ac"])
        await config_store.save_rule(rule)
        before = await compiler.get_compiled(tenant_id)

        await config_store.save_rule(
            rule.model_copy(update={"keywords": frozenset({"furnace"})})
        )
        rebuilt = await compiler.invalidate(tenant_id)
        after = await compiler.get_compiled(tenant_id)

        assert rebuilt.version == after.version != before.version
        assert after.rules[0].keywords == frozenset({"furnace"})

    @pytest.mark.asyncio
    async def test_deleted_rule_disappears(
        self,
        tenant_id: UUID,
        compiler: RuleCompiler,
        config_store: InMemoryTenantConfigStore,
    ) -> None:
        """Deleting a rule and invalidating leaves only the fallback."""
        rule = RuleFactory.create(tenant_id=tenant_id)
        await config_store.save_rule(rule)
        await compiler.get_compiled(tenant_id)

        await config_store.delete_rule(tenant_id, rule.id)
        await compiler.invalidate(tenant_id)

        assert len(await compiler.get_compiled(tenant_id)) == 1

    @pytest.mark.asyncio
    async def test_invalidate_all_clears_every_tenant(
        self,
        compiler: RuleCompiler,
        cache: InMemoryCacheService,
    ) -> None:
        """Global invalidation removes all compiled sets from the cache."""
        first, second = UUID(int=1), UUID(int=2)
        await compiler.get_compiled(first)
        await compiler.get_compiled(second)

        deleted = await compiler.invalidate_all()

        assert deleted == 2
        assert await cache.get(f"fd:triage:compiled:{first}") is None
