"""Redis implementation of LearningStore.

Key structure (see frontdesk.cache.keys):
- {ns}:learn:{tenant}:caller:{digest}:{intent} - hash of caller counters
- {ns}:learn:{tenant}:path:{intent}:{category} - hash of {scenario}:samples/successes
- {ns}:learn:{tenant}:resp:{hash}              - hash of response text and counters

Counters use HINCRBY; "last" fields use HSET (last write wins).
"""

from datetime import datetime
from uuid import UUID

import redis.asyncio as redis

from frontdesk.cache.keys import CacheKeys
from frontdesk.memory.models import (
    CallerIntentHistory,
    IntentResolutionPath,
    ResponseCacheEntry,
    TurnOutcome,
)
from frontdesk.memory.store import LearningStore
from frontdesk.observability.logging import get_logger
from frontdesk.triage.models import utc_now

logger = get_logger(__name__)


def _as_str(value: str | bytes | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def _decode(raw: dict) -> dict[str, str]:
    return {_as_str(k): _as_str(v) for k, v in raw.items()}  # type: ignore[misc]


def _uuid_or_none(value: str | None) -> UUID | None:
    return UUID(value) if value else None


class RedisLearningStore(LearningStore):
    """Learning records in Redis hashes."""

    def __init__(
        self,
        client: redis.Redis,
        keys: CacheKeys | None = None,
        caller_ttl_seconds: int = 180 * 24 * 3600,
        response_ttl_seconds: int = 30 * 24 * 3600,
    ) -> None:
        self._client = client
        self._keys = keys or CacheKeys()
        self._caller_ttl = caller_ttl_seconds
        self._response_ttl = response_ttl_seconds

    async def get_caller_history(
        self, tenant_id: UUID, caller_digest: str, intent: str
    ) -> CallerIntentHistory | None:
        raw = await self._client.hgetall(
            self._keys.caller_history(tenant_id, caller_digest, intent)
        )
        if not raw:
            return None
        data = _decode(raw)
        last_outcome = data.get("last_outcome")
        last_seen = data.get("last_seen_at")
        return CallerIntentHistory(
            intent=intent,
            total=int(data.get("total", 0)),
            successes=int(data.get("successes", 0)),
            failures=int(data.get("failures", 0)),
            last_outcome=TurnOutcome(last_outcome) if last_outcome else None,
            last_scenario_id=_uuid_or_none(data.get("last_scenario_id")),
            last_success_scenario_id=_uuid_or_none(data.get("last_success_scenario_id")),
            last_seen_at=datetime.fromisoformat(last_seen) if last_seen else None,
        )

    async def get_resolution_paths(
        self, tenant_id: UUID, intent: str, category: str
    ) -> list[IntentResolutionPath]:
        raw = await self._client.hgetall(self._keys.resolution_path(tenant_id, intent, category))
        counters: dict[str, dict[str, int]] = {}
        for field, value in _decode(raw).items():
            scenario, _, counter = field.rpartition(":")
            if not scenario:
                continue
            counters.setdefault(scenario, {})[counter] = int(value)
        return [
            IntentResolutionPath(
                intent=intent,
                category=category,
                scenario_id=UUID(scenario),
                samples=c.get("samples", 0),
                successes=c.get("successes", 0),
            )
            for scenario, c in counters.items()
        ]

    async def get_cached_response(
        self, tenant_id: UUID, utterance_hash: str
    ) -> ResponseCacheEntry | None:
        raw = await self._client.hgetall(self._keys.response_cache(tenant_id, utterance_hash))
        data = _decode(raw) if raw else {}
        if "text" not in data:
            return None
        return ResponseCacheEntry(
            utterance_hash=utterance_hash,
            text=data["text"],
            scenario_id=_uuid_or_none(data.get("scenario_id")),
            hits=int(data.get("hits", 0)),
            successes=int(data.get("successes", 0)),
            failures=int(data.get("failures", 0)),
        )

    async def record_caller_outcome(
        self,
        tenant_id: UUID,
        caller_digest: str,
        intent: str,
        outcome: TurnOutcome,
        scenario_id: UUID | None,
    ) -> None:
        key = self._keys.caller_history(tenant_id, caller_digest, intent)
        fields: dict[str, str] = {
            "last_outcome": outcome.value,
            "last_seen_at": utc_now().isoformat(),
            "last_scenario_id": str(scenario_id) if scenario_id else "",
        }
        if outcome == TurnOutcome.RESOLVED and scenario_id is not None:
            fields["last_success_scenario_id"] = str(scenario_id)

        pipe = self._client.pipeline(transaction=True)
        pipe.hincrby(key, "total", 1)
        if outcome == TurnOutcome.RESOLVED:
            pipe.hincrby(key, "successes", 1)
        elif outcome == TurnOutcome.ESCALATED:
            pipe.hincrby(key, "failures", 1)
        pipe.hset(key, mapping=fields)
        pipe.expire(key, self._caller_ttl)
        await pipe.execute()

    async def record_path_outcome(
        self,
        tenant_id: UUID,
        intent: str,
        category: str,
        scenario_id: UUID,
        success: bool,
    ) -> None:
        key = self._keys.resolution_path(tenant_id, intent, category)
        pipe = self._client.pipeline(transaction=True)
        pipe.hincrby(key, f"{scenario_id}:samples", 1)
        if success:
            pipe.hincrby(key, f"{scenario_id}:successes", 1)
        await pipe.execute()

    async def record_response(
        self,
        tenant_id: UUID,
        utterance_hash: str,
        *,
        text: str | None,
        scenario_id: UUID | None,
        success: bool,
        served_from_cache: bool = False,
    ) -> None:
        key = self._keys.response_cache(tenant_id, utterance_hash)
        if text is None and not await self._client.hexists(key, "text"):
            return

        pipe = self._client.pipeline(transaction=True)
        fields: dict[str, str] = {}
        if text is not None:
            fields["text"] = text
        if scenario_id is not None:
            fields["scenario_id"] = str(scenario_id)
        if fields:
            pipe.hset(key, mapping=fields)
        if served_from_cache:
            pipe.hincrby(key, "hits", 1)
        pipe.hincrby(key, "successes" if success else "failures", 1)
        pipe.expire(key, self._response_ttl)
        await pipe.execute()
        logger.debug("response_cache_recorded", tenant_id=str(tenant_id), success=success)
