"""Storage and cache backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "redis"]


class StorageConfig(BaseModel):
    """Backend selection for the cache service and learning store."""

    backend: BackendType = Field(default="inmemory", description="Backend type")
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    key_namespace: str = Field(
        default="frontdesk",
        min_length=1,
        description="Prefix applied to every key this service writes",
    )


class CacheConfig(BaseModel):
    """Cache/invalidation service configuration."""

    enabled: bool = Field(default=True, description="Use the cache at all")
    compiled_rules_ttl_seconds: int = Field(
        default=3600,
        gt=0,
        description="TTL of a compiled triage rule set",
    )
    scan_count: int = Field(
        default=100,
        gt=0,
        description="COUNT hint for incremental SCAN during pattern invalidation",
    )
    delete_batch_size: int = Field(
        default=100,
        gt=0,
        description="Keys deleted per pipelined batch",
    )
    alert_failure_threshold: int = Field(
        default=5,
        gt=0,
        description="Consecutive backend failures before alerting",
    )
    alert_cooldown_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Minimum seconds between two alerts",
    )
