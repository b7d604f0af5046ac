"""Configuration section models."""

from frontdesk.config.models.api import APIConfig
from frontdesk.config.models.observability import ObservabilityConfig
from frontdesk.config.models.pipeline import (
    ActionConfig,
    BudgetConfig,
    MemoryConfig,
    OptimizationConfig,
    ResolverConfig,
    ResponseConfig,
    Tier2Config,
    Tier3Config,
    TriageConfig,
)
from frontdesk.config.models.providers import EmbeddingProviderConfig, ProvidersConfig
from frontdesk.config.models.storage import CacheConfig, StorageConfig

__all__ = [
    "APIConfig",
    "ActionConfig",
    "BudgetConfig",
    "CacheConfig",
    "EmbeddingProviderConfig",
    "MemoryConfig",
    "ObservabilityConfig",
    "OptimizationConfig",
    "ProvidersConfig",
    "ResolverConfig",
    "ResponseConfig",
    "StorageConfig",
    "Tier2Config",
    "Tier3Config",
    "TriageConfig",
]
