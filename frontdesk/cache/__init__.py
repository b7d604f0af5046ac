"""Cache/invalidation service."""

from frontdesk.cache.alerts import (
    AlertNotifier,
    CacheAlert,
    FailureMonitor,
    LoggingAlertNotifier,
)
from frontdesk.cache.inmemory import InMemoryCacheService
from frontdesk.cache.keys import CacheKeys
from frontdesk.cache.redis import RedisCacheService
from frontdesk.cache.service import CacheService

__all__ = [
    "AlertNotifier",
    "CacheAlert",
    "CacheKeys",
    "CacheService",
    "FailureMonitor",
    "InMemoryCacheService",
    "LoggingAlertNotifier",
    "RedisCacheService",
]
