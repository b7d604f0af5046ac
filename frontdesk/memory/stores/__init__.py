"""Learning store implementations."""

from frontdesk.memory.stores.inmemory import InMemoryLearningStore
from frontdesk.memory.stores.redis import RedisLearningStore

__all__ = ["InMemoryLearningStore", "RedisLearningStore"]
