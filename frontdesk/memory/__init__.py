"""Cross-call memory: learning records, hydration, the optimization gate
and post-turn learning."""

from frontdesk.memory.gate import OptimizationGate
from frontdesk.memory.hydrator import MemoryHydrator
from frontdesk.memory.learning import PostTurnLearner
from frontdesk.memory.models import (
    CallerIntentHistory,
    GateDecision,
    GateReason,
    IntentResolutionPath,
    LearningRecord,
    MemorySnapshot,
    ResponseCacheEntry,
    TurnClassification,
    TurnOutcome,
)
from frontdesk.memory.store import LearningStore

__all__ = [
    "CallerIntentHistory",
    "GateDecision",
    "GateReason",
    "IntentResolutionPath",
    "LearningRecord",
    "LearningStore",
    "MemoryHydrator",
    "MemorySnapshot",
    "OptimizationGate",
    "PostTurnLearner",
    "ResponseCacheEntry",
    "TurnClassification",
    "TurnOutcome",
]
