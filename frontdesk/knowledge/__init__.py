"""Knowledge resolution: scenario pool models and the tiered cascade.

The resolver and tiers are imported from their modules directly; this
package only re-exports the models so the tenant store can depend on it.
"""

from frontdesk.knowledge.models import (
    FollowUpAction,
    ReplyStrategy,
    ReplyVariant,
    ResolutionResult,
    ResolutionTier,
    ScenarioCandidate,
    ScenarioScore,
    ScenarioType,
    Tier3Verdict,
    TierAttempt,
)

__all__ = [
    "FollowUpAction",
    "ReplyStrategy",
    "ReplyVariant",
    "ResolutionResult",
    "ResolutionTier",
    "ScenarioCandidate",
    "ScenarioScore",
    "ScenarioType",
    "Tier3Verdict",
    "TierAttempt",
]
