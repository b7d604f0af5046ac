"""Authoring checks over a compiled rule set: keyword conflicts and
emergency phrase coverage."""

from enum import Enum
from itertools import combinations
from uuid import UUID

from pydantic import BaseModel, Field

from frontdesk.tenants.models import Trade
from frontdesk.triage.matcher import TriageMatcher
from frontdesk.triage.models import CompiledRuleSet, TriageAction

EMERGENCY_PHRASES: dict[Trade, tuple[str, ...]] = {
    Trade.HVAC: (
        "smell gas",
        "gas odor",
        "gas leak",
        "carbon monoxide",
        "co detector",
        "sparks from unit",
        "burning smell from ac",
        "electrical fire",
        "smoke from unit",
    ),
    Trade.PLUMBING: (
        "raw sewage",
        "sewage backup",
        "burst pipe",
        "flooding",
        "gas leak water heater",
        "water gushing",
        "main line break",
    ),
    Trade.ELECTRICAL: (
        "sparks",
        "burning smell",
        "exposed wires",
        "smoke from outlet",
        "electrical fire",
        "shock hazard",
        "arcing",
    ),
    Trade.GENERAL: (
        "emergency",
        "life threatening",
        "fire",
        "explosion",
        "injury",
    ),
}


class ConflictSeverity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


_SEVERITY_ORDER = {ConflictSeverity.HIGH: 0, ConflictSeverity.MEDIUM: 1, ConflictSeverity.LOW: 2}


class RuleConflict(BaseModel):
    """Two rules whose required keywords overlap."""

    rule_a_id: UUID
    rule_a_label: str
    rule_b_id: UUID
    rule_b_label: str
    overlapping_keywords: list[str]
    severity: ConflictSeverity
    winner_id: UUID = Field(..., description="Rule evaluated first in the compiled order")


class EmergencyGap(BaseModel):
    """An emergency phrase the live rules would not escalate."""

    phrase: str
    matched_rule_id: UUID
    matched_action: TriageAction


def detect_conflicts(ruleset: CompiledRuleSet) -> list[RuleConflict]:
    """Pairwise keyword overlap between authored rules, most severe first.

    HIGH when the overlap is more than half of either rule's keywords,
    MEDIUM when at least two keywords overlap, LOW otherwise.
    """
    conflicts: list[RuleConflict] = []
    authored = [r for r in ruleset.rules if not r.is_fallback]
    for first, second in combinations(authored, 2):
        overlap = first.keywords & second.keywords
        if not overlap:
            continue
        share_a = len(overlap) / len(first.keywords)
        share_b = len(overlap) / len(second.keywords)
        if share_a > 0.5 or share_b > 0.5:
            severity = ConflictSeverity.HIGH
        elif len(overlap) >= 2:
            severity = ConflictSeverity.MEDIUM
        else:
            severity = ConflictSeverity.LOW
        conflicts.append(
            RuleConflict(
                rule_a_id=first.id,
                rule_a_label=first.label,
                rule_b_id=second.id,
                rule_b_label=second.label,
                overlapping_keywords=sorted(overlap),
                severity=severity,
                winner_id=first.id,
            )
        )
    conflicts.sort(key=lambda c: _SEVERITY_ORDER[c.severity])
    return conflicts


def emergency_gaps(
    ruleset: CompiledRuleSet,
    trade: Trade,
    matcher: TriageMatcher | None = None,
) -> list[EmergencyGap]:
    """Run each emergency phrase for the trade through the live matcher."""
    matcher = matcher or TriageMatcher()
    phrases = EMERGENCY_PHRASES.get(trade, ()) + (
        EMERGENCY_PHRASES[Trade.GENERAL] if trade != Trade.GENERAL else ()
    )
    gaps: list[EmergencyGap] = []
    for phrase in phrases:
        result = matcher.match(phrase, ruleset)
        if result.action != TriageAction.ESCALATE_TO_HUMAN:
            gaps.append(
                EmergencyGap(
                    phrase=phrase,
                    matched_rule_id=result.rule.id,
                    matched_action=result.action,
                )
            )
    return gaps
