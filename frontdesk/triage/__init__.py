"""Triage: rule models, the shared comparator and the matcher.

The compiler and preview tooling live in their own modules and are imported
directly to keep this package free of store dependencies.
"""

from frontdesk.triage.matcher import TriageMatcher
from frontdesk.triage.models import (
    CompiledRuleSet,
    MatchMethod,
    RuleSource,
    ServiceType,
    TriageAction,
    TriageMatch,
    TriageRule,
)
from frontdesk.triage.ordering import order_rules, rule_sort_key

__all__ = [
    "CompiledRuleSet",
    "MatchMethod",
    "RuleSource",
    "ServiceType",
    "TriageAction",
    "TriageMatch",
    "TriageMatcher",
    "TriageRule",
    "order_rules",
    "rule_sort_key",
]
