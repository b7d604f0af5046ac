"""The one rule comparator.

Used by the compiler and by the preview/test-match tooling so what authors
see is what production evaluates.
"""

from collections.abc import Iterable

from frontdesk.triage.models import TriageRule


def rule_sort_key(rule: TriageRule) -> tuple[int, int, float, str]:
    """Priority desc, source rank desc, updated_at desc, id asc."""
    return (
        -rule.priority,
        -rule.source.rank,
        -rule.updated_at.timestamp(),
        str(rule.id),
    )


def order_rules(rules: Iterable[TriageRule], fallback: TriageRule) -> tuple[TriageRule, ...]:
    """Sort authored rules and append the fallback after them."""
    ordered = sorted((r for r in rules if not r.is_fallback), key=rule_sort_key)
    return (*ordered, fallback)
