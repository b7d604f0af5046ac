"""Triage matcher: first rule whose AND/NOT keyword conditions hold."""

from collections.abc import Sequence

from frontdesk.text import contains_phrase, normalize_text
from frontdesk.triage.models import CompiledRuleSet, MatchMethod, TriageMatch, TriageRule


class TriageMatcher:
    """Walks a compiled rule set in order.

    The effective keyword set of a turn is the utterance itself (whole-word
    phrase containment) plus any auxiliary keywords supplied by upstream
    classification. Pure and synchronous.
    """

    def match(
        self,
        utterance: str,
        ruleset: CompiledRuleSet,
        auxiliary_keywords: Sequence[str] | None = None,
    ) -> TriageMatch:
        text = normalize_text(utterance)
        aux = tuple(k for k in (normalize_text(a) for a in auxiliary_keywords or ()) if k)

        for index, rule in enumerate(ruleset.rules):
            if rule.is_fallback:
                return TriageMatch(
                    rule=rule,
                    match_method=MatchMethod.FALLBACK,
                    rule_index=index,
                    ruleset_version=ruleset.version,
                )

            if self._is_excluded(rule, text, aux):
                continue

            from_text = {k for k in rule.keywords if contains_phrase(text, k)}
            remaining = rule.keywords - from_text
            if any(not self._in_auxiliary(k, aux) for k in remaining):
                continue

            return TriageMatch(
                rule=rule,
                match_method=(
                    MatchMethod.AUXILIARY_KEYWORD if remaining else MatchMethod.EXACT_KEYWORD
                ),
                matched_keywords=tuple(sorted(rule.keywords)),
                rule_index=index,
                ruleset_version=ruleset.version,
            )

        # Unreachable while CompiledRuleSet enforces a trailing fallback.
        raise RuntimeError("compiled rule set has no fallback rule")

    @staticmethod
    def _in_auxiliary(keyword: str, aux: tuple[str, ...]) -> bool:
        return any(a == keyword or contains_phrase(a, keyword) for a in aux)

    def _is_excluded(self, rule: TriageRule, text: str, aux: tuple[str, ...]) -> bool:
        return any(
            contains_phrase(text, ex) or self._in_auxiliary(ex, aux)
            for ex in rule.exclude_keywords
        )
