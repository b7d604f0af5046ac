"""Key layout for everything this service persists.

    {ns}:triage:compiled:{tenant}                 compiled rule set
    {ns}:learn:{tenant}:caller:{digest}:{intent}  caller intent history
    {ns}:learn:{tenant}:path:{intent}:{category}  resolution path stats
    {ns}:learn:{tenant}:resp:{utterance_hash}     response cache entry
"""

from uuid import UUID


class CacheKeys:
    """Builds tenant-scoped keys under one namespace."""

    def __init__(self, namespace: str = "frontdesk") -> None:
        self._ns = namespace

    @property
    def namespace(self) -> str:
        return self._ns

    def compiled_rules(self, tenant_id: UUID) -> str:
        return f"{self._ns}:triage:compiled:{tenant_id}"

    def compiled_rules_prefix(self) -> str:
        return f"{self._ns}:triage:compiled:"

    def learning_prefix(self, tenant_id: UUID) -> str:
        return f"{self._ns}:learn:{tenant_id}:"

    def caller_history(self, tenant_id: UUID, caller_digest: str, intent: str) -> str:
        return f"{self._ns}:learn:{tenant_id}:caller:{caller_digest}:{intent}"

    def caller_history_prefix(self, tenant_id: UUID, caller_digest: str) -> str:
        return f"{self._ns}:learn:{tenant_id}:caller:{caller_digest}:"

    def resolution_path(self, tenant_id: UUID, intent: str, category: str) -> str:
        return f"{self._ns}:learn:{tenant_id}:path:{intent}:{category}"

    def response_cache(self, tenant_id: UUID, utterance_hash: str) -> str:
        return f"{self._ns}:learn:{tenant_id}:resp:{utterance_hash}"
