"""Domain error taxonomy.

Each error is raised at the seam that fails and caught where the turn
degrades to a safe default. Only CallClosedError is allowed to leave the
turn entry point.
"""


class FrontdeskError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(FrontdeskError):
    """Unusable configuration: service config files or a tenant's rules and scenarios."""


class ResolverTimeout(FrontdeskError):
    """Tier 3 did not answer inside its hard timeout."""

    def __init__(self, message: str, timeout_ms: int) -> None:
        super().__init__(message)
        self.timeout_ms = timeout_ms


class BudgetExceeded(FrontdeskError):
    """Tenant tier-3 spend, latency or failure budget is exhausted."""

    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class CacheUnavailable(FrontdeskError):
    """Cache backend could not be reached."""

    def __init__(self, message: str, operation: str) -> None:
        super().__init__(message)
        self.operation = operation


class LearningWriteFailure(FrontdeskError):
    """A post-turn learning write was lost."""


class CallClosedError(FrontdeskError):
    """A turn arrived for a call that already ended or was handed off."""

    def __init__(self, message: str, call_id: str) -> None:
        super().__init__(message)
        self.call_id = call_id
