"""Operator alerting for sustained cache backend failures."""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import BaseModel, Field

from frontdesk.observability.logging import get_logger
from frontdesk.observability.metrics import CACHE_ALERTS

logger = get_logger(__name__)


class CacheAlert(BaseModel):
    """Alert payload handed to the notifier."""

    consecutive_failures: int = Field(..., description="Failures in a row when raised")
    last_operation: str = Field(..., description="Operation that tipped the threshold")
    last_error: str = Field(..., description="Error text of the last failure")


class AlertNotifier(ABC):
    """Destination for operator alerts."""

    @abstractmethod
    def notify(self, alert: CacheAlert) -> None:
        """Deliver the alert. Must not raise."""
        pass


class LoggingAlertNotifier(AlertNotifier):
    """Emits the alert as an error-level structured log line."""

    def notify(self, alert: CacheAlert) -> None:
        logger.error(
            "cache_alert_raised",
            consecutive_failures=alert.consecutive_failures,
            operation=alert.last_operation,
            error=alert.last_error,
        )


class FailureMonitor:
    """Counts consecutive backend failures and raises throttled alerts.

    An alert fires when the consecutive count reaches the threshold and no
    alert fired within the cooldown. Any success resets the count.
    """

    def __init__(
        self,
        notifier: AlertNotifier | None = None,
        threshold: int = 5,
        cooldown_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._notifier = notifier or LoggingAlertNotifier()
        self._threshold = threshold
        self._cooldown = cooldown_seconds
        self._clock = clock
        self._consecutive = 0
        self._last_alert_at: float | None = None

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive

    def record_success(self) -> None:
        if self._consecutive:
            logger.info("cache_backend_recovered", after_failures=self._consecutive)
        self._consecutive = 0

    def record_failure(self, operation: str, error: str) -> bool:
        """Count a failure; returns True when an alert was raised."""
        self._consecutive += 1
        if self._consecutive < self._threshold:
            return False

        now = self._clock()
        if self._last_alert_at is not None and now - self._last_alert_at < self._cooldown:
            return False

        self._last_alert_at = now
        CACHE_ALERTS.inc()
        self._notifier.notify(
            CacheAlert(
                consecutive_failures=self._consecutive,
                last_operation=operation,
                last_error=error,
            )
        )
        return True
