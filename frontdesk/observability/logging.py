"""Structured logging for the call pipeline.

Every line emitted while a turn is running carries tenant_id, call_id and
turn_index through structlog contextvars. Caller identity never reaches the
log sink: identity fields are dropped to a marker and phone numbers or
emails inside free text (utterances, replies) are masked.
"""

import logging
import re
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

from frontdesk.config.models.observability import ObservabilityConfig

# Fields that identify the caller or hold credentials
CALLER_FIELDS: frozenset[str] = frozenset({
    "caller_id",
    "caller_phone",
    "phone",
    "phone_number",
    "callback_number",
    "first_name",
    "last_name",
    "email",
    "address",
    "street_address",
    "api_key",
    "authorization",
    "token",
    "secret",
})

_EMAIL = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
_PHONE = re.compile(r"\+?\d[\d\s\-\(\)\.]{8,}\d")

_CALL_KEYS = ("tenant_id", "call_id", "turn_index")


class PIIRedactor:
    """structlog processor that scrubs caller identity from an event."""

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._scrub(event_dict))

    def _scrub(self, value: Any, key: str | None = None) -> Any:
        if key is not None and key.lower() in CALLER_FIELDS:
            return "[REDACTED]"
        if isinstance(value, MutableMapping):
            return {k: self._scrub(v, k) for k, v in value.items()}
        if isinstance(value, list):
            return [self._scrub(item) for item in value]
        if isinstance(value, str):
            return _PHONE.sub("[PHONE]", _EMAIL.sub("[EMAIL]", value))
        return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structlog for the service.

    Args:
        level: Minimum log level name
        format: "json" for deployed services, "console" for local runs
        redact_pii: Install PIIRedactor ahead of the renderer
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if redact_pii:
        processors.append(PIIRedactor())
    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def configure_from(config: ObservabilityConfig) -> None:
    """Apply the observability section of Settings."""
    setup_logging(
        level=config.log_level,
        format=config.log_format,
        redact_pii=config.redact_pii,
    )


@contextmanager
def call_context(tenant_id: Any, call_id: str, turn_index: int) -> Iterator[None]:
    """Bind the turn's identifiers to every log line inside the block."""
    structlog.contextvars.bind_contextvars(
        tenant_id=str(tenant_id), call_id=call_id, turn_index=turn_index
    )
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*_CALL_KEYS)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
