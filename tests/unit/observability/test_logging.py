"""Unit tests for structured logging and PII redaction."""

import pytest
import structlog

from frontdesk.config.models.observability import ObservabilityConfig
from frontdesk.observability.logging import (
    PIIRedactor,
    call_context,
    configure_from,
    get_logger,
    setup_logging,
)


class TestPIIRedactor:
    """Tests for the redaction processor."""

    def test_sensitive_keys_replaced(self) -> None:
        """Known sensitive keys are redacted wholesale."""
        redactor = PIIRedactor()
        event = redactor(None, "info", {"event": "turn", "caller_id": "+1 555 010 0199"})
        assert event["caller_id"] == "[REDACTED]"
        assert event["event"] == "turn"

    def test_phone_numbers_scrubbed_from_strings(self) -> None:
        """Phone numbers inside free text are masked."""
        redactor = PIIRedactor()
        event = redactor(None, "info", {"utterance": "call me at 555-010-0199 please"})
        assert event["utterance"] == "call me at [PHONE] please"

    def test_emails_scrubbed_in_nested_values(self) -> None:
        """Nested dicts and lists are scrubbed too."""
        redactor = PIIRedactor()
        event = redactor(
            None,
            "info",
            {"context": {"notes": ["reach me at jo@example.com"]}, "address": "12 Elm St"},
        )
        assert event["context"]["notes"] == ["reach me at [EMAIL]"]
        assert event["address"] == "[REDACTED]"

    def test_non_string_values_untouched(self) -> None:
        """Numbers and booleans pass through."""
        redactor = PIIRedactor()
        event = redactor(None, "info", {"turn_index": 3, "degraded": False})
        assert event == {"turn_index": 3, "degraded": False}


class TestSetupLogging:
    """Tests for logging configuration."""

    def test_json_logging_configures_structlog(self) -> None:
        """setup_logging installs the redactor when asked."""
        setup_logging(level="DEBUG", format="json", redact_pii=True)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, PIIRedactor) for p in processors)

    def test_redaction_can_be_disabled(self) -> None:
        """Without redact_pii no redactor is installed."""
        setup_logging(level="INFO", format="console", redact_pii=False)
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, PIIRedactor) for p in processors)

    def test_get_logger_returns_bound_logger(self) -> None:
        """Loggers accept structured keyword arguments."""
        logger = get_logger("frontdesk.test")
        logger.info("logger_smoke_test", tenant_id="t-1")

    def test_configure_from_settings_section(self) -> None:
        """configure_from applies the observability config."""
        configure_from(ObservabilityConfig(log_format="console", redact_pii=False))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


class TestCallContext:
    """Tests for per-turn context binding."""

    def test_binds_and_unbinds_call_identifiers(self) -> None:
        """Identifiers are visible inside the block only."""
        with call_context("tenant-1", "call-7", 2):
            bound = structlog.contextvars.get_contextvars()
            assert bound == {"tenant_id": "tenant-1", "call_id": "call-7", "turn_index": 2}

        assert "call_id" not in structlog.contextvars.get_contextvars()

    def test_unbinds_when_block_raises(self) -> None:
        """A failing turn does not leak its identifiers."""
        with pytest.raises(RuntimeError), call_context("tenant-1", "call-7", 0):
            raise RuntimeError("boom")

        assert "tenant_id" not in structlog.contextvars.get_contextvars()
