"""Logging and metrics."""

from frontdesk.observability.logging import call_context, configure_from, get_logger, setup_logging

__all__ = ["call_context", "configure_from", "get_logger", "setup_logging"]
