"""Frontdesk: per-turn call-decision pipeline for field-service phone agents."""

__version__ = "0.1.0"
