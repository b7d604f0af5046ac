"""Observability configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class ObservabilityConfig(BaseModel):
    """Logging and metrics configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Minimum log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="json", description="Log renderer"
    )
    redact_pii: bool = Field(default=True, description="Redact PII from log events")
    metrics_enabled: bool = Field(default=True, description="Expose /metrics")
