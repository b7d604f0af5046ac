"""API request and response models."""

from frontdesk.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from frontdesk.api.models.health import ComponentHealth, HealthResponse
from frontdesk.api.models.triage import InvalidateResponse, TestMatchRequest

__all__ = [
    "ComponentHealth",
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "InvalidateResponse",
    "TestMatchRequest",
]
