"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, etc.)."""

    CALL_CLOSED = "CALL_CLOSED"
    """A turn arrived for a call that already ended or was handed off."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """The tenant has no usable configuration for the request."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level detail for validation failures."""

    field: str | None = None
    message: str


class ErrorBody(BaseModel):
    code: ErrorCode
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Standard error envelope.

    Example:
        {
            "error": {
                "code": "CALL_CLOSED",
                "message": "Call abc already ended with ESCALATE_TO_HUMAN"
            }
        }
    """

    error: ErrorBody
