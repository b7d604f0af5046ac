"""API exception hierarchy.

All API exceptions inherit from FrontdeskAPIError, whose status_code and
error_code drive the global exception handler.
"""

from frontdesk.api.models.errors import ErrorCode


class FrontdeskAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(FrontdeskAPIError):
    """Raised when a request is well formed but inconsistent."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST
