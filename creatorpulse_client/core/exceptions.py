"""
Custom exceptions and the envelope conversion boundary.
"""
from typing import Any, Dict, Optional

import httpx

from creatorpulse_client.core.logging import get_logger
from creatorpulse_client.schemas.common import ApiResponse, error_response

logger = get_logger(__name__)


class CreatorPulseException(Exception):
    """Base exception for CreatorPulse business errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "server_error",
        status_code: int = httpx.codes.INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationException(CreatorPulseException):
    """Validation error exception."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=httpx.codes.UNPROCESSABLE_ENTITY,
            details=details,
        )


class AuthException(CreatorPulseException):
    """Bad credentials or unusable account."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(
            message=message,
            error_code="auth_error",
            status_code=httpx.codes.UNAUTHORIZED,
        )


class AuthenticationException(CreatorPulseException):
    """Authentication error exception."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            error_code="authentication_error",
            status_code=httpx.codes.UNAUTHORIZED,
        )


class NotFoundException(CreatorPulseException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            error_code="not_found",
            status_code=httpx.codes.NOT_FOUND,
        )


class RateLimitException(CreatorPulseException):
    """Rate limit exceeded exception."""

    def __init__(self, message: str = "Rate limit exceeded"):
        super().__init__(
            message=message,
            error_code="rate_limit_error",
            status_code=httpx.codes.TOO_MANY_REQUESTS,
        )


class ServerException(CreatorPulseException):
    """Upstream or processing failure."""

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(
            message=message,
            error_code="server_error",
            status_code=httpx.codes.INTERNAL_SERVER_ERROR,
        )


class RemoteApiException(CreatorPulseException):
    """Well-formed business error returned by the remote API."""


class BackendUnavailable(Exception):
    """
    The remote backend could not be reached or answered with something
    that does not fit the wire contract.

    Only this exception triggers the simulated fallback path.
    """

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation}: {reason}")


# Map status codes to error codes
STATUS_ERROR_CODES = {
    400: "validation_error",
    401: "authentication_error",
    403: "authorization_error",
    404: "not_found",
    422: "validation_error",
    429: "rate_limit_error",
}

ERROR_CODES = frozenset({
    "validation_error",
    "auth_error",
    "authentication_error",
    "authorization_error",
    "not_found",
    "rate_limit_error",
    "server_error",
})


def error_code_for_status(status_code: int) -> str:
    """Map a non-success HTTP status to the error taxonomy."""
    if status_code in STATUS_ERROR_CODES:
        return STATUS_ERROR_CODES[status_code]
    if status_code >= 500:
        return "server_error"
    return "validation_error"


def exception_to_response(exc: CreatorPulseException) -> ApiResponse:
    """Convert a business exception to an error envelope."""
    logger.info(
        "Operation returned error",
        error_code=exc.error_code,
        message=exc.message,
        status_code=int(exc.status_code),
    )
    return error_response(exc.error_code, exc.message, exc.details)


def unexpected_exception_response(exc: Exception, operation: str) -> ApiResponse:
    """Convert an unexpected exception to a generic server error envelope."""
    logger.exception(
        "Unexpected exception occurred",
        exception_type=type(exc).__name__,
        operation=operation,
    )
    return error_response("server_error", "An unexpected error occurred")
