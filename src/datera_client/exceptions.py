"""Custom exception hierarchy for the Datera client."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .models import ApiErrorResponse


class DateraError(RuntimeError):
    """Base error for Datera failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ApiError(DateraError):
    """Raised when the API answered with an error envelope."""

    def __init__(self, response: ApiErrorResponse, message: str | None = None) -> None:
        super().__init__(
            message or response.describe(),
            status_code=response.http or None,
            details=response.errors or None,
        )
        self.response = response


class InvalidRequestError(ApiError):
    """HTTP 400: the request itself was rejected."""


class PermissionDeniedError(ApiError):
    """HTTP 401: the session is missing, expired or the credentials are wrong."""


class RetryableServerError(ApiError):
    """HTTP 503: the service is temporarily unavailable."""


class RequestError(DateraError):
    """Raised when an HTTP request cannot be fulfilled."""


class ApiConnectionError(RequestError):
    """Raised when the management endpoint refuses the connection."""


class RequestCancelledError(RequestError):
    """Raised when a call's deadline passes or its cancel event fires."""


class UnexpectedResponseError(DateraError):
    """Raised when the API returns an unexpected payload structure."""


class AuthenticationError(DateraError):
    """Raised when a login completes without yielding a session key."""


class RetryTimeoutError(DateraError):
    """Raised when retries run out of time before a terminal outcome."""

    def __init__(self, message: str, *, last_error: ApiErrorResponse | None = None) -> None:
        super().__init__(
            message,
            status_code=last_error.http if last_error is not None else None,
        )
        self.last_error = last_error
