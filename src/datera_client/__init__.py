"""High-level Datera client entrypoints."""
from .client import DateraClient
from .config import CallContext, ClientConfig
from .connection import ApiConnection
from .exceptions import (
    ApiConnectionError,
    ApiError,
    DateraError,
    InvalidRequestError,
    PermissionDeniedError,
    RequestError,
    RetryableServerError,
    RetryTimeoutError,
)
from .models import ApiErrorResponse, ApiListOuter, ApiOuter, ListParams, ListRangeParams

__all__ = [
    "DateraClient",
    "ApiConnection",
    "ClientConfig",
    "CallContext",
    "DateraError",
    "ApiError",
    "InvalidRequestError",
    "PermissionDeniedError",
    "RetryableServerError",
    "RequestError",
    "ApiConnectionError",
    "RetryTimeoutError",
    "ApiErrorResponse",
    "ApiOuter",
    "ApiListOuter",
    "ListParams",
    "ListRangeParams",
]
