"""HTTP utilities for Datera API access: transport calls and error classification."""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from requests import RequestException, Response, Session

from .exceptions import (
    ApiError,
    InvalidRequestError,
    PermissionDeniedError,
    RequestError,
    RetryableServerError,
    UnexpectedResponseError,
)
from .models import ApiErrorResponse

logger = logging.getLogger(__name__)

CONNECTION_REFUSED_TEXT = "connection refused"


class Outcome(enum.IntEnum):
    """Failure classes that drive retry and re-authentication decisions."""

    INVALID_REQUEST = 400
    PERMISSION_DENIED = 401
    RETRYABLE_SERVER_ERROR = 503
    CONNECTION_ERROR = 9998
    # Internal only: the call must be replayed after a fresh login.
    RETRY_AFTER_LOGIN = 9999


_OUTCOME_ERRORS: dict[Outcome, type[ApiError]] = {
    Outcome.INVALID_REQUEST: InvalidRequestError,
    Outcome.PERMISSION_DENIED: PermissionDeniedError,
    Outcome.RETRYABLE_SERVER_ERROR: RetryableServerError,
}


def is_connection_refused(error: BaseException) -> bool:
    """Return True when a transport error means the endpoint refused the connection."""

    if isinstance(error, ConnectionRefusedError):
        return True
    return CONNECTION_REFUSED_TEXT in str(error).lower()


def classify_status(status_code: int) -> Outcome | None:
    try:
        outcome = Outcome(status_code)
    except ValueError:
        return None
    return outcome if outcome in _OUTCOME_ERRORS else None


def translate_errors(
    response: Response | None,
    error: BaseException | None,
) -> tuple[ApiErrorResponse | None, Outcome | None]:
    """Map a transport result onto an API error and an outcome class.

    A transport error that is not a refused connection is re-raised as
    `RequestError`; it is never classified.
    """

    if error is not None:
        if is_connection_refused(error):
            return None, Outcome.CONNECTION_ERROR
        reason = str(error).strip() or error.__class__.__name__
        raise RequestError(
            f"Failed to communicate with Datera API: {reason}", details=reason
        ) from error

    if response is None or response.ok:
        return None, None

    try:
        eresp = ApiErrorResponse.from_json(response.json() if response.content else None)
    except (ValueError, UnexpectedResponseError) as exc:
        logger.error(
            "Failed to decode error response (status %s): %s", response.status_code, exc
        )
        eresp = ApiErrorResponse()
    # 503s in particular may arrive without a body, the status is always kept.
    if not eresp.http:
        eresp.http = response.status_code
    return eresp, classify_status(response.status_code)


def api_error_for(eresp: ApiErrorResponse, outcome: Outcome | None) -> ApiError:
    """Build the exception that surfaces `eresp` to the caller."""

    return _OUTCOME_ERRORS.get(outcome, ApiError)(eresp)


def parse_json(response: Response) -> Any:
    """Parse JSON with helpful error context."""

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise UnexpectedResponseError(
            "Response did not contain valid JSON", details=response.text[:200]
        ) from exc


def send(
    session: Session,
    method: str,
    url: str,
    *,
    params: Mapping[str, str] | None = None,
    headers: MutableMapping[str, str] | None = None,
    json_payload: Mapping[str, Any] | None = None,
    data_payload: Mapping[str, Any] | None = None,
    timeout: float | tuple[float, float] | None = None,
    verify: bool | str = True,
) -> tuple[Response | None, BaseException | None]:
    """Issue one request, returning either the response or the transport error."""

    try:
        response = session.request(
            method=method,
            url=url,
            params=params,
            headers=headers,
            json=json_payload,
            data=data_payload,
            timeout=timeout,
            verify=verify,
        )
    except RequestException as exc:
        return None, exc
    return response, None
