"""Bounded-duration retry for transient Datera failures."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from .config import DEFAULT_RETRY_TIMEOUT, CallContext
from .exceptions import ApiConnectionError, RetryableServerError, RetryTimeoutError
from .models import ApiErrorResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    attempt: Callable[[], T],
    *,
    timeout: float = DEFAULT_RETRY_TIMEOUT,
    context: CallContext | None = None,
) -> T:
    """Run `attempt` until it succeeds, fails terminally, or `timeout` elapses.

    Only `RetryableServerError` (HTTP 503) and `ApiConnectionError` are
    retried; every other exception propagates from the first attempt that
    raises it.
    """

    context = context or CallContext()
    started = time.monotonic()
    backoff = 1
    last_error: ApiErrorResponse | None = None
    last_exc: Exception | None = None
    while time.monotonic() - started < timeout:
        context.check()
        try:
            return attempt()
        except RetryableServerError as exc:
            last_error = exc.response
            last_exc = exc
        except ApiConnectionError as exc:
            last_exc = exc
        delay = backoff * backoff
        logger.warning(
            "Transient failure (%s), retrying in %ss (trace_id=%s)",
            last_exc,
            delay,
            context.trace_id,
        )
        context.wait(delay)
        backoff += 1
    raise RetryTimeoutError(
        "timeout reached before request completed successfully during retries",
        last_error=last_error,
    ) from last_exc
