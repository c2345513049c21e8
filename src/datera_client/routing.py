"""URL composition, canonical routes and log redaction."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

REDACTED = "********"
MUTED = "<muted>"
# Payloads mentioning any of these are never logged.
SENSITIVE_FIELDS = ("target_user_name", "secret", "password")
SENSITIVE_HEADERS = ("Auth-Token",)

_ID_SEGMENT = re.compile(
    r"^(?:\d+|[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})$",
    re.IGNORECASE,
)


def build_url(base_url: str, path: str) -> str:
    """Join `path` onto `base_url`, keeping the base path (the API version) intact."""

    parsed = urlparse(path)
    if parsed.scheme and parsed.netloc:
        return path
    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return base_url.rstrip("/")
    return f"{base_url.rstrip('/')}/{'/'.join(segments)}"


def canonicalize_route(path: str, api_version: str) -> str:
    """Collapse identifiers in `path` so log lines group by endpoint."""

    segments = [segment for segment in urlparse(path).path.split("/") if segment]
    if segments and segments[0] == f"v{api_version}":
        segments = segments[1:]
    canonical = ["{id}" if _ID_SEGMENT.match(segment) else segment for segment in segments]
    return "/" + "/".join(canonical)


def redact_payload(
    payload: Mapping[str, Any] | None,
    *,
    sensitive: bool = False,
    quiet: bool = False,
) -> str:
    """Render a request payload for logging."""

    if quiet:
        return MUTED
    if sensitive:
        return REDACTED
    try:
        text = json.dumps(payload)
    except (TypeError, ValueError):
        text = repr(payload)
    if any(name in text for name in SENSITIVE_FIELDS):
        return REDACTED
    return text


def redact_body(body: str, *, quiet: bool = False) -> str:
    """Render a response body for logging."""

    if quiet:
        return MUTED
    if any(name in body for name in SENSITIVE_FIELDS) or '"key"' in body:
        return REDACTED
    return body


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        name: (REDACTED if name in SENSITIVE_HEADERS else value)
        for name, value in headers.items()
    }
