"""Envelope and query-parameter types shared across the client."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import UnexpectedResponseError


def _expect_mapping(payload: Any, kind: str) -> Mapping[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise UnexpectedResponseError(
            f"Expected a JSON object for {kind}, got {type(payload).__name__}",
            details=payload,
        )
    return payload


@dataclass(slots=True)
class ApiErrorResponse:
    """Decoded error envelope. Every field may be absent on the wire."""

    name: str = ""
    code: int = 0
    http: int = 0
    message: str = ""
    ts: str = ""
    version: str = ""
    op: str = ""
    tenant: str = ""
    path: str = ""
    params: dict[str, str] = field(default_factory=dict)
    conn_info: dict[str, str] = field(default_factory=dict)
    client_id: str = ""
    client_type: str = ""
    api_req_id: int = 0
    tenancy_class: str = ""
    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Any) -> ApiErrorResponse:
        body = _expect_mapping(payload, "error envelope")
        return cls(
            name=body.get("name") or "",
            code=body.get("code") or 0,
            http=body.get("http") or 0,
            message=body.get("message") or "",
            ts=body.get("ts") or "",
            version=body.get("version") or "",
            op=body.get("op") or "",
            tenant=body.get("tenant") or "",
            path=body.get("path") or "",
            params=dict(body.get("params") or {}),
            conn_info=dict(body.get("connInfo") or {}),
            client_id=body.get("client_id") or "",
            client_type=body.get("client_type") or "",
            api_req_id=body.get("api_req_id") or 0,
            tenancy_class=body.get("tenancy_class") or "",
            errors=list(body.get("errors") or []),
        )

    def to_json(self) -> dict[str, Any]:
        """Render back to the wire shape, omitting empty fields."""
        wire = {
            "name": self.name,
            "code": self.code,
            "http": self.http,
            "message": self.message,
            "ts": self.ts,
            "version": self.version,
            "op": self.op,
            "tenant": self.tenant,
            "path": self.path,
            "params": self.params,
            "connInfo": self.conn_info,
            "client_id": self.client_id,
            "client_type": self.client_type,
            "api_req_id": self.api_req_id,
            "tenancy_class": self.tenancy_class,
            "errors": self.errors,
        }
        return {key: value for key, value in wire.items() if value}

    def describe(self) -> str:
        label = self.name or "ApiError"
        text = f"{label} (http {self.http})"
        if self.message:
            text += f": {self.message}"
        return text


@dataclass(slots=True)
class ApiOuter:
    """Single-resource envelope."""

    data: dict[str, Any] = field(default_factory=dict)
    version: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    request_time: int = 0
    tenant: str = ""
    path: str = ""

    @classmethod
    def from_json(cls, payload: Any) -> ApiOuter:
        body = _expect_mapping(payload, "response envelope")
        data = body.get("data") or {}
        if not isinstance(data, Mapping):
            raise UnexpectedResponseError(
                "Expected 'data' to be a JSON object", details=payload
            )
        return cls(
            data=dict(data),
            version=body.get("version") or "",
            metadata=dict(body.get("metadata") or {}),
            request_time=body.get("request_time") or 0,
            tenant=body.get("tenant") or "",
            path=body.get("path") or "",
        )


@dataclass(slots=True)
class ApiListOuter:
    """List envelope; `metadata['total_count']` drives pagination."""

    data: list[Any] = field(default_factory=list)
    version: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    request_time: int = 0
    tenant: str = ""
    path: str = ""

    @classmethod
    def from_json(cls, payload: Any) -> ApiListOuter:
        body = _expect_mapping(payload, "list envelope")
        data = body.get("data") or []
        if not isinstance(data, list):
            raise UnexpectedResponseError("Expected 'data' to be a JSON array", details=payload)
        return cls(
            data=list(data),
            version=body.get("version") or "",
            metadata=dict(body.get("metadata") or {}),
            request_time=body.get("request_time") or 0,
            tenant=body.get("tenant") or "",
            path=body.get("path") or "",
        )

    @property
    def total_count(self) -> int | None:
        value = self.metadata.get("total_count")
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise UnexpectedResponseError(
                f"Invalid total_count in list metadata: {value!r}"
            ) from exc


@dataclass(slots=True)
class ApiLogin:
    """Login response."""

    key: str = ""
    version: str = ""
    request_time: int = 0

    @classmethod
    def from_json(cls, payload: Any) -> ApiLogin:
        body = _expect_mapping(payload, "login response")
        return cls(
            key=body.get("key") or "",
            version=body.get("version") or "",
            request_time=body.get("request_time") or 0,
        )


def _parse_int(raw: str | None, name: str) -> int:
    if not raw:
        return 0
    try:
        return int(raw, 0)
    except ValueError as exc:
        raise ValueError(f"Query parameter {name!r} is not an integer: {raw!r}") from exc


@dataclass(slots=True)
class ListParams:
    """Standard list query parameters. Zero and empty values are never sent."""

    filter: str = ""
    limit: int = 0
    sort: str = ""
    offset: int = 0

    def to_map(self) -> dict[str, str]:
        result: dict[str, str] = {}
        if self.filter:
            result["filter"] = self.filter
        if self.limit:
            result["limit"] = str(self.limit)
        if self.sort:
            result["sort"] = self.sort
        if self.offset:
            result["offset"] = str(self.offset)
        return result

    @classmethod
    def from_map(cls, params: Mapping[str, str] | None) -> ListParams:
        params = params or {}
        return cls(
            filter=params.get("filter", ""),
            limit=_parse_int(params.get("limit"), "limit"),
            sort=params.get("sort", ""),
            offset=_parse_int(params.get("offset"), "offset"),
        )

    @property
    def is_windowed(self) -> bool:
        """True when the caller asked for an explicit page."""
        return bool(self.limit or self.offset)


@dataclass(slots=True)
class ListRangeParams(ListParams):
    """List parameters for time-ranged collections such as metrics and events."""

    since: str = ""
    from_: str = ""
    to: str = ""

    def to_map(self) -> dict[str, str]:
        result = ListParams.to_map(self)
        if self.since:
            result["since"] = self.since
        if self.from_:
            result["from"] = self.from_
        if self.to:
            result["to"] = self.to
        return result

    @classmethod
    def from_map(cls, params: Mapping[str, str] | None) -> ListRangeParams:
        params = params or {}
        return cls(
            filter=params.get("filter", ""),
            limit=_parse_int(params.get("limit"), "limit"),
            sort=params.get("sort", ""),
            offset=_parse_int(params.get("offset"), "offset"),
            since=params.get("since", ""),
            from_=params.get("from", ""),
            to=params.get("to", ""),
        )


@dataclass(slots=True)
class ApiVersions:
    api_versions: list[str] = field(default_factory=list)
