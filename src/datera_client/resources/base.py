"""Common helpers for resource wrappers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..config import CallContext
from ..models import ApiListOuter, ApiOuter, ListParams

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from ..connection import ApiConnection


class ResourceBase:
    """Provide shared helpers for resource modules.

    Wrappers only build paths and payloads; classification, retry and paging
    all happen inside `ApiConnection`.
    """

    path: str = "/"

    def __init__(self, connection: ApiConnection, prefix: str = "/") -> None:
        self._conn = connection
        self._prefix = prefix.rstrip("/")

    def _path(self, *parts: str) -> str:
        segments = [self.path.strip("/"), *(part.strip("/") for part in parts)]
        return f"{self._prefix}/{'/'.join(segment for segment in segments if segment)}"

    def _get(self, *parts: str, context: CallContext | None = None) -> ApiOuter:
        return self._conn.get(self._path(*parts), context=context)

    def _list(
        self,
        *parts: str,
        params: ListParams | Mapping[str, str] | None = None,
        context: CallContext | None = None,
    ) -> ApiListOuter:
        return self._conn.get_list(self._path(*parts), params=params, context=context)

    def _put(
        self,
        *parts: str,
        payload: Mapping[str, Any] | None = None,
        context: CallContext | None = None,
    ) -> ApiOuter:
        return self._conn.put(self._path(*parts), json_payload=payload, context=context)

    def _post(
        self,
        *parts: str,
        payload: Mapping[str, Any] | None = None,
        context: CallContext | None = None,
    ) -> ApiOuter:
        return self._conn.post(self._path(*parts), json_payload=payload, context=context)

    def _delete(self, *parts: str, context: CallContext | None = None) -> ApiOuter:
        return self._conn.delete(self._path(*parts), context=context)
