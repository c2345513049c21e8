"""Storage node helpers."""

from __future__ import annotations

from typing import Any

from ..config import CallContext
from ..models import ListParams
from .base import ResourceBase


class StorageNodesResource(ResourceBase):
    """Work with Datera storage nodes."""

    path = "/storage_nodes"

    def list(
        self,
        params: ListParams | None = None,
        *,
        context: CallContext | None = None,
    ) -> list[dict[str, Any]]:
        return self._list(params=params, context=context).data

    def get(self, node_id: str, *, context: CallContext | None = None) -> dict[str, Any]:
        return self._get(node_id, context=context).data

    def set(
        self,
        node_id: str,
        payload: dict[str, Any],
        *,
        context: CallContext | None = None,
    ) -> dict[str, Any]:
        return self._put(node_id, payload=payload, context=context).data
