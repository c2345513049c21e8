"""System metadata helpers."""
from __future__ import annotations

from typing import Any

from ..config import CallContext
from .base import ResourceBase


class SystemResource(ResourceBase):
    """Expose the cluster-wide /system endpoint."""

    path = "/system"

    def get(self, *, context: CallContext | None = None) -> dict[str, Any]:
        return self._get(context=context).data

    def set(self, payload: dict[str, Any], *, context: CallContext | None = None) -> dict[str, Any]:
        return self._put(payload=payload, context=context).data

    def sw_version(self, *, context: CallContext | None = None) -> str:
        """Return the running software version string."""

        return str(self.get(context=context).get("sw_version") or "")
