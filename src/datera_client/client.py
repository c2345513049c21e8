"""High-level Datera client entrypoint."""

from __future__ import annotations

import logging
from typing import Any

import requests

from .config import CallContext, ClientConfig
from .connection import ApiConnection
from .resources import StorageNodesResource, SystemResource

logger = logging.getLogger(__name__)


class DateraClient:
    """Own an `ApiConnection` and expose resource helpers on top of it."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        session: requests.Session | None = None,
        **overrides: Any,
    ) -> None:
        self.config = config or ClientConfig.from_env(**overrides)
        self.conn = ApiConnection(self.config, session=session)
        self.system = SystemResource(self.conn)
        self.storage_nodes = StorageNodesResource(self.conn)

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> DateraClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    # Public API --------------------------------------------------------------
    def new_context(self, *, quiet: bool = False, timeout: float | None = None) -> CallContext:
        """Return a fresh per-call context with its own trace id."""

        return CallContext.new(quiet=quiet, timeout=timeout)

    def api_versions(self) -> list[str]:
        return self.conn.api_versions()

    def system_version(self) -> str:
        return self.system.sw_version(context=self.new_context(quiet=True))

    def health_check(self) -> list[dict[str, Any]]:
        """List storage nodes to prove the cluster is reachable with these credentials."""

        nodes = self.storage_nodes.list(context=self.new_context(quiet=True))
        logger.debug(
            "Connected to cluster: %s with tenant %s.", self.config.hostname, self.config.tenant
        )
        for node in nodes:
            logger.debug("Found Storage Node: %s", node.get("uuid"))
        return nodes

    def close(self) -> None:
        self.conn.close()
