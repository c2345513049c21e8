"""Resource-specific convenience wrappers."""
from .base import ResourceBase
from .storage_nodes import StorageNodesResource
from .system import SystemResource

__all__ = ["ResourceBase", "StorageNodesResource", "SystemResource"]
