"""Authentication strategies for Datera."""
from .base import AuthStrategy
from .session import ReadWriteLock, SessionAuth

__all__ = ["AuthStrategy", "ReadWriteLock", "SessionAuth"]
