"""Base abstractions for auth strategies."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import MutableMapping


class AuthStrategy(ABC):
    """Credentials a connection attaches to every authenticated request."""

    @abstractmethod
    def apply(self, headers: MutableMapping[str, str]) -> None:
        """Write tenant and credential headers into `headers`."""

    @abstractmethod
    def has_logged_in(self) -> bool:
        """Whether credentials are currently held."""

    @abstractmethod
    def logout(self) -> None:
        """Forget held credentials so the next call must log in again."""

    def refresh(self, headers: MutableMapping[str, str]) -> None:
        """Re-apply headers after credentials changed, before a replay."""
        self.apply(headers)
