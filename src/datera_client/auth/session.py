"""Session-key authentication against the Datera login endpoint."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator, Mapping, MutableMapping
from contextlib import contextmanager

from ..exceptions import AuthenticationError, PermissionDeniedError
from ..models import ApiLogin
from .base import AuthStrategy

logger = logging.getLogger(__name__)

TOKEN_HEADER = "Auth-Token"
TENANT_HEADER = "tenant"

LoginCall = Callable[[Mapping[str, str]], ApiLogin]


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SessionAuth(AuthStrategy):
    """Hold the session key and tenant shared by every caller of a connection.

    A non-empty key is trusted until a 401 clears it; there is no expiry check.
    """

    def __init__(
        self,
        username: str,
        password: str,
        *,
        tenant: str,
        ldap_server: str = "",
    ) -> None:
        self.username = username
        self._password = password
        self.tenant = tenant
        self.ldap_server = ldap_server
        self._token = ""
        self._lock = ReadWriteLock()

    def __repr__(self) -> str:
        return f"SessionAuth(username={self.username!r}, tenant={self.tenant!r})"

    @property
    def token(self) -> str:
        with self._lock.read():
            return self._token

    def has_logged_in(self) -> bool:
        with self._lock.read():
            return self._token != ""

    def credentials(self) -> dict[str, str]:
        payload = {"name": self.username, "password": self._password}
        if self.ldap_server:
            payload["remote_server"] = self.ldap_server
        return payload

    def login(self, perform: LoginCall) -> bool:
        """Log in through `perform` unless a session key is already held.

        The write lock is held for the whole attempt so concurrent callers
        serialize and later ones find the key already set. Returns True when a
        network login actually happened.
        """
        with self._lock.write():
            if self._token:
                return False
            try:
                result = perform(self.credentials())
            except PermissionDeniedError:
                self._token = ""
                logger.error("Login rejected for user %s", self.username)
                raise
            if not result.key:
                raise AuthenticationError("Login response did not include a session key")
            self._token = result.key
            logger.debug("Logged in as %s (tenant %s)", self.username, self.tenant)
            return True

    def logout(self) -> None:
        with self._lock.write():
            self._token = ""

    def invalidate(self, stale_token: str) -> bool:
        """Clear the key only if it is still `stale_token`.

        Threads rejected with the same key all land here; the first clears it
        and the rest find a newer key (or an empty one) and leave it alone.
        Returns True when the key was cleared.
        """
        with self._lock.write():
            if self._token != stale_token:
                return False
            self._token = ""
            return True

    def apply(self, headers: MutableMapping[str, str]) -> None:
        with self._lock.read():
            headers[TENANT_HEADER] = self.tenant
            headers[TOKEN_HEADER] = self._token
