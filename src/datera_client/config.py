"""Configuration helpers for the Datera client."""

from __future__ import annotations

import os
import threading
import time
import uuid
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import RequestCancelledError

VERSION = "1.1.5"
DEFAULT_DRIVER = f"Python-SDK-{VERSION}"
DEFAULT_API_VERSION = "2.2"
DEFAULT_TENANT = "/root"
DEFAULT_RETRY_TIMEOUT = 300.0
SECURE_PORT = 7718
INSECURE_PORT = 7717
LOGIN_PATH = "login"

ENV_HOST = "DAT_MGMT"
ENV_USERNAME = "DAT_USER"
ENV_PASSWORD = "DAT_PASS"
ENV_TENANT = "DAT_TENANT"
ENV_API_VERSION = "DAT_API"
ENV_LDAP = "DAT_LDAP"


@dataclass(slots=True)
class ClientConfig:
    """Typed configuration for `ApiConnection`."""

    hostname: str
    username: str
    password: str
    tenant: str = DEFAULT_TENANT
    api_version: str = DEFAULT_API_VERSION
    ldap_server: str = ""
    secure: bool = True
    verify_ssl: bool | str = False
    timeout: float = 30.0
    retry_timeout: float = DEFAULT_RETRY_TIMEOUT
    driver: str = DEFAULT_DRIVER

    @property
    def root_url(self) -> str:
        host = self.hostname.strip("/")
        if self.secure:
            return f"https://{host}:{SECURE_PORT}"
        return f"http://{host}:{INSECURE_PORT}"

    @property
    def base_url(self) -> str:
        return f"{self.root_url}/v{self.api_version}"

    def resolved_headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Datera-Driver": self.driver,
        }

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> ClientConfig:
        """Build a config from the `DAT_*` environment variables.

        Keyword overrides win over the environment. Raises `ValueError` listing
        every required variable that is missing.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "hostname": env.get(ENV_HOST, ""),
            "username": env.get(ENV_USERNAME, ""),
            "password": env.get(ENV_PASSWORD, ""),
            "tenant": env.get(ENV_TENANT) or DEFAULT_TENANT,
            "api_version": env.get(ENV_API_VERSION) or DEFAULT_API_VERSION,
            "ldap_server": env.get(ENV_LDAP, ""),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        required = (("hostname", ENV_HOST), ("username", ENV_USERNAME), ("password", ENV_PASSWORD))
        missing = [env_name for key, env_name in required if not values[key]]
        if missing:
            raise ValueError(f"Missing Datera configuration: {', '.join(missing)}")
        return cls(**values)


@dataclass(slots=True)
class RequestParams:
    """Bundle together prepared request details."""

    method: str
    path: str
    params: Mapping[str, str] | None = None
    headers: MutableMapping[str, str] = field(default_factory=dict)
    payload: Mapping[str, Any] | None = None
    sensitive: bool = False
    form_encoded: bool = False
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(slots=True)
class CallContext:
    """Per-call settings threaded through every attempt of a request.

    `deadline` is an absolute `time.monotonic()` value. `quiet` mutes request
    and response bodies in the logs.
    """

    trace_id: str = "nil"
    quiet: bool = False
    deadline: float | None = None
    cancel: threading.Event | None = None

    @classmethod
    def new(cls, *, quiet: bool = False, timeout: float | None = None) -> CallContext:
        deadline = time.monotonic() + timeout if timeout is not None else None
        return cls(trace_id=str(uuid.uuid4()), quiet=quiet, deadline=deadline)

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()

    def check(self) -> None:
        """Raise `RequestCancelledError` if the call may not proceed."""
        if self.cancel is not None and self.cancel.is_set():
            raise RequestCancelledError("Request cancelled")
        remaining = self.remaining()
        if remaining is not None and remaining <= 0:
            raise RequestCancelledError("Request deadline exceeded")

    def attempt_timeout(self, default: float) -> float:
        remaining = self.remaining()
        if remaining is None:
            return default
        return max(min(default, remaining), 0.001)

    def wait(self, seconds: float) -> None:
        """Sleep for `seconds`, waking early if the call is cancelled."""
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, max(remaining, 0.0))
        if self.cancel is not None:
            self.cancel.wait(seconds)
        else:
            time.sleep(seconds)
        self.check()
