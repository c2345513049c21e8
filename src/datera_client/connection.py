"""Stateful connection to a Datera cluster's management API."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from .auth.session import TOKEN_HEADER, SessionAuth
from .config import LOGIN_PATH, CallContext, ClientConfig, RequestParams
from .exceptions import ApiConnectionError, RequestError
from .http import Outcome, api_error_for, parse_json, send, translate_errors
from .models import ApiListOuter, ApiLogin, ApiOuter, ApiVersions, ListParams
from .pagination import collect_pages
from .retry import call_with_retry
from .routing import (
    build_url,
    canonicalize_route,
    redact_body,
    redact_headers,
    redact_payload,
)

logger = logging.getLogger(__name__)

QueryParams = Mapping[str, Any] | ListParams | None


def _query_map(params: QueryParams) -> dict[str, str]:
    if params is None:
        return {}
    if isinstance(params, ListParams):
        return params.to_map()
    return {
        key: str(value)
        for key, value in params.items()
        if value is not None and value != "" and value != 0
    }


class ApiConnection:
    """Execute authenticated requests with retry, re-login and pagination.

    One connection is meant to be shared by every thread talking to the same
    cluster; the session key is the only mutable state and lives behind the
    `SessionAuth` read/write lock.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: requests.Session | None = None,
        auth: SessionAuth | None = None,
    ) -> None:
        self.config = config
        self._session = session or requests.Session()
        self._auth = auth or SessionAuth(
            config.username,
            config.password,
            tenant=config.tenant,
            ldap_server=config.ldap_server,
        )
        self._suppress_insecure_warning_if_needed()

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> ApiConnection:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def tenant(self) -> str:
        return self._auth.tenant

    def close(self) -> None:
        self._session.close()

    # Session -----------------------------------------------------------------
    def has_logged_in(self) -> bool:
        return self._auth.has_logged_in()

    def login(self, context: CallContext | None = None) -> bool:
        """Acquire a session key unless one is already held.

        Returns True when a login request was actually sent.
        """
        context = context or CallContext()

        def perform(credentials: Mapping[str, str]) -> ApiLogin:
            request = RequestParams(
                method="PUT",
                path=LOGIN_PATH,
                payload=credentials,
                sensitive=True,
                form_encoded=True,
            )
            body = call_with_retry(
                lambda: self._do(request, context, allow_reauth=False),
                timeout=self.config.retry_timeout,
                context=context,
            )
            return ApiLogin.from_json(body)

        return self._auth.login(perform)

    def logout(self) -> None:
        self._auth.logout()

    # Verbs -------------------------------------------------------------------
    def get(
        self,
        path: str,
        *,
        params: QueryParams = None,
        context: CallContext | None = None,
    ) -> ApiOuter:
        return ApiOuter.from_json(self._call("GET", path, params=params, context=context))

    def get_list(
        self,
        path: str,
        *,
        params: QueryParams = None,
        context: CallContext | None = None,
    ) -> ApiListOuter:
        """GET a collection, following pages unless `limit` or `offset` is set."""

        context = context or CallContext()

        def fetch(query: dict[str, str]) -> ApiListOuter:
            return ApiListOuter.from_json(self._call("GET", path, params=query, context=context))

        return collect_pages(fetch, _query_map(params))

    def put(
        self,
        path: str,
        *,
        json_payload: Mapping[str, Any] | None = None,
        params: QueryParams = None,
        context: CallContext | None = None,
    ) -> ApiOuter:
        body = self._call("PUT", path, params=params, json_payload=json_payload, context=context)
        return ApiOuter.from_json(body)

    def post(
        self,
        path: str,
        *,
        json_payload: Mapping[str, Any] | None = None,
        params: QueryParams = None,
        context: CallContext | None = None,
    ) -> ApiOuter:
        body = self._call("POST", path, params=params, json_payload=json_payload, context=context)
        return ApiOuter.from_json(body)

    def delete(
        self,
        path: str,
        *,
        json_payload: Mapping[str, Any] | None = None,
        params: QueryParams = None,
        context: CallContext | None = None,
    ) -> ApiOuter:
        body = self._call("DELETE", path, params=params, json_payload=json_payload, context=context)
        return ApiOuter.from_json(body)

    def api_versions(self) -> list[str]:
        """Return the API versions the cluster advertises, or [] if unreachable."""

        url = f"{self.config.root_url}/api_versions"
        try:
            response = self._session.get(
                url, timeout=self.config.timeout, verify=self.config.verify_ssl
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Unable to read %s: %s", url, exc)
            return []
        if not isinstance(payload, Mapping):
            return []
        return ApiVersions(api_versions=list(payload.get("api_versions") or [])).api_versions

    # Internal helpers -------------------------------------------------------
    def _call(
        self,
        method: str,
        path: str,
        *,
        params: QueryParams = None,
        json_payload: Mapping[str, Any] | None = None,
        context: CallContext | None = None,
    ) -> Any:
        context = context or CallContext()
        request = RequestParams(
            method=method,
            path=path,
            params=_query_map(params) or None,
            payload=json_payload,
        )
        return call_with_retry(
            lambda: self._do_with_auth(request, context),
            timeout=self.config.retry_timeout,
            context=context,
        )

    def _do_with_auth(self, request: RequestParams, context: CallContext) -> Any:
        if not self.has_logged_in():
            try:
                self.login(context)
            except Exception:
                logger.error(
                    "Login failure before %s %s (trace_id=%s)",
                    request.method,
                    request.path,
                    context.trace_id,
                )
                raise
        self._auth.apply(request.headers)
        return self._do(request, context, allow_reauth=True)

    def _do(self, request: RequestParams, context: CallContext, *, allow_reauth: bool) -> Any:
        """Send exactly one request (plus at most one replay after re-login)."""

        context.check()
        url = build_url(self.base_url, request.path)
        route = canonicalize_route(urlparse(url).path, self.config.api_version)
        headers = self.config.resolved_headers()
        headers.update(request.headers)
        if request.form_encoded:
            headers.pop("Content-Type", None)
        payload_log = redact_payload(
            request.payload, sensitive=request.sensitive, quiet=context.quiet
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Datera request %s %s route=%s request_id=%s trace_id=%s "
                "headers=%s payload=%s params=%s",
                request.method,
                url,
                route,
                request.request_id,
                context.trace_id,
                redact_headers(headers),
                payload_log,
                request.params,
            )

        started = time.monotonic()
        response, error = send(
            self._session,
            request.method,
            url,
            params=request.params,
            headers=headers,
            json_payload=None if request.form_encoded else request.payload,
            data_payload=request.payload if request.form_encoded else None,
            timeout=context.attempt_timeout(self.config.timeout),
            verify=self.config.verify_ssl,
        )
        elapsed = time.monotonic() - started
        status = response.status_code if response is not None else None
        if logger.isEnabledFor(logging.DEBUG):
            body = response.text if response is not None else ""
            logger.debug(
                "Datera response %s %s route=%s request_id=%s trace_id=%s "
                "elapsed=%.3fs code=%s payload=%s",
                request.method,
                url,
                route,
                request.request_id,
                context.trace_id,
                elapsed,
                status,
                redact_body(body, quiet=context.quiet),
            )

        try:
            eresp, outcome = translate_errors(response, error)
        except RequestError as exc:
            logger.error("Request %s failed: %s", request.request_id, exc)
            raise

        if outcome is Outcome.CONNECTION_ERROR:
            logger.error("Request %s refused: %s", request.request_id, error)
            raise ApiConnectionError(
                f"Connection refused by {self.config.root_url}", details=str(error)
            ) from error

        if outcome is Outcome.PERMISSION_DENIED and allow_reauth:
            outcome = Outcome.RETRY_AFTER_LOGIN
        if outcome is Outcome.RETRY_AFTER_LOGIN:
            logger.info(
                "Session rejected for %s %s, logging in again (request_id=%s)",
                request.method,
                route,
                request.request_id,
            )
            self._reauthenticate(request.headers.get(TOKEN_HEADER, ""), context)
            self._auth.refresh(request.headers)
            # The replay may not trigger another login.
            return self._do(request, context, allow_reauth=False)

        if eresp is not None:
            logger.error(
                "Received API error for request %s: %s",
                request.request_id,
                redact_body(json.dumps(eresp.to_json()), quiet=context.quiet),
            )
            raise api_error_for(eresp, outcome)

        return parse_json(response)

    def _reauthenticate(self, rejected_token: str, context: CallContext) -> None:
        # No-op if another thread already replaced the rejected key.
        self._auth.invalidate(rejected_token)
        try:
            self.login(context)
        except Exception as exc:
            logger.error("Failed to re-authenticate before retrying request: %s", exc)
            raise

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)
