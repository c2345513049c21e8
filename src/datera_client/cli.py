"""Command-line interface for interacting with Datera clusters."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install datera-client[cli]' to enable this command."
    ) from exc

from . import DateraClient
from .config import (
    DEFAULT_API_VERSION,
    DEFAULT_TENANT,
    ENV_API_VERSION,
    ENV_HOST,
    ENV_LDAP,
    ENV_PASSWORD,
    ENV_TENANT,
    ENV_USERNAME,
    ClientConfig,
)
from .exceptions import ApiError, DateraError
from .models import ListParams

app = typer.Typer(help="Datera storage management CLI.", no_args_is_help=True)

# Scalar columns beyond this are only visible with --json.
MAX_TABLE_COLUMNS = 8


def _build_client(
    host: str,
    username: str | None,
    password: str | None,
    tenant: str,
    api_version: str,
    ldap_server: str | None,
    secure: bool,
    verify_ssl: bool,
    timeout: float,
    debug: bool,
    *,
    require_credentials: bool = True,
) -> DateraClient:
    if require_credentials and (not username or not password):
        raise typer.BadParameter("--username and --password are required.")
    if debug:
        logging.basicConfig(level=logging.DEBUG)
    config = ClientConfig(
        hostname=host,
        username=username or "",
        password=password or "",
        tenant=tenant,
        api_version=api_version,
        ldap_server=ldap_server or "",
        secure=secure,
        verify_ssl=verify_ssl,
        timeout=timeout,
    )
    return DateraClient(config)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


console = Console(force_terminal=False, color_system=None)


def _table_columns(rows: Sequence[Mapping[str, Any]]) -> list[str]:
    columns: list[str] = []
    for row in rows:
        for key, value in row.items():
            if key in columns or isinstance(value, (Mapping, list)):
                continue
            columns.append(key)
    return columns[:MAX_TABLE_COLUMNS]


def _render_rich_table(title: str, rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(
        title=title,
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    columns = _table_columns(rows)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("" if row.get(column) is None else str(row.get(column)) for column in columns))
    console.print(table)


def _present_output(payload: Any, *, title: str, json_output: bool) -> None:
    if json_output or not isinstance(payload, list):
        _echo_json(payload)
        return
    rows = [item for item in payload if isinstance(item, Mapping)]
    if not rows:
        _echo_json(payload)
        return
    _render_rich_table(title, rows)


def _handle_error(exc: DateraError) -> None:
    message = f"Request failed (status {exc.status_code}): {exc}"
    if isinstance(exc, ApiError) and exc.response.errors:
        message += "\nDetails: " + "; ".join(exc.response.errors)
    elif exc.details:
        message += f"\nDetails: {exc.details}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _shared_options() -> dict[str, Any]:  # pragma: no cover - helper indirection
    return {
        "host": typer.Option(
            ..., "--host", envvar=ENV_HOST, help="Management IP or hostname of the cluster."
        ),
        "username": typer.Option(
            None, "--username", "-u", envvar=ENV_USERNAME, help="Account name."
        ),
        "password": typer.Option(
            None,
            "--password",
            "-p",
            envvar=ENV_PASSWORD,
            help="Account password.",
            hide_input=True,
        ),
        "tenant": typer.Option(
            DEFAULT_TENANT, "--tenant", envvar=ENV_TENANT, help="Tenant path.", show_default=True
        ),
        "api_version": typer.Option(
            DEFAULT_API_VERSION,
            "--api-version",
            envvar=ENV_API_VERSION,
            help="API version to target.",
            show_default=True,
        ),
        "ldap_server": typer.Option(
            None, "--ldap-server", envvar=ENV_LDAP, help="Remote LDAP server name for login."
        ),
        "secure": typer.Option(
            True,
            "--secure/--insecure",
            help="Use HTTPS on port 7718 instead of HTTP on 7717.",
            show_default=True,
        ),
        "verify_ssl": typer.Option(
            False,
            "--verify/--no-verify",
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
        "timeout": typer.Option(30.0, help="Per-request timeout (seconds).", show_default=True),
        "output_json": typer.Option(
            False, "--json", "-j", help="Return raw JSON instead of rendering a table."
        ),
        "debug": typer.Option(False, "--debug", help="Log every request at DEBUG level."),
    }


_SHARED_OPTIONS = _shared_options()


@app.command("versions")
def versions(
    host: str = _SHARED_OPTIONS["host"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    tenant: str = _SHARED_OPTIONS["tenant"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    ldap_server: str | None = _SHARED_OPTIONS["ldap_server"],
    secure: bool = _SHARED_OPTIONS["secure"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    debug: bool = _SHARED_OPTIONS["debug"],
) -> None:
    """List the API versions the cluster supports."""

    with _build_client(
        host, username, password, tenant, api_version, ldap_server, secure, verify_ssl, timeout, debug,
        require_credentials=False,
    ) as client:
        _echo_json(client.api_versions())


@app.command("system-version")
def system_version(
    host: str = _SHARED_OPTIONS["host"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    tenant: str = _SHARED_OPTIONS["tenant"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    ldap_server: str | None = _SHARED_OPTIONS["ldap_server"],
    secure: bool = _SHARED_OPTIONS["secure"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    debug: bool = _SHARED_OPTIONS["debug"],
) -> None:
    """Display the cluster software version."""

    with _build_client(
        host, username, password, tenant, api_version, ldap_server, secure, verify_ssl, timeout, debug
    ) as client:
        try:
            version = client.system_version()
        except DateraError as exc:
            _handle_error(exc)
            return
    typer.echo(version)


@app.command("health")
def health(
    host: str = _SHARED_OPTIONS["host"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    tenant: str = _SHARED_OPTIONS["tenant"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    ldap_server: str | None = _SHARED_OPTIONS["ldap_server"],
    secure: bool = _SHARED_OPTIONS["secure"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    debug: bool = _SHARED_OPTIONS["debug"],
) -> None:
    """Verify connectivity and credentials by listing storage nodes."""

    with _build_client(
        host, username, password, tenant, api_version, ldap_server, secure, verify_ssl, timeout, debug
    ) as client:
        try:
            nodes = client.health_check()
        except DateraError as exc:
            _handle_error(exc)
            return
    _present_output(nodes, title="Storage Nodes", json_output=output_json)


@app.command("get")
def get_resource(
    path: str = typer.Argument(..., help="API path, e.g. /system or /app_instances/<id>."),
    host: str = _SHARED_OPTIONS["host"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    tenant: str = _SHARED_OPTIONS["tenant"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    ldap_server: str | None = _SHARED_OPTIONS["ldap_server"],
    secure: bool = _SHARED_OPTIONS["secure"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    debug: bool = _SHARED_OPTIONS["debug"],
) -> None:
    """GET a single resource and print its data."""

    with _build_client(
        host, username, password, tenant, api_version, ldap_server, secure, verify_ssl, timeout, debug
    ) as client:
        try:
            envelope = client.conn.get(path)
        except DateraError as exc:
            _handle_error(exc)
            return
    _echo_json(envelope.data)


@app.command("list")
def list_resources(
    path: str = typer.Argument(..., help="Collection path, e.g. /app_instances."),
    filter_: str = typer.Option("", "--filter", help="Server-side filter expression."),
    limit: int = typer.Option(0, "--limit", help="Page size; disables automatic paging."),
    sort: str = typer.Option("", "--sort", help="Sort expression."),
    offset: int = typer.Option(0, "--offset", help="Start offset; disables automatic paging."),
    host: str = _SHARED_OPTIONS["host"],
    username: str | None = _SHARED_OPTIONS["username"],
    password: str | None = _SHARED_OPTIONS["password"],
    tenant: str = _SHARED_OPTIONS["tenant"],
    api_version: str = _SHARED_OPTIONS["api_version"],
    ldap_server: str | None = _SHARED_OPTIONS["ldap_server"],
    secure: bool = _SHARED_OPTIONS["secure"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    debug: bool = _SHARED_OPTIONS["debug"],
) -> None:
    """List a collection, following every page unless --limit or --offset is given."""

    params = ListParams(filter=filter_, limit=limit, sort=sort, offset=offset)
    with _build_client(
        host, username, password, tenant, api_version, ldap_server, secure, verify_ssl, timeout, debug
    ) as client:
        try:
            envelope = client.conn.get_list(path, params=params)
        except DateraError as exc:
            _handle_error(exc)
            return
    _present_output(envelope.data, title=path, json_output=output_json)


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    app()
