import json

from typer.testing import CliRunner

from conftest import BASE_URL, mock_login
from datera_client.cli import app

runner = CliRunner()

ENV = {"DAT_MGMT": "cluster", "DAT_USER": "admin", "DAT_PASS": "pw"}


def test_list_renders_json(requests_mock):
    mock_login(requests_mock)
    requests_mock.get(
        f"{BASE_URL}/storage_nodes",
        json={"data": [{"uuid": "sn-1", "name": "node1"}], "metadata": {"total_count": 1}},
    )

    result = runner.invoke(app, ["list", "/storage_nodes", "--json"], env=ENV)

    assert result.exit_code == 0
    assert json.loads(result.stdout) == [{"uuid": "sn-1", "name": "node1"}]


def test_list_renders_table(requests_mock):
    mock_login(requests_mock)
    requests_mock.get(
        f"{BASE_URL}/storage_nodes",
        json={"data": [{"uuid": "sn-1", "name": "node1", "ips": ["1.2.3.4"]}]},
    )

    result = runner.invoke(app, ["list", "/storage_nodes"], env=ENV)

    assert result.exit_code == 0
    assert "node1" in result.stdout
    assert "ips" not in result.stdout


def test_list_passes_window(requests_mock):
    mock_login(requests_mock)
    matcher = requests_mock.get(
        f"{BASE_URL}/app_instances",
        json={"data": [], "metadata": {"total_count": 100}},
    )

    result = runner.invoke(app, ["list", "/app_instances", "--limit", "5", "--json"], env=ENV)

    assert result.exit_code == 0
    assert matcher.call_count == 1
    assert matcher.last_request.qs == {"limit": ["5"]}


def test_system_version_cli(requests_mock):
    mock_login(requests_mock)
    requests_mock.get(f"{BASE_URL}/system", json={"data": {"sw_version": "3.3.5"}})

    result = runner.invoke(
        app,
        ["system-version", "--host", "cluster", "--username", "admin", "--password", "pw"],
    )

    assert result.exit_code == 0
    assert "3.3.5" in result.stdout


def test_api_error_exits_non_zero(requests_mock):
    mock_login(requests_mock)
    requests_mock.get(
        f"{BASE_URL}/app_instances/nope",
        status_code=404,
        json={"name": "NotFoundError", "message": "no such app", "errors": ["missing"]},
    )

    result = runner.invoke(app, ["get", "/app_instances/nope"], env=ENV)

    assert result.exit_code == 1
    assert "no such app" in result.stderr
    assert "missing" in result.stderr


def test_missing_credentials_rejected():
    result = runner.invoke(app, ["health", "--host", "cluster"], env={"DAT_USER": "", "DAT_PASS": ""})

    assert result.exit_code != 0


def test_versions_needs_no_credentials(requests_mock):
    matcher = requests_mock.get(
        "https://cluster:7718/api_versions", json={"api_versions": ["v2.1", "v2.2"]}
    )

    result = runner.invoke(app, ["versions", "--host", "cluster"], env={"DAT_USER": "", "DAT_PASS": ""})

    assert result.exit_code == 0
    assert json.loads(result.stdout) == ["v2.1", "v2.2"]
    assert matcher.call_count == 1
