import pytest
from urllib3.exceptions import InsecureRequestWarning

from conftest import BASE_URL, build_config, mock_login
from datera_client import ClientConfig, DateraClient
from datera_client.config import CallContext


def test_system_version(requests_mock):
    mock_login(requests_mock)
    requests_mock.get(f"{BASE_URL}/system", json={"data": {"sw_version": "3.3.5"}})
    client = DateraClient(build_config())

    assert client.system_version() == "3.3.5"


def test_health_check_lists_storage_nodes(requests_mock, caplog):
    mock_login(requests_mock)
    requests_mock.get(
        f"{BASE_URL}/storage_nodes",
        json={"data": [{"uuid": "sn-1"}, {"uuid": "sn-2"}], "metadata": {"total_count": 2}},
    )

    with DateraClient(build_config()) as client:
        with caplog.at_level("DEBUG", logger="datera_client.client"):
            nodes = client.health_check()

    assert [node["uuid"] for node in nodes] == ["sn-1", "sn-2"]
    assert "Found Storage Node: sn-2" in caplog.text


def test_storage_node_wrappers_build_paths(requests_mock):
    mock_login(requests_mock)
    matcher = requests_mock.put(f"{BASE_URL}/storage_nodes/sn-1", json={"data": {"op_state": "running"}})
    client = DateraClient(build_config())

    assert client.storage_nodes.set("sn-1", {"op_state": "running"}) == {"op_state": "running"}
    assert matcher.last_request.json() == {"op_state": "running"}


def test_new_context_has_trace_id():
    client = DateraClient(build_config())

    first = client.new_context()
    second = client.new_context(quiet=True)

    assert isinstance(first, CallContext)
    assert first.trace_id != second.trace_id
    assert second.quiet


def test_config_from_env():
    config = ClientConfig.from_env(
        {
            "DAT_MGMT": "10.0.0.5",
            "DAT_USER": "admin",
            "DAT_PASS": "pw",
            "DAT_API": "2.1",
            "DAT_LDAP": "corp",
        }
    )

    assert config.base_url == "https://10.0.0.5:7718/v2.1"
    assert config.tenant == "/root"
    assert config.ldap_server == "corp"


def test_config_from_env_reports_missing_variables():
    with pytest.raises(ValueError) as excinfo:
        ClientConfig.from_env({"DAT_MGMT": "10.0.0.5"})

    assert "DAT_USER" in str(excinfo.value)
    assert "DAT_PASS" in str(excinfo.value)


def test_client_reads_environment(monkeypatch):
    monkeypatch.setenv("DAT_MGMT", "array")
    monkeypatch.setenv("DAT_USER", "admin")
    monkeypatch.setenv("DAT_PASS", "pw")

    client = DateraClient(tenant="/root/ops")

    assert client.config.hostname == "array"
    assert client.conn.tenant == "/root/ops"


def test_disables_insecure_warning_when_verify_disabled(monkeypatch):
    captured: list[object] = []

    def fake_disable(warning):  # pragma: no cover - helper
        captured.append(warning)

    monkeypatch.setattr("datera_client.connection.urllib3.disable_warnings", fake_disable)

    DateraClient(build_config(verify_ssl=False))

    assert captured and captured[0] is InsecureRequestWarning
