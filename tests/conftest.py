import pytest

from datera_client import ApiConnection, ClientConfig

HOST = "cluster"
BASE_URL = "https://cluster:7718/v2.2"
LOGIN_URL = f"{BASE_URL}/login"


class FakeClock:
    """Stand-in for the `time` module so backoff never really sleeps."""

    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr("datera_client.retry.time", fake)
    monkeypatch.setattr("datera_client.config.time", fake)
    return fake


def build_config(**overrides) -> ClientConfig:
    values = {
        "hostname": HOST,
        "username": "admin",
        "password": "s3cr3t-pass",
        "tenant": "/root",
    }
    values.update(overrides)
    return ClientConfig(**values)


def build_connection(**overrides) -> ApiConnection:
    return ApiConnection(build_config(**overrides))


def mock_login(requests_mock, *keys: str):
    keys = keys or ("tok-1",)
    return requests_mock.put(
        LOGIN_URL,
        [{"json": {"key": key, "version": "v2.2", "request_time": 1}} for key in keys],
    )
