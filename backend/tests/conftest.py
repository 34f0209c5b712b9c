import pytest

from app.core.config import AppConfig


class FakeClock:
    """Epoch-millisecond clock the tests move by hand."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, *, minutes: float = 0, seconds: float = 0) -> None:
        self.now += int((minutes * 60 + seconds) * 1000)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        tools_base_url="http://tools.test/api/mcp-proxy/tools",
        connect_timeout=1.0,
        read_timeout=1.0,
        write_timeout=1.0,
        pool_timeout=1.0,
        retries=3,
        backoff_base=0.0,
        weather_ttl_minutes=10,
        trips_ttl_minutes=5,
        stations_ttl_minutes=30,
        nearest_station_limit=1,
        log_level="WARNING",
    )


@pytest.fixture(autouse=True)
def no_backoff_sleep(monkeypatch):
    monkeypatch.setattr("app.clients.tools.sleep_backoff", lambda *a, **k: None)
