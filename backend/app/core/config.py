import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    tools_base_url: str

    connect_timeout: float
    read_timeout: float
    write_timeout: float
    pool_timeout: float

    retries: int
    backoff_base: float

    weather_ttl_minutes: float
    trips_ttl_minutes: float
    stations_ttl_minutes: float

    nearest_station_limit: int
    log_level: str


def _env_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def load_config() -> AppConfig:
    return AppConfig(
        tools_base_url=os.getenv("TOOLS_BASE_URL", "http://localhost:3000/api/mcp-proxy/tools"),
        connect_timeout=_env_float("TOOLS_CONNECT_TIMEOUT_SECONDS", "10"),
        read_timeout=_env_float("TOOLS_READ_TIMEOUT_SECONDS", "30"),
        write_timeout=_env_float("TOOLS_WRITE_TIMEOUT_SECONDS", "30"),
        pool_timeout=_env_float("TOOLS_POOL_TIMEOUT_SECONDS", "30"),
        retries=_env_int("TOOLS_RETRIES", "3"),
        backoff_base=_env_float("TOOLS_BACKOFF_BASE_SECONDS", "0.5"),
        weather_ttl_minutes=_env_float("CACHE_TTL_WEATHER_MINUTES", "10"),
        trips_ttl_minutes=_env_float("CACHE_TTL_TRIPS_MINUTES", "5"),
        stations_ttl_minutes=_env_float("CACHE_TTL_STATIONS_MINUTES", "30"),
        nearest_station_limit=_env_int("NEAREST_STATION_LIMIT", "1"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
