from dataclasses import dataclass, field
from typing import Any, Callable

from app.cache.ttl import TTLCache, now_ms
from app.core.config import AppConfig


@dataclass
class AppContext:
    """Owns the tool-result caches for one application (or one test)."""

    config: AppConfig
    weather: TTLCache[Any] = field(init=False)
    trips: TTLCache[Any] = field(init=False)
    stations: TTLCache[Any] = field(init=False)
    clock: Callable[[], int] = now_ms

    def __post_init__(self):
        self.weather = TTLCache(self.config.weather_ttl_minutes, clock=self.clock)
        self.trips = TTLCache(self.config.trips_ttl_minutes, clock=self.clock)
        self.stations = TTLCache(self.config.stations_ttl_minutes, clock=self.clock)

    def caches(self) -> dict[str, TTLCache[Any]]:
        return {"weather": self.weather, "trips": self.trips, "stations": self.stations}

    def cleanup(self) -> dict[str, int]:
        """Sweep expired entries from every cache; returns removed counts."""
        return {name: cache.cleanup() for name, cache in self.caches().items()}
