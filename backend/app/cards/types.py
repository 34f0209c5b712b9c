from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Mapping, Optional, Union

# (latitude, longitude), never GeoJSON order
CoordinatePoint = tuple[float, float]

BoardType = Literal["departures", "arrivals"]


@dataclass(frozen=True)
class BoardData:
    type: BoardType
    station: str                          # never empty; "Unknown Station" fallback
    connections: tuple[Mapping[str, Any], ...]


@dataclass(frozen=True)
class ServiceLeg:
    service_journey: Mapping[str, Any]
    departure: Optional[Mapping[str, Any]]
    arrival: Optional[Mapping[str, Any]]
    duration: Optional[str]
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    type: Literal["ServiceLeg"] = "ServiceLeg"


@dataclass(frozen=True)
class WalkLeg:
    duration: Optional[str]
    distance: Optional[float]
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    type: Literal["WalkLeg"] = "WalkLeg"


Leg = Union[ServiceLeg, WalkLeg]


@dataclass(frozen=True)
class TripSummary:
    duration: Optional[str] = None
    transfers: Optional[int] = None
    departure: Optional[str] = None
    arrival: Optional[str] = None


@dataclass(frozen=True)
class TripData:
    legs: tuple[Leg, ...]                 # source order
    summary: Optional[TripSummary] = None
    origin: Optional[Mapping[str, Any]] = None
    destination: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class WeatherData:
    location_name: str
    hourly: Optional[Mapping[str, list]] = None
    daily: Optional[Mapping[str, list]] = None


@dataclass(frozen=True)
class EcoData:
    train_co2: float
    car_co2: Optional[float] = None
    plane_co2: Optional[float] = None
    savings: Optional[float] = None
    trees_equivalent: Optional[float] = None
    route: Optional[str] = None


@dataclass(frozen=True)
class StationData:
    name: str
    id: Optional[str] = None
    coordinates: Optional[CoordinatePoint] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class Route:
    name: str                             # "Option N" when upstream has none
    id: Optional[str] = None
    duration: Optional[str] = None
    transfers: Optional[int] = None
    departure: Optional[str] = None
    arrival: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class CompareData:
    origin: str
    destination: str
    routes: tuple[Route, ...]
    criteria: Optional[str] = None
    analysis: Optional[Mapping[str, Any]] = None


def _without_raw(items: list[tuple[str, Any]]) -> dict[str, Any]:
    return {k: v for k, v in items if k != "raw"}


def card_to_dict(card: Any) -> dict[str, Any]:
    """Plain-dict form of a card record for JSON output; leg `raw` mappings are left out."""
    return asdict(card, dict_factory=_without_raw)
