from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from app.cards.extractors import Extractor, first_match, get_path
from app.cards.types import CoordinatePoint
from app.geo.coordinates import FLAT_PATTERNS, resolve_coordinates

EARTH_RADIUS_M = 6371e3
DEFAULT_IMPORTANCE = 10


@dataclass(frozen=True)
class RankedStation:
    station: Mapping[str, Any]
    point: Optional[CoordinatePoint]
    distance: float                       # meters; inf when unknown


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def format_distance(meters: float) -> str:
    if meters < 1000:
        # half-up, not banker's rounding
        return f"{math.floor(meters + 0.5)}m"
    return f"{meters / 1000:.1f}km"


STATION_POINT_PATTERNS: tuple[Extractor[CoordinatePoint], ...] = (
    lambda s: resolve_coordinates(get_path(s, "location")),
    lambda s: resolve_coordinates({"coordinates": get_path(s, "coordinates")}),
    lambda s: resolve_coordinates({"centroid": get_path(s, "centroid")}),
    lambda s: first_match(FLAT_PATTERNS, s),
)


def station_point(candidate: Any) -> Optional[CoordinatePoint]:
    if not isinstance(candidate, Mapping):
        return None
    return first_match(STATION_POINT_PATTERNS, candidate)


def _importance(candidate: Mapping[str, Any]) -> float:
    value = candidate.get("importance")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_IMPORTANCE
    return value


def _fallback_distance(candidate: Mapping[str, Any]) -> float:
    value = candidate.get("distance")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return math.inf
    return float(value)


def rank_stations(
    candidates: Iterable[Mapping[str, Any]],
    user_location: CoordinatePoint,
) -> list[RankedStation]:
    """
    Order station candidates best-first: major hubs, then lower importance,
    then shorter distance. Ties keep input order.

    Distance is measured from user_location when the candidate's point
    resolves, otherwise the candidate's own `distance` field is used.
    """
    user_lat, user_lon = user_location
    ranked: list[RankedStation] = []
    for candidate in candidates:
        if not isinstance(candidate, Mapping):
            continue
        point = station_point(candidate)
        if point is not None:
            distance = haversine_distance(user_lat, user_lon, point[0], point[1])
        else:
            distance = _fallback_distance(candidate)
        ranked.append(RankedStation(station=candidate, point=point, distance=distance))

    # list.sort is stable
    ranked.sort(
        key=lambda r: (
            r.station.get("majorHub") is not True,
            _importance(r.station),
            r.distance,
        )
    )
    return ranked


def select_nearest(ranked: list[RankedStation]) -> Optional[RankedStation]:
    """Top ranked station, or None when its coordinates could not be resolved."""
    if not ranked:
        return None
    best = ranked[0]
    if best.point is None or best.point == (0.0, 0.0):
        return None
    return best
