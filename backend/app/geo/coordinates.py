"""
Coordinate resolution across the location shapes returned by the tool proxy.

Upstream tools disagree on how a point is spelled: `{latitude, longitude}`,
`{lat, lon}`, GeoJSON `{coordinates: [lon, lat]}`, or any of those nested under
`centroid` / `coordinates`. Everything here returns `(latitude, longitude)` or
None and never raises on odd input.
"""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from app.cards.extractors import Extractor, first_match, get_path
from app.cards.types import CoordinatePoint, TripData, WalkLeg

logger = logging.getLogger(__name__)


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def _pair(lat: Any, lon: Any) -> Optional[CoordinatePoint]:
    lat_n = _number(lat)
    lon_n = _number(lon)
    if lat_n is None or lon_n is None:
        return None
    return (lat_n, lon_n)


def _geojson_pair(value: Any) -> Optional[CoordinatePoint]:
    """GeoJSON position [lon, lat(, alt)] -> (lat, lon)."""
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    return _pair(value[1], value[0])


# ---------------------------------------------------------------------------
# Patterns, in priority order
# ---------------------------------------------------------------------------

def from_latitude_longitude(obj: Any) -> Optional[CoordinatePoint]:
    return _pair(get_path(obj, "latitude"), get_path(obj, "longitude"))


def from_lat_lon(obj: Any) -> Optional[CoordinatePoint]:
    return _pair(get_path(obj, "lat"), get_path(obj, "lon"))


def from_geojson(obj: Any) -> Optional[CoordinatePoint]:
    return _geojson_pair(get_path(obj, "coordinates"))


def from_centroid(obj: Any) -> Optional[CoordinatePoint]:
    centroid = get_path(obj, "centroid")
    if not isinstance(centroid, Mapping):
        return None
    return _geojson_pair(centroid.get("coordinates")) or first_match(FLAT_PATTERNS, centroid)


def from_nested_coordinates(obj: Any) -> Optional[CoordinatePoint]:
    nested = get_path(obj, "coordinates")
    if not isinstance(nested, Mapping):
        return None
    return first_match(FLAT_PATTERNS, nested)


FLAT_PATTERNS: tuple[Extractor[CoordinatePoint], ...] = (
    from_latitude_longitude,
    from_lat_lon,
)

COORDINATE_PATTERNS: tuple[Extractor[CoordinatePoint], ...] = (
    from_latitude_longitude,
    from_lat_lon,
    from_geojson,
    from_centroid,
    from_nested_coordinates,
)


def resolve_coordinates(obj: Any) -> Optional[CoordinatePoint]:
    if not isinstance(obj, Mapping):
        return None
    return first_match(COORDINATE_PATTERNS, obj)


# ---------------------------------------------------------------------------
# Trips
# ---------------------------------------------------------------------------

def _endpoint_extractors(*names: str) -> tuple[Extractor[CoordinatePoint], ...]:
    out: list[Extractor[CoordinatePoint]] = []
    for name in names:
        out.append(lambda leg, name=name: resolve_coordinates(get_path(leg, name, "place")))
        out.append(lambda leg, name=name: resolve_coordinates(get_path(leg, name)))
    return tuple(out)


LEG_START = _endpoint_extractors("departure", "start", "origin")
LEG_END = _endpoint_extractors("arrival", "end", "destination")


def _iter_legs(trip: Union[TripData, Mapping[str, Any], None]) -> Iterable[Mapping[str, Any]]:
    if isinstance(trip, TripData):
        for leg in trip.legs:
            if isinstance(leg, WalkLeg):
                continue
            yield leg.raw or {
                "serviceJourney": leg.service_journey,
                "departure": leg.departure,
                "arrival": leg.arrival,
            }
        return

    legs = get_path(trip, "legs")
    if not isinstance(legs, list):
        return
    for leg in legs:
        if not isinstance(leg, Mapping) or leg.get("type") == "WalkLeg":
            continue
        yield leg


def _leg_points(leg: Mapping[str, Any]) -> list[CoordinatePoint]:
    stop_points = get_path(leg, "serviceJourney", "stopPoints")
    if isinstance(stop_points, list):
        points = []
        for stop in stop_points:
            point = resolve_coordinates(get_path(stop, "place")) or resolve_coordinates(stop)
            if point is not None:
                points.append(point)
        return points

    return [
        point
        for point in (first_match(LEG_START, leg), first_match(LEG_END, leg))
        if point is not None
    ]


def dedupe_consecutive(points: Sequence[CoordinatePoint]) -> list[CoordinatePoint]:
    out: list[CoordinatePoint] = []
    for point in points:
        if out and out[-1][0] == point[0] and out[-1][1] == point[1]:
            continue
        out.append(point)
    return out


def extract_trip_coordinates(trip: Union[TripData, Mapping[str, Any], None]) -> list[CoordinatePoint]:
    """
    Ordered map points for a trip; walk legs contribute nothing.

    Accepts a normalized TripData or the raw trip mapping.
    """
    points: list[CoordinatePoint] = []
    for leg in _iter_legs(trip):
        points.extend(_leg_points(leg))

    deduped = dedupe_consecutive(points)
    logger.debug("extract_trip_coordinates points=%d (raw=%d)", len(deduped), len(points))
    return deduped
