import math

import pytest

from app.cards.normalizers import normalize_trip_data
from app.geo.coordinates import (
    dedupe_consecutive,
    extract_trip_coordinates,
    from_centroid,
    from_geojson,
    resolve_coordinates,
)

BERN = (46.948, 7.4474)
ZURICH = (47.3769, 8.5417)


@pytest.mark.parametrize(
    "obj",
    [
        {"latitude": 46.948, "longitude": 7.4474},
        {"lat": 46.948, "lon": 7.4474},
        {"type": "Point", "coordinates": [7.4474, 46.948]},
        {"centroid": {"type": "Point", "coordinates": [7.4474, 46.948]}},
        {"centroid": {"lat": 46.948, "lon": 7.4474}},
        {"coordinates": {"latitude": 46.948, "longitude": 7.4474}},
        {"coordinates": {"lat": 46.948, "lon": 7.4474}},
    ],
)
def test_resolve_known_shapes(obj):
    point = resolve_coordinates(obj)
    assert point == BERN
    assert all(math.isfinite(v) for v in point)


def test_geojson_is_swapped():
    assert from_geojson({"coordinates": [8.5417, 47.3769]}) == ZURICH
    assert from_centroid({"centroid": {"coordinates": [8.5417, 47.3769]}}) == ZURICH


def test_geojson_altitude_is_ignored():
    assert resolve_coordinates({"coordinates": [7.4474, 46.948, 540.0]}) == BERN


def test_latitude_longitude_wins_over_lat_lon():
    obj = {"latitude": 1.0, "longitude": 2.0, "lat": 3.0, "lon": 4.0}
    assert resolve_coordinates(obj) == (1.0, 2.0)


def test_nan_falls_through_to_next_pattern():
    obj = {"latitude": float("nan"), "longitude": 7.0, "lat": 46.0, "lon": 7.5}
    assert resolve_coordinates(obj) == (46.0, 7.5)


def test_centroid_array_wins_over_nested_coordinates_object():
    obj = {
        "centroid": {"coordinates": [7.4474, 46.948]},
        "coordinates": {"lat": 0.5, "lon": 0.5},
    }
    assert resolve_coordinates(obj) == BERN


@pytest.mark.parametrize(
    "obj",
    [
        None,
        "46.9,7.4",
        [7.4474, 46.948],
        {},
        {"latitude": "46.948", "longitude": "7.4474"},
        {"lat": True, "lon": False},
        {"lat": float("inf"), "lon": 7.0},
        {"coordinates": [7.4474]},
        {"coordinates": ["7.4", "46.9"]},
        {"centroid": {"coordinates": None}},
    ],
)
def test_unresolvable_returns_none(obj):
    assert resolve_coordinates(obj) is None


def test_trip_stop_points():
    trip = {
        "legs": [
            {
                "type": "ServiceLeg",
                "serviceJourney": {
                    "stopPoints": [
                        {"place": {"latitude": 46.948, "longitude": 7.4474}},
                        {"place": {"latitude": 47.3769, "longitude": 8.5417}},
                    ]
                },
            }
        ]
    }
    assert extract_trip_coordinates(trip) == [BERN, ZURICH]


def test_trip_stop_points_geojson_centroid():
    trip = {
        "legs": [
            {
                "type": "ServiceLeg",
                "serviceJourney": {
                    "stopPoints": [
                        {"place": {"centroid": {"type": "Point", "coordinates": [7.4474, 46.948]}}},
                        {"place": {"centroid": {"type": "Point", "coordinates": [8.5417, 47.3769]}}},
                    ]
                },
            }
        ]
    }
    assert extract_trip_coordinates(trip) == [BERN, ZURICH]


def test_stop_itself_used_when_place_missing():
    trip = {"legs": [{"serviceJourney": {"stopPoints": [{"lat": 46.948, "lon": 7.4474}, {"name": "no coords"}]}}]}
    assert extract_trip_coordinates(trip) == [BERN]


def test_leg_endpoint_fallbacks():
    trip = {
        "legs": [
            {
                "type": "ServiceLeg",
                "serviceJourney": {},
                "departure": {"place": {"latitude": 46.948, "longitude": 7.4474}},
                "arrival": {"place": {"latitude": 47.3769, "longitude": 8.5417}},
            },
            {
                "start": {"lat": 47.3769, "lon": 8.5417},
                "destination": {"place": {"centroid": {"coordinates": [7.5886, 47.5476]}}},
            },
        ]
    }
    # Zurich appears twice in a row and collapses to one point
    assert extract_trip_coordinates(trip) == [BERN, ZURICH, (47.5476, 7.5886)]


def test_missing_endpoint_is_skipped():
    trip = {"legs": [{"departure": {"name": "Bern"}, "arrival": {"lat": 47.3769, "lon": 8.5417}}]}
    assert extract_trip_coordinates(trip) == [ZURICH]


def test_walk_legs_contribute_nothing():
    trip = {
        "legs": [
            {"type": "WalkLeg", "start": {"lat": 1.0, "lon": 1.0}, "end": {"lat": 2.0, "lon": 2.0}},
            {
                "type": "ServiceLeg",
                "serviceJourney": {},
                "departure": {"lat": 46.948, "lon": 7.4474},
                "arrival": {"lat": 47.3769, "lon": 8.5417},
            },
        ]
    }
    assert extract_trip_coordinates(trip) == [BERN, ZURICH]


def test_normalized_trip_is_accepted():
    raw = {
        "legs": [
            {
                "type": "ServiceLeg",
                "serviceJourney": {
                    "stopPoints": [
                        {"place": {"centroid": {"coordinates": [7.4474, 46.948]}}},
                        {"place": {"centroid": {"coordinates": [8.5417, 47.3769]}}},
                    ]
                },
            },
            {"type": "WalkLeg", "duration": "PT5M", "start": {"lat": 9.0, "lon": 9.0}},
        ]
    }
    assert extract_trip_coordinates(normalize_trip_data(raw)) == [BERN, ZURICH]


def test_non_consecutive_duplicates_are_kept():
    points = [BERN, ZURICH, ZURICH, BERN]
    assert dedupe_consecutive(points) == [BERN, ZURICH, BERN]


@pytest.mark.parametrize("trip", [None, {}, {"legs": None}, {"legs": "x"}, {"legs": [None, 3]}])
def test_trip_without_usable_legs(trip):
    assert extract_trip_coordinates(trip) == []
