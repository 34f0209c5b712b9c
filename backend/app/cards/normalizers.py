"""
Normalizers turning raw tool payloads into canonical card records.

Every normalizer either returns a fresh record or raises InvalidCardData naming
the entity. Field aliases are tried in the order of the chains below; caller
`params` (context from the original query) only fill gaps the payload leaves.
Nested mappings are deep-copied, so a record never aliases the caller's payload.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ValidationError

from app.cards.errors import InvalidCardData
from app.cards.extractors import first_match, list_field, mapping_field, text_field
from app.cards.schemas import EcoIn, StationIn, TripIn, WeatherIn
from app.cards.types import (
    BoardData,
    CompareData,
    EcoData,
    Leg,
    Route,
    ServiceLeg,
    StationData,
    TripData,
    TripSummary,
    WalkLeg,
    WeatherData,
)
from app.geo.coordinates import resolve_coordinates

logger = logging.getLogger(__name__)

Params = Optional[Mapping[str, Any]]


def _param(name: str, params: Params) -> Callable[[Any], Optional[str]]:
    return lambda _obj: text_field(name)(params or {})


def _validate(schema: type[BaseModel], raw: Any, entity: str) -> BaseModel:
    if not isinstance(raw, Mapping):
        raise InvalidCardData(entity, "expected object")
    try:
        return schema.model_validate(raw)
    except ValidationError as e:
        logger.error("normalize %s: validation failed errors=%s", entity, e.errors(include_url=False))
        raise InvalidCardData(entity, "validation failed") from e


# ---------------------------------------------------------------------------
# Board (departures / arrivals)
# ---------------------------------------------------------------------------

BOARD_CONNECTIONS = (
    list_field("connections"),
    list_field("departures"),
    list_field("arrivals"),
    list_field("events"),
    list_field("stationboard"),
)

BOARD_STATION = (
    text_field("station"),
    text_field("stationName"),
    text_field("place", "name"),
    text_field("stopPlace", "name"),
    text_field("location", "name"),
    text_field("name"),
)


def normalize_board_data(raw: Any, params: Params = None) -> BoardData:
    if isinstance(raw, list):
        # bare list of connections
        return BoardData(
            type="departures",
            station=text_field("station")(params or {}) or "Unknown Station",
            connections=tuple(copy.deepcopy(raw)),
        )

    if not isinstance(raw, Mapping):
        raise InvalidCardData("board", "expected object")

    connections = first_match(BOARD_CONNECTIONS, raw)
    if connections is None:
        logger.warning("normalize board: no connections found keys=%s", sorted(raw.keys()))
        raise InvalidCardData("board", "no connections found")

    board_type = "arrivals" if raw.get("type") == "arrivals" else "departures"
    station = first_match(BOARD_STATION + (_param("station", params),), raw) or "Unknown Station"

    logger.debug("normalize board: type=%s station=%s connections=%d", board_type, station, len(connections))
    return BoardData(type=board_type, station=station, connections=tuple(copy.deepcopy(connections)))


# ---------------------------------------------------------------------------
# Trip
# ---------------------------------------------------------------------------

def _leg(raw_leg: Mapping[str, Any]) -> Leg:
    raw_leg = copy.deepcopy(raw_leg)
    if raw_leg["type"] == "WalkLeg":
        return WalkLeg(
            duration=raw_leg.get("duration"),
            distance=raw_leg.get("distance"),
            raw=raw_leg,
        )
    return ServiceLeg(
        service_journey=raw_leg["serviceJourney"],
        departure=raw_leg.get("departure"),
        arrival=raw_leg.get("arrival"),
        duration=raw_leg.get("duration"),
        raw=raw_leg,
    )


def normalize_trip_data(raw: Any, params: Params = None) -> TripData:
    trip = _validate(TripIn, raw, "trip")

    summary = None
    if trip.summary is not None:
        summary = TripSummary(
            duration=trip.summary.duration,
            transfers=trip.summary.transfers,
            departure=trip.summary.departure,
            arrival=trip.summary.arrival,
        )

    # legs passed validation, so every raw leg carries a valid type tag
    legs = tuple(_leg(raw_leg) for raw_leg in raw["legs"])

    logger.debug("normalize trip: legs=%d summary=%s", len(legs), summary is not None)
    return TripData(
        legs=legs,
        summary=summary,
        origin=copy.deepcopy(raw.get("origin")),
        destination=copy.deepcopy(raw.get("destination")),
    )


# ---------------------------------------------------------------------------
# Compare
# ---------------------------------------------------------------------------

def _route_from_mapping(route: Any, idx: int) -> Route:
    if not isinstance(route, Mapping):
        return Route(name=f"Option {idx + 1}")

    known = {"id", "name", "duration", "transfers", "departure", "arrival"}
    transfers = route.get("transfers")
    return Route(
        name=text_field("name")(route) or f"Option {idx + 1}",
        id=route.get("id"),
        duration=route.get("duration"),
        transfers=transfers if isinstance(transfers, int) and not isinstance(transfers, bool) else None,
        departure=route.get("departure"),
        arrival=route.get("arrival"),
        extra=copy.deepcopy({k: v for k, v in route.items() if k not in known}),
    )


def _stop_time(leg: Mapping[str, Any], index: int, side: str) -> Optional[str]:
    stop_points = list_field("serviceJourney", "stopPoints")(leg)
    if not stop_points or not isinstance(stop_points[index], Mapping):
        return None
    return first_match((text_field(side, "timeAimed"), text_field(side, "timeRt")), stop_points[index])


def _leg_departure(leg: Any) -> Optional[str]:
    if not isinstance(leg, Mapping):
        return None
    return first_match(
        (
            lambda raw_leg: _stop_time(raw_leg, 0, "departure"),
            text_field("start", "departure", "timeAimed"),
            text_field("departure"),
        ),
        leg,
    )


def _leg_arrival(leg: Any) -> Optional[str]:
    if not isinstance(leg, Mapping):
        return None
    return first_match(
        (
            lambda raw_leg: _stop_time(raw_leg, -1, "arrival"),
            text_field("end", "arrival", "timeAimed"),
            text_field("arrival"),
        ),
        leg,
    )


TRIP_ROUTE_EXTRAS = ("price", "occupancy", "score")


def trip_to_route(trip: Any, idx: int) -> Route:
    """
    Synthesize a comparison route from a trip search result.

    Times come from `departureTime`/`arrivalTime`, then from the first and
    last leg, then from plain `departure`/`arrival` on the trip.
    """
    if not isinstance(trip, Mapping):
        return Route(name=f"Option {idx + 1}")

    legs = trip.get("legs")
    legs = legs if isinstance(legs, list) else None
    first_leg = legs[0] if legs else None
    last_leg = legs[-1] if legs else None

    departure = first_match(
        (text_field("departureTime"), lambda _t: _leg_departure(first_leg), text_field("departure")),
        trip,
    )
    arrival = first_match(
        (text_field("arrivalTime"), lambda _t: _leg_arrival(last_leg), text_field("arrival")),
        trip,
    )
    duration = first_match((text_field("summary", "duration"), text_field("duration")), trip)

    extra: dict[str, Any] = {k: trip[k] for k in TRIP_ROUTE_EXTRAS if trip.get(k) is not None}
    co2 = first_match((lambda t: t.get("co2"), lambda t: t.get("trainCO2")), trip)
    if co2 is not None:
        extra["co2"] = co2
    if legs is not None:
        extra["legs"] = legs

    return Route(
        name=f"Option {idx + 1}",
        id=trip.get("id"),
        duration=duration,
        transfers=max(0, len(legs) - 1) if legs is not None else None,
        departure=departure,
        arrival=arrival,
        extra=copy.deepcopy(extra),
    )


TRIP_LISTS = (
    list_field("trips"),
    list_field("options"),
    list_field("data"),
)


def _routes(raw: Any) -> tuple[Route, ...]:
    if isinstance(raw, list):
        return tuple(_route_from_mapping(r, i) for i, r in enumerate(raw))

    routes = list_field("routes")(raw)
    if routes is not None:
        return tuple(_route_from_mapping(r, i) for i, r in enumerate(routes))

    trips = first_match(TRIP_LISTS, raw)
    if trips is not None:
        return tuple(trip_to_route(t, i) for i, t in enumerate(trips))

    logger.warning("normalize compare: no routes or trips in payload")
    return ()


def normalize_compare_data(raw: Any, params: Params = None) -> CompareData:
    if not isinstance(raw, (Mapping, list)):
        raise InvalidCardData("compare", "expected object or array")

    payload = raw if isinstance(raw, Mapping) else {}
    origin = first_match((text_field("origin"), text_field("from"), _param("origin", params)), payload)
    destination = first_match(
        (text_field("destination"), text_field("to"), _param("destination", params)),
        payload,
    )
    criteria = first_match((text_field("criteria"), _param("criteria", params)), payload)
    routes = _routes(raw)

    logger.debug(
        "normalize compare: origin=%s destination=%s routes=%d",
        origin,
        destination,
        len(routes),
    )
    return CompareData(
        origin=origin or "Unknown",
        destination=destination or "Unknown",
        criteria=criteria,
        routes=routes,
        analysis=copy.deepcopy(mapping_field("analysis")(payload)),
    )


# ---------------------------------------------------------------------------
# Weather / Eco / Station
# ---------------------------------------------------------------------------

WEATHER_LOCATION = (
    text_field("locationName"),
    text_field("location"),
    text_field("location", "name"),
)


def normalize_weather_data(raw: Any, params: Params = None) -> WeatherData:
    _validate(WeatherIn, raw, "weather")

    location_name = first_match(WEATHER_LOCATION + (_param("locationName", params),), raw)
    return WeatherData(
        location_name=location_name or "Unknown Location",
        hourly=copy.deepcopy(raw.get("hourly")),
        daily=copy.deepcopy(raw.get("daily")),
    )


def normalize_eco_data(raw: Any, params: Params = None) -> EcoData:
    eco = _validate(EcoIn, raw, "eco")
    return EcoData(
        train_co2=eco.trainCO2,
        car_co2=eco.carCO2,
        plane_co2=eco.planeCO2,
        savings=eco.savings,
        trees_equivalent=eco.treesEquivalent,
        route=eco.route,
    )


def normalize_station_data(raw: Any, params: Params = None) -> StationData:
    station = _validate(StationIn, raw, "station")

    coordinates = first_match(
        (
            lambda s: resolve_coordinates({"coordinates": s.get("coordinates")}),
            lambda s: resolve_coordinates(s.get("location")),
        ),
        raw,
    )
    if coordinates is None and (station.coordinates is not None or station.location is not None):
        logger.warning("normalize station: could not resolve coordinates for %s", station.name)

    return StationData(
        name=station.name,
        id=str(station.id) if station.id is not None else None,
        coordinates=coordinates,
        distance=station.distance,
    )


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

NORMALIZERS: dict[str, Callable[..., Any]] = {
    "board": normalize_board_data,
    "trip": normalize_trip_data,
    "compare": normalize_compare_data,
    "weather": normalize_weather_data,
    "eco": normalize_eco_data,
    "station": normalize_station_data,
}


def normalize_card(kind: str, raw: Any, params: Params = None):
    try:
        normalizer = NORMALIZERS[kind]
    except KeyError:
        raise ValueError(f"Unknown card kind: {kind}")
    return normalizer(raw, params)
