"""
Raw-shape guards for upstream tool payloads.

These models only decide whether a payload is structurally usable. They allow
unknown fields and use strict scalar types (no "12" -> 12.0 coercion), so
the normalizers can keep passing the original values through once a payload has
been accepted.
"""
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, model_validator


# bool is rejected, int and float both accepted
Number = Union[StrictInt, StrictFloat]


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="allow")


def _check_parallel(series: BaseModel, label: str) -> None:
    lengths = {
        name: len(values)
        for name, values in series.model_dump(exclude_none=True).items()
        if isinstance(values, list)
    }
    if len(set(lengths.values())) > 1:
        raise ValueError(f"{label} series have different lengths: {lengths}")


# ---------------------------------------------------------------------------
# Trip
# ---------------------------------------------------------------------------

class ServiceLegIn(_RawModel):
    type: Literal["ServiceLeg"]
    serviceJourney: dict
    departure: Optional[dict] = None
    arrival: Optional[dict] = None
    duration: Optional[StrictStr] = None


class WalkLegIn(_RawModel):
    type: Literal["WalkLeg"]
    duration: Optional[StrictStr] = None
    distance: Optional[Number] = None


LegIn = Annotated[Union[ServiceLegIn, WalkLegIn], Field(discriminator="type")]


class TripSummaryIn(_RawModel):
    duration: Optional[StrictStr] = None
    transfers: Optional[StrictInt] = None
    departure: Optional[StrictStr] = None
    arrival: Optional[StrictStr] = None


class TripIn(_RawModel):
    legs: list[LegIn]
    summary: Optional[TripSummaryIn] = None
    origin: Optional[dict] = None
    destination: Optional[dict] = None


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

class HourlyIn(_RawModel):
    time: Optional[list[StrictStr]] = None
    temperature_2m: Optional[list[Optional[Number]]] = None
    apparent_temperature: Optional[list[Optional[Number]]] = None
    relative_humidity_2m: Optional[list[Optional[Number]]] = None
    wind_speed_10m: Optional[list[Optional[Number]]] = None
    precipitation: Optional[list[Optional[Number]]] = None
    rain: Optional[list[Optional[Number]]] = None
    weather_code: Optional[list[Optional[Number]]] = None
    uv_index: Optional[list[Optional[Number]]] = None
    visibility: Optional[list[Optional[Number]]] = None

    @model_validator(mode="after")
    def series_are_parallel(self):
        _check_parallel(self, "hourly")
        return self


class DailyIn(_RawModel):
    time: Optional[list[StrictStr]] = None
    temperature_2m_max: Optional[list[Optional[Number]]] = None
    temperature_2m_min: Optional[list[Optional[Number]]] = None
    weather_code: Optional[list[Optional[Number]]] = None

    @model_validator(mode="after")
    def series_are_parallel(self):
        _check_parallel(self, "daily")
        return self


class WeatherIn(_RawModel):
    locationName: Optional[StrictStr] = None
    location: Any = None
    hourly: Optional[HourlyIn] = None
    daily: Optional[DailyIn] = None

    @model_validator(mode="after")
    def has_a_forecast(self):
        if self.hourly is None and self.daily is None:
            raise ValueError("expected hourly or daily forecast")
        return self


# ---------------------------------------------------------------------------
# Eco / Station
# ---------------------------------------------------------------------------

class EcoIn(_RawModel):
    trainCO2: Number
    carCO2: Optional[Number] = None
    planeCO2: Optional[Number] = None
    savings: Optional[Number] = None
    treesEquivalent: Optional[Number] = None
    route: Optional[StrictStr] = None


class StationIn(_RawModel):
    name: StrictStr = Field(min_length=1)
    id: Optional[Union[StrictStr, StrictInt]] = None
    coordinates: Any = None
    location: Any = None
    distance: Optional[Number] = None
