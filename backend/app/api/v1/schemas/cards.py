from typing import Any, Optional

from pydantic import BaseModel, Field


class CardRequest(BaseModel):
    data: Any = Field(..., description="Raw tool payload")
    params: Optional[dict[str, Any]] = Field(None, description="Query context, e.g. origin/destination")


class CardResponse(BaseModel):
    kind: str
    card: dict[str, Any]


class TripCoordinates(BaseModel):
    points: list[tuple[float, float]] = Field(..., description="[lat, lon] pairs in travel order")


class NearestStationOut(BaseModel):
    name: str
    distance: float
    distance_label: str
    coordinates: tuple[float, float]
    stop_id: Optional[str] = None


class ToolCardRequest(BaseModel):
    params: dict[str, Any] = Field(default_factory=dict, description="Tool arguments, also used as query context")
