from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Body, Depends, HTTPException, Query

from app.api.v1.schemas.cards import (
    CardRequest,
    CardResponse,
    NearestStationOut,
    ToolCardRequest,
    TripCoordinates,
)
from app.cards.errors import InvalidCardData
from app.cards.normalizers import NORMALIZERS, normalize_card
from app.cards.types import card_to_dict
from app.clients.tools import TOOL_CARDS, fetch_tool_card, find_nearest_station
from app.core.context import AppContext
from app.core.deps import get_context, get_tools_client
from app.geo.coordinates import extract_trip_coordinates
from app.geo.distance import format_distance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["cards"])


@router.post("/cards/{kind}", response_model=CardResponse)
def post_card(kind: str, body: CardRequest):
    if kind not in NORMALIZERS:
        raise HTTPException(status_code=404, detail=f"unknown card kind: {kind}")

    try:
        card = normalize_card(kind, body.data, body.params)
    except InvalidCardData as e:
        logger.info("Rejected %s card: %s", kind, e)
        raise HTTPException(status_code=400, detail=str(e))

    return CardResponse(kind=kind, card=card_to_dict(card))


@router.post("/tools/{tool_name}/card", response_model=CardResponse)
def post_tool_card(
    tool_name: str,
    body: ToolCardRequest,
    ctx: AppContext = Depends(get_context),
    client: httpx.Client = Depends(get_tools_client),
):
    if tool_name not in TOOL_CARDS:
        raise HTTPException(status_code=404, detail=f"no card for tool: {tool_name}")

    try:
        kind, card = fetch_tool_card(ctx.config, client, ctx.caches(), tool_name, body.params)
    except InvalidCardData as e:
        logger.info("Rejected %s answer: %s", tool_name, e)
        raise HTTPException(status_code=400, detail=str(e))
    except (httpx.HTTPError, ValueError) as e:
        # ValueError here is a non-JSON upstream body
        logger.error("Tool %s failed: %r", tool_name, e)
        raise HTTPException(status_code=502, detail=f"tool {tool_name} failed")

    return CardResponse(kind=kind, card=card_to_dict(card))


@router.post("/trips/coordinates", response_model=TripCoordinates)
def post_trip_coordinates(trip: Any = Body(...)):
    return TripCoordinates(points=extract_trip_coordinates(trip))


@router.get("/stations/nearest", response_model=NearestStationOut)
def get_nearest_station(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    ctx: AppContext = Depends(get_context),
    client: httpx.Client = Depends(get_tools_client),
):
    station = find_nearest_station(ctx.config, client, (lat, lon), cache=ctx.stations)
    if station is None:
        raise HTTPException(status_code=404, detail="no station found")

    return NearestStationOut(
        name=station.name,
        distance=station.distance,
        distance_label=format_distance(station.distance),
        coordinates=station.coordinates,
        stop_id=station.stop_id,
    )
