import json
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from app.cache.ttl import TTLCache, cached_call
from app.cards.normalizers import normalize_card
from app.cards.types import CoordinatePoint
from app.core.config import AppConfig
from app.geo.distance import rank_stations, select_nearest

logger = logging.getLogger(__name__)

RETRY_STATUSES = {429, 502, 503, 504, 520, 522, 524}


@dataclass(frozen=True)
class NearestStation:
    name: str
    distance: float                       # meters
    coordinates: CoordinatePoint
    stop_id: Optional[str] = None


def log_request(request: httpx.Request) -> None:
    logger.debug("HTTP %s %s", request.method, request.url)


def make_client(cfg: AppConfig, *, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    timeout = httpx.Timeout(
        connect=cfg.connect_timeout,
        read=cfg.read_timeout,
        write=cfg.write_timeout,
        pool=cfg.pool_timeout,
    )
    return httpx.Client(
        base_url=cfg.tools_base_url,
        timeout=timeout,
        headers={"Content-Type": "application/json"},
        event_hooks={"request": [log_request]},
        transport=transport,
    )


def sleep_backoff(cfg: AppConfig, *, attempt: int, path: str) -> None:
    sleep_s = cfg.backoff_base * (2 ** (attempt - 1))
    sleep_s += random.uniform(0, 0.25)
    logger.info("Sleeping %.2fs before retrying %s", sleep_s, path)
    time.sleep(sleep_s)


def post_with_retry(cfg: AppConfig, client: httpx.Client, path: str, payload: dict) -> Any:
    last_err: Exception | None = None

    for attempt in range(1, cfg.retries + 1):
        t0 = time.perf_counter()
        try:
            r = client.post(path, json=payload)
            elapsed = time.perf_counter() - t0

            if r.status_code in RETRY_STATUSES:
                logger.warning(
                    "Retryable HTTP %d (attempt %d/%d) POST %s after %.2fs body_snippet=%r",
                    r.status_code,
                    attempt,
                    cfg.retries,
                    path,
                    elapsed,
                    (r.text or "")[:300],
                )
                raise httpx.HTTPStatusError("Retryable status", request=r.request, response=r)

            logger.debug("POST %s completed in %.2fs status=%d", path, elapsed, r.status_code)
            r.raise_for_status()
            return r.json()

        except (httpx.ReadTimeout, httpx.ConnectTimeout) as e:
            last_err = e
            logger.warning(
                "%s (attempt %d/%d) POST %s after %.2fs",
                e.__class__.__name__,
                attempt,
                cfg.retries,
                path,
                time.perf_counter() - t0,
            )

        except httpx.HTTPStatusError as e:
            last_err = e
            status = e.response.status_code
            if status not in RETRY_STATUSES:
                logger.error(
                    "Non-retryable HTTP %s POST %s body_snippet=%r",
                    status,
                    path,
                    (e.response.text or "")[:300],
                )
                raise

        if attempt < cfg.retries:
            sleep_backoff(cfg, attempt=attempt, path=path)

    raise last_err  # type: ignore


def tool_cache_key(tool_name: str, params: dict) -> str:
    return f"{tool_name}:{json.dumps(params, sort_keys=True, default=str)}"


def call_tool(cfg: AppConfig, client: httpx.Client, tool_name: str, params: dict) -> Any:
    return post_with_retry(cfg, client, f"/{tool_name}", params)


def call_tool_cached(
    cfg: AppConfig,
    client: httpx.Client,
    cache: TTLCache,
    tool_name: str,
    params: dict,
) -> Any:
    return cached_call(
        cache,
        tool_cache_key(tool_name, params),
        lambda: call_tool(cfg, client, tool_name, params),
    )


# tool name -> (cache name, card kind)
TOOL_CARDS: dict[str, tuple[str, str]] = {
    "getWeather": ("weather", "weather"),
    "findTrips": ("trips", "compare"),
    "compareRoutes": ("trips", "compare"),
    "getPlaceEvents": ("trips", "board"),
    "getEcoComparison": ("trips", "eco"),
}


def fetch_tool_card(
    cfg: AppConfig,
    client: httpx.Client,
    caches: Mapping[str, TTLCache],
    tool_name: str,
    params: dict,
):
    """
    Call a tool through its cache and normalize the answer into a card.

    The same params are sent upstream and handed to the normalizer as query
    context. Raises KeyError for tools without a card, httpx.HTTPError or
    ValueError for upstream failures, InvalidCardData for unusable payloads.
    """
    cache_name, kind = TOOL_CARDS[tool_name]
    data = call_tool_cached(cfg, client, caches[cache_name], tool_name, params)
    logger.debug("Tool %s answered, normalizing as %s card", tool_name, kind)
    return kind, normalize_card(kind, data, params)


def _stations_from_response(data: Any) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("stations"), list):
        return data["stations"]
    return []


def find_nearest_station(
    cfg: AppConfig,
    client: httpx.Client,
    location: CoordinatePoint,
    *,
    cache: Optional[TTLCache] = None,
) -> Optional[NearestStation]:
    """
    Ask the tool proxy for stations around `location` and pick the best one.

    Returns None on upstream errors, an empty answer, or when the chosen
    station has no usable coordinates.
    """
    lat, lon = location
    params = {"latitude": lat, "longitude": lon, "limit": cfg.nearest_station_limit}

    try:
        if cache is not None:
            data = call_tool_cached(cfg, client, cache, "findPlacesByLocation", params)
        else:
            data = call_tool(cfg, client, "findPlacesByLocation", params)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("findPlacesByLocation failed lat=%s lon=%s error=%r", lat, lon, e)
        return None

    stations = _stations_from_response(data)
    if not stations:
        logger.warning("findPlacesByLocation returned no stations (type=%s)", type(data).__name__)
        return None

    best = select_nearest(rank_stations(stations, location))
    if best is None:
        logger.warning("No station with usable coordinates near lat=%s lon=%s", lat, lon)
        return None

    station = best.station
    stop_id = station.get("stopId") or station.get("id")
    return NearestStation(
        name=station.get("name") or station.get("label") or "Unknown Station",
        distance=best.distance,
        coordinates=best.point,
        stop_id=str(stop_id) if stop_id is not None else None,
    )
