"""Departure endpoints.

Endpoints
---------
GET /api/departures   – next departures for a mode
GET /api/modes        – configured mode names
"""

from __future__ import annotations

from typing import Annotated, Any, List, Optional, Union

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from albion_rush.config import get_settings
from albion_rush.logging import get_logger
from albion_rush.services.departures import (
    MODES,
    UnknownModeError,
    get_mode,
    resolve_departures,
)
from albion_rush.services.feed_cache import FeedCache, get_feed_cache
from albion_rush.services.gtfs_rt import FeedDecodeError, UpstreamError

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["departures"])

UPSTREAM_ERROR_MESSAGE = "Could not fetch live data from TransLink"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class DepartureItem(BaseModel):
    line: str
    minutes: int
    departure_ts: Union[int, float] = Field(serialization_alias="departureTs")
    platform: Optional[str] = None


class DeparturesResponse(BaseModel):
    departures: List[DepartureItem]
    fetched_at: int = Field(serialization_alias="fetchedAt")


class ModesResponse(BaseModel):
    modes: List[str]
    default: str


class ErrorResponse(BaseModel):
    error: str


# ---------------------------------------------------------------------------
# GET /api/departures
# ---------------------------------------------------------------------------


@router.get(
    "/departures",
    response_model=DeparturesResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Next departures for a mode",
    description=(
        "Return the next departures for `mode`, soonest first, derived from "
        "the cached TransLink TripUpdates feed.  An empty list is a valid "
        "answer; an unknown mode is a 400 and an unreachable feed a 502."
    ),
)
async def get_departures(
    cache: Annotated[FeedCache, Depends(get_feed_cache)],
    mode: Annotated[
        Optional[str],
        Query(description="Mode name, e.g. `albion` or `roma-milton`"),
    ] = None,
    limit: Annotated[
        Optional[int],
        Query(ge=1, le=20, description="Maximum number of departures to return"),
    ] = None,
) -> Any:
    """Resolve departures for a mode against the current feed snapshot."""
    settings = get_settings()
    mode = mode or settings.default_mode
    try:
        get_mode(mode)
    except UnknownModeError as exc:
        logger.info("Rejected unknown mode", mode=mode)
        return JSONResponse(status_code=400, content={"error": str(exc)})

    try:
        snapshot = await cache.get()
    except (UpstreamError, FeedDecodeError) as exc:
        logger.error("Error fetching GTFS-RT", mode=mode, error=str(exc))
        return JSONResponse(status_code=502, content={"error": UPSTREAM_ERROR_MESSAGE})

    departures = resolve_departures(
        snapshot.feed,
        mode,
        limit=limit if limit is not None else settings.departure_limit,
        grace_sec=settings.departure_grace_sec,
    )
    return {
        "departures": [
            {
                "line": d.line,
                "minutes": d.minutes,
                "departure_ts": d.departure_ts,
                "platform": d.platform,
            }
            for d in departures
        ],
        "fetched_at": snapshot.fetched_at_ms,
    }


# ---------------------------------------------------------------------------
# GET /api/modes
# ---------------------------------------------------------------------------


@router.get("/modes", response_model=ModesResponse, summary="List configured modes")
async def list_modes() -> dict[str, Any]:
    """Return the configured mode names and the default mode."""
    return {"modes": sorted(MODES), "default": get_settings().default_mode}
