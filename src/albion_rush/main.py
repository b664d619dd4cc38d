"""FastAPI application entry point."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from albion_rush.config import get_settings
from albion_rush.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from albion_rush.routers.departures import router as departures_router
from albion_rush.services.feed_cache import FeedCache, get_feed_cache, reset_feed_cache

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()
    settings = get_settings()
    cache = get_feed_cache()
    logger.info(
        "Starting Albion Rush",
        feed_url=settings.translink_trip_updates_url,
        cache_ttl_ms=cache.ttl_ms,
    )

    yield

    reset_feed_cache()
    logger.info("Shutting down Albion Rush")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Next SEQ rail departures from the TransLink GTFS-RT feed",
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.environment == "development" else [],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next: Any) -> Any:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        bind_request_context(request_id=request_id, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response

    app.include_router(departures_router)

    @app.get("/health", tags=["meta"])
    async def health_check(
        cache: Annotated[FeedCache, Depends(get_feed_cache)],
    ) -> dict[str, Any]:
        """Health check reporting the feed cache state."""
        settings = get_settings()
        state = cache.state
        fetched_at = cache.fetched_at_ms

        issues: list[str] = []
        if cache.last_error:
            issues.append(f"Last feed refresh failed: {cache.last_error}")

        status = "degraded" if issues else "healthy"
        return {
            "service": settings.app_name,
            "status": status,
            "version": settings.app_version,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "feedCache": {
                    "state": state.value,
                    "fetchedAt": fetched_at,
                    "ttlMs": cache.ttl_ms,
                },
            },
            "issues": issues,
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred",
            },
        )

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn using host and port from settings."""
    settings = get_settings()
    uvicorn.run(
        "albion_rush.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )
