"""Shared TripUpdates snapshot cache with single-flight refresh."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from albion_rush.config import get_settings
from albion_rush.logging import get_logger
from albion_rush.services.gtfs_rt.decoder import GtfsRtDecoder
from albion_rush.services.gtfs_rt.fetcher import GtfsRtFetcher

if TYPE_CHECKING:
    from google.transit import gtfs_realtime_pb2  # type: ignore[import-untyped]

logger = get_logger(__name__)

DEFAULT_TTL_MS = 15000


class CacheState(str, Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"
    REFRESHING = "refreshing"


@dataclass(frozen=True)
class FeedSnapshot:
    """One decoded feed and the wall-clock time it was fetched."""

    feed: gtfs_realtime_pb2.FeedMessage
    fetched_at_ms: int


class FeedCache:
    """Holds the most recent decoded feed, refreshing at most once per TTL.

    Callers that arrive while a refresh is outstanding await the same task,
    so a burst of requests against a stale cache costs one upstream fetch.
    A failed refresh is raised to every waiter and leaves the previous
    snapshot in place; the next ``get()`` starts a new fetch.

    Usage:
        cache = FeedCache(GtfsRtFetcher(), GtfsRtDecoder(), url)
        snapshot = await cache.get()
    """

    def __init__(
        self,
        fetcher: GtfsRtFetcher,
        decoder: GtfsRtDecoder,
        url: str,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher
        self._decoder = decoder
        self._url = url
        self._ttl_ms = ttl_ms
        self._clock = clock

        self._lock = asyncio.Lock()
        self._snapshot: FeedSnapshot | None = None
        self._inflight: asyncio.Task[FeedSnapshot] | None = None
        self._last_error: str | None = None

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def snapshot(self) -> FeedSnapshot | None:
        return self._snapshot

    @property
    def fetched_at_ms(self) -> int | None:
        return self._snapshot.fetched_at_ms if self._snapshot else None

    @property
    def last_error(self) -> str | None:
        """Message of the most recent failed refresh, cleared by a successful one."""
        return self._last_error

    @property
    def state(self) -> CacheState:
        if self._inflight is not None:
            return CacheState.REFRESHING
        if self._snapshot is None:
            return CacheState.EMPTY
        if self._is_fresh(self._snapshot):
            return CacheState.FRESH
        return CacheState.STALE

    async def get(self) -> FeedSnapshot:
        """Return a snapshot no older than the TTL, refreshing if needed.

        Raises:
            UpstreamError: If the shared refresh could not fetch the feed.
            FeedDecodeError: If the shared refresh fetched an undecodable payload.
        """
        async with self._lock:
            snapshot = self._snapshot
            if snapshot is not None and self._is_fresh(snapshot):
                return snapshot

            task = self._inflight
            if task is None:
                task = asyncio.create_task(self._refresh())
                self._inflight = task
                # Mark the outcome retrieved even if every waiter was cancelled
                task.add_done_callback(lambda t: t.cancelled() or t.exception())
                logger.debug("Feed cache refresh started", had_snapshot=snapshot is not None)

        # Shield so a cancelled request does not cancel the fetch other callers await
        return await asyncio.shield(task)

    def _is_fresh(self, snapshot: FeedSnapshot) -> bool:
        return self._now_ms() - snapshot.fetched_at_ms < self._ttl_ms

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def _refresh(self) -> FeedSnapshot:
        # No await between decode and the finally block, so the new snapshot and
        # the cleared in-flight marker become visible in the same loop step
        try:
            data = await self._fetcher.fetch(self._url)
            feed = self._decoder.decode(data)
            snapshot = FeedSnapshot(feed=feed, fetched_at_ms=self._now_ms())
            self._snapshot = snapshot
            self._last_error = None
        except Exception as exc:
            self._last_error = str(exc)
            logger.warning(
                "Feed cache refresh failed",
                error=str(exc),
                kept_previous_snapshot=self._snapshot is not None,
            )
            raise
        finally:
            self._inflight = None

        logger.info("Feed cache refreshed", entity_count=len(feed.entity))
        return snapshot


# Singleton instance for the app lifecycle
_cache_instance: FeedCache | None = None


def get_feed_cache() -> FeedCache:
    """Get or create the singleton feed cache."""
    global _cache_instance
    if _cache_instance is None:
        settings = get_settings()
        _cache_instance = FeedCache(
            fetcher=GtfsRtFetcher(timeout_sec=settings.feed_fetch_timeout_sec),
            decoder=GtfsRtDecoder(),
            url=settings.translink_trip_updates_url,
            ttl_ms=settings.feed_cache_ttl_ms,
        )
    return _cache_instance


def reset_feed_cache() -> None:
    """Reset the singleton (for testing)."""
    global _cache_instance
    _cache_instance = None
