"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from albion_rush.main import app
from albion_rush.services.feed_cache import FeedCache, get_feed_cache, reset_feed_cache
from albion_rush.services.gtfs_rt.decoder import GtfsRtDecoder

from .fixtures.gtfs_rt_fixture import build_trip_update_feed


@pytest.fixture
def mock_fetcher() -> Any:
    """Fetcher stub whose ``fetch`` returns a one-trip Albion feed."""
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=build_trip_update_feed())
    return fetcher


@pytest.fixture
def feed_cache(mock_fetcher: Any) -> FeedCache:
    """Feed cache backed by the stub fetcher and the real decoder."""
    return FeedCache(mock_fetcher, GtfsRtDecoder(), "https://example.com/TripUpdates")


@pytest.fixture
async def client(feed_cache: FeedCache) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the feed cache dependency overridden."""
    app.dependency_overrides[get_feed_cache] = lambda: feed_cache
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    reset_feed_cache()
