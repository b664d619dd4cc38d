"""Tests for environment-driven settings."""

import pytest

from albion_rush.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GTFS_RT_URL", raising=False)
    settings = Settings(_env_file=None)

    assert settings.translink_trip_updates_url == (
        "https://gtfsrt.api.translink.com.au/api/realtime/SEQ/TripUpdates"
    )
    assert settings.feed_cache_ttl_ms == 15000
    assert settings.departure_limit == 5
    assert settings.departure_grace_sec == 60
    assert settings.default_mode == "albion"
    assert settings.port == 3000


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GTFS_RT_URL", "https://mirror.example.com/TripUpdates")
    monkeypatch.setenv("FEED_CACHE_TTL_MS", "5000")
    monkeypatch.setenv("PORT", "8080")

    settings = Settings(_env_file=None)

    assert settings.translink_trip_updates_url == "https://mirror.example.com/TripUpdates"
    assert settings.feed_cache_ttl_ms == 5000
    assert settings.port == 8080


def test_departure_limit_bounds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEPARTURE_LIMIT", "0")

    with pytest.raises(ValueError):
        Settings(_env_file=None)
