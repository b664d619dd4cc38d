"""GTFS-Realtime retrieval for the TransLink SEQ TripUpdates feed."""

from albion_rush.services.gtfs_rt.decoder import FeedDecodeError, GtfsRtDecoder
from albion_rush.services.gtfs_rt.fetcher import GtfsRtFetcher, UpstreamError

__all__ = [
    "FeedDecodeError",
    "GtfsRtDecoder",
    "GtfsRtFetcher",
    "UpstreamError",
]
