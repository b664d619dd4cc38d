"""GTFS-RT protobuf decode layer."""

from __future__ import annotations

from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from albion_rush.logging import get_logger

logger = get_logger(__name__)


class FeedDecodeError(Exception):
    """Raised when protobuf decoding fails."""


class GtfsRtDecoder:
    """Decodes raw protobuf bytes into GTFS-RT FeedMessage objects."""

    @staticmethod
    def decode(data: bytes) -> gtfs_realtime_pb2.FeedMessage:
        """Decode protobuf bytes into a FeedMessage.

        Raises:
            FeedDecodeError: If protobuf parsing fails.
        """
        try:
            feed = gtfs_realtime_pb2.FeedMessage()
            feed.ParseFromString(data)
        except DecodeError as exc:
            msg = "Failed to decode TripUpdates protobuf"
            logger.error(msg, size_bytes=len(data), error=str(exc))
            raise FeedDecodeError(msg) from exc

        logger.info(
            "GTFS-RT feed decoded",
            entity_count=len(feed.entity),
            trip_update_count=sum(1 for e in feed.entity if e.HasField("trip_update")),
            feed_timestamp=feed.header.timestamp or 0,
        )
        return feed
