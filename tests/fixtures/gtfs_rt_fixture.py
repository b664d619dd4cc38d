"""Test fixtures for GTFS-RT protobuf data."""

from __future__ import annotations

import time

from google.transit import gtfs_realtime_pb2


def stop(
    stop_id: str,
    departure: int | None = None,
    arrival: int | None = None,
    assigned_stop_id: str | None = None,
) -> dict:
    """Describe one stop time update for ``add_trip_update``."""
    return {
        "stop_id": stop_id,
        "departure": departure,
        "arrival": arrival,
        "assigned_stop_id": assigned_stop_id,
    }


def add_trip_update(
    feed: gtfs_realtime_pb2.FeedMessage,
    trip_id: str | None = "trip_001",
    route_id: str | None = "RPSP-4484",
    direction_id: int | None = None,
    stop_updates: list[dict] | None = None,
) -> gtfs_realtime_pb2.TripUpdate:
    """Append a TripUpdate entity to ``feed``.

    Args:
        feed: FeedMessage to extend.
        trip_id: Trip identifier, or None to leave it unset.
        route_id: Route identifier, or None to leave it unset.
        direction_id: GTFS direction, or None to leave it unset.
        stop_updates: Dicts built with ``stop()``. A None departure/arrival
            leaves that event absent.

    Returns:
        The TripUpdate message that was added.
    """
    entity = feed.entity.add()
    entity.id = f"tu_{len(feed.entity)}"
    tu = entity.trip_update
    if trip_id is not None:
        tu.trip.trip_id = trip_id
    if route_id is not None:
        tu.trip.route_id = route_id
    if direction_id is not None:
        tu.trip.direction_id = direction_id

    for su in stop_updates or []:
        stu = tu.stop_time_update.add()
        stu.stop_id = su["stop_id"]
        if su.get("departure") is not None:
            stu.departure.time = su["departure"]
        if su.get("arrival") is not None:
            stu.arrival.time = su["arrival"]
        if su.get("assigned_stop_id") is not None:
            stu.stop_time_properties.assigned_stop_id = su["assigned_stop_id"]

    return tu


def build_feed(feed_timestamp: int | None = None) -> gtfs_realtime_pb2.FeedMessage:
    """Build an empty FeedMessage with a populated header."""
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    feed.header.timestamp = feed_timestamp or int(time.time())
    return feed


def build_trip_update_feed(
    trip_id: str = "trip_001",
    route_id: str = "RPSP-4484",
    stop_updates: list[dict] | None = None,
    feed_timestamp: int | None = None,
) -> bytes:
    """Build a serialized FeedMessage with a single TripUpdate entity.

    Defaults to a citybound Albion service leaving platform 2 in ten minutes.
    """
    feed = build_feed(feed_timestamp)
    if stop_updates is None:
        depart = int(time.time()) + 600
        stop_updates = [
            stop("600366", departure=depart),
            stop("600029", arrival=depart + 480),
        ]
    add_trip_update(
        feed,
        trip_id=trip_id,
        route_id=route_id,
        direction_id=0,
        stop_updates=stop_updates,
    )
    return feed.SerializeToString()


def build_vehicle_position_feed(vehicle_id: str = "veh_001") -> gtfs_realtime_pb2.FeedMessage:
    """Build a FeedMessage holding only a VehiclePosition entity."""
    feed = build_feed()
    entity = feed.entity.add()
    entity.id = f"vp_{vehicle_id}"
    entity.vehicle.vehicle.id = vehicle_id
    entity.vehicle.trip.trip_id = "trip_001"
    entity.vehicle.position.latitude = -27.4298
    entity.vehicle.position.longitude = 153.0431
    return feed
