"""Departure resolver: decoded TripUpdates feed to a ranked departure list.

Everything here is a pure function of its inputs (plus the clock when ``now``
is not given), so it can be called concurrently against any snapshot.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from albion_rush.logging import get_logger
from albion_rush.services.departures.modes import LINE_NAMES, MODES, PLATFORM_NAMES, ModeConfig

if TYPE_CHECKING:
    from google.transit import gtfs_realtime_pb2  # type: ignore[import-untyped]

logger = get_logger(__name__)

DEFAULT_LIMIT = 5
DEFAULT_GRACE_SEC = 60
GENERIC_LINE_NAME = "Train"


class UnknownModeError(KeyError):
    """Raised when a mode name is not configured."""

    def __init__(self, mode: str) -> None:
        super().__init__(mode)
        self.mode = mode

    def __str__(self) -> str:
        return f"Unknown mode: {self.mode}"


class TimeConversionError(ValueError):
    """Raised when a stop time event carries no usable epoch time."""


@dataclass(frozen=True)
class Departure:
    """One upcoming departure for a mode."""

    line: str
    minutes: int
    departure_ts: int | float
    platform: str | None = None


def get_mode(mode: str, modes: Mapping[str, ModeConfig] = MODES) -> ModeConfig:
    """Look up a mode configuration by name.

    Raises:
        UnknownModeError: If ``mode`` is not in ``modes``.
    """
    try:
        return modes[mode]
    except KeyError:
        raise UnknownModeError(mode) from None


def line_name(
    route_id: str | None,
    use_destination: bool = False,
    names: Mapping[str, str] = LINE_NAMES,
) -> str:
    """Decode a TransLink route ID into a display line name.

    ``RPSP-4484`` names the Redcliffe line from its origin half or the
    Springfield line from its destination half. Unknown codes fall back to
    the raw route ID.
    """
    if not route_id:
        return GENERIC_LINE_NAME
    code = route_id.upper().split("-", 1)[0]
    if use_destination and len(code) >= 4:
        dest = names.get(code[2:4])
        if dest:
            return dest
    return names.get(code[0:2]) or route_id


def platform_name(stop_id: str, platforms: Mapping[str, str] = PLATFORM_NAMES) -> str | None:
    """Return the platform label for a stop ID, or None if unmapped."""
    return platforms.get(stop_id)


def _effective_stop_id(stu: gtfs_realtime_pb2.TripUpdate.StopTimeUpdate) -> str:
    # TransLink sets assigned_stop_id when a train is moved off its scheduled platform
    if stu.HasField("stop_time_properties") and stu.stop_time_properties.assigned_stop_id:
        return str(stu.stop_time_properties.assigned_stop_id)
    return str(stu.stop_id)


def _to_epoch_seconds(value: Any) -> int | float:
    """Convert a protobuf int64 (or anything numeric) to epoch seconds.

    Raises:
        TimeConversionError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        msg = f"not a timestamp: {value!r}"
        raise TimeConversionError(msg)
    if isinstance(value, int):
        return value
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        msg = f"not a timestamp: {value!r}"
        raise TimeConversionError(msg) from exc
    if not math.isfinite(seconds):
        msg = f"not a finite timestamp: {value!r}"
        raise TimeConversionError(msg)
    return seconds


def _event_time(stu: gtfs_realtime_pb2.TripUpdate.StopTimeUpdate) -> int | float:
    """Departure time of a stop time update, falling back to arrival.

    Raises:
        TimeConversionError: If neither event is present or it has no time.
    """
    if stu.HasField("departure"):
        event = stu.departure
    elif stu.HasField("arrival"):
        event = stu.arrival
    else:
        msg = "stop time update has neither departure nor arrival"
        raise TimeConversionError(msg)
    if not event.HasField("time"):
        msg = "stop time event has no time"
        raise TimeConversionError(msg)
    return _to_epoch_seconds(event.time)


def _round_minutes(seconds: float) -> int:
    # Round half up; round() would send 2.5 down to 2
    return math.floor(seconds / 60 + 0.5)


def _resolve_cap(limit: int | None, config: ModeConfig) -> int:
    if limit is not None and limit < 1:
        msg = f"limit must be positive, got {limit}"
        raise ValueError(msg)
    caps = [cap for cap in (limit, config.limit) if cap is not None]
    return min(caps) if caps else DEFAULT_LIMIT


def resolve_departures(
    feed: gtfs_realtime_pb2.FeedMessage,
    mode: str,
    *,
    now: float | None = None,
    limit: int | None = None,
    grace_sec: int = DEFAULT_GRACE_SEC,
    modes: Mapping[str, ModeConfig] = MODES,
) -> list[Departure]:
    """Extract upcoming departures from a TripUpdates feed for one mode.

    For each trip update, in feed order:
        1. skip trip IDs that already produced a departure
        2. skip trips whose known direction differs from the mode's
        3. find the first stop time update matching the mode's stops,
           by scheduled or assigned stop ID
        4. if the mode requires downstream stops, require one of them
           (by scheduled stop ID) after the matched position
        5. take the departure time (or arrival), skipping trains that left
           more than ``grace_sec`` ago

    Args:
        feed: Decoded GTFS-RT FeedMessage. Not modified.
        mode: Key into ``modes``.
        now: Resolution instant in epoch seconds; defaults to the current time.
        limit: Cap on results. The smaller of this and the mode's own
            ``limit`` applies; with neither, ``DEFAULT_LIMIT``.
        grace_sec: How long after departure a train is still listed.
        modes: Mode table to resolve ``mode`` against.

    Returns:
        Departures sorted by departure time, at most the cap long.

    Raises:
        UnknownModeError: If ``mode`` is not configured.
        ValueError: If ``limit`` is less than 1.
    """
    config = get_mode(mode, modes)
    cap = _resolve_cap(limit, config)
    if now is None:
        now = time.time()

    results: list[Departure] = []
    seen_trip_ids: set[str] = set()
    skipped_times = 0

    for entity in feed.entity:
        if not entity.HasField("trip_update"):
            continue
        tu = entity.trip_update
        if not tu.stop_time_update:
            continue

        trip_id = tu.trip.trip_id
        if trip_id and trip_id in seen_trip_ids:
            continue

        if (
            config.direction_id is not None
            and tu.trip.HasField("direction_id")
            and tu.trip.direction_id != config.direction_id
        ):
            continue

        target = None
        target_stop_id = ""
        target_idx = -1
        for idx, stu in enumerate(tu.stop_time_update):
            effective = _effective_stop_id(stu)
            if stu.stop_id in config.stop_ids or effective in config.stop_ids:
                target, target_stop_id, target_idx = stu, effective, idx
                break
        if target is None:
            continue

        if config.required_stop_ids is not None and not any(
            later.stop_id in config.required_stop_ids
            for later in tu.stop_time_update[target_idx + 1 :]
        ):
            continue

        try:
            departure_ts = _event_time(target)
        except TimeConversionError as exc:
            skipped_times += 1
            logger.debug("Skipping trip with unusable time", trip_id=trip_id, error=str(exc))
            continue
        if departure_ts < now - grace_sec:
            continue

        results.append(
            Departure(
                line=line_name(tu.trip.route_id, config.use_destination),
                minutes=_round_minutes(departure_ts - now),
                departure_ts=departure_ts,
                platform=platform_name(target_stop_id),
            )
        )
        if trip_id:
            seen_trip_ids.add(trip_id)

    results.sort(key=lambda d: d.departure_ts)

    logger.debug(
        "Departures resolved",
        mode=mode,
        entity_count=len(feed.entity),
        matched=len(results),
        returned=min(cap, len(results)),
        skipped_times=skipped_times,
    )
    return results[:cap]
