"""Departure derivation for the configured SEQ rail modes."""

from albion_rush.services.departures.modes import LINE_NAMES, MODES, PLATFORM_NAMES, ModeConfig
from albion_rush.services.departures.resolver import (
    Departure,
    UnknownModeError,
    get_mode,
    line_name,
    platform_name,
    resolve_departures,
)

__all__ = [
    "LINE_NAMES",
    "MODES",
    "PLATFORM_NAMES",
    "Departure",
    "ModeConfig",
    "UnknownModeError",
    "get_mode",
    "line_name",
    "platform_name",
    "resolve_departures",
]
