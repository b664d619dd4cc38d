"""Static mode, platform and line-name tables for the SEQ rail network.

Stop IDs and platform numbers come from ``stops.txt`` in the TransLink SEQ
static GTFS dataset. Each physical platform has its own stop ID.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class ModeConfig:
    """Which trips count as departures for one station/direction pairing.

    Attributes:
        stop_ids: Target stop IDs. A trip qualifies when any stop time update
            matches one of these by scheduled or assigned stop ID.
        direction_id: GTFS ``direction_id`` to keep. Trips that carry a
            different direction are dropped; trips without one are kept.
        required_stop_ids: If set, the trip must call at one of these
            (by scheduled stop ID) somewhere after the matched stop.
        use_destination: Name the line after the destination half of the
            route code instead of the origin half.
        limit: Per-mode cap on the number of departures returned.
    """

    stop_ids: frozenset[str]
    direction_id: int | None = None
    required_stop_ids: frozenset[str] | None = None
    use_destination: bool = False
    limit: int | None = None

    def __post_init__(self) -> None:
        if not self.stop_ids:
            msg = "stop_ids must not be empty"
            raise ValueError(msg)
        if self.required_stop_ids is not None and not self.required_stop_ids:
            msg = "required_stop_ids must be None or non-empty"
            raise ValueError(msg)
        if self.limit is not None and self.limit < 1:
            msg = f"limit must be positive, got {self.limit}"
            raise ValueError(msg)

    @classmethod
    def build(
        cls,
        stop_ids: Iterable[str],
        *,
        direction_id: int | None = None,
        required_stop_ids: Iterable[str] | None = None,
        use_destination: bool = False,
        limit: int | None = None,
    ) -> ModeConfig:
        """Construct a config from any iterables of stop IDs."""
        return cls(
            stop_ids=frozenset(stop_ids),
            direction_id=direction_id,
            required_stop_ids=(
                frozenset(required_stop_ids) if required_stop_ids is not None else None
            ),
            use_destination=use_destination,
            limit=limit,
        )


MODES: Mapping[str, ModeConfig] = MappingProxyType(
    {
        # Inbound (toward Roma Street) at Albion; direction 0 is citybound
        "albion": ModeConfig.build(
            ["600365", "600366", "600368"],
            direction_id=0,
        ),
        # Roma Street trains that go on to call at Milton
        "roma-milton": ModeConfig.build(
            ["600029"],
            required_stop_ids=["600279", "600280"],
            use_destination=True,
        ),
    }
)

PLATFORM_NAMES: Mapping[str, str] = MappingProxyType(
    {
        # Roma Street
        "600028": "7",
        "600029": "8",
        "600030": "6",
        "600033": "3",
        "600034": "5",
        "600035": "10",
        "600036": "4",
        "600038": "9",
        # Albion
        "600365": "1",
        "600366": "2",
        "600368": "3",
    }
)

# Route IDs look like ORIGDEST-version (e.g. RPSP-4484); ORIG and DEST are
# these two-letter terminal codes.
LINE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "AI": "Airport",
        "BD": "Gold Coast",
        "CA": "Caboolture",
        "CL": "Cleveland",
        "DB": "Doomben",
        "FG": "Ferny Grove",
        "GC": "Gold Coast",
        "GY": "Gympie",
        "IP": "Ipswich",
        "NA": "Nambour",
        "RP": "Redcliffe",
        "RW": "Rosewood",
        "SH": "Shorncliffe",
        "SM": "Stradbroke",
        "SP": "Springfield",
        "VL": "Gold Coast",
    }
)
