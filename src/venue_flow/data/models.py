"""Venue, station and passenger-flow data models."""

from __future__ import annotations

import re
from dataclasses import dataclass

_SLUG_RE = re.compile(r"[^a-zA-Z0-9]+")


def performance_id(name: str) -> str:
    """Derive the selection id of a performance from its *name*.

    Examples
    --------
    >>> performance_id("Swan Lake - Night 2")
    'perf_swan_lake_night_2'
    """
    return "perf_" + _SLUG_RE.sub("_", name).lower()


@dataclass(frozen=True)
class Performance:
    """A live performance at a venue, with its ranked nearby metro stations."""

    id: str
    """Selection id, see :func:`performance_id`."""

    name: str
    """Performance name. Flow records join on this value."""

    venue: str
    """Venue display name."""

    geometry_point: tuple[float, float] | None
    """Venue location as ``(lon, lat)``, or None when absent/malformed."""

    nearest_stations: tuple[str, ...]
    """Up to five station names, nearest first."""


@dataclass(frozen=True)
class Station:
    """A metro station. ``name`` is the join key used by every other entity."""

    name: str
    lat: float
    lon: float


@dataclass(frozen=True)
class FlowRecord:
    """Passenger counts attributable to one performance at one station.

    ``interval_start`` is the raw bucket label from the source
    (``"HH:MM:00"`` or ``"YYYY-MM-DD HH:MM:00"``).
    """

    performance_name: str
    station: str
    interval_start: str
    entry_count: int
    exit_count: int

    @property
    def total(self) -> int:
        return self.entry_count + self.exit_count


@dataclass(frozen=True)
class ReferenceFlowRecord:
    """Baseline station traffic, independent of any performance."""

    station: str
    interval_start: str
    entry_count: int
    exit_count: int

    @property
    def total(self) -> int:
        return self.entry_count + self.exit_count


@dataclass(frozen=True)
class Dataset:
    """Everything the playback layer needs, as loaded (or substituted)."""

    performances: tuple[Performance, ...]
    stations: tuple[Station, ...]
    flows: tuple[FlowRecord, ...]
    reference_flows: tuple[ReferenceFlowRecord, ...]

    def station_map(self) -> dict[str, Station]:
        """Return stations keyed by name; the first station with a name wins."""
        out: dict[str, Station] = {}
        for s in self.stations:
            out.setdefault(s.name, s)
        return out
