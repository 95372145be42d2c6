"""Flow index — groups event flows into 15-minute time intervals.

Two joins live here and they are deliberately different:

* event flow is found by *containment*: the interval whose
  ``[start, end)`` holds the clock, then the station inside it;
* reference flow is found by *exact label*: the clock formatted as
  ``HH:MM:00`` must equal the record's ``interval_start`` string.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from venue_flow.data.models import FlowRecord, Performance, ReferenceFlowRecord

_logger = logging.getLogger(__name__)

INTERVAL_MINUTES = 15


# ---------------------------------------------------------------------------
# Time-of-day helpers
# ---------------------------------------------------------------------------


def parse_time_of_day(label: str) -> int | None:
    """Return minutes since midnight for *label*, or None if unparsable.

    Accepts ``"HH:MM"``, ``"HH:MM:SS"`` and ``"YYYY-MM-DD HH:MM:SS"``; only
    the time-of-day part of a full timestamp is used.

    Examples
    --------
    >>> parse_time_of_day("2025-05-28 18:15:00")
    1095
    """
    parts = label.strip().split(" ")
    time_part = parts[1] if len(parts) > 1 else parts[0]
    fields = time_part.split(":")
    if len(fields) < 2:
        return None
    try:
        hours, minutes = int(fields[0]), int(fields[1])
    except ValueError:
        return None
    return hours * 60 + minutes


def _split_minutes(minutes: float) -> tuple[int, int]:
    hours = math.floor(minutes / 60)
    return hours, math.floor(minutes % 60)


def format_time_display(minutes: float) -> str:
    """Format a clock position as ``HH:MM`` (fractional minutes are floored)."""
    hours, mins = _split_minutes(minutes)
    return f"{hours:02d}:{mins:02d}"


def format_time_for_data(minutes: float) -> str:
    """Format a clock position the way reference-flow buckets are labelled."""
    hours, mins = _split_minutes(minutes)
    return f"{hours:02d}:{mins:02d}:00"


# ---------------------------------------------------------------------------
# Intervals
# ---------------------------------------------------------------------------


@dataclass
class TimeInterval:
    """All flow records of one performance that share an ``interval_start``.

    ``records`` keeps source order (used for drawing flow lines); station
    lookups go through an internal name index.
    """

    start_minutes: int
    end_minutes: int
    records: tuple[FlowRecord, ...]
    label: str = ""
    _by_station: dict[str, FlowRecord] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        for record in self.records:
            self._by_station.setdefault(record.station, record)

    def contains(self, minutes: float) -> bool:
        return self.start_minutes <= minutes < self.end_minutes

    def flow_at(self, station: str) -> FlowRecord | None:
        """Return the first record for *station* in this interval, or None."""
        return self._by_station.get(station)


def build_intervals(
    flows: Iterable[FlowRecord],
    performance_name: str,
    width: int = INTERVAL_MINUTES,
) -> list[TimeInterval]:
    """Group the flows of *performance_name* into intervals ordered by start."""
    grouped: dict[str, list[FlowRecord]] = {}
    for record in flows:
        if record.performance_name == performance_name:
            grouped.setdefault(record.interval_start, []).append(record)

    intervals: list[TimeInterval] = []
    for label, records in grouped.items():
        start = parse_time_of_day(label)
        if start is None:
            _logger.debug(
                "Skipping %d flow record(s) with unparsable interval %r",
                len(records),
                label,
            )
            continue
        intervals.append(
            TimeInterval(
                start_minutes=start,
                end_minutes=start + width,
                records=tuple(records),
                label=label,
            )
        )
    intervals.sort(key=lambda t: t.start_minutes)
    return intervals


def find_interval(intervals: Iterable[TimeInterval], minutes: float) -> TimeInterval | None:
    """Return the first interval containing *minutes*, or None."""
    for interval in intervals:
        if interval.contains(minutes):
            return interval
    return None


class FlowIndex:
    """Precomputed intervals for every performance, keyed by performance name."""

    def __init__(self, flows: Iterable[FlowRecord], width: int = INTERVAL_MINUTES) -> None:
        by_name: dict[str, list[FlowRecord]] = {}
        for record in flows:
            by_name.setdefault(record.performance_name, []).append(record)
        self._intervals: dict[str, list[TimeInterval]] = {
            name: build_intervals(records, name, width) for name, records in by_name.items()
        }

    def intervals_for(self, performance: Performance) -> list[TimeInterval]:
        """Return a fresh list of *performance*'s intervals (empty if it has no flow)."""
        return list(self._intervals.get(performance.name, ()))

    def __len__(self) -> int:
        return len(self._intervals)


class ReferenceFlowIndex:
    """Exact ``(station, interval_start)`` lookup over reference flow."""

    def __init__(self, records: Iterable[ReferenceFlowRecord]) -> None:
        self._records: dict[tuple[str, str], ReferenceFlowRecord] = {}
        for record in records:
            self._records.setdefault((record.station, record.interval_start), record)

    def lookup(self, station: str, time_of_day: str) -> ReferenceFlowRecord | None:
        return self._records.get((station, time_of_day))

    def __len__(self) -> int:
        return len(self._records)
