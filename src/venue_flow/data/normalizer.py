"""Entity normalizer — raw CSV field mappings to typed entities.

Each ``normalize_*`` function accepts any iterable of ``{column: value}``
dicts (typically :func:`~venue_flow.data.csv_reader.parse_rows`) and returns
the entities that survived validation, in load order. Malformed rows are
dropped, never reported as errors.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping

from venue_flow.data.models import (
    FlowRecord,
    Performance,
    ReferenceFlowRecord,
    Station,
    performance_id,
)

_logger = logging.getLogger(__name__)

_NEAREST_STATION_COLUMNS: tuple[str, ...] = tuple(
    f"Nearest Station {i}" for i in range(1, 6)
)

# Historical column names, first non-blank wins.
_STATION_NAME_ALIASES: tuple[str, ...] = ("Station", "name", "station_name", "Name")
_STATION_LAT_ALIASES: tuple[str, ...] = ("lat",)
_STATION_LON_ALIASES: tuple[str, ...] = ("lon", "lng")

# dataset → (performance, station, interval, entry, exit) column names
_FLOW_COLUMNS = ("Performance", "Station", "Interval Start", "Entry Count", "Exit Count")
_REFERENCE_COLUMNS = ("station", "interval_start", "entry_count", "exit_count")

_POINT_RE = re.compile(r"POINT\s*\(([^)]+)\)")
_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _first(row: Mapping[str, str], aliases: Iterable[str]) -> str:
    for key in aliases:
        value = (row.get(key) or "").strip()
        if value:
            return value
    return ""


def _to_float(value: str) -> float | None:
    """Return *value* as a finite float, or None."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def to_count(value: str | None) -> int:
    """Coerce a count cell to a non-negative int.

    Leading digits are honoured (``"12.7"`` → 12, ``"40 people"`` → 40);
    anything unparsable yields 0.
    """
    match = _LEADING_INT_RE.match((value or "").strip())
    if match is None:
        return 0
    return max(0, int(match.group()))


def parse_point(geometry: str | None) -> tuple[float, float] | None:
    """Parse ``POINT(<lon> <lat>)`` into ``(lon, lat)``; None if malformed."""
    if not geometry or not geometry.strip():
        return None
    match = _POINT_RE.search(geometry)
    if match is None:
        return None
    coords = match.group(1).split()
    if len(coords) < 2:
        return None
    lon = _to_float(coords[0])
    lat = _to_float(coords[1])
    if lon is None or lat is None:
        return None
    return lon, lat


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------


def normalize_performances(rows: Iterable[Mapping[str, str]]) -> list[Performance]:
    """Project performance rows. Rows without a performance name are dropped."""
    out: list[Performance] = []
    dropped = 0
    for row in rows:
        name = (row.get("Performance") or "").strip()
        if not name:
            dropped += 1
            continue
        nearest = tuple(
            s.strip()
            for s in (row.get(col) or "" for col in _NEAREST_STATION_COLUMNS)
            if s.strip()
        )
        out.append(
            Performance(
                id=performance_id(name),
                name=name,
                venue=(row.get("Venue Name") or "").strip(),
                geometry_point=parse_point(row.get("geometry")),
                nearest_stations=nearest,
            )
        )
    if dropped:
        _logger.debug("Dropped %d performance row(s) without a name", dropped)
    return out


def normalize_stations(rows: Iterable[Mapping[str, str]]) -> list[Station]:
    """Project station rows, dropping blank names and non-numeric coordinates."""
    out: list[Station] = []
    dropped = 0
    for row in rows:
        name = _first(row, _STATION_NAME_ALIASES)
        lat = _to_float(_first(row, _STATION_LAT_ALIASES))
        lon = _to_float(_first(row, _STATION_LON_ALIASES))
        if not name or lat is None or lon is None:
            dropped += 1
            continue
        out.append(Station(name=name, lat=lat, lon=lon))
    if dropped:
        _logger.debug("Dropped %d malformed station row(s)", dropped)
    return out


def normalize_flows(rows: Iterable[Mapping[str, str]]) -> list[FlowRecord]:
    """Project event-flow rows, dropping blank identifiers and zero-flow rows."""
    perf_col, station_col, interval_col, entry_col, exit_col = _FLOW_COLUMNS
    out: list[FlowRecord] = []
    dropped = 0
    for row in rows:
        record = FlowRecord(
            performance_name=(row.get(perf_col) or "").strip(),
            station=(row.get(station_col) or "").strip(),
            interval_start=(row.get(interval_col) or "").strip(),
            entry_count=to_count(row.get(entry_col)),
            exit_count=to_count(row.get(exit_col)),
        )
        if not record.performance_name or not record.station or record.total == 0:
            dropped += 1
            continue
        out.append(record)
    if dropped:
        _logger.debug("Dropped %d event-flow row(s)", dropped)
    return out


def normalize_reference_flows(
    rows: Iterable[Mapping[str, str]],
) -> list[ReferenceFlowRecord]:
    """Project reference-flow rows, dropping blank stations and zero-flow rows."""
    station_col, interval_col, entry_col, exit_col = _REFERENCE_COLUMNS
    out: list[ReferenceFlowRecord] = []
    dropped = 0
    for row in rows:
        record = ReferenceFlowRecord(
            station=(row.get(station_col) or "").strip(),
            interval_start=(row.get(interval_col) or "").strip(),
            entry_count=to_count(row.get(entry_col)),
            exit_count=to_count(row.get(exit_col)),
        )
        if not record.station or record.total == 0:
            dropped += 1
            continue
        out.append(record)
    if dropped:
        _logger.debug("Dropped %d reference-flow row(s)", dropped)
    return out
