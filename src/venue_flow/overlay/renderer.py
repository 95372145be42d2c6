"""Overlay rendering — maps flow counts to marker and line magnitudes.

Nothing here draws. :class:`FlowRenderer` turns the active interval into a
:class:`FrameView` that a map client (Leaflet in the browser, or the replay
script's text output) can draw as-is.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from venue_flow.data.models import Performance, Station
from venue_flow.data.normalizer import parse_point
from venue_flow.playback.flow_index import (
    ReferenceFlowIndex,
    TimeInterval,
    format_time_display,
    format_time_for_data,
)

_logger = logging.getLogger(__name__)

BASE_RADIUS = 8.0
MAX_RADIUS = 35.0
RADIUS_PER_PASSENGER = 0.3
MIN_LINE_WEIGHT = 3.0
WEIGHT_PER_PASSENGER = 1.5

# People's Square; used when a venue has no usable geometry.
FALLBACK_COORDINATE: tuple[float, float] = (121.4758, 31.2397)

ENTRY = "entry"
EXIT = "exit"


def station_radius(total_flow: int) -> float:
    """Marker radius for *total_flow* passengers, clamped to [8, 35].

    Examples
    --------
    >>> station_radius(30)
    17.0
    """
    return max(BASE_RADIUS, min(MAX_RADIUS, BASE_RADIUS + total_flow * RADIUS_PER_PASSENGER))


def line_weight(count: int) -> float:
    """Flow line weight for *count* passengers travelling one way (min 3)."""
    return max(MIN_LINE_WEIGHT, count * WEIGHT_PER_PASSENGER)


def parse_geometry(geometry: str | None) -> tuple[float, float]:
    """Return ``(lon, lat)`` from ``POINT(lon lat)`` text, or the fallback coordinate."""
    point = parse_point(geometry)
    if point is None:
        _logger.debug("Unusable geometry %r, using fallback coordinate", geometry)
        return FALLBACK_COORDINATE
    return point


# ---------------------------------------------------------------------------
# Frame view
# ---------------------------------------------------------------------------


@dataclass
class VenueVisual:
    name: str
    performance: str
    lon: float
    lat: float


@dataclass
class StationVisual:
    """One nearby-station marker: position, size and popup counts."""

    station: str
    lat: float
    lon: float
    radius: float
    entry: int
    exit: int
    total: int
    time: str
    """Clock position as ``HH:MM``."""


@dataclass
class FlowLine:
    """A straight line between a station and the venue.

    ``kind`` is ``"entry"`` (station → venue) or ``"exit"`` (venue → station);
    ``start`` / ``end`` are ``(lat, lon)`` in drawing order.
    """

    station: str
    kind: str
    count: int
    weight: float
    start: tuple[float, float]
    end: tuple[float, float]


@dataclass
class FrameView:
    """Everything needed to draw one animation frame."""

    current_minutes: float
    time: str
    venue: VenueVisual | None = None
    interval: TimeInterval | None = None
    station_visuals: list[StationVisual] = field(default_factory=list)
    flow_lines: list[FlowLine] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict."""
        return {
            "current_minutes": self.current_minutes,
            "time": self.time,
            "venue": None if self.venue is None else vars(self.venue).copy(),
            "interval": None
            if self.interval is None
            else {
                "start_minutes": self.interval.start_minutes,
                "end_minutes": self.interval.end_minutes,
                "label": self.interval.label,
            },
            "station_visuals": [vars(v).copy() for v in self.station_visuals],
            "flow_lines": [
                {**vars(line), "start": list(line.start), "end": list(line.end)}
                for line in self.flow_lines
            ],
        }


class FlowRenderer:
    """Projects the active interval of a performance onto map visuals.

    All methods are pure data transformations with no side effects.
    """

    def venue(self, performance: Performance) -> VenueVisual:
        lon, lat = performance.geometry_point or FALLBACK_COORDINATE
        return VenueVisual(name=performance.venue, performance=performance.name, lon=lon, lat=lat)

    def render_frame(
        self,
        performance: Performance,
        stations: Mapping[str, Station],
        interval: TimeInterval | None,
        reference: ReferenceFlowIndex,
        current_minutes: float,
    ) -> FrameView:
        """Build the :class:`FrameView` for *performance* at *current_minutes*.

        Parameters
        ----------
        stations:
            Stations keyed by name. Names missing from it are skipped.
        interval:
            The interval containing *current_minutes*, or None. With no
            interval the frame carries no station visuals and no lines.
        reference:
            Baseline flow, matched on the exact ``HH:MM:00`` clock label.
        """
        venue = self.venue(performance)
        frame = FrameView(
            current_minutes=current_minutes,
            time=format_time_display(current_minutes),
            venue=venue,
            interval=interval,
        )
        if interval is None:
            return frame

        data_time = format_time_for_data(current_minutes)
        for name in performance.nearest_stations:
            station = stations.get(name)
            if station is None:
                _logger.debug("Station %r of %r not found", name, performance.name)
                continue
            event = interval.flow_at(name)
            ref = reference.lookup(name, data_time)
            entry = (event.entry_count if event else 0) + (ref.entry_count if ref else 0)
            exit_ = (event.exit_count if event else 0) + (ref.exit_count if ref else 0)
            frame.station_visuals.append(
                StationVisual(
                    station=name,
                    lat=station.lat,
                    lon=station.lon,
                    radius=station_radius(entry + exit_),
                    entry=entry,
                    exit=exit_,
                    total=entry + exit_,
                    time=frame.time,
                )
            )

        venue_pos = (venue.lat, venue.lon)
        for kind in (ENTRY, EXIT):
            for record in interval.records:
                count = record.entry_count if kind == ENTRY else record.exit_count
                if count <= 0:
                    continue
                station = stations.get(record.station)
                if station is None:
                    continue
                station_pos = (station.lat, station.lon)
                start, end = (station_pos, venue_pos) if kind == ENTRY else (venue_pos, station_pos)
                frame.flow_lines.append(
                    FlowLine(
                        station=record.station,
                        kind=kind,
                        count=count,
                        weight=line_weight(count),
                        start=start,
                        end=end,
                    )
                )
        return frame
