"""AppSession — one viewer's selection, clock and loaded data.

All state that the browser version kept in globals lives on a session object,
so several independent viewers (web sessions, tests, the replay script) can
share one :class:`~venue_flow.data.models.Dataset`.
"""

from __future__ import annotations

import logging

from venue_flow.data.models import Dataset, Performance
from venue_flow.overlay.renderer import FlowRenderer, FrameView
from venue_flow.playback.clock import AnimationClock, ClockConfig, ClockState
from venue_flow.playback.flow_index import (
    FlowIndex,
    ReferenceFlowIndex,
    TimeInterval,
    find_interval,
    format_time_display,
)

_logger = logging.getLogger(__name__)


class UnknownPerformanceError(LookupError):
    """Raised when a performance id does not match any loaded performance."""


class AppSession:
    """Selection + animation clock over a shared dataset.

    Parameters
    ----------
    dataset:
        Loaded (or sample) data. Not mutated.
    clock_config:
        Playback speed; defaults to :class:`ClockConfig`.
    flow_index / reference_index:
        Prebuilt indexes to share between sessions; built from *dataset*
        when omitted.
    """

    def __init__(
        self,
        dataset: Dataset,
        clock_config: ClockConfig | None = None,
        flow_index: FlowIndex | None = None,
        reference_index: ReferenceFlowIndex | None = None,
    ) -> None:
        self._dataset = dataset
        self._stations = dataset.station_map()
        self._flow_index = flow_index or FlowIndex(dataset.flows)
        self._reference = reference_index or ReferenceFlowIndex(dataset.reference_flows)
        self._performances: dict[str, Performance] = {}
        for perf in dataset.performances:
            self._performances.setdefault(perf.id, perf)
        self._renderer = FlowRenderer()
        self._clock = AnimationClock(clock_config)
        self._selected: Performance | None = None
        self._intervals: list[TimeInterval] = []

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def performances(self) -> tuple[Performance, ...]:
        return self._dataset.performances

    @property
    def selected(self) -> Performance | None:
        return self._selected

    @property
    def intervals(self) -> list[TimeInterval]:
        return list(self._intervals)

    @property
    def clock(self) -> AnimationClock:
        return self._clock

    def get_performance(self, performance_id: str) -> Performance | None:
        return self._performances.get(performance_id)

    def select_performance(self, performance_id: str) -> list[TimeInterval]:
        """Select a performance, recompute its intervals and reset the clock.

        Raises
        ------
        UnknownPerformanceError
            If *performance_id* matches no loaded performance.
        """
        perf = self.get_performance(performance_id)
        if perf is None:
            raise UnknownPerformanceError(f"Unknown performance id: {performance_id!r}")

        self._selected = perf
        self._intervals = self._flow_index.intervals_for(perf)
        self._clock.set_intervals(self._intervals)
        self._clock.reset()
        _logger.info(
            "Selected %r at %r: %d interval(s)", perf.name, perf.venue, len(self._intervals)
        )
        return self.intervals

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def play(self) -> bool:
        """Start playback. Returns False without a selection or when already playing."""
        if self._selected is None:
            return False
        return self._clock.play()

    def pause(self) -> None:
        self._clock.pause()

    def reset(self) -> FrameView:
        self._clock.reset()
        return self.render_frame()

    def tick(self, elapsed_ms: float) -> FrameView:
        """Advance the clock (if running) and render exactly one frame."""
        self._clock.tick(elapsed_ms)
        return self.render_frame()

    def state(self) -> ClockState:
        return self._clock.state()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_frame(self, current_minutes: float | None = None) -> FrameView:
        """Render the selected performance at *current_minutes* (default: the clock)."""
        minutes = self._clock.current_minutes if current_minutes is None else current_minutes
        if self._selected is None:
            return FrameView(current_minutes=minutes, time=format_time_display(minutes))
        return self._renderer.render_frame(
            self._selected,
            self._stations,
            find_interval(self._intervals, minutes),
            self._reference,
            minutes,
        )
