"""AnimationClock — simulated time-of-day that replays flow intervals in a loop."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from venue_flow.playback.flow_index import TimeInterval, find_interval


@dataclass
class ClockConfig:
    """Playback speed settings."""

    rate: float = 40.0     # simulated minutes per real second
    max_step: float = 8.0  # cap per tick, absorbs slow frames / suspended tabs


@dataclass
class ClockState:
    current_minutes: float
    running: bool


class AnimationClock:
    """Stopped/Running state machine advanced by explicit :meth:`tick` calls.

    The clock is scheduler-agnostic: a frame callback, a fixed-rate thread or
    a test can drive it by passing the wall-clock time elapsed since the
    previous tick.

    Parameters
    ----------
    config:
        Rate and step cap; defaults to 40 min/s capped at 8 min per tick.
    intervals:
        Initial interval list, ordered by start.
    """

    def __init__(
        self,
        config: ClockConfig | None = None,
        intervals: Iterable[TimeInterval] = (),
    ) -> None:
        self._cfg = config or ClockConfig()
        self._intervals: list[TimeInterval] = list(intervals)
        self._running = False
        self.current_minutes: float = self._first_start()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def intervals(self) -> list[TimeInterval]:
        return list(self._intervals)

    def state(self) -> ClockState:
        return ClockState(current_minutes=self.current_minutes, running=self._running)

    def set_intervals(self, intervals: Iterable[TimeInterval]) -> None:
        """Replace the interval list. The clock position is left untouched."""
        self._intervals = list(intervals)

    def play(self) -> bool:
        """Start from the first interval. Returns False if already running."""
        if self._running:
            return False
        self._running = True
        self.current_minutes = self._first_start()
        return True

    def pause(self) -> None:
        self._running = False

    def reset(self) -> None:
        """Stop and rewind to the first interval's start."""
        self._running = False
        self.current_minutes = self._first_start()

    def tick(self, elapsed_ms: float) -> float:
        """Advance by *elapsed_ms* of wall-clock time and return the new position.

        Inside an interval the clock moves by
        ``min(max_step, elapsed_ms / 1000 * rate)``.  Outside every interval it
        jumps to the next interval's start, wrapping to the first one after the
        last.  No-op while stopped.
        """
        if not self._running:
            return self.current_minutes

        increment = min(self._cfg.max_step, max(0.0, elapsed_ms) / 1000.0 * self._cfg.rate)

        if find_interval(self._intervals, self.current_minutes) is not None:
            self.current_minutes += increment
        else:
            upcoming = next(
                (t for t in self._intervals if t.start_minutes > self.current_minutes),
                None,
            )
            if upcoming is not None:
                self.current_minutes = upcoming.start_minutes
            else:
                self.current_minutes = self._first_start()
        return self.current_minutes

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _first_start(self) -> float:
        return self._intervals[0].start_minutes if self._intervals else 0
