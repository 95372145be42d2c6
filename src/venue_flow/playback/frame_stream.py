"""Drive a session's animation from wall-clock time on a background thread.

A viewer that is not event driven (the replay script, a socket push) needs
frames at a steady rate without calling ``tick`` itself. :class:`FrameStream`
measures the real time between ticks, hands it to the session, and keeps a
short backlog of rendered frames for the consumer to draw.
"""

from __future__ import annotations

import logging
import queue
import threading
import time

from venue_flow.overlay.renderer import FrameView

_logger = logging.getLogger(__name__)


class FrameStream:
    """Renders frames from *session* at roughly *target_fps* per second.

    A consumer that falls behind sees the newest frames: once *queue_maxsize*
    frames are waiting, the stalest one is discarded for each new frame.

    Parameters
    ----------
    session:
        Anything with ``tick(elapsed_ms) -> FrameView``, usually an
        :class:`~venue_flow.playback.session.AppSession`.
    target_fps:
        Frames rendered per second of wall time.
    queue_maxsize:
        Frames kept waiting for the consumer.
    """

    def __init__(
        self,
        session,
        target_fps: float = 60.0,
        queue_maxsize: int = 120,
    ) -> None:
        self._session = session
        self._frame_period = 1.0 / target_fps
        self._frames: queue.Queue[FrameView] = queue.Queue(maxsize=queue_maxsize)
        self._halt = threading.Event()
        self._worker: threading.Thread | None = None

    def start(self) -> None:
        """Begin rendering frames."""
        self._halt.clear()
        self._worker = threading.Thread(
            target=self._render_loop, daemon=True, name="venue-flow-frames"
        )
        self._worker.start()

    def stop(self) -> None:
        """Stop rendering; frames already queued stay readable."""
        self._halt.set()
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.join(timeout=2.0)

    def get_frame(self, timeout: float = 0.1) -> FrameView | None:
        """Oldest waiting frame, or None when nothing is rendered within *timeout* seconds."""
        try:
            return self._frames.get(timeout=timeout)
        except queue.Empty:
            return None

    def queue_size(self) -> int:
        return self._frames.qsize()

    def _render_loop(self) -> None:
        previous = time.monotonic()
        while not self._halt.is_set():
            now = time.monotonic()
            # The first frame advances by zero; later ones by real elapsed time.
            elapsed_ms = (now - previous) * 1000.0
            previous = now
            try:
                frame = self._session.tick(elapsed_ms)
            except Exception:
                _logger.exception("Rendering a frame failed after %.1f ms", elapsed_ms)
            else:
                self._push(frame)
            self._halt.wait(max(0.0, self._frame_period - (time.monotonic() - now)))

    def _push(self, frame: FrameView) -> None:
        while True:
            try:
                self._frames.put_nowait(frame)
                return
            except queue.Full:
                try:
                    self._frames.get_nowait()
                except queue.Empty:
                    pass
