"""PlaybackService — shared dataset plus one AppSession per web viewer."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from venue_flow.config import AppConfig
from venue_flow.data.loader import load_dataset
from venue_flow.data.models import Dataset
from venue_flow.playback.clock import ClockConfig
from venue_flow.playback.flow_index import FlowIndex, ReferenceFlowIndex
from venue_flow.playback.session import AppSession

_logger = logging.getLogger(__name__)

DEFAULT_IDLE_TIMEOUT = 1800.0


class UnknownSessionError(LookupError):
    """Raised when a session id was never issued, was dropped, or expired."""


@dataclass
class _SessionSlot:
    session: AppSession
    last_used: float
    lock: threading.Lock = field(default_factory=threading.Lock)


class PlaybackService:
    """Owns the dataset and indexes shared by every :class:`AppSession`.

    Requests for one session are serialised on that session's own lock.
    Sessions untouched for *idle_timeout* seconds are discarded.

    Parameters
    ----------
    dataset:
        Loaded or sample data.
    clock_config:
        Playback speed given to every new session.
    idle_timeout:
        Seconds of inactivity after which a session expires.
    clock:
        Monotonic time source, in seconds.
    """

    def __init__(
        self,
        dataset: Dataset,
        clock_config: ClockConfig | None = None,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._dataset = dataset
        self._clock_config = clock_config or ClockConfig()
        self._flow_index = FlowIndex(dataset.flows)
        self._reference = ReferenceFlowIndex(dataset.reference_flows)
        self._idle_timeout = idle_timeout
        self._now = clock
        self._slots: dict[str, _SessionSlot] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: AppConfig) -> PlaybackService:
        """Load the dataset described by *config* (falling back to samples)."""
        return cls(load_dataset(config.sources), config.clock, config.session_idle_seconds)

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def flow_index(self) -> FlowIndex:
        return self._flow_index

    @property
    def idle_timeout(self) -> float:
        return self._idle_timeout

    def session_count(self) -> int:
        with self._lock:
            return len(self._slots)

    def create_session(self) -> tuple[str, AppSession]:
        """Create a new session and return ``(session_id, session)``."""
        session = AppSession(
            self._dataset,
            self._clock_config,
            flow_index=self._flow_index,
            reference_index=self._reference,
        )
        session_id = secrets.token_hex(8)
        with self._lock:
            self._expire_idle()
            self._slots[session_id] = _SessionSlot(session, self._now())
            active = len(self._slots)
        _logger.info("Created session %s (%d active)", session_id, active)
        return session_id, session

    @contextmanager
    def use_session(self, session_id: str) -> Iterator[AppSession]:
        """Hold *session_id*'s lock for the body of the ``with`` block.

        Raises
        ------
        UnknownSessionError
            If no such session exists.
        """
        with self._lock:
            self._expire_idle()
            slot = self._slots.get(session_id)
            if slot is None:
                raise UnknownSessionError(f"Unknown session id: {session_id!r}")
            slot.last_used = self._now()
        with slot.lock:
            yield slot.session

    def get_session(self, session_id: str) -> AppSession:
        """Return the session for *session_id* without locking it."""
        with self.use_session(session_id) as session:
            return session

    def drop_session(self, session_id: str) -> None:
        """Forget *session_id*.

        Raises
        ------
        UnknownSessionError
            If no such session exists.
        """
        with self._lock:
            if self._slots.pop(session_id, None) is None:
                raise UnknownSessionError(f"Unknown session id: {session_id!r}")

    def _expire_idle(self) -> None:
        # Caller holds self._lock.
        cutoff = self._now() - self._idle_timeout
        stale = [sid for sid, slot in self._slots.items() if slot.last_used < cutoff]
        for sid in stale:
            del self._slots[sid]
        if stale:
            _logger.info("Expired %d idle session(s)", len(stale))
