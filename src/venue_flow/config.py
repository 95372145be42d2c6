"""Runtime configuration — data locations and playback speed.

Values come from environment variables (a ``.env`` file is honoured by the
web app and scripts through ``python-dotenv``):

``VENUE_FLOW_DATA_DIR``   directory holding the four CSV files (``data``)
``VENUE_FLOW_RATE``       simulated minutes per real second (``40``)
``VENUE_FLOW_MAX_STEP``   largest single clock step in minutes (``8``)
``VENUE_FLOW_SESSION_IDLE`` seconds before an unused web session expires (``1800``)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from venue_flow.data.loader import DataSources
from venue_flow.playback.clock import ClockConfig

_logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    sources: DataSources = field(default_factory=DataSources)
    clock: ClockConfig = field(default_factory=ClockConfig)
    session_idle_seconds: float = 1800.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build a config from *environ* (defaults to ``os.environ``).

        Unparsable numeric overrides are ignored with a warning.
        """
        env = os.environ if environ is None else environ
        sources = DataSources(data_dir=Path(env.get("VENUE_FLOW_DATA_DIR", "data")))
        defaults = ClockConfig()
        clock = ClockConfig(
            rate=_env_float(env, "VENUE_FLOW_RATE", defaults.rate),
            max_step=_env_float(env, "VENUE_FLOW_MAX_STEP", defaults.max_step),
        )
        idle = _env_float(env, "VENUE_FLOW_SESSION_IDLE", cls.session_idle_seconds)
        return cls(sources=sources, clock=clock, session_idle_seconds=idle)


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        _logger.warning("Ignoring %s=%r: not a number", key, raw)
        return default
