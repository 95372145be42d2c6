"""Replay one performance's passenger flow in the terminal.

Usage:
  uv run python scripts/replay_performance.py
  uv run python scripts/replay_performance.py --data-dir data --performance perf_swan_lake
  uv run python scripts/replay_performance.py --seconds 5 --realtime

Without ``--realtime`` the clock is driven by synthetic ticks of 1/fps
seconds, so a replay of any length finishes immediately.  Source files that
cannot be read fall back to the built-in sample data.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from venue_flow.config import AppConfig  # noqa: E402
from venue_flow.data.loader import load_dataset  # noqa: E402
from venue_flow.overlay.renderer import FrameView  # noqa: E402
from venue_flow.playback.frame_stream import FrameStream  # noqa: E402
from venue_flow.playback.session import AppSession, UnknownPerformanceError  # noqa: E402


def _describe(frame: FrameView) -> str:
    if frame.interval is None:
        return f"{frame.time}  (between intervals)"
    busiest = sorted(frame.station_visuals, key=lambda v: -v.total)[:3]
    stations = ", ".join(f"{v.station} {v.total}" for v in busiest) or "no station flow"
    return f"{frame.time}  [{frame.interval.label}]  {stations}  lines={len(frame.flow_lines)}"


def _run_synthetic(session: AppSession, seconds: float, fps: float) -> None:
    step_ms = 1000.0 / fps
    last_interval = None
    for _ in range(int(seconds * fps)):
        frame = session.tick(step_ms)
        if frame.interval is not last_interval:
            print(_describe(frame))
            last_interval = frame.interval


def _run_realtime(session: AppSession, seconds: float, fps: float) -> None:
    stream = FrameStream(session, target_fps=fps)
    stream.start()
    deadline = time.monotonic() + seconds
    last_interval = None
    try:
        while time.monotonic() < deadline:
            frame = stream.get_frame(timeout=0.1)
            if frame is not None and frame.interval is not last_interval:
                print(_describe(frame), flush=True)
                last_interval = frame.interval
    except KeyboardInterrupt:
        pass
    finally:
        stream.stop()


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay venue passenger flow")
    ap.add_argument("--data-dir", default=None, help="Directory with the four CSV files")
    ap.add_argument("--performance", default="", help="Performance id (default: first)")
    ap.add_argument("--seconds", type=float, default=10.0, help="Real seconds to replay")
    ap.add_argument("--fps", type=float, default=30.0, help="Ticks per real second")
    ap.add_argument("--realtime", action="store_true", help="Tick from a background thread")
    ap.add_argument("--log-level", default="INFO", help="Logging level")
    args = ap.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    config = AppConfig.from_env()
    if args.data_dir:
        config.sources.data_dir = Path(args.data_dir)

    dataset = load_dataset(config.sources)
    if not dataset.performances:
        print("No performances loaded.", file=sys.stderr)
        sys.exit(1)

    session = AppSession(dataset, config.clock)
    performance_id = args.performance or dataset.performances[0].id
    try:
        intervals = session.select_performance(performance_id)
    except UnknownPerformanceError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        print("  Available: " + ", ".join(p.id for p in dataset.performances), file=sys.stderr)
        sys.exit(1)

    perf = session.selected
    print(f"Performance : {perf.name}")
    print(f"Venue       : {perf.venue}")
    print(f"Intervals   : {len(intervals)}")
    print()

    session.play()
    if args.realtime:
        _run_realtime(session, args.seconds, args.fps)
    else:
        _run_synthetic(session, args.seconds, args.fps)
    session.pause()


if __name__ == "__main__":
    main()
