"""FastAPI Web application — performance list and per-viewer playback sessions.

Run with ``uvicorn venue_flow.web.app:app``.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from venue_flow import __version__
from venue_flow.config import AppConfig
from venue_flow.playback.flow_index import format_time_display
from venue_flow.playback.session import AppSession, UnknownPerformanceError
from venue_flow.web.schemas import (
    ClockStateResponse,
    FrameResponse,
    HealthResponse,
    IntervalOut,
    PerformancesResponse,
    PerformanceSummary,
    PlayResponse,
    SelectRequest,
    SelectResponse,
    TickRequest,
)
from venue_flow.web.service import PlaybackService, UnknownSessionError

load_dotenv()  # loads .env from project root; must run before env vars are consumed

# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

_HERE = Path(__file__).parent

app = FastAPI(title="Venue Flow", version=__version__)

templates = Jinja2Templates(directory=str(_HERE / "templates"))

_service: PlaybackService | None = None
_service_lock = threading.Lock()


def _get_service() -> PlaybackService:
    """Return the process-wide service, loading the dataset on first use."""
    global _service
    with _service_lock:
        if _service is None:
            _service = PlaybackService.from_config(AppConfig.from_env())
        return _service


@contextmanager
def _session(session_id: str) -> Iterator[AppSession]:
    """Hold the session for the request; unknown or expired ids become 404."""
    try:
        with _get_service().use_session(session_id) as session:
            yield session
    except UnknownSessionError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _state(session_id: str, session: AppSession) -> dict:
    state = session.state()
    return {
        "session_id": session_id,
        "selected": session.selected.id if session.selected else None,
        "current_minutes": state.current_minutes,
        "time": format_time_display(state.current_minutes),
        "running": state.running,
    }


def _performance_summaries(service: PlaybackService) -> list[PerformanceSummary]:
    out = []
    for perf in service.dataset.performances:
        lon, lat = perf.geometry_point or (None, None)
        out.append(
            PerformanceSummary(
                id=perf.id,
                name=perf.name,
                venue=perf.venue,
                lon=lon,
                lat=lat,
                nearest_stations=list(perf.nearest_stations),
                interval_count=len(service.flow_index.intervals_for(perf)),
            )
        )
    return out


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


@app.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    """Render the performance overview page."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {"performances": _performance_summaries(_get_service())},
    )


@app.get("/api/performances", response_model=PerformancesResponse)
def list_performances() -> PerformancesResponse:
    return PerformancesResponse(performances=_performance_summaries(_get_service()))


@app.post("/api/sessions", response_model=ClockStateResponse, status_code=201)
def create_session() -> ClockStateResponse:
    session_id, session = _get_service().create_session()
    return ClockStateResponse(**_state(session_id, session))


@app.delete("/api/sessions/{session_id}", status_code=204)
def delete_session(session_id: str) -> None:
    try:
        _get_service().drop_session(session_id)
    except UnknownSessionError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.post("/api/sessions/{session_id}/select", response_model=SelectResponse)
def select_performance(session_id: str, req: SelectRequest) -> SelectResponse:
    """Select a performance; its intervals are recomputed and the clock reset."""
    with _session(session_id) as session:
        try:
            intervals = session.select_performance(req.performance_id)
        except UnknownPerformanceError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    return SelectResponse(
        session_id=session_id,
        performance_id=req.performance_id,
        intervals=[
            IntervalOut(
                start_minutes=t.start_minutes,
                end_minutes=t.end_minutes,
                label=t.label,
                record_count=len(t.records),
            )
            for t in intervals
        ],
    )


@app.post("/api/sessions/{session_id}/play", response_model=PlayResponse)
def play(session_id: str) -> PlayResponse:
    """Start playback. ``started`` is false without a selection or when already playing."""
    with _session(session_id) as session:
        started = session.play()
        return PlayResponse(started=started, **_state(session_id, session))


@app.post("/api/sessions/{session_id}/pause", response_model=ClockStateResponse)
def pause(session_id: str) -> ClockStateResponse:
    with _session(session_id) as session:
        session.pause()
        return ClockStateResponse(**_state(session_id, session))


@app.post("/api/sessions/{session_id}/reset", response_model=ClockStateResponse)
def reset(session_id: str) -> ClockStateResponse:
    with _session(session_id) as session:
        session.reset()
        return ClockStateResponse(**_state(session_id, session))


@app.post("/api/sessions/{session_id}/tick", response_model=FrameResponse)
def tick(session_id: str, req: TickRequest) -> FrameResponse:
    """Advance the clock by ``elapsed_ms`` of wall-clock time and return the frame."""
    with _session(session_id) as session:
        frame = session.tick(req.elapsed_ms)
    return FrameResponse(**frame.to_dict())


@app.get("/api/sessions/{session_id}/frame", response_model=FrameResponse)
def current_frame(session_id: str, minutes: float | None = None) -> FrameResponse:
    """Render the frame at the clock position, or at ``minutes`` if given."""
    with _session(session_id) as session:
        frame = session.render_frame(minutes)
    return FrameResponse(**frame.to_dict())
