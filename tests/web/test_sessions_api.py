"""Performance listing and playback-session endpoints."""

from __future__ import annotations

from venue_flow.data.models import Dataset, FlowRecord, Performance, Station
from venue_flow.web.service import PlaybackService

# ---------------------------------------------------------------------------
# /api/performances
# ---------------------------------------------------------------------------


def test_performances_list(client):
    data = client.get("/api/performances").json()
    perfs = data["performances"]
    assert [p["id"] for p in perfs] == ["perf1", "perf2", "perf3"]
    assert perfs[0]["interval_count"] == 3
    assert perfs[1]["lon"] == 121.5444
    assert len(perfs[2]["nearest_stations"]) == 5


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def test_create_session(client):
    resp = client.post("/api/sessions")
    assert resp.status_code == 201
    data = resp.json()
    assert data["session_id"]
    assert data["running"] is False
    assert data["selected"] is None


def test_sessions_are_independent(client):
    a = client.post("/api/sessions").json()["session_id"]
    b = client.post("/api/sessions").json()["session_id"]
    client.post(f"/api/sessions/{a}/select", json={"performance_id": "perf2"})
    client.post(f"/api/sessions/{a}/play")

    assert client.get(f"/api/sessions/{b}/frame").json()["venue"] is None
    assert client.post(f"/api/sessions/{b}/pause").json()["selected"] is None


def test_unknown_session_404(client):
    assert client.post("/api/sessions/nope/play").status_code == 404
    assert client.get("/api/sessions/nope/frame").status_code == 404


def test_delete_session(client, session_id):
    assert client.delete(f"/api/sessions/{session_id}").status_code == 204
    assert client.post(f"/api/sessions/{session_id}/play").status_code == 404


def test_delete_unknown_session_404(client):
    assert client.delete("/api/sessions/nope").status_code == 404


def test_select_returns_intervals(client, session_id):
    resp = client.post(f"/api/sessions/{session_id}/select", json={"performance_id": "perf1"})
    assert resp.status_code == 200
    intervals = resp.json()["intervals"]
    assert [(t["start_minutes"], t["end_minutes"]) for t in intervals] == [
        (1080, 1095),
        (1095, 1110),
        (1110, 1125),
    ]
    assert intervals[0]["label"] == "18:00"


def test_select_unknown_performance_404(client, session_id):
    resp = client.post(f"/api/sessions/{session_id}/select", json={"performance_id": "perf9"})
    assert resp.status_code == 404


def test_play_without_selection_does_not_start(client, session_id):
    data = client.post(f"/api/sessions/{session_id}/play").json()
    assert data["started"] is False
    assert data["running"] is False


def test_play_tick_pause_reset(client, session_id):
    client.post(f"/api/sessions/{session_id}/select", json={"performance_id": "perf1"})

    data = client.post(f"/api/sessions/{session_id}/play").json()
    assert data["started"] is True
    assert data["time"] == "18:00"

    frame = client.post(f"/api/sessions/{session_id}/tick", json={"elapsed_ms": 1000}).json()
    assert frame["current_minutes"] == 1088
    assert frame["time"] == "18:08"
    assert frame["interval"]["start_minutes"] == 1080
    assert len(frame["station_visuals"]) == 5

    paused = client.post(f"/api/sessions/{session_id}/pause").json()
    assert paused["running"] is False
    assert paused["current_minutes"] == 1088

    reset = client.post(f"/api/sessions/{session_id}/reset").json()
    assert reset["current_minutes"] == 1080


def test_frame_at_explicit_minutes(client, session_id):
    client.post(f"/api/sessions/{session_id}/select", json={"performance_id": "perf2"})
    frame = client.get(f"/api/sessions/{session_id}/frame", params={"minutes": 1000}).json()
    assert frame["interval"] is None
    assert frame["venue"]["name"] == "东方艺术中心"


def test_tick_frame_contains_flow_lines(client, monkeypatch):
    import venue_flow.web.app as web_app

    ds = Dataset(
        performances=(Performance("perf_gala", "Gala", "Hall", (121.0, 31.0), ("A",)),),
        stations=(Station("A", 31.1, 121.1),),
        flows=(FlowRecord("Gala", "A", "18:00:00", 4, 2),),
        reference_flows=(),
    )
    monkeypatch.setattr(web_app, "_service", PlaybackService(ds))

    sid = client.post("/api/sessions").json()["session_id"]
    client.post(f"/api/sessions/{sid}/select", json={"performance_id": "perf_gala"})
    client.post(f"/api/sessions/{sid}/play")
    frame = client.post(f"/api/sessions/{sid}/tick", json={"elapsed_ms": 16}).json()

    assert [(line["kind"], line["weight"]) for line in frame["flow_lines"]] == [
        ("entry", 6.0),
        ("exit", 3.0),
    ]
    assert frame["station_visuals"][0]["total"] == 6
    assert frame["flow_lines"][0]["start"] == [31.1, 121.1]
