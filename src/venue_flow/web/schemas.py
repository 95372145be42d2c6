"""Pydantic request/response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str


class PerformanceSummary(BaseModel):
    id: str
    name: str
    venue: str
    lon: float | None = None
    lat: float | None = None
    nearest_stations: list[str]
    interval_count: int


class PerformancesResponse(BaseModel):
    performances: list[PerformanceSummary]


class ClockStateResponse(BaseModel):
    session_id: str
    selected: str | None = None
    current_minutes: float
    time: str
    running: bool


class PlayResponse(ClockStateResponse):
    started: bool


class SelectRequest(BaseModel):
    performance_id: str


class IntervalOut(BaseModel):
    start_minutes: int
    end_minutes: int
    label: str
    record_count: int


class SelectResponse(BaseModel):
    session_id: str
    performance_id: str
    intervals: list[IntervalOut]


class TickRequest(BaseModel):
    elapsed_ms: float


class VenueOut(BaseModel):
    name: str
    performance: str
    lon: float
    lat: float


class IntervalRef(BaseModel):
    start_minutes: int
    end_minutes: int
    label: str


class StationVisualOut(BaseModel):
    station: str
    lat: float
    lon: float
    radius: float
    entry: int
    exit: int
    total: int
    time: str


class FlowLineOut(BaseModel):
    station: str
    kind: str
    count: int
    weight: float
    start: list[float]
    end: list[float]


class FrameResponse(BaseModel):
    current_minutes: float
    time: str
    venue: VenueOut | None = None
    interval: IntervalRef | None = None
    station_visuals: list[StationVisualOut]
    flow_lines: list[FlowLineOut]
