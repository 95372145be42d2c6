"""Tests for the entity normalizer."""

from __future__ import annotations

import pytest

from venue_flow.data.csv_reader import parse_rows
from venue_flow.data.models import performance_id
from venue_flow.data.normalizer import (
    normalize_flows,
    normalize_performances,
    normalize_reference_flows,
    normalize_stations,
    parse_point,
    to_count,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def perf_row(**overrides) -> dict:
    base = {
        "Performance": "Swan Lake",
        "Venue Name": "Grand Theatre",
        "geometry": "POINT(121.4758 31.2397)",
        "Nearest Station 1": "People's Square",
        "Nearest Station 2": "East Nanjing Road",
        "Nearest Station 3": "",
        "Nearest Station 4": "Yuyuan Garden",
        "Nearest Station 5": " ",
    }
    base.update(overrides)
    return base


def flow_row(**overrides) -> dict:
    base = {
        "Performance": "Swan Lake",
        "Station": "People's Square",
        "Interval Start": "2025-05-28 18:00:00",
        "Entry Count": "12",
        "Exit Count": "3",
    }
    base.update(overrides)
    return base


# ---------------------------------------------------------------------------
# performance_id
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("name, expected", [
    ("Swan Lake", "perf_swan_lake"),
    ("Swan  Lake!!", "perf_swan_lake_"),
    ("ABC-123", "perf_abc_123"),
    ("上海大剧院演出", "perf__"),
])
def test_performance_id(name, expected):
    assert performance_id(name) == expected


# ---------------------------------------------------------------------------
# Performances
# ---------------------------------------------------------------------------


def test_performance_fields():
    [perf] = normalize_performances([perf_row()])
    assert perf.id == "perf_swan_lake"
    assert perf.name == "Swan Lake"
    assert perf.venue == "Grand Theatre"
    assert perf.geometry_point == pytest.approx((121.4758, 31.2397))


def test_performance_nearest_stations_blank_removed_order_kept():
    [perf] = normalize_performances([perf_row()])
    assert perf.nearest_stations == ("People's Square", "East Nanjing Road", "Yuyuan Garden")


def test_performance_missing_station_columns():
    row = {"Performance": "Solo", "Venue Name": "Hall", "geometry": ""}
    [perf] = normalize_performances([row])
    assert perf.nearest_stations == ()
    assert perf.geometry_point is None


def test_performance_without_name_dropped():
    perfs = normalize_performances([perf_row(Performance=""), perf_row()])
    assert len(perfs) == 1


def test_performance_malformed_geometry_is_none():
    [perf] = normalize_performances([perf_row(geometry="POINT(abc)")])
    assert perf.geometry_point is None


# ---------------------------------------------------------------------------
# Stations
# ---------------------------------------------------------------------------


def test_station_name_aliases_first_non_blank_wins():
    rows = [
        {"Station": "", "name": "A", "lat": "31.1", "lon": "121.1"},
        {"station_name": "B", "lat": "31.2", "lon": "121.2"},
        {"Name": "C", "lat": "31.3", "lng": "121.3"},
    ]
    assert [s.name for s in normalize_stations(rows)] == ["A", "B", "C"]


def test_station_lng_alias():
    [station] = normalize_stations([{"Station": "A", "lat": "31.0", "lng": "121.5"}])
    assert station.lon == pytest.approx(121.5)


def test_station_non_numeric_lat_excluded():
    text = "Station,lat,lon\nA,31.1,121.1\nB,north,121.2\nC,31.3,121.3\n"
    stations = normalize_stations(parse_rows(text))
    assert [s.name for s in stations] == ["A", "C"]


@pytest.mark.parametrize("lat, lon", [("nan", "121"), ("31", "inf"), ("", "121"), ("31", "")])
def test_station_non_finite_or_blank_coords_excluded(lat, lon):
    assert normalize_stations([{"Station": "A", "lat": lat, "lon": lon}]) == []


def test_station_blank_name_excluded():
    assert normalize_stations([{"Station": " ", "lat": "31", "lon": "121"}]) == []


def test_station_load_order_preserved():
    rows = [{"Station": n, "lat": "1", "lon": "2"} for n in ("Z", "A", "M")]
    assert [s.name for s in normalize_stations(rows)] == ["Z", "A", "M"]


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("raw, expected", [
    ("12", 12),
    (" 7 ", 7),
    ("12.7", 12),
    ("40 people", 40),
    ("-5", 0),
    ("abc", 0),
    ("", 0),
    (None, 0),
])
def test_to_count(raw, expected):
    assert to_count(raw) == expected


# ---------------------------------------------------------------------------
# Event flow
# ---------------------------------------------------------------------------


def test_flow_fields():
    [record] = normalize_flows([flow_row()])
    assert record.performance_name == "Swan Lake"
    assert record.station == "People's Square"
    assert record.interval_start == "2025-05-28 18:00:00"
    assert (record.entry_count, record.exit_count, record.total) == (12, 3, 15)


def test_flow_zero_total_dropped():
    assert normalize_flows([flow_row(**{"Entry Count": "0", "Exit Count": "0"})]) == []


def test_flow_unparsable_counts_become_zero_and_drop():
    assert normalize_flows([flow_row(**{"Entry Count": "n/a", "Exit Count": ""})]) == []


def test_flow_one_sided_count_kept():
    [record] = normalize_flows([flow_row(**{"Entry Count": "x", "Exit Count": "4"})])
    assert (record.entry_count, record.exit_count) == (0, 4)


@pytest.mark.parametrize("column", ["Performance", "Station"])
def test_flow_blank_identifier_dropped(column):
    assert normalize_flows([flow_row(**{column: "  "})]) == []


# ---------------------------------------------------------------------------
# Reference flow
# ---------------------------------------------------------------------------


def test_reference_flow_fields():
    rows = [{"station": "A", "interval_start": "18:15:00", "entry_count": "5", "exit_count": "6"}]
    [record] = normalize_reference_flows(rows)
    assert record.station == "A"
    assert record.interval_start == "18:15:00"
    assert record.total == 11


def test_reference_flow_drops_blank_station_and_zero_flow():
    rows = [
        {"station": "", "interval_start": "18:15:00", "entry_count": "5", "exit_count": "6"},
        {"station": "A", "interval_start": "18:15:00", "entry_count": "0", "exit_count": "0"},
    ]
    assert normalize_reference_flows(rows) == []


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("text, expected", [
    ("POINT(121.5 31.2)", (121.5, 31.2)),
    ("POINT (121.5   31.2)", (121.5, 31.2)),
    ("SRID=4326;POINT(1 2)", (1.0, 2.0)),
    ("POINT(1)", None),
    ("POINT(a b)", None),
    ("LINESTRING(1 2, 3 4)", None),
    ("", None),
    (None, None),
])
def test_parse_point(text, expected):
    result = parse_point(text)
    if expected is None:
        assert result is None
    else:
        assert result == pytest.approx(expected)
