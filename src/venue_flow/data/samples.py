"""Built-in sample datasets used when a source file cannot be read.

The samples are small on purpose: enough for the map to show three venues
around People's Square and Lujiazui, not enough to be mistaken for real data.
"""

from __future__ import annotations

from venue_flow.data.models import (
    FlowRecord,
    Performance,
    ReferenceFlowRecord,
    Station,
)

_GRAND_THEATRE = "上海大剧院演出"
_ORIENTAL_ART_CENTER = "东方艺术中心音乐会"
_CONCERT_HALL = "上海音乐厅古典音乐会"

SAMPLE_PERFORMANCES: tuple[Performance, ...] = (
    Performance(
        id="perf1",
        name=_GRAND_THEATRE,
        venue="上海大剧院",
        geometry_point=(121.4758, 31.2397),
        nearest_stations=("人民广场站", "南京东路站", "陆家嘴站", "豫园站", "外滩站"),
    ),
    Performance(
        id="perf2",
        name=_ORIENTAL_ART_CENTER,
        venue="东方艺术中心",
        geometry_point=(121.5444, 31.2211),
        nearest_stations=("世纪大道站", "陆家嘴站", "东昌路站", "浦电路站", "蓝村路站"),
    ),
    Performance(
        id="perf3",
        name=_CONCERT_HALL,
        venue="上海音乐厅",
        geometry_point=(121.4803, 31.2334),
        nearest_stations=("人民广场站", "南京东路站", "豫园站", "外滩站", "陆家嘴站"),
    ),
)

SAMPLE_STATIONS: tuple[Station, ...] = (
    Station(name="人民广场站", lat=31.2334, lon=121.4803),
    Station(name="南京东路站", lat=31.2397, lon=121.4758),
    Station(name="陆家嘴站", lat=31.2211, lon=121.5444),
    Station(name="豫园站", lat=31.2274, lon=121.4924),
    Station(name="外滩站", lat=31.2334, lon=121.4903),
    Station(name="世纪大道站", lat=31.2211, lon=121.5444),
    Station(name="东昌路站", lat=31.2211, lon=121.5444),
    Station(name="浦电路站", lat=31.2211, lon=121.5444),
    Station(name="蓝村路站", lat=31.2211, lon=121.5444),
)

# One record per interval, each at one of the performance's nearest stations.
SAMPLE_FLOWS: tuple[FlowRecord, ...] = (
    FlowRecord(_GRAND_THEATRE, "人民广场站", "18:00", 150, 50),
    FlowRecord(_GRAND_THEATRE, "南京东路站", "18:15", 200, 75),
    FlowRecord(_GRAND_THEATRE, "人民广场站", "18:30", 180, 100),
    FlowRecord(_ORIENTAL_ART_CENTER, "世纪大道站", "19:00", 120, 30),
    FlowRecord(_ORIENTAL_ART_CENTER, "陆家嘴站", "19:15", 160, 60),
    FlowRecord(_CONCERT_HALL, "人民广场站", "20:00", 90, 20),
    FlowRecord(_CONCERT_HALL, "南京东路站", "20:15", 110, 40),
)

SAMPLE_REFERENCE_FLOWS: tuple[ReferenceFlowRecord, ...] = ()
