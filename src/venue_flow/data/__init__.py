"""Venue, station and passenger-flow data loading.

Public API
----------
Performance, Station, FlowRecord, ReferenceFlowRecord, Dataset - entities
parse_rows          - lenient CSV text → row dicts
normalize_*         - row dicts → entities
load_dataset        - read all sources, falling back to built-in samples
SourceUnavailable   - a source file could not be read
"""

from venue_flow.data.csv_reader import parse_rows
from venue_flow.data.loader import (
    DataSources,
    LoadResult,
    SourceUnavailable,
    load_dataset,
    sample_dataset,
    with_fallback,
)
from venue_flow.data.models import (
    Dataset,
    FlowRecord,
    Performance,
    ReferenceFlowRecord,
    Station,
)
from venue_flow.data.normalizer import (
    normalize_flows,
    normalize_performances,
    normalize_reference_flows,
    normalize_stations,
)

__all__ = [
    "DataSources",
    "Dataset",
    "FlowRecord",
    "LoadResult",
    "Performance",
    "ReferenceFlowRecord",
    "SourceUnavailable",
    "Station",
    "load_dataset",
    "normalize_flows",
    "normalize_performances",
    "normalize_reference_flows",
    "normalize_stations",
    "parse_rows",
    "sample_dataset",
    "with_fallback",
]
