"""Dataset loader — reads the four source files, falling back per dataset.

Each source is read into a :class:`LoadResult`. A result that carries a
:class:`SourceUnavailable` error is turned into the built-in sample by
:func:`with_fallback`, so :func:`load_dataset` always returns a renderable
:class:`~venue_flow.data.models.Dataset`.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, TypeVar

from venue_flow.data import samples
from venue_flow.data.csv_reader import parse_rows
from venue_flow.data.models import Dataset, Performance
from venue_flow.data.normalizer import (
    normalize_flows,
    normalize_performances,
    normalize_reference_flows,
    normalize_stations,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")

Projection = Callable[[Iterable[Mapping[str, str]]], list[Any]]


class SourceUnavailable(Exception):
    """Raised when a source file cannot be read or decoded."""


@dataclass
class DataSources:
    """Where the four source datasets live."""

    data_dir: Path = Path("data")
    performances: str = "shanghai_performances.csv"
    stations: str = "shanghai_metro_stations.csv"
    flows: str = "event_flow_calculated.csv"
    reference_flows: str = "refer_flow_per_15.csv"

    def path(self, filename: str) -> Path:
        return self.data_dir / filename


@dataclass(frozen=True)
class LoadResult(Generic[T]):
    """Outcome of loading one dataset: either ``value`` or ``error``."""

    name: str
    value: T | None = None
    error: SourceUnavailable | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def read_source(path: Path) -> str:
    """Return the text of *path*, decoded as UTF-8 with any leading BOM removed.

    Raises
    ------
    SourceUnavailable
        If the file is missing, unreadable, or not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceUnavailable(f"Cannot read {str(path)!r}: {exc}") from exc


def load_source(name: str, path: Path, project: Projection) -> LoadResult[tuple]:
    """Read *path*, parse its rows and apply *project* to them."""
    try:
        text = read_source(path)
    except SourceUnavailable as exc:
        return LoadResult(name=name, error=exc)
    entities = tuple(project(parse_rows(text)))
    _logger.info("Loaded %s: %d record(s) from %s", name, len(entities), path)
    return LoadResult(name=name, value=entities)


def with_fallback(result: LoadResult[T], sample: T) -> T:
    """Return the loaded value, or *sample* when the source was unavailable."""
    if result.ok and result.value is not None:
        return result.value
    _logger.warning("%s unavailable (%s); using built-in sample", result.name, result.error)
    return sample


def find_id_collisions(performances: Iterable[Performance]) -> dict[str, list[str]]:
    """Return ``{id: [names...]}`` for every id shared by differently named performances."""
    names_by_id: dict[str, list[str]] = defaultdict(list)
    for perf in performances:
        if perf.name not in names_by_id[perf.id]:
            names_by_id[perf.id].append(perf.name)
    return {pid: names for pid, names in names_by_id.items() if len(names) > 1}


def load_dataset(sources: DataSources | None = None) -> Dataset:
    """Load all four datasets concurrently; never raises for unreadable sources.

    Returns only once every dataset has either loaded or fallen back.
    """
    sources = sources or DataSources()
    jobs: dict[str, tuple[str, Projection]] = {
        "performances": (sources.performances, normalize_performances),
        "stations": (sources.stations, normalize_stations),
        "flows": (sources.flows, normalize_flows),
        "reference_flows": (sources.reference_flows, normalize_reference_flows),
    }

    with ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix="DatasetLoad") as pool:
        futures = {
            name: pool.submit(load_source, name, sources.path(filename), project)
            for name, (filename, project) in jobs.items()
        }
        results = {name: fut.result() for name, fut in futures.items()}

    dataset = Dataset(
        performances=with_fallback(results["performances"], samples.SAMPLE_PERFORMANCES),
        stations=with_fallback(results["stations"], samples.SAMPLE_STATIONS),
        flows=with_fallback(results["flows"], samples.SAMPLE_FLOWS),
        reference_flows=with_fallback(
            results["reference_flows"], samples.SAMPLE_REFERENCE_FLOWS
        ),
    )

    for pid, names in find_id_collisions(dataset.performances).items():
        _logger.warning(
            "Performance id %r is shared by %d performances (%s); only the first is selectable",
            pid,
            len(names),
            ", ".join(names),
        )
    return dataset


def sample_dataset() -> Dataset:
    """Return the built-in sample dataset without touching the filesystem."""
    return Dataset(
        performances=samples.SAMPLE_PERFORMANCES,
        stations=samples.SAMPLE_STATIONS,
        flows=samples.SAMPLE_FLOWS,
        reference_flows=samples.SAMPLE_REFERENCE_FLOWS,
    )
