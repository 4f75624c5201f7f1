"""
Trend statistics and regression alerts over benchmark history.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .extra import try_parse_extra
from .models import BenchmarkData, BenchmarkEntry

# alert when the result gets worse by more than 200%
DEFAULT_ALERT_THRESHOLD = 2.0


@dataclass
class BenchSeries:
    """Values of one bench across the entries of a suite, oldest first."""

    name: str
    unit: str
    commit_ids: List[str] = field(default_factory=list)
    dates: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.int64))
    values: np.ndarray = field(default_factory=lambda: np.array([], dtype=np.float64))
    # counters decoded from ``extra``; None when any entry lacks them
    gctimes: Optional[np.ndarray] = None
    memory: Optional[np.ndarray] = None
    allocs: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self.values)


@dataclass
class SeriesSummary:
    """Aggregate statistics for a BenchSeries."""

    name: str
    unit: str
    count: int
    mean: float
    median: float
    std: float
    min: float
    max: float
    latest: float
    change: Optional[float] = None  # latest / previous
    memory_stable: Optional[bool] = None
    allocs_stable: Optional[bool] = None


@dataclass
class BenchComparison:
    """Comparison of one bench between two consecutive entries."""

    name: str
    unit: str
    previous: float
    current: float
    ratio: float  # > 1.0 means worse
    alert: bool


def bench_series(data: BenchmarkData, suite: str, name: str) -> BenchSeries:
    """Collect the history of one bench.

    Args:
        data: Benchmark history document
        suite: Suite name
        name: Bench name

    Returns:
        BenchSeries; empty when the bench was never recorded
    """
    unit = ""
    commit_ids, dates, values = [], [], []
    extras = []
    for entry in data.entries.get(suite, []):
        bench = entry.get_bench(name)
        if bench is None:
            continue
        unit = bench.unit
        commit_ids.append(entry.commit.id)
        dates.append(entry.date)
        values.append(bench.value)
        extras.append(try_parse_extra(bench.extra))

    series = BenchSeries(
        name=name,
        unit=unit,
        commit_ids=commit_ids,
        dates=np.asarray(dates, dtype=np.int64),
        values=np.asarray(values, dtype=np.float64),
    )

    if extras and all(e is not None for e in extras):
        series.gctimes = np.asarray([e.gctime for e in extras], dtype=np.float64)
        series.memory = np.asarray([e.memory for e in extras], dtype=np.int64)
        series.allocs = np.asarray([e.allocs for e in extras], dtype=np.int64)

    return series


def summarize_series(series: BenchSeries) -> SeriesSummary:
    """Compute summary statistics for a non-empty series."""
    if len(series) == 0:
        raise ValueError(f"No measurements recorded for {series.name}")

    values = series.values
    change = None
    if len(values) > 1 and values[-2] != 0:
        change = float(values[-1] / values[-2])

    summary = SeriesSummary(
        name=series.name,
        unit=series.unit,
        count=len(values),
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        std=float(np.std(values)),
        min=float(np.min(values)),
        max=float(np.max(values)),
        latest=float(values[-1]),
        change=change,
    )

    if series.memory is not None:
        summary.memory_stable = bool(np.unique(series.memory).size == 1)
        summary.allocs_stable = bool(np.unique(series.allocs).size == 1)

    return summary


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return math.inf if numerator > 0 else 1.0
    return numerator / denominator


def compare_entries(
    previous: BenchmarkEntry,
    current: BenchmarkEntry,
    bigger_is_better: bool = False,
    threshold: float = DEFAULT_ALERT_THRESHOLD,
) -> List[BenchComparison]:
    """Compare the benches two entries have in common.

    Args:
        previous: Earlier entry (the baseline)
        current: Newer entry
        bigger_is_better: Whether larger values are improvements
        threshold: Ratio above which a comparison raises an alert

    Returns:
        One BenchComparison per bench present in both entries, in the
        order of ``current.benches``
    """
    comparisons = []
    for bench in current.benches:
        before = previous.get_bench(bench.name)
        if before is None:
            continue

        if bigger_is_better:
            ratio = _ratio(before.value, bench.value)
        else:
            ratio = _ratio(bench.value, before.value)

        comparisons.append(
            BenchComparison(
                name=bench.name,
                unit=bench.unit,
                previous=float(before.value),
                current=float(bench.value),
                ratio=ratio,
                alert=ratio > threshold,
            )
        )

    return comparisons
