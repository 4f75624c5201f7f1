"""
Consistency checks over a benchmark history document.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import ExtraFormatError, SchemaError
from .extra import parse_extra
from .models import BenchmarkData, BenchmarkEntry

# lastUpdate is stamped when the file is written, a moment after the entry date
DEFAULT_MAX_UPDATE_LAG_MS = 10 * 60 * 1000


class Severity(Enum):
    """Severity of a validation issue."""

    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """A single problem found in a document."""

    severity: Severity
    message: str
    suite: Optional[str] = None
    index: Optional[int] = None  # entry index within the suite

    def location(self) -> str:
        if self.suite is None:
            return "<document>"
        if self.index is None:
            return self.suite
        return f"{self.suite}[{self.index}]"


@dataclass
class ValidationReport:
    """All issues found by validate_data."""

    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, severity: Severity, message: str, suite: Optional[str] = None,
            index: Optional[int] = None) -> None:
        self.issues.append(ValidationIssue(severity, message, suite, index))


def _is_positive_int(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer() and value > 0
    return isinstance(value, int) and value > 0


def _is_valid_value(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value >= 0


def bench_problems(entry: BenchmarkEntry) -> List[str]:
    """List what is wrong with the benches of one entry (empty when valid)."""
    problems = []
    if not entry.benches:
        problems.append("benches is empty")

    seen = set()
    for bench in entry.benches:
        if bench.name in seen:
            problems.append(f"duplicate bench name {bench.name!r}")
        seen.add(bench.name)

        if not _is_valid_value(bench.value):
            problems.append(
                f"{bench.name}: value must be a non-negative number, got {bench.value!r}"
            )
        if not bench.unit:
            problems.append(f"{bench.name}: unit is empty")

        if entry.tool == "julia":
            if bench.extra is None:
                problems.append(f"{bench.name}: extra is missing")
                continue
            try:
                parse_extra(bench.extra)
            except ExtraFormatError as e:
                problems.append(f"{bench.name}: extra: {e}")
    return problems


def _check_entry(report: ValidationReport, suite: str, index: int,
                 entry: BenchmarkEntry) -> None:
    if not _is_positive_int(entry.date):
        report.add(Severity.ERROR, f"date must be a positive integer, got {entry.date!r}",
                   suite, index)
    else:
        try:
            commit_ms = entry.commit.timestamp_ms()
        except SchemaError as e:
            report.add(Severity.ERROR, str(e), suite, index)
        else:
            if entry.date < commit_ms:
                report.add(
                    Severity.ERROR,
                    f"date {entry.date} is earlier than commit timestamp "
                    f"{entry.commit.timestamp}",
                    suite, index,
                )

    for problem in bench_problems(entry):
        report.add(Severity.ERROR, problem, suite, index)


def validate_data(
    data: BenchmarkData, max_update_lag_ms: int = DEFAULT_MAX_UPDATE_LAG_MS
) -> ValidationReport:
    """Check a document against the history invariants.

    Args:
        data: Parsed benchmark history
        max_update_lag_ms: How far lastUpdate may run ahead of the newest
            entry date before a warning is raised

    Returns:
        ValidationReport listing every issue found
    """
    report = ValidationReport()

    if not data.repo_url:
        report.add(Severity.WARNING, "repoUrl is empty")

    for suite, entries in data.entries.items():
        if not entries:
            report.add(Severity.WARNING, "suite has no entries", suite)
            continue

        commit_ids = {}
        previous_date = None
        for index, entry in enumerate(entries):
            _check_entry(report, suite, index, entry)

            first = commit_ids.setdefault(entry.commit.id, index)
            if first != index:
                report.add(
                    Severity.ERROR,
                    f"commit {entry.commit.short_id} already recorded at index {first}",
                    suite, index,
                )

            if previous_date is not None and entry.date < previous_date:
                report.add(
                    Severity.ERROR,
                    f"date {entry.date} is older than previous entry date {previous_date}",
                    suite, index,
                )
            previous_date = entry.date

    latest = data.latest_date()
    if latest is not None:
        if data.last_update < latest:
            report.add(
                Severity.ERROR,
                f"lastUpdate {data.last_update} is older than newest entry date {latest}",
            )
        elif data.last_update - latest > max_update_lag_ms:
            report.add(
                Severity.WARNING,
                f"lastUpdate {data.last_update} is {data.last_update - latest} ms "
                f"after the newest entry date {latest}",
            )

    return report
