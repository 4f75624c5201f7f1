"""
Append-only store over a benchmark history file.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .datafile import empty_data, load_data_file, now_ms, save_data_file
from .errors import DuplicateEntryError, OutOfOrderEntryError, SchemaError
from .models import Bench, BenchmarkData, BenchmarkEntry
from .validation import bench_problems

logger = logging.getLogger(__name__)

DEFAULT_SUITE = "Benchmark"


class BenchmarkStore:
    """Owns a BenchmarkData document and the file it came from."""

    def __init__(self, data: BenchmarkData, path: Optional[Union[str, Path]] = None):
        """Initialize the store.

        Args:
            data: Benchmark history document
            path: File the document is saved to, if any
        """
        self.data = data
        self.path = Path(path) if path is not None else None

    @classmethod
    def open(
        cls, path: Union[str, Path], repo_url: Optional[str] = None
    ) -> "BenchmarkStore":
        """Load a history file, or start a new document if it does not exist.

        Args:
            path: Location of the data.js or JSON file
            repo_url: Repository URL for a new document

        Returns:
            BenchmarkStore bound to ``path``
        """
        path = Path(path)
        if path.exists():
            return cls(load_data_file(path), path)

        if not repo_url:
            raise FileNotFoundError(
                f"{path} does not exist and no repository URL was given to create it"
            )
        logger.info("Starting new benchmark history at %s", path)
        return cls(empty_data(repo_url), path)

    def list_suites(self) -> List[str]:
        """List suite names in document order."""
        return self.data.suites()

    def get_entries(self, suite: str = DEFAULT_SUITE) -> List[BenchmarkEntry]:
        """Get a copy of the entries of a suite (empty if the suite is unknown)."""
        return list(self.data.entries.get(suite, []))

    def latest_entry(self, suite: str = DEFAULT_SUITE) -> Optional[BenchmarkEntry]:
        entries = self.data.entries.get(suite)
        return entries[-1] if entries else None

    def add_entry(self, entry: BenchmarkEntry, suite: str = DEFAULT_SUITE) -> None:
        """Append an entry to a suite.

        Args:
            entry: The new benchmark entry
            suite: Suite to append to; created when missing

        Raises:
            SchemaError: If the benches are empty or would fail validation
            DuplicateEntryError: If the commit already has an entry in the suite
            OutOfOrderEntryError: If the entry is older than the suite's newest entry
        """
        problems = bench_problems(entry)
        if problems:
            raise SchemaError("; ".join(problems), f"entry {entry.commit.short_id}")

        entries = self.data.entries.setdefault(suite, [])
        for existing in entries:
            if existing.commit.id == entry.commit.id:
                raise DuplicateEntryError(
                    f"commit {entry.commit.short_id} already has an entry in suite {suite!r}"
                )

        if entries and entry.date < entries[-1].date:
            raise OutOfOrderEntryError(
                f"entry date {entry.date} is older than latest date "
                f"{entries[-1].date} in suite {suite!r}"
            )

        entries.append(entry)
        self.data.last_update = max(now_ms(), entry.date, self.data.last_update)
        logger.info(
            "Added %d benches for commit %s to suite %s",
            len(entry.benches), entry.commit.short_id, suite,
        )

    def history(
        self, bench_name: str, suite: str = DEFAULT_SUITE
    ) -> List[Tuple[BenchmarkEntry, Bench]]:
        """Get every recorded measurement of one bench, oldest first.

        Args:
            bench_name: Bench name, e.g. ``factorize/1``
            suite: Suite to search

        Returns:
            List of (entry, bench) pairs for entries that measured the bench
        """
        pairs = []
        for entry in self.data.entries.get(suite, []):
            bench = entry.get_bench(bench_name)
            if bench is not None:
                pairs.append((entry, bench))
        return pairs

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the document to ``path`` or the path it was opened from."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("No path given and store was not opened from a file")
        return save_data_file(self.data, target)
