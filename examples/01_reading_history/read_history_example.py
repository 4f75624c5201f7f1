"""
Benchmark History Example: Reading a data.js file

This example walks through the history file published for a benchmark
dashboard:
- Loading the window.BENCHMARK_DATA script
- Decoding the Julia ``extra`` counters
- Checking the file for consistency
- Summarizing one bench across commits

Usage:
    python read_history_example.py path/to/dev/bench/data.js [bench-name]
"""

import sys
from pathlib import Path

from benchmark_history.core.datafile import load_data_file
from benchmark_history.core.extra import try_parse_extra
from benchmark_history.core.metrics import bench_series, summarize_series
from benchmark_history.core.validation import validate_data


def demonstrate_history(path: Path, bench_name: str = "factorize/1") -> None:
    """Print what a history file records about one bench."""
    print("=" * 60)
    print("BENCHMARK HISTORY: Reading data.js")
    print("=" * 60)

    data = load_data_file(path)
    print(f"   Repository: {data.repo_url}")
    print(f"   Suites: {', '.join(data.suites()) or '(none)'}")

    report = validate_data(data)
    print(f"\n  Validation: {len(report.errors)} error(s), {len(report.warnings)} warning(s)")
    for issue in report.issues:
        print(f"   {issue.severity.value}: {issue.location()}: {issue.message}")

    for suite, entries in data.entries.items():
        print(f"\n  Suite {suite}: {len(entries)} entries")
        for entry in entries:
            bench = entry.get_bench(bench_name)
            if bench is None:
                continue
            extra = try_parse_extra(bench.extra)
            line = f"   {entry.commit.short_id}  {bench.value:>14,.1f} {bench.unit}"
            if extra is not None:
                line += f"  memory={extra.memory:,} B  allocs={extra.allocs:,}"
            print(line)

        series = bench_series(data, suite, bench_name)
        if len(series) == 0:
            continue
        summary = summarize_series(series)
        print(f"\n   mean {summary.mean:,.1f} {summary.unit} (std {summary.std:,.1f})")
        if summary.memory_stable is not None:
            print(f"   allocations stable across commits: {summary.allocs_stable}")

    print("=" * 60)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    demonstrate_history(Path(sys.argv[1]), *sys.argv[2:3])
