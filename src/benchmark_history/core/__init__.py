"""
Core benchmark history infrastructure.
"""

from .datafile import load_data_file, parse_data_js, save_data_file
from .extra import BenchExtra, format_extra, parse_extra
from .metrics import bench_series, compare_entries, summarize_series
from .models import Bench, BenchmarkData, BenchmarkEntry, Commit, CommitUser
from .store import BenchmarkStore
from .validation import validate_data

__all__ = [
    "Bench",
    "BenchExtra",
    "BenchmarkData",
    "BenchmarkEntry",
    "BenchmarkStore",
    "Commit",
    "CommitUser",
    "bench_series",
    "compare_entries",
    "format_extra",
    "load_data_file",
    "parse_data_js",
    "parse_extra",
    "save_data_file",
    "summarize_series",
    "validate_data",
]
