"""
Benchmark History

Read, validate, extend and analyse continuous-benchmarking history files
(the ``window.BENCHMARK_DATA`` data.js layout used by benchmark dashboards).
"""

__version__ = "0.1.0"
__author__ = "Arvin Singh"
__email__ = "arvinsingh@protonmail.com"

from .core.datafile import load_data_file, save_data_file
from .core.models import Bench, BenchmarkData, BenchmarkEntry, Commit
from .core.store import BenchmarkStore
from .core.validation import validate_data

__all__ = [
    "Bench",
    "BenchmarkData",
    "BenchmarkEntry",
    "BenchmarkStore",
    "Commit",
    "load_data_file",
    "save_data_file",
    "validate_data",
]
