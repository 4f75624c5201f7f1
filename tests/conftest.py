"""
Shared fixtures for the benchmark history tests.
"""

import json
from pathlib import Path

import pytest

from benchmark_history.core.datafile import parse_data_js
from benchmark_history.core.models import (
    Bench,
    BenchmarkData,
    BenchmarkEntry,
    Commit,
    CommitUser,
)

DATA_DIR = Path(__file__).parent / "data"

FIRST_DATE = 1763492271445
DAY_MS = 86_400_000
PARAMS = (
    '{"gctrial":true,"time_tolerance":0.05,"evals_set":false,"samples":10000,'
    '"evals":1,"gcsample":false,"seconds":5,"overhead":0,"memory_tolerance":0.01}'
)
REPO_URL = "https://github.com/MPF-Optimization-Laboratory/BlockTensorFactorization.jl"


def make_extra(gctime=0, memory=10040808, allocs=113709):
    return f"gctime={gctime}\nmemory={memory}\nallocs={allocs}\nparams={PARAMS}"


def make_commit(commit_id, timestamp="2025-11-18T10:54:30-08:00", message="update"):
    user = CommitUser(email="njericha@math.ubc.ca", name="Nicholas", username="njericha")
    return Commit(
        author=user,
        committer=user,
        id=commit_id,
        message=message,
        timestamp=timestamp,
        url=f"{REPO_URL}/commit/{commit_id}",
        distinct=True,
        tree_id="f920f226932ee58daa835846d4ca6efedebec877",
    )


def make_entry(commit_id, date, value, name="factorize/1", tool="julia", **extra):
    return BenchmarkEntry(
        commit=make_commit(commit_id),
        date=date,
        tool=tool,
        benches=[Bench(name=name, value=value, unit="ns", extra=make_extra(**extra))],
    )


@pytest.fixture
def sample_text():
    """The published data.js with the first recorded entry."""
    return (DATA_DIR / "data.js").read_text(encoding="utf-8")


@pytest.fixture
def sample_data(sample_text):
    return parse_data_js(sample_text)


@pytest.fixture
def history_data():
    """Four entries of factorize/1 with noisy timings and fixed allocations."""
    values = [15497440.5, 15812003.0, 14988215.5, 16104377.0]
    gctimes = [0, 0, 1203312, 0]
    entries = [
        make_entry(f"{i:040x}", FIRST_DATE + i * DAY_MS, value, gctime=gc)
        for i, (value, gc) in enumerate(zip(values, gctimes))
    ]
    return BenchmarkData(
        last_update=entries[-1].date + 1265,
        repo_url=REPO_URL,
        entries={"Benchmark": entries},
    )


@pytest.fixture
def julia_output():
    """BenchmarkTools JSON for a median-reduced suite."""
    estimate = {
        "allocs": 113709,
        "time": 15497440.5,
        "memory": 10040808,
        "params": ["Parameters", json.loads(PARAMS)],
        "gctime": 0.0,
    }
    document = [
        {"Julia": "1.10.0", "BenchmarkTools": "1.0.0"},
        [
            [
                "BenchmarkGroup",
                {
                    "data": {
                        "factorize": [
                            "BenchmarkGroup",
                            {"data": {"1": ["TrialEstimate", estimate]}, "tags": []},
                        ]
                    },
                    "tags": [],
                },
            ]
        ],
    ]
    return json.dumps(document)


@pytest.fixture
def push_event():
    return {
        "ref": "refs/heads/main",
        "head_commit": make_commit(
            "9a1f3b2c4d5e6f708192a3b4c5d6e7f8091a2b3c",
            timestamp="2025-11-19T09:12:04-08:00",
            message="speed up block updates",
        ).to_dict(),
    }
