"""
Extractor for Julia BenchmarkTools results.

BenchmarkTools serializes a (usually ``median``-reduced) BenchmarkGroup as::

    [{"Julia": "1.10.0", "BenchmarkTools": "1.0.0"},
     [["BenchmarkGroup", {"data": {"factorize": ["BenchmarkGroup", {...}]},
                          "tags": []}]]]

Leaves are ``["TrialEstimate", {"time": ..., "gctime": ..., "memory": ...,
"allocs": ..., "params": ["Parameters", {...}]}]``.
"""

import json
import math
from typing import Any, List

from ..core.errors import ExtractorError
from ..core.extra import BenchExtra, format_extra
from ..core.models import Bench


def _field(name: str, estimate: dict, key: str) -> Any:
    try:
        return estimate[key]
    except KeyError as e:
        raise ExtractorError(f"{name}: TrialEstimate is missing {e}") from e


def _duration(name: str, estimate: dict, key: str) -> float:
    value = _field(name, estimate, key)
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or not math.isfinite(value)
        or value < 0
    ):
        raise ExtractorError(f"{name}: {key} must be a non-negative number, got {value!r}")
    return value


def _count(name: str, estimate: dict, key: str) -> int:
    value = _field(name, estimate, key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ExtractorError(f"{name}: {key} must be a non-negative integer, got {value!r}")
    return value


def _trial_estimate_bench(name: str, estimate: Any) -> Bench:
    if not isinstance(estimate, dict):
        raise ExtractorError(f"{name}: TrialEstimate payload is not an object")

    params = _field(name, estimate, "params")
    if isinstance(params, list) and len(params) == 2:
        params = params[1]
    if not isinstance(params, dict):
        raise ExtractorError(f"{name}: params must be an object, got {params!r}")

    extra = BenchExtra(
        gctime=_duration(name, estimate, "gctime"),
        memory=_count(name, estimate, "memory"),
        allocs=_count(name, estimate, "allocs"),
        params=params,
    )
    value = _duration(name, estimate, "time")
    return Bench(name=name, value=value, unit="ns", extra=format_extra(extra))


def _walk_group(group: Any, labels: List[str]) -> List[Bench]:
    where = "/".join(labels) or "<root>"
    if not (isinstance(group, list) and len(group) == 2 and isinstance(group[1], dict)):
        raise ExtractorError(f"malformed BenchmarkGroup at {where}")

    data = group[1].get("data", {})
    if not isinstance(data, dict):
        raise ExtractorError(f"BenchmarkGroup data at {where} is not an object")

    benches = []
    for key, value in data.items():
        path = labels + [key]
        kind = value[0] if isinstance(value, list) and value else None
        if kind == "BenchmarkGroup":
            benches.extend(_walk_group(value, path))
        elif kind == "TrialEstimate":
            if len(value) != 2:
                raise ExtractorError(f"TrialEstimate at {'/'.join(path)} has no payload")
            benches.append(_trial_estimate_bench("/".join(path), value[1]))
        else:
            raise ExtractorError(f"unexpected Julia benchmark type {kind!r} at {'/'.join(path)}")
    return benches


def extract_julia(output: str) -> List[Bench]:
    """Turn BenchmarkTools JSON output into benches named ``group/.../key``."""
    try:
        document = json.loads(output)
    except json.JSONDecodeError as e:
        raise ExtractorError(f"output is not valid BenchmarkTools JSON: {e}") from e

    if not (isinstance(document, list) and len(document) == 2 and isinstance(document[1], list)):
        raise ExtractorError("expected [version_info, [groups...]] at top level")

    benches = []
    for group in document[1]:
        benches.extend(_walk_group(group, []))
    return benches


def register_julia_extractors(registry) -> None:
    """Register the Julia extractor with the registry."""
    registry.register_extractor("julia", extract_julia, bigger_is_better=False)
