"""
Codec for the ``extra`` string attached to Julia BenchmarkTools benches.

The publishing tool flattens a ``TrialEstimate`` into text of the form::

    gctime=0
    memory=10040808
    allocs=113709
    params={"gctrial":true,"samples":10000,...}
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .errors import ExtraFormatError

Number = Union[int, float]

EXTRA_KEYS = ("gctime", "memory", "allocs", "params")


@dataclass(frozen=True)
class BenchExtra:
    """Decoded counters and parameters of a Julia benchmark run."""

    gctime: Number  # nanoseconds
    memory: int  # bytes
    allocs: int
    params: Dict[str, Any] = field(default_factory=dict)


def format_number(value: Number) -> str:
    """Render a number the way JavaScript's ``String(n)`` does for common values."""
    if isinstance(value, float) and value.is_integer() and math.isfinite(value):
        return str(int(value))
    return str(value)


def _parse_number(key: str, text: str) -> Number:
    try:
        value = float(text)
    except ValueError as e:
        raise ExtraFormatError(f"{key} is not a number: {text!r}") from e
    if not math.isfinite(value):
        raise ExtraFormatError(f"{key} is not finite: {text!r}")
    return int(value) if value.is_integer() else value


def _parse_count(key: str, text: str) -> int:
    # plain digits go through int() so counters above 2**53 stay exact
    digits = text[1:] if text.startswith("-") else text
    if digits.isascii() and digits.isdigit():
        value: Number = int(text)
    else:
        value = _parse_number(key, text)
    if not isinstance(value, int):
        raise ExtraFormatError(f"{key} must be an integer, got {text!r}")
    if value < 0:
        raise ExtraFormatError(f"{key} must be non-negative, got {value}")
    return value


def parse_extra(text: str) -> BenchExtra:
    """Decode an ``extra`` string.

    Args:
        text: The ``extra`` field of a bench

    Returns:
        BenchExtra with the decoded values

    Raises:
        ExtraFormatError: If a key is missing or a value is malformed
    """
    fields: Dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        key, sep, value = line.partition("=")
        if not sep:
            raise ExtraFormatError(f"expected key=value, got {line!r}")
        fields[key.strip()] = value.strip()

    missing = [key for key in EXTRA_KEYS if key not in fields]
    if missing:
        raise ExtraFormatError(f"missing keys: {', '.join(missing)}")

    gctime = _parse_number("gctime", fields["gctime"])
    if gctime < 0:
        raise ExtraFormatError(f"gctime must be non-negative, got {gctime}")

    try:
        params = json.loads(fields["params"])
    except json.JSONDecodeError as e:
        raise ExtraFormatError(f"params is not valid JSON: {e}") from e
    if not isinstance(params, dict):
        raise ExtraFormatError("params must be a JSON object")

    return BenchExtra(
        gctime=gctime,
        memory=_parse_count("memory", fields["memory"]),
        allocs=_parse_count("allocs", fields["allocs"]),
        params=params,
    )


def try_parse_extra(text: Optional[str]) -> Optional[BenchExtra]:
    """Like parse_extra, but returns None for absent or foreign ``extra`` text."""
    if not text:
        return None
    try:
        return parse_extra(text)
    except ExtraFormatError:
        return None


def format_extra(extra: BenchExtra) -> str:
    """Encode a BenchExtra back into its ``extra`` string."""
    params = json.dumps(extra.params, separators=(",", ":"), ensure_ascii=False)
    return (
        f"gctime={format_number(extra.gctime)}\n"
        f"memory={format_number(extra.memory)}\n"
        f"allocs={format_number(extra.allocs)}\n"
        f"params={params}"
    )
