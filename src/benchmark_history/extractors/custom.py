"""
Extractors for tool-agnostic JSON results.

The input is a JSON array of ``{"name", "value", "unit", "range"?, "extra"?}``
objects, written by whatever harness produced the numbers.
"""

import json
from typing import List

from ..core.errors import ExtractorError, SchemaError
from ..core.models import Bench


def extract_custom(output: str) -> List[Bench]:
    """Parse a custom JSON bench list."""
    try:
        items = json.loads(output)
    except json.JSONDecodeError as e:
        raise ExtractorError(f"output is not valid JSON: {e}") from e

    if not isinstance(items, list):
        raise ExtractorError("custom benchmark output must be a JSON array")

    try:
        return [Bench.from_dict(item, f"[{i}]") for i, item in enumerate(items)]
    except SchemaError as e:
        raise ExtractorError(f"invalid custom benchmark result {e}") from e


def register_custom_extractors(registry) -> None:
    """Register both custom extractor flavours with the registry."""
    registry.register_extractor("customSmallerIsBetter", extract_custom, bigger_is_better=False)
    registry.register_extractor("customBiggerIsBetter", extract_custom, bigger_is_better=True)
