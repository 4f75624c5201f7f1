"""
Reading and writing benchmark history files.

Two layouts hold the same document: the ``data.js`` script consumed by the
dashboard page (``window.BENCHMARK_DATA = {...}``) and plain JSON.
"""

import json
import logging
import os
import re
import time
from pathlib import Path
from typing import Union

from .errors import DataFileFormatError, SchemaError
from .models import BenchmarkData

logger = logging.getLogger(__name__)

SCRIPT_PREFIX = "window.BENCHMARK_DATA = "

_SCRIPT_PREFIX_RE = re.compile(r"window\.BENCHMARK_DATA\s*=\s*")


def now_ms() -> int:
    """Current time as Unix epoch milliseconds."""
    return int(time.time() * 1000)


def empty_data(repo_url: str) -> BenchmarkData:
    """Create a document with no suites."""
    return BenchmarkData(last_update=now_ms(), repo_url=repo_url, entries={})


def parse_data_js(text: str) -> BenchmarkData:
    """Parse a ``data.js`` script or its plain JSON form.

    Args:
        text: File contents

    Returns:
        Parsed BenchmarkData

    Raises:
        DataFileFormatError: If the text is not valid JSON after the prefix
        SchemaError: If the JSON does not match the document schema
    """
    body = text.strip()
    match = _SCRIPT_PREFIX_RE.match(body)
    if match:
        body = body[match.end():]
        if body.endswith(";"):
            body = body[:-1].rstrip()
    elif body.startswith("window."):
        raise DataFileFormatError("unexpected script assignment; expected window.BENCHMARK_DATA")

    try:
        obj = json.loads(body)
    except json.JSONDecodeError as e:
        raise DataFileFormatError(f"invalid benchmark data JSON: {e}") from e

    return BenchmarkData.from_dict(obj)


def dump_json(data: BenchmarkData) -> str:
    """Serialize as plain JSON with 2-space indentation."""
    return json.dumps(data.to_dict(), indent=2, ensure_ascii=False)


def dump_data_js(data: BenchmarkData) -> str:
    """Serialize as a ``data.js`` script, byte-compatible with the publisher."""
    return SCRIPT_PREFIX + dump_json(data)


def load_data_file(path: Union[str, Path]) -> BenchmarkData:
    """Load a history file from disk.

    Raises:
        FileNotFoundError: If the file does not exist
        DataFileFormatError: If the file cannot be parsed
    """
    path = Path(path)
    logger.debug("Loading benchmark data from %s", path)
    text = path.read_text(encoding="utf-8")
    try:
        return parse_data_js(text)
    except SchemaError as e:
        raise DataFileFormatError(f"{path}: {e}") from e


def save_data_file(data: BenchmarkData, path: Union[str, Path]) -> Path:
    """Write a history file atomically.

    A ``.json`` suffix selects plain JSON; anything else is written as a
    ``data.js`` script.

    Returns:
        The path written
    """
    path = Path(path)
    text = dump_json(data) if path.suffix == ".json" else dump_data_js(data)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + f".tmp-{os.getpid()}")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    os.replace(tmp, path)

    logger.debug("Wrote %d bytes of benchmark data to %s", len(text), path)
    return path
