"""
Record types for benchmark history documents.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import SchemaError

Number = Union[int, float]


def _require(obj: Dict[str, Any], key: str, types: Tuple[type, ...], path: str) -> Any:
    """Fetch ``obj[key]`` and check its type, raising SchemaError otherwise."""
    if key not in obj:
        raise SchemaError("missing field", f"{path}.{key}" if path else key)
    value = obj[key]
    # bool is an int subclass, but never a valid number here
    if isinstance(value, bool) and bool not in types:
        raise SchemaError("expected a number, got a boolean", f"{path}.{key}")
    if not isinstance(value, types):
        names = "/".join(t.__name__ for t in types)
        raise SchemaError(
            f"expected {names}, got {type(value).__name__}",
            f"{path}.{key}" if path else key,
        )
    return value


def _optional(obj: Dict[str, Any], key: str, types: Tuple[type, ...], path: str) -> Any:
    if obj.get(key) is None:
        return None
    return _require(obj, key, types, path)


def _check_object(obj: Any, path: str) -> Dict[str, Any]:
    if not isinstance(obj, dict):
        raise SchemaError(f"expected an object, got {type(obj).__name__}", path)
    return obj


@dataclass(frozen=True)
class CommitUser:
    """Author or committer of a commit."""

    email: str
    name: str
    username: Optional[str] = None

    @classmethod
    def from_dict(cls, obj: Any, path: str = "user") -> "CommitUser":
        obj = _check_object(obj, path)
        return cls(
            email=_require(obj, "email", (str,), path),
            name=_require(obj, "name", (str,), path),
            username=_optional(obj, "username", (str,), path),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = {"email": self.email, "name": self.name}
        if self.username is not None:
            out["username"] = self.username
        return out


@dataclass(frozen=True)
class Commit:
    """Source-control metadata of the commit a benchmark ran against."""

    author: CommitUser
    committer: CommitUser
    id: str
    message: str
    timestamp: str  # ISO-8601, kept verbatim
    url: str
    distinct: Optional[bool] = None
    tree_id: Optional[str] = None

    @classmethod
    def from_dict(cls, obj: Any, path: str = "commit") -> "Commit":
        obj = _check_object(obj, path)
        return cls(
            author=CommitUser.from_dict(
                _require(obj, "author", (dict,), path), f"{path}.author"
            ),
            committer=CommitUser.from_dict(
                _require(obj, "committer", (dict,), path), f"{path}.committer"
            ),
            id=_require(obj, "id", (str,), path),
            message=_require(obj, "message", (str,), path),
            timestamp=_require(obj, "timestamp", (str,), path),
            url=_require(obj, "url", (str,), path),
            distinct=_optional(obj, "distinct", (bool,), path),
            tree_id=_optional(obj, "tree_id", (str,), path),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "author": self.author.to_dict(),
            "committer": self.committer.to_dict(),
        }
        if self.distinct is not None:
            out["distinct"] = self.distinct
        out["id"] = self.id
        out["message"] = self.message
        out["timestamp"] = self.timestamp
        if self.tree_id is not None:
            out["tree_id"] = self.tree_id
        out["url"] = self.url
        return out

    @property
    def short_id(self) -> str:
        return self.id[:7]

    def timestamp_ms(self) -> int:
        """Commit time as Unix epoch milliseconds.

        Raises:
            SchemaError: If the timestamp is not ISO-8601
        """
        text = self.timestamp
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as e:
            raise SchemaError(f"invalid ISO-8601 timestamp {self.timestamp!r}") from e
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return int(round(moment.timestamp() * 1000))


@dataclass(frozen=True)
class Bench:
    """A single named measurement."""

    name: str
    value: Number
    unit: str
    extra: Optional[str] = None
    range: Optional[str] = None  # e.g. "± 3.2%"

    @classmethod
    def from_dict(cls, obj: Any, path: str = "bench") -> "Bench":
        obj = _check_object(obj, path)
        return cls(
            name=_require(obj, "name", (str,), path),
            value=_require(obj, "value", (int, float), path),
            unit=_require(obj, "unit", (str,), path),
            extra=_optional(obj, "extra", (str,), path),
            range=_optional(obj, "range", (str,), path),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "value": self.value}
        if self.range is not None:
            out["range"] = self.range
        out["unit"] = self.unit
        if self.extra is not None:
            out["extra"] = self.extra
        return out


@dataclass
class BenchmarkEntry:
    """One benchmark run: a commit plus the measurements taken at it."""

    commit: Commit
    date: int  # epoch milliseconds
    tool: str
    benches: List[Bench] = field(default_factory=list)

    @classmethod
    def from_dict(cls, obj: Any, path: str = "entry") -> "BenchmarkEntry":
        obj = _check_object(obj, path)
        raw_benches = _require(obj, "benches", (list,), path)
        return cls(
            commit=Commit.from_dict(_require(obj, "commit", (dict,), path), f"{path}.commit"),
            date=_require(obj, "date", (int, float), path),
            tool=_require(obj, "tool", (str,), path),
            benches=[
                Bench.from_dict(b, f"{path}.benches[{i}]")
                for i, b in enumerate(raw_benches)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commit": self.commit.to_dict(),
            "date": self.date,
            "tool": self.tool,
            "benches": [b.to_dict() for b in self.benches],
        }

    def get_bench(self, name: str) -> Optional[Bench]:
        for bench in self.benches:
            if bench.name == name:
                return bench
        return None


@dataclass
class BenchmarkData:
    """The whole history document: suites of entries plus bookkeeping."""

    last_update: int  # epoch milliseconds
    repo_url: str
    entries: Dict[str, List[BenchmarkEntry]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, obj: Any) -> "BenchmarkData":
        obj = _check_object(obj, "")
        raw_entries = _require(obj, "entries", (dict,), "")
        entries = {}
        for suite, items in raw_entries.items():
            if not isinstance(items, list):
                raise SchemaError("expected a list of entries", f"entries.{suite}")
            entries[suite] = [
                BenchmarkEntry.from_dict(item, f"entries.{suite}[{i}]")
                for i, item in enumerate(items)
            ]
        return cls(
            last_update=_require(obj, "lastUpdate", (int, float), ""),
            repo_url=_require(obj, "repoUrl", (str,), ""),
            entries=entries,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastUpdate": self.last_update,
            "repoUrl": self.repo_url,
            "entries": {
                suite: [entry.to_dict() for entry in items]
                for suite, items in self.entries.items()
            },
        }

    def suites(self) -> List[str]:
        return list(self.entries.keys())

    def latest_date(self) -> Optional[int]:
        """Newest entry date across all suites, or None when empty."""
        dates = [entry.date for items in self.entries.values() for entry in items]
        return max(dates) if dates else None
