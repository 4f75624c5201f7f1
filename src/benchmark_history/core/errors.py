"""
Exception hierarchy for benchmark history handling.

Callers can catch ``BenchmarkHistoryError`` for any failure raised by this
package, or one of the subclasses when they need to react to a specific
category (a malformed file vs. a rejected append, for example).
"""

__all__ = [
    "BenchmarkHistoryError",
    "SchemaError",
    "ExtraFormatError",
    "DataFileFormatError",
    "ExtractorError",
    "DuplicateEntryError",
    "OutOfOrderEntryError",
    "CommitInfoError",
]


class BenchmarkHistoryError(ValueError):
    """Base exception for benchmark history failures."""


class SchemaError(BenchmarkHistoryError):
    """Raised when a document does not match the benchmark data schema."""

    def __init__(self, message: str, path: str = ""):
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class ExtraFormatError(BenchmarkHistoryError):
    """Raised when a bench ``extra`` string cannot be decoded."""


class DataFileFormatError(BenchmarkHistoryError):
    """Raised when a data file is neither a data.js script nor JSON."""


class ExtractorError(BenchmarkHistoryError):
    """Raised when benchmark tool output cannot be turned into benches."""


class DuplicateEntryError(BenchmarkHistoryError):
    """Raised when a commit already has an entry in a suite."""


class OutOfOrderEntryError(BenchmarkHistoryError):
    """Raised when an entry is older than the newest entry of its suite."""


class CommitInfoError(BenchmarkHistoryError):
    """Raised when commit metadata cannot be collected."""
