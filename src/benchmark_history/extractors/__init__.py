"""
Extractors turning benchmark tool output into benches.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..core.errors import ExtractorError
from ..core.models import Bench

logger = logging.getLogger(__name__)

Extractor = Callable[[str], List[Bench]]


class ExtractorRegistry:
    """Maps tool labels to extractor functions."""

    def __init__(self, load_builtin: bool = True):
        self._extractors: Dict[str, Dict[str, object]] = {}
        if load_builtin:
            self._load_extractors()

    def _load_extractors(self) -> None:
        """Load and register the built-in extractors."""
        from .custom import register_custom_extractors
        from .julia import register_julia_extractors

        register_julia_extractors(self)
        register_custom_extractors(self)

    def register_extractor(
        self, tool: str, extract: Extractor, bigger_is_better: bool = False
    ) -> None:
        """Register an extractor.

        Args:
            tool: Tool label stored in each entry's ``tool`` field
            extract: Function turning raw tool output into benches
            bigger_is_better: Whether larger values of this tool are improvements
        """
        if tool in self._extractors:
            logger.debug("Replacing extractor for tool %s", tool)
        self._extractors[tool] = {
            "extract": extract,
            "bigger_is_better": bigger_is_better,
        }

    def list_tools(self) -> List[str]:
        return sorted(self._extractors)

    def get_extractor(self, tool: str) -> Extractor:
        if tool not in self._extractors:
            raise ExtractorError(
                f"Unknown tool: {tool} (known: {', '.join(self.list_tools())})"
            )
        return self._extractors[tool]["extract"]

    def is_bigger_better(self, tool: str) -> bool:
        """Whether bigger values are better; unknown tools default to smaller."""
        entry = self._extractors.get(tool)
        return bool(entry["bigger_is_better"]) if entry else False

    def extract_benches(self, tool: str, output: str) -> List[Bench]:
        """Run the extractor for ``tool`` over raw output.

        Raises:
            ExtractorError: If the tool is unknown, the output is malformed,
                or it holds no benches
        """
        benches = self.get_extractor(tool)(output)
        if not benches:
            raise ExtractorError(f"No benchmark results found in {tool} output")
        logger.debug("Extracted %d benches from %s output", len(benches), tool)
        return benches


_default_registry: Optional[ExtractorRegistry] = None


def get_registry() -> ExtractorRegistry:
    """Return the process-wide registry with the built-in extractors."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ExtractorRegistry()
    return _default_registry


def register_extractor(tool: str, extract: Extractor, bigger_is_better: bool = False) -> None:
    get_registry().register_extractor(tool, extract, bigger_is_better)


def get_extractor(tool: str) -> Extractor:
    return get_registry().get_extractor(tool)


def is_bigger_better(tool: str) -> bool:
    return get_registry().is_bigger_better(tool)


def list_tools() -> List[str]:
    return get_registry().list_tools()


def extract_benches(tool: str, output: str) -> List[Bench]:
    return get_registry().extract_benches(tool, output)


__all__ = [
    "ExtractorRegistry",
    "extract_benches",
    "get_extractor",
    "get_registry",
    "is_bigger_better",
    "list_tools",
    "register_extractor",
]
