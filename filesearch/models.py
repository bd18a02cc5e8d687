"""Models for file search requests and results."""

from dataclasses import dataclass
from typing import List, Optional

DEFAULT_MAX_RESULTS = 1000
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024
MAX_CONTEXT_LINES = 100


@dataclass
class Match:
    """Represents a matching line and its surrounding context."""

    line: int
    text: str
    pre: Optional[List[str]] = None
    post: Optional[List[str]] = None

    def to_dict(self) -> dict:
        """Serialize the match, leaving out empty context."""
        data = {"line": self.line, "text": self.text}
        if self.pre:
            data["pre"] = list(self.pre)
        if self.post:
            data["post"] = list(self.post)
        return data


@dataclass
class SearchOptions:
    """Options for a single search call."""

    regex: bool = False
    insensitive: bool = False
    context: int = 0
    max_results: int = DEFAULT_MAX_RESULTS
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    workspace_root: Optional[str] = None

    @property
    def effective_context(self) -> int:
        """Context size after applying the hard cap."""
        return min(self.context, MAX_CONTEXT_LINES)
