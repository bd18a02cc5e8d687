"""Request and response schemas shared by the MCP tool and the HTTP endpoint."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from filesearch.models import MAX_CONTEXT_LINES, Match, SearchOptions

MAX_RESULTS_LIMIT = 100000


class SearchRequestOptions(BaseModel):
    """Search options accepted from remote callers."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    regex: bool = Field(default=False, description="treat the keyword as a regular expression")
    insensitive: bool = Field(default=False, description="case-insensitive matching")
    context: int = Field(
        default=0,
        ge=0,
        le=MAX_CONTEXT_LINES,
        description="lines of context before and after each match",
    )
    max_results: int = Field(
        default=1000,
        ge=1,
        le=MAX_RESULTS_LIMIT,
        alias="maxResults",
        description="maximum number of matches to return",
    )

    def to_search_options(self, workspace_root: str, max_file_size: int) -> SearchOptions:
        """Combine caller options with server-side limits."""
        return SearchOptions(
            regex=self.regex,
            insensitive=self.insensitive,
            context=self.context,
            max_results=self.max_results,
            max_file_size=max_file_size,
            workspace_root=workspace_root,
        )


class SearchRequest(BaseModel):
    """Body of ``POST /search``."""

    model_config = ConfigDict(extra="forbid")

    path: str = Field(..., min_length=1, description="file to search")
    keyword: str = Field(..., min_length=1, description="keyword or pattern")
    options: SearchRequestOptions = Field(default_factory=SearchRequestOptions)


def build_envelope(path: str, keyword: str, matches: List[Match], duration_ms: int) -> dict:
    """Build the ``{matches, meta}`` response payload."""
    return {
        "matches": [match.to_dict() for match in matches],
        "meta": {
            "path": path,
            "keyword": keyword,
            "count": len(matches),
            "durationMs": duration_ms,
        },
    }


def error_body(message: Optional[str]) -> dict:
    return {"error": message or "Unknown error"}
