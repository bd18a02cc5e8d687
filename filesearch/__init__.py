"""Bounded-memory keyword and pattern search over a single text file."""

from .engine import search, search_sync
from .errors import (
    AccessDeniedError,
    BinaryFileError,
    FileAccessError,
    FileTooLargeError,
    InvalidInputError,
    InvalidPatternError,
    KeywordTooLongError,
    NotAFileError,
    PathNotFoundError,
    PermissionDeniedError,
    ScanIOError,
    SearchError,
)
from .models import Match, SearchOptions

__all__ = [
    "search",
    "search_sync",
    "Match",
    "SearchOptions",
    "SearchError",
    "InvalidInputError",
    "KeywordTooLongError",
    "AccessDeniedError",
    "PathNotFoundError",
    "PermissionDeniedError",
    "FileAccessError",
    "NotAFileError",
    "FileTooLargeError",
    "BinaryFileError",
    "InvalidPatternError",
    "ScanIOError",
]
