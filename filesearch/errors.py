"""Errors raised by the file search engine.

Every failure carries a stable ``kind`` so that front ends can translate it
into their own exit codes or status codes.
"""


class SearchError(Exception):
    """Base class for all search failures."""

    kind = "error"

    def __init__(self, message: str) -> None:
        """Initialize the error.

        Args:
            message: Human readable detail
        """
        super().__init__(message)
        self.message = message

    def describe(self) -> str:
        """Return ``"<kind>: <detail>"``."""
        return f"{self.kind}: {self.message}"


class InvalidInputError(SearchError):
    kind = "invalid_input"


class KeywordTooLongError(InvalidInputError):
    kind = "too_long"


class AccessDeniedError(SearchError):
    kind = "access_denied"


class PathNotFoundError(SearchError):
    kind = "not_found"


class PermissionDeniedError(SearchError):
    kind = "permission_denied"


class FileAccessError(SearchError):
    kind = "access_error"


class NotAFileError(SearchError):
    kind = "not_a_file"


class FileTooLargeError(SearchError):
    kind = "too_large"


class BinaryFileError(SearchError):
    kind = "binary_content"


class InvalidPatternError(SearchError):
    kind = "invalid_pattern"


class ScanIOError(SearchError):
    kind = "io_error"
