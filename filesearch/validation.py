"""Path sandboxing and file classification."""

import errno
import logging
import os
import stat
from typing import Optional, Tuple

from filesearch.errors import (
    AccessDeniedError,
    BinaryFileError,
    FileAccessError,
    FileTooLargeError,
    InvalidInputError,
    NotAFileError,
    PathNotFoundError,
    PermissionDeniedError,
)

logger = logging.getLogger(__name__)

BINARY_SAMPLE_SIZE = 512
NON_PRINTABLE_RATIO = 0.3
# tab, LF, CR
_TEXT_CONTROL_BYTES = frozenset((9, 10, 13))


def resolve_path(file_path: str, workspace_root: Optional[str] = None) -> str:
    """Resolve a path to an absolute, normalized form.

    Relative paths are resolved against ``workspace_root`` when one is given,
    otherwise against the current directory. Symlinks are followed, so a link
    pointing out of the workspace is refused like any other outside path.

    Args:
        file_path: Raw path supplied by the caller
        workspace_root: Optional directory the path must stay inside

    Returns:
        The resolved absolute path

    Raises:
        InvalidInputError: If the path is empty or not a string
        AccessDeniedError: If the path resolves outside the workspace root
    """
    if not file_path or not isinstance(file_path, str):
        raise InvalidInputError("Invalid file path")
    if "\x00" in file_path:
        raise InvalidInputError("Invalid file path: embedded null byte")

    root = os.path.realpath(workspace_root) if workspace_root else None
    base = root or os.getcwd()
    resolved = os.path.realpath(os.path.join(base, file_path))

    if root is not None and not _is_within(resolved, root):
        logger.warning(f"Refusing path outside workspace root: {file_path}")
        raise AccessDeniedError("Access denied: Path must be within workspace root")

    return resolved


def _is_within(path: str, root: str) -> bool:
    try:
        return os.path.commonpath([path, root]) == root
    except ValueError:
        # different drives
        return False


def is_binary_file(file_path: str) -> bool:
    """Check whether a file looks binary by sampling its first bytes.

    A file is binary if the sample holds a null byte or if more than 30% of
    it is non-printable control characters. Read failures count as text;
    the scan that follows reports them properly.
    """
    try:
        with open(file_path, "rb") as handle:
            sample = handle.read(BINARY_SAMPLE_SIZE)
    except OSError as exc:
        logger.debug(f"Binary sniff failed for {file_path}: {exc}")
        return False

    if not sample:
        return False
    if b"\x00" in sample:
        return True

    non_printable = sum(1 for b in sample if b < 32 and b not in _TEXT_CONTROL_BYTES)
    return non_printable / len(sample) > NON_PRINTABLE_RATIO


def classify_file(resolved_path: str, display_path: str, max_file_size: int) -> Tuple[str, int]:
    """Validate that a resolved path is a searchable text file.

    Args:
        resolved_path: Absolute path returned by ``resolve_path``
        display_path: Path as the caller supplied it, used in messages
        max_file_size: Largest accepted size in bytes

    Returns:
        Tuple of (resolved path, size in bytes)

    Raises:
        PathNotFoundError: If the file does not exist
        PermissionDeniedError: If the file cannot be stat'ed for lack of permission
        FileAccessError: On any other stat failure
        NotAFileError: If the path is not a regular file
        FileTooLargeError: If the file exceeds ``max_file_size``
        BinaryFileError: If the file content looks binary
    """
    try:
        st = os.stat(resolved_path)
    except FileNotFoundError as exc:
        raise PathNotFoundError(f"File not found: {display_path}") from exc
    except PermissionError as exc:
        raise PermissionDeniedError(f"Permission denied: {display_path}") from exc
    except OSError as exc:
        if exc.errno == errno.ENOTDIR:
            raise PathNotFoundError(f"File not found: {display_path}") from exc
        raise FileAccessError(f"Cannot access file: {exc}") from exc

    if not stat.S_ISREG(st.st_mode):
        raise NotAFileError(f"Path is not a file: {display_path}")

    if st.st_size > max_file_size:
        raise FileTooLargeError(
            f"File too large: {st.st_size} bytes (max: {max_file_size} bytes)"
        )

    if is_binary_file(resolved_path):
        raise BinaryFileError(f"Cannot search binary file: {display_path}")

    return resolved_path, st.st_size
