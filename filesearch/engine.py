"""Search entry point: validates the request and picks a scanning strategy."""

import asyncio
import logging
from typing import List, Optional

from filesearch.config import DEFAULT_CHUNK_SIZE, DEFAULT_STREAM_THRESHOLD
from filesearch.errors import InvalidInputError
from filesearch.models import Match, SearchOptions
from filesearch.patterns import compile_pattern, validate_keyword
from filesearch.scanners import scan_in_memory, scan_streaming
from filesearch.validation import classify_file, resolve_path

logger = logging.getLogger(__name__)


def _validate_options(options: SearchOptions) -> None:
    if not isinstance(options, SearchOptions):
        raise InvalidInputError("options must be a SearchOptions instance")
    for name in ("regex", "insensitive"):
        if not isinstance(getattr(options, name), bool):
            raise InvalidInputError(f"option {name} must be a boolean")
    for name, minimum in (("context", 0), ("max_results", 1), ("max_file_size", 1)):
        value = getattr(options, name)
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            raise InvalidInputError(f"option {name} must be an integer >= {minimum}")
    if options.workspace_root is not None and not isinstance(options.workspace_root, str):
        raise InvalidInputError("option workspace_root must be a string")


async def search(
    file_path: str,
    keyword: str,
    options: Optional[SearchOptions] = None,
    *,
    stream_threshold: int = DEFAULT_STREAM_THRESHOLD,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> List[Match]:
    """Search a file for a keyword or regular expression.

    Files larger than ``stream_threshold`` bytes are scanned as a stream with
    a bounded window of lines; smaller files are read whole.

    Args:
        file_path: Path of the file to search
        keyword: Literal keyword, or a regular expression when ``options.regex`` is set
        options: Search options; defaults are used when omitted
        stream_threshold: Size in bytes above which the streaming scanner is used
        chunk_size: Bytes per read for the streaming scanner

    Returns:
        Matches in increasing line order, at most ``options.max_results``

    Raises:
        SearchError: One of its subclasses, describing the first failed check
    """
    if options is None:
        options = SearchOptions()

    if not file_path or not isinstance(file_path, str):
        raise InvalidInputError("file path and keyword required")
    validate_keyword(keyword)
    _validate_options(options)

    resolved = resolve_path(file_path, options.workspace_root)
    _, size = classify_file(resolved, file_path, options.max_file_size)
    pattern = compile_pattern(keyword, regex=options.regex, insensitive=options.insensitive)
    context = options.effective_context

    if size > stream_threshold:
        logger.debug(f"Streaming search of {resolved} ({size} bytes)")
        return await scan_streaming(
            resolved, pattern, context, options.max_results, chunk_size=chunk_size
        )

    logger.debug(f"In-memory search of {resolved} ({size} bytes)")
    return await scan_in_memory(resolved, pattern, context, options.max_results)


def search_sync(
    file_path: str, keyword: str, options: Optional[SearchOptions] = None, **kwargs
) -> List[Match]:
    """Run ``search`` to completion from synchronous code."""
    return asyncio.run(search(file_path, keyword, options, **kwargs))
