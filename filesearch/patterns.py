"""Keyword validation and pattern compilation."""

import re
from typing import Pattern

from filesearch.errors import InvalidInputError, InvalidPatternError, KeywordTooLongError

MAX_KEYWORD_LENGTH = 1000


def validate_keyword(keyword: str) -> str:
    """Check that the keyword is a non-empty string within the length bound."""
    if not isinstance(keyword, str) or not keyword:
        raise InvalidInputError("keyword must be a non-empty string")
    if len(keyword) > MAX_KEYWORD_LENGTH:
        raise KeywordTooLongError(
            f"keyword too long: {len(keyword)} characters (max: {MAX_KEYWORD_LENGTH})"
        )
    return keyword


def compile_pattern(keyword: str, regex: bool = False, insensitive: bool = False) -> Pattern[str]:
    """Build the matcher for a search.

    In literal mode every regex metacharacter in the keyword is escaped, so
    the pattern matches the keyword as a plain substring. Case sensitivity is
    controlled only by ``insensitive`` in both modes.

    Args:
        keyword: Search keyword or regular expression
        regex: Treat the keyword as a regular expression
        insensitive: Match case-insensitively

    Returns:
        Compiled pattern

    Raises:
        InvalidPatternError: If ``regex`` is set and the keyword does not compile
    """
    validate_keyword(keyword)
    flags = re.IGNORECASE if insensitive else 0

    if not regex:
        return re.compile(re.escape(keyword), flags)

    try:
        return re.compile(keyword, flags)
    except re.error as exc:
        raise InvalidPatternError(f"Invalid regex pattern: {exc}") from exc
