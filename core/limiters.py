"""Request limiters for the search front ends (body size and time limits)."""

import asyncio
from typing import Any, Awaitable, Optional, TypeVar

T = TypeVar("T")


class RequestSizeLimiter:
    """Limits the size of incoming request bodies."""

    def __init__(self, max_bytes: int) -> None:
        """Initialize request size limiter.

        Args:
            max_bytes: Largest accepted request body in bytes
        """
        self.max_bytes = max_bytes

    def allows_declared(self, content_length: Optional[Any]) -> bool:
        """Check a ``Content-Length`` header value before reading the body.

        A missing or malformed header is allowed here; the body itself is
        checked with ``allows`` once read.
        """
        if content_length is None:
            return True
        try:
            return int(content_length) <= self.max_bytes
        except (TypeError, ValueError):
            return True

    def allows(self, body: bytes) -> bool:
        """Check an already-read request body."""
        return len(body) <= self.max_bytes


class TimeoutLimiter:
    """Limits how long a request may run."""

    def __init__(self, timeout_seconds: float) -> None:
        """Initialize timeout limiter.

        Args:
            timeout_seconds: Deadline applied to each call
        """
        self.timeout_seconds = timeout_seconds

    async def run_with_limit(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable``, cancelling it once the deadline passes.

        Raises:
            asyncio.TimeoutError: If the deadline is exceeded
        """
        return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
