"""Line scanners: whole-file for small inputs, sliding-window streaming for large ones.

Both scanners return the same matches for the same content. The streaming
scanner emits a match only once its trailing context has been read, and when
``max_results`` is reached it stops matching but keeps reading until the
trailing context of the last match is complete, then stops issuing reads.
"""

import asyncio
import codecs
import logging
import re
from collections import deque
from typing import Deque, List, Pattern, Sequence

from filesearch.errors import ScanIOError
from filesearch.models import DEFAULT_MAX_RESULTS, Match

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
DEFAULT_WINDOW_LINES = 1000

_LINE_BREAK = re.compile(r"\r?\n")


def make_match(line_number: int, text: str, pre: Sequence[str], post: Sequence[str]) -> Match:
    """Build a match, dropping empty context lists."""
    return Match(line=line_number, text=text, pre=list(pre) or None, post=list(post) or None)


def split_lines(text: str) -> List[str]:
    """Split text on ``\\r?\\n``; a terminating newline does not start another line."""
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


def _read_bytes(file_path: str) -> bytes:
    with open(file_path, "rb") as handle:
        return handle.read()


async def scan_in_memory(
    file_path: str,
    pattern: Pattern[str],
    context: int = 0,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> List[Match]:
    """Search a file that is read into memory in one go.

    Args:
        file_path: Validated absolute path
        pattern: Compiled search pattern
        context: Lines of context before and after each match
        max_results: Stop after this many matches

    Returns:
        Matches in line order

    Raises:
        ScanIOError: If the file cannot be read
    """
    try:
        raw = await asyncio.to_thread(_read_bytes, file_path)
    except OSError as exc:
        raise ScanIOError(f"Error reading file: {exc}") from exc

    lines = split_lines(raw.decode("utf-8", errors="replace"))
    matches: List[Match] = []

    for index, text in enumerate(lines):
        if not pattern.search(text):
            continue
        matches.append(
            make_match(
                index + 1,
                text,
                lines[max(0, index - context):index],
                lines[index + 1:index + 1 + context],
            )
        )
        if len(matches) >= max_results:
            break

    return matches


class LineWindow:
    """Sliding window over the most recently read lines.

    Lines are addressed by absolute line number. Evicted lines stay in the
    backing list until ``capacity`` of them have piled up and are then
    dropped with a single slice deletion, so eviction is amortized O(1) per
    line and the backing list never holds more than ``2 * capacity`` lines.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.first_line = 1
        self.last_line = 0
        self._lines: List[str] = []
        self._base = 0

    def __len__(self) -> int:
        return self.last_line - self.first_line + 1

    def append(self, text: str) -> None:
        self._lines.append(text)
        self.last_line += 1
        if len(self) > self.capacity:
            self.first_line += 1
            self._base += 1
            if self._base >= self.capacity:
                del self._lines[:self._base]
                self._base = 0

    def get(self, line_number: int) -> str:
        if not self.first_line <= line_number <= self.last_line:
            raise IndexError(f"line {line_number} is not in the window")
        return self._lines[self._base + line_number - self.first_line]

    def span(self, start: int, stop: int) -> List[str]:
        """Lines numbered ``start`` up to ``stop`` (exclusive), clipped to the window."""
        start = max(start, self.first_line)
        stop = min(stop, self.last_line + 1)
        if start >= stop:
            return []
        offset = self._base - self.first_line
        return self._lines[offset + start:offset + stop]


class LineSplitter:
    """Split incrementally decoded text into lines.

    The unterminated tail is kept as a list of pieces and joined only once a
    line break arrives, so each character is scanned once however many
    chunks a line spans.
    """

    def __init__(self) -> None:
        self._carry: List[str] = []

    def push(self, text: str) -> List[str]:
        """Add decoded text and return the lines it completes."""
        if not text:
            return []
        if text[0] == "\n" and self._carry and self._carry[-1].endswith("\r"):
            # CRLF split across two chunks
            self._carry[-1] = self._carry[-1][:-1]

        parts = _LINE_BREAK.split(text)
        if len(parts) == 1:
            self._carry.append(text)
            return []

        self._carry.append(parts[0])
        lines = ["".join(self._carry)]
        lines.extend(parts[1:-1])
        self._carry = [parts[-1]] if parts[-1] else []
        return lines

    def finish(self) -> str:
        """Return the unterminated final line, or an empty string."""
        tail = "".join(self._carry)
        self._carry = []
        return tail


class StreamScan:
    """Match bookkeeping for one streaming scan."""

    def __init__(self, pattern: Pattern[str], context: int, max_results: int) -> None:
        self.pattern = pattern
        self.context = context
        self.max_results = max_results
        self.window = LineWindow(2 * context + 1 if context > 0 else DEFAULT_WINDOW_LINES)
        self.pending: Deque[int] = deque()
        self.matches: List[Match] = []
        self.match_count = 0
        self.limit_reached = False

    def feed(self, text: str) -> bool:
        """Process one completed line.

        Returns:
            True once no further input is needed
        """
        self.window.append(text)
        line_number = self.window.last_line

        if not self.limit_reached and self.pattern.search(text):
            self.pending.append(line_number)
            self.match_count += 1
            if self.match_count >= self.max_results:
                self.limit_reached = True

        self._flush(line_number - self.context)
        return self.limit_reached and not self.pending

    def finish(self) -> List[Match]:
        """Flush every pending match with whatever trailing context exists."""
        self._flush(self.window.last_line)
        return self.matches

    def _flush(self, upto: int) -> None:
        context = self.context
        while self.pending and self.pending[0] <= upto:
            line_number = self.pending.popleft()
            self.matches.append(
                make_match(
                    line_number,
                    self.window.get(line_number),
                    self.window.span(line_number - context, line_number),
                    self.window.span(line_number + 1, line_number + 1 + context),
                )
            )


async def scan_streaming(
    file_path: str,
    pattern: Pattern[str],
    context: int = 0,
    max_results: int = DEFAULT_MAX_RESULTS,
    chunk_size: int = CHUNK_SIZE,
) -> List[Match]:
    """Search a file chunk by chunk while holding only a bounded window of lines.

    Args:
        file_path: Validated absolute path
        pattern: Compiled search pattern
        context: Lines of context before and after each match
        max_results: Stop after this many matches
        chunk_size: Bytes per read

    Returns:
        Matches in line order

    Raises:
        ScanIOError: If reading fails part way through
    """
    scan = StreamScan(pattern, context, max_results)
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    splitter = LineSplitter()

    try:
        with open(file_path, "rb") as handle:
            while True:
                chunk = await asyncio.to_thread(handle.read, chunk_size)
                final = not chunk

                for text in splitter.push(decoder.decode(chunk, final=final)):
                    if scan.feed(text):
                        logger.debug(
                            f"Stopped reading {file_path} at line {scan.window.last_line} "
                            f"after {scan.match_count} matches"
                        )
                        return scan.finish()

                if final:
                    break
    except OSError as exc:
        raise ScanIOError(f"Error reading file: {exc}") from exc

    remaining = splitter.finish()
    if remaining:
        scan.feed(remaining)
    return scan.finish()
