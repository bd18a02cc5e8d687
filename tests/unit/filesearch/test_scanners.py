"""Tests for the in-memory and streaming scanners."""

import asyncio
import re

import pytest

from filesearch import scanners
from filesearch.errors import ScanIOError
from filesearch.scanners import (
    DEFAULT_WINDOW_LINES,
    LineSplitter,
    LineWindow,
    StreamScan,
    scan_in_memory,
    scan_streaming,
    split_lines,
)


def _pairs(matches):
    return [(m.line, m.text, m.pre, m.post) for m in matches]


class TestSplitLines:
    """Tests for split_lines."""

    def test_crlf_and_lf(self):
        assert split_lines("a\r\nb\nc") == ["a", "b", "c"]

    def test_terminating_newline_adds_no_line(self):
        assert split_lines("a\nb\n") == ["a", "b"]
        assert split_lines("a\n\n") == ["a", ""]

    def test_empty_text_has_no_lines(self):
        assert split_lines("") == []


class TestLineSplitter:
    """Tests for incremental line splitting."""

    def test_carries_partial_line_across_pushes(self):
        splitter = LineSplitter()
        assert splitter.push("ab") == []
        assert splitter.push("cd") == []
        assert splitter.push("e\nf\ng") == ["abcde", "f"]
        assert splitter.finish() == "g"

    def test_crlf_split_between_pushes(self):
        splitter = LineSplitter()
        assert splitter.push("one\r") == []
        assert splitter.push("\ntwo\r") == ["one"]
        assert splitter.push("\n") == ["two"]
        assert splitter.finish() == ""

    def test_lone_carriage_return_is_kept(self):
        splitter = LineSplitter()
        assert splitter.push("a\r") == []
        assert splitter.push("b\n") == ["a\rb"]

    def test_empty_push(self):
        splitter = LineSplitter()
        assert splitter.push("") == []
        assert splitter.finish() == ""


class TestLineWindow:
    """Tests for the sliding line window."""

    def test_evicts_oldest_lines(self):
        window = LineWindow(capacity=3)
        for i in range(1, 6):
            window.append(f"l{i}")
        assert len(window) == 3
        assert window.first_line == 3
        assert window.span(1, 10) == ["l3", "l4", "l5"]
        with pytest.raises(IndexError):
            window.get(2)

    def test_compaction_keeps_addressing_stable(self):
        window = LineWindow(capacity=4)
        for i in range(1, 101):
            window.append(f"l{i}")
            assert window.get(i) == f"l{i}"
        assert window.span(97, 101) == ["l97", "l98", "l99", "l100"]
        assert len(window._lines) <= 2 * window.capacity

    def test_span_clips_to_window(self):
        window = LineWindow(capacity=10)
        for i in range(1, 4):
            window.append(f"l{i}")
        assert window.span(-5, 2) == ["l1"]
        assert window.span(3, 99) == ["l3"]
        assert window.span(4, 9) == []


class TestStreamScan:
    """Tests for streaming match bookkeeping."""

    def test_window_size(self):
        pattern = re.compile("x")
        assert StreamScan(pattern, 0, 10).window.capacity == DEFAULT_WINDOW_LINES
        assert StreamScan(pattern, 3, 10).window.capacity == 7

    def test_match_held_until_trailing_context_read(self):
        scan = StreamScan(re.compile("hit"), context=2, max_results=10)
        scan.feed("a")
        scan.feed("hit")
        scan.feed("b")
        assert scan.matches == []
        scan.feed("c")
        assert _pairs(scan.matches) == [(2, "hit", ["a"], ["b", "c"])]

    def test_reports_done_once_limit_context_complete(self):
        scan = StreamScan(re.compile("hit"), context=1, max_results=1)
        assert scan.feed("hit") is False
        assert scan.feed("hit again") is True
        assert _pairs(scan.finish()) == [(1, "hit", None, ["hit again"])]


class TestScanners:
    """Tests comparing both scanning strategies on the same files."""

    @pytest.mark.asyncio
    async def test_in_memory_context(self, write_lines):
        path = write_lines(["l1", "l2", "l3", "l4 keyword", "l5", "l6", "l7"])
        matches = await scan_in_memory(path, re.compile("keyword"), context=2)
        assert _pairs(matches) == [(4, "l4 keyword", ["l2", "l3"], ["l5", "l6"])]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chunk_size", [1, 3, 7, 64 * 1024])
    async def test_streaming_matches_in_memory(self, write_lines, chunk_size):
        """Chunk boundaries never change the result."""
        lines = [f"line {i} {'keyword' if i % 7 == 0 else 'filler'}" for i in range(1, 200)]
        path = write_lines(lines, trailing_newline=True)
        pattern = re.compile("keyword")

        expected = await scan_in_memory(path, pattern, context=3)
        actual = await scan_streaming(path, pattern, context=3, chunk_size=chunk_size)

        assert _pairs(actual) == _pairs(expected)
        assert len(actual) == 28

    @pytest.mark.asyncio
    @pytest.mark.parametrize("context", [0, 1, 5])
    async def test_streaming_max_results_keeps_trailing_context(self, write_lines, context):
        """At the result cap both strategies return the same matches, post context included."""
        path = write_lines([f"keyword {i}" for i in range(1, 101)])
        pattern = re.compile("keyword")

        expected = await scan_in_memory(path, pattern, context=context, max_results=10)
        actual = await scan_streaming(path, pattern, context=context, max_results=10, chunk_size=16)

        assert [m.line for m in actual] == list(range(1, 11))
        assert _pairs(actual) == _pairs(expected)
        if context:
            assert actual[-1].post == [f"keyword {i}" for i in range(11, 11 + context)]

    @pytest.mark.asyncio
    async def test_streaming_stops_reading_after_cap(self, tmp_path, monkeypatch):
        """No reads are issued once the cap and its trailing context are satisfied."""
        path = tmp_path / "many.txt"
        path.write_text("keyword\n" * 10000)

        reads = []
        real_to_thread = asyncio.to_thread

        async def counting_to_thread(func, *args):
            reads.append(args)
            return await real_to_thread(func, *args)

        monkeypatch.setattr("filesearch.scanners.asyncio.to_thread", counting_to_thread)

        # the first 64-byte chunk holds 8 lines: 5 matches plus 2 lines of trailing context
        matches = await scan_streaming(
            str(path), re.compile("keyword"), context=2, max_results=5, chunk_size=64
        )
        assert [m.line for m in matches] == [1, 2, 3, 4, 5]
        assert matches[-1].post == ["keyword", "keyword"]
        assert len(reads) == 1

    @pytest.mark.asyncio
    async def test_streaming_evicts_far_matches_with_full_context(self, write_lines):
        """Matches that scroll out of the window keep their pre and post context."""
        lines = ["x"] * 50
        lines[9] = "hit one"
        lines[30] = "hit two"
        path = write_lines(lines)

        matches = await scan_streaming(path, re.compile("hit"), context=2, chunk_size=5)
        assert _pairs(matches) == [
            (10, "hit one", ["x", "x"], ["x", "x"]),
            (31, "hit two", ["x", "x"], ["x", "x"]),
        ]

    @pytest.mark.asyncio
    async def test_context_clipped_at_file_edges(self, write_lines):
        path = write_lines(["hit", "a", "hit"])
        for scanner in (scan_in_memory, scan_streaming):
            matches = await scanner(path, re.compile("hit"), context=5)
            assert _pairs(matches) == [
                (1, "hit", None, ["a", "hit"]),
                (3, "hit", ["hit", "a"], None),
            ]

    @pytest.mark.asyncio
    async def test_final_line_without_newline(self, write_lines):
        path = write_lines(["a", "b", "last keyword"])
        matches = await scan_streaming(path, re.compile("keyword"), chunk_size=4)
        assert _pairs(matches) == [(3, "last keyword", None, None)]

    @pytest.mark.asyncio
    async def test_crlf_split_across_chunks(self, tmp_path):
        path = tmp_path / "crlf.txt"
        path.write_bytes(b"ab\r\ncd keyword\r\nef\r\n")
        pattern = re.compile("keyword")
        for chunk_size in (1, 2, 3):
            matches = await scan_streaming(str(path), pattern, context=1, chunk_size=chunk_size)
            assert _pairs(matches) == [(2, "cd keyword", ["ab"], ["ef"])]

    @pytest.mark.asyncio
    async def test_multibyte_characters_split_across_chunks(self, tmp_path):
        path = tmp_path / "utf8.txt"
        path.write_bytes("héllo\nnaïve keyword ✓\n".encode("utf-8"))
        matches = await scan_streaming(str(path), re.compile("keyword"), chunk_size=1)
        assert _pairs(matches) == [(2, "naïve keyword ✓", None, None)]

    @pytest.mark.asyncio
    async def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_bytes(b"")
        pattern = re.compile(".*")
        assert await scan_in_memory(str(path), pattern) == []
        assert await scan_streaming(str(path), pattern) == []

    @pytest.mark.asyncio
    async def test_long_line_is_split_in_linear_time(self, tmp_path, monkeypatch):
        """A line spanning many chunks is scanned for line breaks only once."""
        content = "x" * 200_000 + " keyword\n"
        path = tmp_path / "minified.json"
        path.write_text(content)

        scanned = []
        real_pattern = scanners._LINE_BREAK

        class CountingPattern:
            def split(self, text):
                scanned.append(len(text))
                return real_pattern.split(text)

        monkeypatch.setattr(scanners, "_LINE_BREAK", CountingPattern())

        matches = await scan_streaming(str(path), re.compile("keyword"), chunk_size=1024)
        assert [m.line for m in matches] == [1]
        assert sum(scanned) == len(content)

    @pytest.mark.asyncio
    async def test_read_failure_mid_stream_is_scan_io_error(self, write_lines, monkeypatch):
        """A failed read after some progress raises instead of returning partial matches."""
        path = write_lines([f"keyword {i}" for i in range(1, 50)])

        reads = []
        real_to_thread = asyncio.to_thread

        async def failing_to_thread(func, *args):
            reads.append(args)
            if len(reads) == 3:
                raise OSError(5, "Input/output error")
            return await real_to_thread(func, *args)

        monkeypatch.setattr("filesearch.scanners.asyncio.to_thread", failing_to_thread)

        with pytest.raises(ScanIOError, match="Error reading file"):
            await scan_streaming(path, re.compile("keyword"), chunk_size=16)
        assert len(reads) == 3

    @pytest.mark.asyncio
    async def test_read_failure_is_scan_io_error(self, tmp_path):
        missing = str(tmp_path / "gone.txt")
        with pytest.raises(ScanIOError):
            await scan_in_memory(missing, re.compile("x"))
        with pytest.raises(ScanIOError):
            await scan_streaming(missing, re.compile("x"))
