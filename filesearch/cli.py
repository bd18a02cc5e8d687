"""Command-line entry point for file search."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from filesearch.client import HttpSearchClient
from filesearch.config import SearchConfig
from filesearch.engine import search
from filesearch.errors import SearchError
from filesearch.models import Match, SearchOptions

logger = logging.getLogger(__name__)

EXIT_SEARCH_ERROR = 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="filesearch",
        description="Search a file for a keyword or pattern and print matching lines.",
    )
    parser.add_argument("file", help="file to search")
    parser.add_argument("keyword", help="keyword, or regular expression with --regex")
    parser.add_argument("-r", "--regex", action="store_true", help="treat keyword as a regex")
    parser.add_argument(
        "-i", "--insensitive", action="store_true", help="case-insensitive matching"
    )
    parser.add_argument(
        "-c", "--context", type=int, default=0, metavar="N", help="lines of context (max 100)"
    )
    parser.add_argument(
        "-m", "--max", dest="max_results", type=int, default=1000, metavar="N",
        help="maximum number of matches",
    )
    parser.add_argument(
        "--max-file-size", type=int, default=None, metavar="BYTES",
        help="refuse files larger than this",
    )
    parser.add_argument(
        "--workspace-root", default=None, metavar="DIR",
        help="refuse paths outside this directory",
    )
    parser.add_argument(
        "--url", default=None, help="search through a running HTTP server instead of locally"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def format_matches(matches: List[Match]) -> List[str]:
    """Render matches as ``"<line>: <text>"`` lines."""
    if not matches:
        return ["No matches found."]
    return [f"{match.line}: {match.text}" for match in matches]


async def _run(args: argparse.Namespace) -> List[Match]:
    config = SearchConfig()
    options = SearchOptions(
        regex=args.regex,
        insensitive=args.insensitive,
        context=args.context,
        max_results=args.max_results,
        max_file_size=(
            config.max_file_size if args.max_file_size is None else args.max_file_size
        ),
        workspace_root=args.workspace_root,
    )

    if args.url:
        client = HttpSearchClient(args.url)
        return await asyncio.to_thread(client.search, args.file, args.keyword, options)

    return await search(
        args.file,
        args.keyword,
        options,
        stream_threshold=config.stream_threshold,
        chunk_size=config.chunk_size,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        matches = asyncio.run(_run(args))
    except SearchError as exc:
        logger.debug(f"Search failed with {exc.kind}", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_SEARCH_ERROR

    for line in format_matches(matches):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
