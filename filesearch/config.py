"""Configuration for the file search engine and its front ends."""

import os

from dotenv import load_dotenv

from filesearch.models import DEFAULT_MAX_FILE_SIZE
from filesearch.scanners import CHUNK_SIZE as DEFAULT_CHUNK_SIZE

load_dotenv()

DEFAULT_STREAM_THRESHOLD = 10 * 1024 * 1024


class SearchConfig:
    """Search defaults read from environment variables."""

    def __init__(self) -> None:
        """Initialize search configuration."""
        self.max_file_size = self._get_positive_int(
            "FILESEARCH_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE
        )
        self.stream_threshold = self._get_positive_int(
            "FILESEARCH_STREAM_THRESHOLD", DEFAULT_STREAM_THRESHOLD
        )
        self.chunk_size = self._get_positive_int("FILESEARCH_CHUNK_SIZE", DEFAULT_CHUNK_SIZE)

        # Only the network front ends sandbox paths; they default to the cwd
        self.workspace_root = os.getenv("WORKSPACE_ROOT") or os.getcwd()

    @staticmethod
    def _get_positive_int(key: str, default: int) -> int:
        """Read a positive integer environment variable."""
        raw = os.getenv(key)
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got {raw!r}")
        if value <= 0:
            raise ValueError(f"Environment variable {key} must be positive, got {value}")
        return value
