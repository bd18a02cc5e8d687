"""Client for the HTTP search endpoint."""

from typing import List, Optional

import requests

from filesearch.errors import SearchError
from filesearch.models import Match, SearchOptions


class RemoteSearchError(SearchError):
    """Failure reported by a remote search server."""

    kind = "remote_error"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        """Initialize remote error.

        Args:
            message: Error text returned by the server
            status_code: HTTP status of the response, if one was received
        """
        super().__init__(message)
        self.status_code = status_code


class HttpSearchClient:
    """Calls ``POST /search`` on a running HTTP front end."""

    def __init__(self, base_url: str, timeout: float = 30) -> None:
        """Initialize HTTP search client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:3000``
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def search(
        self, path: str, keyword: str, options: Optional[SearchOptions] = None
    ) -> List[Match]:
        """Search a file on the server.

        The server applies its own workspace root and file size limit, so
        those two options are not sent.

        Raises:
            RemoteSearchError: If the request fails or the server reports an error
        """
        options = options or SearchOptions()
        payload = {
            "path": path,
            "keyword": keyword,
            "options": {
                "regex": options.regex,
                "insensitive": options.insensitive,
                "context": options.context,
                "maxResults": options.max_results,
            },
        }

        try:
            response = requests.post(
                f"{self.base_url}/search", json=payload, timeout=self.timeout
            )
        except requests.exceptions.RequestException as exc:
            raise RemoteSearchError(f"Request to {self.base_url} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = body.get("error") or f"HTTP {response.status_code}"
            raise RemoteSearchError(message, status_code=response.status_code)

        return [
            Match(
                line=item["line"],
                text=item["text"],
                pre=item.get("pre"),
                post=item.get("post"),
            )
            for item in body.get("matches", [])
        ]
