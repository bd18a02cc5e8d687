"""HTTP front end for file search."""

import asyncio
import logging
import os
import time
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from core import DescriptionCatalog, RequestSizeLimiter, TimeoutLimiter
from filesearch import SearchError, search
from filesearch.config import SearchConfig
from filesearch.schemas import SearchRequest, build_envelope, error_body

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

load_dotenv()

# not_a_file and binary_content count as input validation failures
STATUS_BY_KIND = {
    "invalid_input": 400,
    "invalid_pattern": 400,
    "not_a_file": 400,
    "binary_content": 400,
    "access_denied": 403,
    "permission_denied": 403,
    "not_found": 404,
    "too_large": 413,
    "too_long": 413,
}


class FrontendConfig:
    """Configuration for the HTTP front end."""

    def __init__(self) -> None:
        """Initialize front end configuration from environment variables."""
        self.port = int(os.getenv("FRONTEND_PORT", "3000"))
        self.max_request_bytes = int(os.getenv("MAX_REQUEST_BYTES", "102400"))
        self.request_timeout_seconds = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))


def status_for(error: SearchError) -> int:
    """Map a search error kind to an HTTP status code."""
    return STATUS_BY_KIND.get(error.kind, 500)


def create_app(
    frontend_config: FrontendConfig = None, search_config: SearchConfig = None
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        frontend_config: HTTP limits; read from the environment when omitted
        search_config: Search limits and workspace root; read from the environment when omitted
    """
    frontend_config = frontend_config or FrontendConfig()
    search_config = search_config or SearchConfig()
    size_limiter = RequestSizeLimiter(frontend_config.max_request_bytes)
    timeout_limiter = TimeoutLimiter(frontend_config.request_timeout_seconds)

    descriptions = DescriptionCatalog(
        Path(__file__).parent.parent / "prompts" / "descriptions.yaml"
    )

    app = FastAPI(title="File Search")

    @app.get("/health", description=descriptions.render("endpoints.health"))
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    @app.post(
        "/search",
        description=descriptions.render(
            "endpoints.search",
            max_request_bytes=frontend_config.max_request_bytes,
            timeout_seconds=frontend_config.request_timeout_seconds,
        ),
    )
    async def search_endpoint(request: Request):
        """Search a file for a keyword or pattern."""
        if not size_limiter.allows_declared(request.headers.get("content-length")):
            return JSONResponse(status_code=413, content=error_body("Request body too large"))

        body = await request.body()
        if not size_limiter.allows(body):
            return JSONResponse(status_code=413, content=error_body("Request body too large"))

        try:
            payload = SearchRequest.model_validate_json(body)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
                for err in e.errors()
            )
            return JSONResponse(status_code=400, content=error_body(f"Invalid request: {errors}"))

        options = payload.options.to_search_options(
            workspace_root=search_config.workspace_root,
            max_file_size=search_config.max_file_size,
        )

        start = time.monotonic()
        try:
            matches = await timeout_limiter.run_with_limit(
                search(
                    payload.path,
                    payload.keyword,
                    options,
                    stream_threshold=search_config.stream_threshold,
                    chunk_size=search_config.chunk_size,
                )
            )
        except SearchError as e:
            logger.warning(f"Search of {payload.path} failed: {e.describe()}")
            return JSONResponse(status_code=status_for(e), content=error_body(str(e)))
        except asyncio.TimeoutError:
            logger.warning(f"Search of {payload.path} timed out")
            return JSONResponse(
                status_code=504,
                content=error_body(
                    f"Search timed out after {frontend_config.request_timeout_seconds} seconds"
                ),
            )
        except Exception as e:
            logger.error(f"Unexpected error searching {payload.path}: {e}")
            return JSONResponse(status_code=500, content=error_body(str(e)))

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(f"Searched {payload.path}: {len(matches)} matches in {duration_ms}ms")
        return build_envelope(payload.path, payload.keyword, matches, duration_ms)

    return app


app = create_app()


def main() -> None:
    """Main entry point."""
    import uvicorn

    port = FrontendConfig().port
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
