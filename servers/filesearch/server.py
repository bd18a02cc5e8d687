"""File search MCP server."""

import asyncio
import base64
import json
import logging
import os
import pathlib
import signal
import time
import uuid
from typing import Any, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_request
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from starlette.requests import Request

from core import DescriptionCatalog, TimeoutLimiter
from filesearch import SearchError, search
from filesearch.config import SearchConfig
from filesearch.models import MAX_CONTEXT_LINES
from filesearch.schemas import MAX_RESULTS_LIMIT, SearchRequestOptions, build_envelope

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

load_dotenv()


class ServerConfig:
    """Server configuration."""

    def __init__(self) -> None:
        """Initialize server configuration."""
        self.transport = os.getenv("MCP_TRANSPORT", "http").lower()
        if self.transport not in ("http", "stdio"):
            raise ValueError("Invalid option for MCP_TRANSPORT. Valid options are [http|stdio]")

        self.sse_port = int(os.getenv("MCP_SSE_PORT", "8000"))
        self.streamable_http_port = int(os.getenv("MCP_STREAMABLE_HTTP_PORT", "8080"))
        self.tool_timeout_seconds = float(os.getenv("MCP_TOOL_TIMEOUT_SECONDS", "60"))

        # Langfuse configuration (optional)
        self.langfuse_enabled = os.getenv("LANGFUSE_ENABLED", "false").lower() == "true"
        if self.langfuse_enabled:
            self.langfuse_public_key = self._get_required_env("LANGFUSE_PUBLIC_KEY")
            self.langfuse_secret_key = self._get_required_env("LANGFUSE_SECRET_KEY")
            self.langfuse_host = self._get_required_env("LANGFUSE_HOST")
        else:
            self.langfuse_public_key = ""
            self.langfuse_secret_key = ""
            self.langfuse_host = ""

    @staticmethod
    def _get_required_env(key: str) -> str:
        """Get required environment variable or raise descriptive error."""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value


class TelemetryManager:
    """Telemetry manager for Langfuse integration."""

    def __init__(self, cfg: ServerConfig) -> None:
        """Initialize telemetry manager."""
        self.cfg = cfg
        self.enabled = cfg.langfuse_enabled
        if self.enabled:
            self._setup()

    def _setup(self) -> None:
        """Export spans to Langfuse over OTLP/HTTP."""
        langfuse_auth = base64.b64encode(
            f"{self.cfg.langfuse_public_key}:{self.cfg.langfuse_secret_key}".encode()
        ).decode()

        os.environ["OTEL_EXPORTER_OTLP_HEADERS"] = f"Authorization=Basic {langfuse_auth}"
        os.environ["OTEL_EXPORTER_OTLP_ENDPOINT"] = f"{self.cfg.langfuse_host}/api/public/otel"

        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(OTLPSpanExporter()))
        trace.set_tracer_provider(provider)

    def get_tracer(self, name: str) -> trace.Tracer:
        """Get tracer instance."""
        if self.enabled:
            return trace.get_tracer(name)
        # No exporter is attached, so spans go nowhere
        return trace.get_tracer(name, tracer_provider=TracerProvider())


config = ServerConfig()
search_config = SearchConfig()
telemetry = TelemetryManager(config)
tracer = telemetry.get_tracer("filesearch-mcp")
timeout_limiter = TimeoutLimiter(config.tool_timeout_seconds)

descriptions = DescriptionCatalog(
    pathlib.Path(__file__).parent.parent.parent / "prompts" / "descriptions.yaml"
)
SEARCH_FILE_DESCRIPTION = descriptions.render(
    "tools.search_file",
    max_context=MAX_CONTEXT_LINES,
    max_results_limit=MAX_RESULTS_LIMIT,
    max_file_size=search_config.max_file_size,
    workspace_root=search_config.workspace_root,
)

server = FastMCP(name="filesearch-mcp")

_shutdown_requested = False


def signal_handler(sig: int, frame: Any) -> None:
    """Handle termination signals for graceful shutdown."""
    global _shutdown_requested
    logger.info(f"Received signal {sig}, initiating graceful shutdown...")
    _shutdown_requested = True
    raise KeyboardInterrupt


def _set_span_attributes(
    span: trace.Span,
    input_data: dict,
    output_data: dict,
    session_id: str,
) -> None:
    """Attach common Langfuse attributes to the current span."""
    if not telemetry.enabled:
        return
    try:
        span.set_attribute("langfuse.session.id", session_id)
        span.set_attribute("langfuse.tags", ["filesearch-mcp"])
        span.set_attribute("input", json.dumps(input_data))
        span.set_attribute("output", json.dumps(output_data))
    except Exception as exc:
        logger.error(f"Error setting span attributes: {exc}")


def _trace_id() -> str:
    """Trace id from the X-TRACE-ID header, or a fresh one outside HTTP transports."""
    try:
        request: Request = get_http_request()
        return str(request.headers.get("X-TRACE-ID", uuid.uuid4()))
    except RuntimeError:
        return str(uuid.uuid4())


@server.tool(name="search_file", description=SEARCH_FILE_DESCRIPTION)
async def search_file(
    path: str, keyword: str, options: Optional[SearchRequestOptions] = None
) -> dict:
    """Search a file for a keyword or pattern."""
    if _shutdown_requested:
        logger.info("Shutdown in progress, declining new requests")
        raise ToolError("Server is shutting down")

    options = options or SearchRequestOptions()
    trace_id = _trace_id()

    with tracer.start_as_current_span("FileSearchMcp:search_file") as span:
        start = time.monotonic()
        try:
            matches = await timeout_limiter.run_with_limit(
                search(
                    path,
                    keyword,
                    options.to_search_options(
                        workspace_root=search_config.workspace_root,
                        max_file_size=search_config.max_file_size,
                    ),
                    stream_threshold=search_config.stream_threshold,
                    chunk_size=search_config.chunk_size,
                )
            )
        except SearchError as exc:
            logger.warning(f"Search of {path} failed: {exc.describe()}")
            raise ToolError(exc.describe()) from exc
        except asyncio.TimeoutError as exc:
            logger.warning(f"Search of {path} timed out after {config.tool_timeout_seconds}s")
            raise ToolError(
                f"timeout: search did not finish within {config.tool_timeout_seconds} seconds"
            ) from exc

        duration_ms = int((time.monotonic() - start) * 1000)
        result = build_envelope(path, keyword, matches, duration_ms)
        logger.info(f"Searched {path} for {keyword!r}: {len(matches)} matches in {duration_ms}ms")

        _set_span_attributes(
            span,
            input_data={
                "path": path,
                "keyword": keyword,
                "options": options.model_dump(by_alias=True),
            },
            output_data=result["meta"],
            session_id=trace_id,
        )
        return result


async def _run_server() -> None:
    """Run the FastMCP server on the configured transport."""
    if config.transport == "stdio":
        await server.run_async(transport="stdio")
        return

    tasks = [
        server.run_http_async(
            transport="streamable-http",
            host="0.0.0.0",
            path="/filesearch/mcp",
            port=config.streamable_http_port,
        ),
        server.run_http_async(
            transport="sse", host="0.0.0.0", path="/filesearch/sse", port=config.sse_port
        ),
    ]
    await asyncio.gather(*tasks)


def main() -> None:
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        logger.info(f"Starting File Search MCP server ({config.transport} transport)...")
        asyncio.run(_run_server())
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    except Exception as exc:
        logger.error(f"Server error: {exc}")
        raise
    finally:
        logger.info("Server has shut down.")


if __name__ == "__main__":
    main()
