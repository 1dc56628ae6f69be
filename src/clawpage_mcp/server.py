"""MCP server exposing the ClawPage extraction API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.routing import Route

from clawpage_mcp.admin import api_stats, health_check
from clawpage_mcp.core.config import HOST, JSON_RESPONSE, LOG_LEVEL, PORT
from clawpage_mcp.sessions import SessionEndpoint, SessionRegistry
from clawpage_mcp.tools import register_tools

logger = logging.getLogger(__name__)

# Seconds uvicorn waits for open streams before the session registry closes them
GRACEFUL_SHUTDOWN_SECONDS = 5

mcp = FastMCP(
    "clawpage",
    instructions=(
        "Extract web pages into structured JSON with ClawPage. "
        "Register with an email to get an API key with free daily extractions, "
        "or pay per request with x402 by retrying extract_url with tx_hash."
    ),
    log_level=LOG_LEVEL,
)

register_tools(mcp)


def create_http_app(json_response: bool = JSON_RESPONSE) -> Starlette:
    """Build the Starlette app serving the session-based /mcp endpoint.

    Args:
        json_response: Answer POSTs with JSON bodies instead of SSE streams

    Returns:
        Starlette application whose lifespan owns the session registry
    """
    # FastMCP 1.x exposes its low-level server only as _mcp_server
    registry = SessionRegistry(mcp._mcp_server, json_response=json_response)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with registry.run():
            yield

    app = Starlette(
        routes=[
            Route("/mcp", endpoint=SessionEndpoint(registry)),
            Route("/healthz", endpoint=health_check, methods=["GET"]),
            Route("/api/stats", endpoint=api_stats, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    app.state.sessions = registry
    return app


def run_server(transport: str = "stdio", host: str = HOST, port: int = PORT) -> None:
    """Run the MCP server.

    Args:
        transport: Transport type ('stdio' or 'http')
        host: Host to bind to for HTTP (default: 0.0.0.0)
        port: Port to bind to for HTTP (default: 8080)
    """
    if transport == "http":
        logger.info(f"ClawPage MCP server (Streamable HTTP) listening on {host}:{port}")
        uvicorn.run(
            create_http_app(),
            host=host,
            port=port,
            log_level=LOG_LEVEL.lower(),
            timeout_graceful_shutdown=GRACEFUL_SHUTDOWN_SECONDS,
        )
        return

    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
