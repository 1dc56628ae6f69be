"""Main entry point for the ClawPage MCP server."""

from __future__ import annotations

import sys

from clawpage_mcp.core.config import HOST, PORT, TRANSPORT
from clawpage_mcp.server import run_server


def select_transport(argv: list[str], env_transport: str = TRANSPORT) -> str:
    """Pick 'http' when --http is passed or MCP_TRANSPORT=http, else 'stdio'."""
    if "--http" in argv or env_transport == "http":
        return "http"
    return "stdio"


def main() -> None:
    """Main entry point."""
    transport = select_transport(sys.argv[1:])

    # stdout carries the protocol in stdio mode
    print(f"Starting ClawPage MCP server with {transport} transport...", file=sys.stderr)
    run_server(transport=transport, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
