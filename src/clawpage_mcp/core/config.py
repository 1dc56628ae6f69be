"""Environment-driven configuration for the ClawPage MCP server."""

from __future__ import annotations

import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_timeout(name: str) -> float | None:
    value = os.getenv(name)
    if not value:
        return None
    return float(value)


# Remote API
API_BASE = os.getenv("CLAWPAGE_API_BASE", "https://api.clawpage.xyz").rstrip("/")
REQUEST_TIMEOUT = _env_timeout("CLAWPAGE_TIMEOUT")

# Transport selection: "stdio" (default) or "http"
TRANSPORT = os.getenv("MCP_TRANSPORT", "stdio").lower()
HOST = os.getenv("MCP_HOST", "0.0.0.0")
PORT = int(os.getenv("MCP_PORT", "8080"))

# Answer POSTs with a single JSON body instead of an SSE stream
JSON_RESPONSE = _env_flag("MCP_JSON_RESPONSE")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_current_config() -> dict[str, object]:
    """Get the effective configuration.

    Returns:
        Dictionary of configuration values safe to expose over HTTP
    """
    return {
        "api_base": API_BASE,
        "request_timeout": REQUEST_TIMEOUT,
        "transport": TRANSPORT,
        "host": HOST,
        "port": PORT,
        "json_response": JSON_RESPONSE,
        "log_level": LOG_LEVEL,
    }
