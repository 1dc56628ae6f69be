"""API providers for reaching the ClawPage service."""

from clawpage_mcp.providers.base import ApiProvider, ApiResponse
from clawpage_mcp.providers.requests_provider import RequestsProvider

__all__ = ["ApiProvider", "ApiResponse", "RequestsProvider"]
