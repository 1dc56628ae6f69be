"""Provider initialization for the ClawPage MCP server."""

from clawpage_mcp.core.config import API_BASE, REQUEST_TIMEOUT
from clawpage_mcp.providers import ApiProvider, RequestsProvider

# Initialize default provider
# This is used by every tool handler unless a provider is passed in
default_provider: ApiProvider = RequestsProvider(base_url=API_BASE, timeout=REQUEST_TIMEOUT)


def get_provider() -> ApiProvider:
    """Get the provider used for outbound API calls."""
    return default_provider
