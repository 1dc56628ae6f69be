"""Admin HTTP endpoints for monitoring.

This module provides administrative endpoints served alongside the
Streamable HTTP transport:
- /healthz: Health check with active session count
- /api/stats: Tool call metrics and effective configuration
"""

from clawpage_mcp.admin.router import (
    api_stats,
    health_check,
)

__all__ = [
    "api_stats",
    "health_check",
]
