"""Core infrastructure and shared configuration.

This module provides foundational components used across the application:
- Environment-driven settings (API base, transport, port, logging)
- The default provider instance used for outbound API calls

The core module is imported by other domain modules and provides the
single source of truth for provider instances and configuration.
"""

from clawpage_mcp.core.providers import (
    default_provider,
    get_provider,
)

__all__ = [
    "default_provider",
    "get_provider",
]
