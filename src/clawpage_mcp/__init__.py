"""ClawPage MCP server: web extraction tools over the Model Context Protocol."""

__version__ = "0.2.0"
