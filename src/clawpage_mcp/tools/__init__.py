"""MCP tools for the ClawPage extraction API.

This module provides the tools exposed over MCP:
- register: Create an account and receive an API key
- extract_url: Extract a web page into structured JSON
- account_info: Free extractions remaining, balance and wallets
- add_wallet: Associate a wallet for prepaid deposits
- deposit: Credit prepaid balance from an on-chain transfer

The tools module follows a router -> service -> classifier pattern:
- router.py: MCP tool definitions and registration
- service.py: One handler per tool issuing a single API request
- classifier.py: Maps API status codes and headers to tool results
"""

from clawpage_mcp.tools.classifier import (
    classify_account_response,
    classify_extract_response,
    connection_error,
    text_result,
)
from clawpage_mcp.tools.router import (
    account_info,
    add_wallet,
    deposit,
    extract_url,
    register,
    register_tools,
)
from clawpage_mcp.tools.service import (
    handle_account,
    handle_add_wallet,
    handle_deposit,
    handle_extract,
    handle_register,
)

__all__ = [
    # MCP tool functions
    "register",
    "extract_url",
    "account_info",
    "add_wallet",
    "deposit",
    # Registration functions
    "register_tools",
    # Service functions
    "handle_register",
    "handle_extract",
    "handle_account",
    "handle_add_wallet",
    "handle_deposit",
    # Classifier functions
    "classify_account_response",
    "classify_extract_response",
    "connection_error",
    "text_result",
]
