"""Pydantic data models for tool parameters.

This module defines the validated inputs of each MCP tool:
- RegisterParams (email must be a valid address)
- ExtractParams (url must be a valid absolute URL)
- AccountParams, AddWalletParams, DepositParams

All models use Pydantic v2 for validation, so malformed input is rejected
before a request ever reaches the ClawPage API.
"""

from clawpage_mcp.models.params import (
    AccountParams,
    AddWalletParams,
    DepositParams,
    ExtractParams,
    RegisterParams,
    UrlString,
)

__all__ = [
    "RegisterParams",
    "ExtractParams",
    "AccountParams",
    "AddWalletParams",
    "DepositParams",
    "UrlString",
]
