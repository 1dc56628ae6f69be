"""MCP tool definitions for the ClawPage API."""

from __future__ import annotations

from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import EmailStr, Field

from clawpage_mcp.models.params import (
    AccountParams,
    AddWalletParams,
    DepositParams,
    ExtractParams,
    RegisterParams,
    UrlString,
)
from clawpage_mcp.tools.service import (
    handle_account,
    handle_add_wallet,
    handle_deposit,
    handle_extract,
    handle_register,
)

TOOL_DESCRIPTIONS = {
    "register": (
        "Register for a ClawPage account. Returns an API key (cpk_ prefix) with 10 free "
        "extractions per day. Required before using extract_url."
    ),
    "extract_url": (
        "Extract and structure a web page into clean JSON. Returns text, tables, prices, "
        "contacts, hours, ratings, dates, links, and images. Handles JavaScript-rendered SPAs "
        "and bot-blocked sites. Requires an API key (from register) or x402 payment. "
        "Cached URLs are free."
    ),
    "account_info": (
        "Get account info including remaining free extractions, USDC balance, and associated wallets."
    ),
    "add_wallet": "Associate a wallet address with your account for prepaid USDC deposits.",
    "deposit": (
        "Credit prepaid USDC balance from an on-chain transaction. Send USDC on Base to the "
        "ClawPage wallet, then submit the tx hash here."
    ),
}

ApiKey = Annotated[str, Field(description="API key (cpk_ prefix)")]


async def register(
    email: Annotated[EmailStr, Field(description="Email address for the account")],
) -> CallToolResult:
    """Register an account and receive an API key."""
    return await handle_register(RegisterParams(email=email))


async def extract_url(
    url: Annotated[UrlString, Field(description="The URL to extract")],
    api_key: Annotated[
        str | None,
        Field(description="API key from register (cpk_ prefix). Required for uncached URLs unless using x402."),
    ] = None,
    sync: Annotated[bool, Field(description="Wait for result inline (default: true)")] = True,
    tx_hash: Annotated[
        str | None,
        Field(description="Transaction hash for x402 payment proof (alternative to API key)"),
    ] = None,
) -> CallToolResult:
    """Extract a web page into structured JSON.

    Args:
        url: The URL to extract (must be a valid absolute URL)
        api_key: API key from register
        sync: Wait for the result inline instead of returning a job to poll
        tx_hash: Transaction hash proving an x402 payment

    Returns:
        CallToolResult with the extraction, async job info, or payment guidance
    """
    return await handle_extract(ExtractParams(url=url, api_key=api_key, sync=sync, tx_hash=tx_hash))


async def account_info(api_key: ApiKey) -> CallToolResult:
    """Get free extractions remaining, balance and wallets."""
    return await handle_account(AccountParams(api_key=api_key))


async def add_wallet(
    api_key: ApiKey,
    wallet_address: Annotated[str, Field(description="Ethereum wallet address (0x...)")],
) -> CallToolResult:
    """Associate a wallet address with the account."""
    return await handle_add_wallet(AddWalletParams(api_key=api_key, wallet_address=wallet_address))


async def deposit(
    api_key: ApiKey,
    tx_hash: Annotated[str, Field(description="Transaction hash of the USDC transfer")],
) -> CallToolResult:
    """Credit prepaid balance from a USDC transfer."""
    return await handle_deposit(DepositParams(api_key=api_key, tx_hash=tx_hash))


def register_tools(mcp: FastMCP) -> None:
    """Register the ClawPage tools on the MCP server.

    Args:
        mcp: FastMCP server instance to register tools on
    """
    for fn in (register, extract_url, account_info, add_wallet, deposit):
        mcp.tool(name=fn.__name__, description=TOOL_DESCRIPTIONS[fn.__name__])(fn)
