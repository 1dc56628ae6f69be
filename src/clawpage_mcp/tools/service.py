"""Business logic for the ClawPage tools."""

from __future__ import annotations

import logging
import time
from typing import Any

from mcp.types import CallToolResult

from clawpage_mcp.core.providers import get_provider
from clawpage_mcp.metrics import record_call
from clawpage_mcp.models.params import (
    AccountParams,
    AddWalletParams,
    DepositParams,
    ExtractParams,
    RegisterParams,
)
from clawpage_mcp.providers import ApiProvider, ApiResponse
from clawpage_mcp.tools.classifier import (
    classify_account_response,
    classify_extract_response,
    connection_error,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


async def _call_api(
    tool: str,
    provider: ApiProvider,
    method: str,
    path: str,
    headers: dict[str, str],
    json_body: dict[str, Any] | None = None,
) -> tuple[ApiResponse | None, CallToolResult | None, float]:
    """Issue one request, converting a transport failure into an error result.

    Returns:
        Tuple of (response, failure result, elapsed milliseconds). Exactly one
        of response and failure result is set.
    """
    start = time.perf_counter()
    try:
        response = await provider.request(method, path, headers=headers, json_body=json_body)
    except Exception as e:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.warning(f"{tool}: {method} {path} failed: {e}")
        record_call(tool, success=False, elapsed_ms=elapsed_ms, error=str(e))
        return None, connection_error(e), elapsed_ms

    return response, None, (time.perf_counter() - start) * 1000


def _finish(tool: str, response: ApiResponse, result: CallToolResult, elapsed_ms: float) -> CallToolResult:
    error_text = result.content[0].text if result.isError else None
    record_call(
        tool,
        success=not result.isError,
        status_code=response.status_code,
        elapsed_ms=elapsed_ms,
        error=error_text,
    )
    logger.debug(f"{tool}: status {response.status_code}, error={result.isError}")
    return result


async def handle_register(params: RegisterParams, provider: ApiProvider | None = None) -> CallToolResult:
    """Register an account by email.

    Args:
        params: Validated register parameters
        provider: API provider (default: the shared RequestsProvider)

    Returns:
        CallToolResult with the new account's API key payload
    """
    provider = provider or get_provider()
    response, failure, elapsed_ms = await _call_api(
        "register", provider, "POST", "/register", dict(JSON_HEADERS), {"email": params.email}
    )
    if failure is not None:
        return failure

    result = classify_account_response(response, "Registration failed")
    return _finish("register", response, result, elapsed_ms)


async def handle_extract(params: ExtractParams, provider: ApiProvider | None = None) -> CallToolResult:
    """Extract a URL, authenticating with an API key and/or x402 payment proof.

    With neither credential the service may still answer from cache, or
    respond 402 with payment instructions.

    Args:
        params: Validated extract parameters
        provider: API provider (default: the shared RequestsProvider)

    Returns:
        CallToolResult with extracted data, async job info, or guidance
    """
    provider = provider or get_provider()

    headers = dict(JSON_HEADERS)
    if params.api_key:
        headers["X-API-Key"] = params.api_key
    if params.tx_hash:
        headers["X-Payment-Proof"] = params.tx_hash

    response, failure, elapsed_ms = await _call_api(
        "extract_url", provider, "POST", "/extract", headers, {"url": params.url, "sync": params.sync}
    )
    if failure is not None:
        return failure

    result = classify_extract_response(response, provider.base_url)
    return _finish("extract_url", response, result, elapsed_ms)


async def handle_account(params: AccountParams, provider: ApiProvider | None = None) -> CallToolResult:
    """Fetch account info for an API key."""
    provider = provider or get_provider()
    response, failure, elapsed_ms = await _call_api(
        "account_info", provider, "GET", "/account", {"X-API-Key": params.api_key}
    )
    if failure is not None:
        return failure

    result = classify_account_response(response, "Error")
    return _finish("account_info", response, result, elapsed_ms)


async def handle_add_wallet(params: AddWalletParams, provider: ApiProvider | None = None) -> CallToolResult:
    """Associate a wallet address with an account."""
    provider = provider or get_provider()
    headers = {**JSON_HEADERS, "X-API-Key": params.api_key}
    response, failure, elapsed_ms = await _call_api(
        "add_wallet",
        provider,
        "POST",
        "/account/wallets",
        headers,
        {"wallet_address": params.wallet_address},
    )
    if failure is not None:
        return failure

    result = classify_account_response(
        response,
        "Error",
        success_text=f"Wallet {params.wallet_address} associated successfully.",
    )
    return _finish("add_wallet", response, result, elapsed_ms)


async def handle_deposit(params: DepositParams, provider: ApiProvider | None = None) -> CallToolResult:
    """Credit prepaid balance from an on-chain USDC transfer."""
    provider = provider or get_provider()
    headers = {**JSON_HEADERS, "X-API-Key": params.api_key}
    response, failure, elapsed_ms = await _call_api(
        "deposit", provider, "POST", "/account/deposit", headers, {"tx_hash": params.tx_hash}
    )
    if failure is not None:
        return failure

    result = classify_account_response(response, "Deposit failed")
    return _finish("deposit", response, result, elapsed_ms)
