"""Map ClawPage API responses to MCP tool results.

Payment and authentication guidance (HTTP 402) is returned as a normal,
non-error result so that an agent can act on it. Everything the caller
should treat as a failure carries ``isError=True``.
"""

from __future__ import annotations

import json
from typing import Any

from mcp.types import CallToolResult, TextContent

from clawpage_mcp.providers import ApiResponse

DEFAULT_PAYMENT_RECIPIENT = "0x9FBF0f395b0610Bc15B17d84aB1f6CEF325420E9"
DEFAULT_PAYMENT_AMOUNT = "0.01"
DEFAULT_PAYMENT_CURRENCY = "USDC"
DEFAULT_PAYMENT_NETWORK = "base"

AUTH_OPTIONS_TEXT = "\n".join(
    [
        "Authentication required. Two options:",
        "",
        "1. Register for free: use the 'register' tool with your email to get an API key with 10 free extractions/day",
        "2. Pay with x402: send 0.01 USDC on Base and retry with tx_hash",
    ]
)

EXHAUSTED_TEXT = "\n".join(
    [
        "Free tier exhausted and insufficient balance.",
        "",
        "Options:",
        "- Wait for daily recharge (10 free extractions per 24h rolling)",
        "- Deposit USDC: use 'add_wallet' then 'deposit' tools",
        "- Pay per request with x402 (no account needed)",
    ]
)

INVALID_KEY_TEXT = "Invalid API key. Use the 'register' tool to get a valid key."


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    """Wrap text in a single-block tool result."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def connection_error(exc: BaseException) -> CallToolResult:
    """Result for a request that never produced a response."""
    return text_result(f"Failed to connect to ClawPage API: {exc}", is_error=True)


def _parse_json(response: ApiResponse) -> tuple[bool, Any]:
    try:
        return True, response.json()
    except ValueError:
        return False, None


def _body_for_error(response: ApiResponse) -> str:
    """Compact JSON if the body parses, else the raw text."""
    ok, data = _parse_json(response)
    if ok:
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return response.text


def _success(response: ApiResponse) -> CallToolResult:
    ok, data = _parse_json(response)
    if not ok:
        return text_result(
            f"Invalid JSON response from ClawPage API ({response.status_code}): {response.text}",
            is_error=True,
        )
    return text_result(json.dumps(data, indent=2, ensure_ascii=False))


def classify_account_response(
    response: ApiResponse,
    failure_prefix: str,
    success_text: str | None = None,
) -> CallToolResult:
    """Classify a response from the register or account endpoints.

    Args:
        response: Response from the API
        failure_prefix: Text leading the error message for non-200 statuses
        success_text: Fixed text to return on 200 instead of the payload

    Returns:
        CallToolResult with the payload or an error naming the status
    """
    if response.status_code == 200:
        if success_text is not None:
            return text_result(success_text)
        return _success(response)

    return text_result(
        f"{failure_prefix} ({response.status_code}): {_body_for_error(response)}",
        is_error=True,
    )


def _async_job(response: ApiResponse, api_base: str) -> CallToolResult:
    ok, data = _parse_json(response)
    if not ok or not isinstance(data, dict):
        data = {}
    return text_result(
        "\n".join(
            [
                "Extraction started (async mode).",
                f"Job ID: {data.get('job_id')}",
                f"Poll for results: {api_base}{data.get('poll_url', '')}",
                f"Estimated time: {data.get('estimated_seconds')}s",
            ]
        )
    )


def _payment_required(response: ApiResponse) -> CallToolResult:
    _, body = _parse_json(response)
    if not isinstance(body, dict):
        body = {}

    if body.get("options") is not None:
        return text_result(AUTH_OPTIONS_TEXT)

    error = body.get("error")
    if isinstance(error, str) and "exhausted" in error:
        return text_result(EXHAUSTED_TEXT)

    headers = response.headers
    recipient = headers.get("X-Payment-Recipient") or DEFAULT_PAYMENT_RECIPIENT
    amount = headers.get("X-Payment-Amount") or DEFAULT_PAYMENT_AMOUNT
    currency = headers.get("X-Payment-Currency") or DEFAULT_PAYMENT_CURRENCY
    network = headers.get("X-Payment-Network") or DEFAULT_PAYMENT_NETWORK

    return text_result(
        "\n".join(
            [
                "This URL is not cached and requires payment.",
                "",
                f"Send {amount} {currency} on {network} to:",
                recipient,
                "",
                "Then call extract_url again with the same URL and tx_hash set to the transaction hash.",
            ]
        )
    )


def classify_extract_response(response: ApiResponse, api_base: str) -> CallToolResult:
    """Classify a response from the extract endpoint.

    Args:
        response: Response from the API
        api_base: Base URL used to build the poll link for async jobs

    Returns:
        CallToolResult with extracted data, guidance, or an error
    """
    status = response.status_code

    if status == 200:
        return _success(response)

    if status == 202:
        return _async_job(response, api_base)

    # Checked in order: options, exhausted, then generic payment instructions
    if status == 402:
        return _payment_required(response)

    if status == 401:
        return text_result(INVALID_KEY_TEXT, is_error=True)

    return text_result(
        f"ClawPage API error ({status}): {_body_for_error(response)}",
        is_error=True,
    )
