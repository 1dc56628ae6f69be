"""Pytest configuration and fixtures for clawpage-mcp tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest
import requests

from clawpage_mcp.providers import ApiProvider, ApiResponse

API_BASE = "https://api.clawpage.xyz"


class StubProvider(ApiProvider):
    """Provider returning a scripted response and recording each request."""

    def __init__(
        self,
        status_code: int = 200,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        text = body if isinstance(body, str) else json.dumps(body if body is not None else {})
        self.response = ApiResponse(status_code=status_code, text=text, headers=headers or {})
        self.calls: list[dict[str, Any]] = []

    @property
    def base_url(self) -> str:
        return API_BASE

    async def request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> ApiResponse:
        self.calls.append(
            {
                "method": method,
                "path": path,
                "headers": dict(headers or {}),
                "json": json_body,
            }
        )
        return self.response


class FailingProvider(ApiProvider):
    """Provider whose requests never complete."""

    @property
    def base_url(self) -> str:
        return API_BASE

    async def request(
        self,
        method: str,
        path: str,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> ApiResponse:
        raise requests.ConnectionError("Connection refused")


@pytest.fixture
def stub() -> Callable[..., StubProvider]:
    """Factory for providers returning a fixed response."""

    def _make(status_code: int = 200, body: Any = None, headers: dict[str, str] | None = None) -> StubProvider:
        return StubProvider(status_code, body, headers)

    return _make


@pytest.fixture
def failing_provider() -> FailingProvider:
    """Provider raising a connection error."""
    return FailingProvider()


@pytest.fixture
def extract_result() -> dict[str, Any]:
    """Sample extraction payload for a cache hit."""
    return {
        "status": "done",
        "data": {
            "url": "https://example.com",
            "title": "Example",
            "content": {"main_text": "Hello", "sections": []},
            "structured": {},
        },
    }
