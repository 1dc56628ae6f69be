"""Tests for the Streamable HTTP session registry."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import pytest
from starlette.applications import Starlette

from clawpage_mcp.server import create_http_app
from clawpage_mcp.sessions import SessionRegistry, is_initialize_request

SESSION_HEADER = "mcp-session-id"
POST_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}
INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "test-client", "version": "1.0"},
    },
}
LIST_TOOLS = {"jsonrpc": "2.0", "id": 2, "method": "tools/list", "params": {}}
INITIALIZED = {"jsonrpc": "2.0", "method": "notifications/initialized"}


@pytest.fixture
def app() -> Starlette:
    """HTTP app answering with JSON bodies instead of SSE."""
    return create_http_app(json_response=True)


@asynccontextmanager
async def running(app: Starlette) -> AsyncIterator[httpx.AsyncClient]:
    """Run the session registry and yield a client bound to the app."""
    async with app.state.sessions.run():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client


def sse_messages(text: str) -> list[dict]:
    """Decode the JSON payloads of an event stream body."""
    return [json.loads(line[len("data:"):]) for line in text.splitlines() if line.startswith("data:")]


async def initialize(client: httpx.AsyncClient) -> str:
    response = await client.post("/mcp", json=INITIALIZE, headers=POST_HEADERS)
    assert response.status_code == 200
    return response.headers[SESSION_HEADER]


class TestIsInitializeRequest:
    """Tests for is_initialize_request."""

    def test_initialize(self) -> None:
        assert is_initialize_request(INITIALIZE)

    def test_other_method(self) -> None:
        assert not is_initialize_request(LIST_TOOLS)

    def test_not_jsonrpc(self) -> None:
        assert not is_initialize_request({"method": "initialize"})
        assert not is_initialize_request([INITIALIZE])
        assert not is_initialize_request(None)


class TestSessionRejection:
    """Requests without a valid session are rejected with 400."""

    @pytest.mark.asyncio
    async def test_post_without_session(self, app: Starlette) -> None:
        async with running(app) as client:
            response = await client.post("/mcp", json=LIST_TOOLS, headers=POST_HEADERS)

        assert response.status_code == 400
        body = response.json()
        assert body["jsonrpc"] == "2.0"
        assert body["error"]["code"] == -32000
        assert body["error"]["message"] == "Bad Request: No valid session ID"
        assert body["id"] is None

    @pytest.mark.asyncio
    async def test_post_with_unknown_session(self, app: Starlette) -> None:
        async with running(app) as client:
            response = await client.post(
                "/mcp", json=INITIALIZE, headers={**POST_HEADERS, SESSION_HEADER: "unknown"}
            )

        assert response.status_code == 400
        assert app.state.sessions.get("unknown") is None
        assert len(app.state.sessions) == 0

    @pytest.mark.asyncio
    async def test_post_invalid_json(self, app: Starlette) -> None:
        async with running(app) as client:
            response = await client.post("/mcp", content=b"{not json", headers=POST_HEADERS)

        assert response.status_code == 400

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    async def test_missing_session(self, app: Starlette, method: str) -> None:
        async with running(app) as client:
            response = await client.request(method, "/mcp")

        assert response.status_code == 400
        assert response.text == "Invalid or missing session ID"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "DELETE"])
    async def test_unknown_session(self, app: Starlette, method: str) -> None:
        async with running(app) as client:
            response = await client.request(method, "/mcp", headers={SESSION_HEADER: "nope"})

        assert response.status_code == 400
        assert response.text == "Invalid or missing session ID"

    @pytest.mark.asyncio
    async def test_unsupported_method(self, app: Starlette) -> None:
        async with running(app) as client:
            response = await client.put("/mcp")

        assert response.status_code == 405

    @pytest.mark.asyncio
    async def test_rejected_initialize_leaves_no_session(self, app: Starlette) -> None:
        """Test that an initialize the transport refuses is not kept."""
        async with running(app) as client:
            response = await client.post(
                "/mcp",
                json=INITIALIZE,
                headers={"Accept": "text/plain", "Content-Type": "application/json"},
            )

            assert response.status_code == 406
            assert len(app.state.sessions) == 0

    @pytest.mark.asyncio
    async def test_repeated_rejected_initialize_does_not_grow(self, app: Starlette) -> None:
        async with running(app) as client:
            for _ in range(5):
                await client.post("/mcp", json=INITIALIZE, headers={"Accept": "text/plain"})

            assert len(app.state.sessions) == 0


class TestSessionLifecycle:
    """Tests for creation, routing and closure of sessions."""

    @pytest.mark.asyncio
    async def test_initialize_creates_session(self, app: Starlette) -> None:
        async with running(app) as client:
            response = await client.post("/mcp", json=INITIALIZE, headers=POST_HEADERS)

            assert response.status_code == 200
            session_id = response.headers[SESSION_HEADER]
            assert session_id in app.state.sessions
            assert response.json()["result"]["serverInfo"]["name"] == "clawpage"

    @pytest.mark.asyncio
    async def test_session_ids_are_unique(self, app: Starlette) -> None:
        async with running(app) as client:
            first = await initialize(client)
            second = await initialize(client)

            assert first != second
            assert len(app.state.sessions) == 2

    @pytest.mark.asyncio
    async def test_delete_closes_session(self, app: Starlette) -> None:
        async with running(app) as client:
            session_id = await initialize(client)

            response = await client.delete(
                "/mcp",
                headers={SESSION_HEADER: session_id, "mcp-protocol-version": "2025-03-26"},
            )

            assert response.status_code == 200
            assert session_id not in app.state.sessions

            # Closed ids are not routed again
            response = await client.post(
                "/mcp", json=LIST_TOOLS, headers={**POST_HEADERS, SESSION_HEADER: session_id}
            )
            assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_shutdown_closes_all_sessions(self, app: Starlette) -> None:
        registry: SessionRegistry = app.state.sessions
        async with running(app) as client:
            await initialize(client)
            await initialize(client)
            assert len(registry) == 2

        assert len(registry) == 0

    @pytest.mark.asyncio
    async def test_create_session_requires_run(self, app: Starlette) -> None:
        with pytest.raises(RuntimeError):
            await app.state.sessions.create_session()


class TestStreamingSessions:
    """Round trips over the default SSE response mode."""

    @pytest.fixture
    def sse_app(self) -> Starlette:
        return create_http_app(json_response=False)

    @pytest.mark.asyncio
    async def test_initialize_and_list_tools(self, sse_app: Starlette) -> None:
        async with running(sse_app) as client:
            response = await client.post("/mcp", json=INITIALIZE, headers=POST_HEADERS)

            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/event-stream")
            session_id = response.headers[SESSION_HEADER]
            assert session_id in sse_app.state.sessions
            assert sse_messages(response.text)[0]["result"]["serverInfo"]["name"] == "clawpage"

            session_headers = {
                **POST_HEADERS,
                SESSION_HEADER: session_id,
                "mcp-protocol-version": "2025-03-26",
            }
            response = await client.post("/mcp", json=INITIALIZED, headers=session_headers)
            assert response.status_code == 202

            response = await client.post("/mcp", json=LIST_TOOLS, headers=session_headers)

            assert response.status_code == 200
            message = sse_messages(response.text)[0]
            assert message["id"] == 2
            assert {t["name"] for t in message["result"]["tools"]} == {
                "register",
                "extract_url",
                "account_info",
                "add_wallet",
                "deposit",
            }


class TestAdminRoutes:
    """Tests for /healthz and /api/stats."""

    @pytest.mark.asyncio
    async def test_health_reports_sessions(self, app: Starlette) -> None:
        async with running(app) as client:
            await initialize(client)
            response = await client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "sessions": 1}

    @pytest.mark.asyncio
    async def test_stats(self, app: Starlette) -> None:
        async with running(app) as client:
            response = await client.get("/api/stats")

        assert response.status_code == 200
        body = response.json()
        assert "calls" in body
        assert body["config"]["api_base"].startswith("http")
