"""Session registry for the Streamable HTTP transport.

Each MCP client gets its own ``StreamableHTTPServerTransport`` bound to a
server-minted session id. The registry owns the id -> transport mapping and
the task group running one MCP server loop per session. All mutations happen
on the event loop, so the mapping needs no lock.

Session lifecycle::

    absent --(POST initialize, no session header, 2xx)--> active
    active --(DELETE, server loop exit, shutdown)--> closed

An initialize the transport rejects discards its session at once. Closed
ids are removed and never reused.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

import anyio
from anyio.abc import TaskGroup, TaskStatus
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import MCP_SESSION_ID_HEADER, StreamableHTTPServerTransport
from mcp.types import JSONRPCRequest
from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.types import Message, Receive, Scope, Send

logger = logging.getLogger(__name__)

NO_VALID_SESSION_ERROR = {
    "jsonrpc": "2.0",
    "error": {"code": -32000, "message": "Bad Request: No valid session ID"},
    "id": None,
}


def is_initialize_request(payload: Any) -> bool:
    """Check whether a decoded JSON-RPC payload is an initialize request."""
    if not isinstance(payload, dict):
        return False
    try:
        request = JSONRPCRequest.model_validate(payload)
    except ValidationError:
        return False
    return request.method == "initialize"


class SessionRegistry:
    """In-memory mapping of session ids to live transports."""

    def __init__(self, server: Server[Any, Any], json_response: bool = False) -> None:
        """Initialize the registry.

        Args:
            server: Low-level MCP server run once per session
            json_response: Answer POSTs with JSON bodies instead of SSE streams
        """
        self.server = server
        self.json_response = json_response
        self._transports: dict[str, StreamableHTTPServerTransport] = {}
        self._task_group: TaskGroup | None = None

    def __len__(self) -> int:
        return len(self._transports)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._transports

    def get(self, session_id: str | None) -> StreamableHTTPServerTransport | None:
        """Look up the transport bound to a session id."""
        if session_id is None:
            return None
        return self._transports.get(session_id)

    @asynccontextmanager
    async def run(self) -> AsyncIterator[None]:
        """Own the task group for session server loops.

        Every open session is terminated before the context exits, so
        clients observe an explicit close rather than a dropped connection.
        """
        if self._task_group is not None:
            raise RuntimeError("SessionRegistry.run() is already active")

        async with anyio.create_task_group() as tg:
            self._task_group = tg
            logger.info("Session registry started")
            try:
                yield
            finally:
                await self.close_all()
                tg.cancel_scope.cancel()
                self._task_group = None
                logger.info("Session registry stopped")

    async def create_session(self) -> StreamableHTTPServerTransport:
        """Mint a session id, bind a new transport and start its server loop.

        Raises:
            RuntimeError: If called outside ``run()``
        """
        if self._task_group is None:
            raise RuntimeError("Session registry is not running. Use 'async with registry.run()'.")

        session_id = uuid4().hex
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=self.json_response,
        )
        self._transports[session_id] = transport
        await self._task_group.start(self._run_session, transport)

        logger.info(f"Session {session_id} created ({len(self)} active)")
        return transport

    async def _run_session(
        self,
        transport: StreamableHTTPServerTransport,
        *,
        task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
    ) -> None:
        session_id = transport.mcp_session_id
        try:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                    stateless=False,
                )
        except Exception:
            logger.exception(f"Session {session_id} crashed")
        finally:
            self.remove(session_id)

    def remove(self, session_id: str | None) -> None:
        """Drop a session record. Unknown ids are ignored."""
        if session_id is not None and self._transports.pop(session_id, None) is not None:
            logger.info(f"Session {session_id} closed ({len(self)} active)")

    async def discard(self, session_id: str | None) -> None:
        """Drop a session that never became active and stop its server loop."""
        transport = self.get(session_id)
        if transport is None:
            return
        self.remove(session_id)
        await transport.terminate()

    async def close_all(self) -> None:
        """Terminate every open session."""
        for session_id, transport in list(self._transports.items()):
            await transport.terminate()
            self.remove(session_id)


def _replay_receive(body: bytes, receive: Receive) -> Receive:
    """Hand an already-read request body to the next ASGI consumer."""
    replayed = False

    async def replay() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return replay


class SessionEndpoint:
    """ASGI app for the single ``/mcp`` path.

    POST submits messages and creates a session on initialize, GET opens
    the server-to-client stream, DELETE terminates the session.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id = request.headers.get(MCP_SESSION_ID_HEADER)
        transport = self.registry.get(session_id)
        created = False

        if request.method == "POST":
            body = await request.body()
            receive = _replay_receive(body, receive)
            if transport is None:
                if session_id is None and is_initialize_request(_decode(body)):
                    transport = await self.registry.create_session()
                    created = True
                else:
                    response = JSONResponse(NO_VALID_SESSION_ERROR, status_code=400)
                    await response(scope, receive, send)
                    return
        elif request.method in ("GET", "DELETE"):
            if transport is None:
                response = PlainTextResponse("Invalid or missing session ID", status_code=400)
                await response(scope, receive, send)
                return
        else:
            response = PlainTextResponse(
                "Method Not Allowed", status_code=405, headers={"Allow": "GET, POST, DELETE"}
            )
            await response(scope, receive, send)
            return

        if not created:
            await transport.handle_request(scope, receive, send)
        else:
            status = await _handle_and_capture_status(transport, scope, receive, send)
            # Only an accepted initialize makes the session active
            if status is None or not 200 <= status < 300:
                logger.info(f"Session {transport.mcp_session_id} rejected with status {status}")
                await self.registry.discard(transport.mcp_session_id)
                return

        # DELETE terminates the transport; drop it without waiting for the loop to exit
        if transport.is_terminated:
            self.registry.remove(transport.mcp_session_id)


def _decode(body: bytes) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return None


async def _handle_and_capture_status(
    transport: StreamableHTTPServerTransport, scope: Scope, receive: Receive, send: Send
) -> int | None:
    """Let the transport answer the request and report the status it sent."""
    status: int | None = None

    async def send_with_status(message: Message) -> None:
        nonlocal status
        if message["type"] == "http.response.start":
            status = message["status"]
        await send(message)

    await transport.handle_request(scope, receive, send_with_status)
    return status
