"""HTTP routes: the SSE announcement stream and the JSON-RPC message endpoint."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import AsyncIterator, List

from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route

from ..executor import AffinityExecutor
from ..protocol.dispatch import MessageDispatcher
from ..registry.registry import ToolRegistry
from ..utils.config import ServerSettings
from .session import ServerState

_SSE_LOGGER = logging.getLogger("toolhost.sse")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

MESSAGE_PATHS = ("/mcp", "/message")


def endpoint_event(url: str) -> str:
    return f"event: endpoint\r\ndata: {url}\r\n\r\n"


PING_COMMENT = ": ping\r\n\r\n"


def make_routes(
    dispatcher: MessageDispatcher,
    registry: ToolRegistry,
    executor: AffinityExecutor,
    state: ServerState,
    settings: ServerSettings,
) -> List[Route]:
    async def handle_message(request: Request) -> Response:
        body = await request.body()
        payload = await dispatcher.handle(body)
        return Response(payload, status_code=200, media_type="application/json")

    async def handle_sse(request: Request) -> Response:
        client = request.client or ("unknown", 0)
        connection_id = uuid.uuid4().hex
        state.connects += 1
        endpoint = str(request.url_for("message"))
        _SSE_LOGGER.info(
            "sse.connect",
            extra={
                "client_host": client[0],
                "client_port": client[1],
                "user_agent": request.headers.get("user-agent", ""),
                "connection_id": connection_id,
                "connects": state.connects,
            },
        )

        async def stream() -> AsyncIterator[str]:
            state.active_streams.add(connection_id)
            reason = "shutdown"
            try:
                yield endpoint_event(endpoint)
                while not state.shutdown.is_set():
                    try:
                        await asyncio.wait_for(
                            state.shutdown.wait(), timeout=settings.keepalive_seconds
                        )
                    except asyncio.TimeoutError:
                        if await request.is_disconnected():
                            reason = "client_disconnect"
                            break
                        yield PING_COMMENT
            except asyncio.CancelledError:
                reason = "cancelled"
                raise
            finally:
                state.active_streams.discard(connection_id)
                _SSE_LOGGER.info(
                    "sse.disconnect",
                    extra={"connection_id": connection_id, "reason": reason},
                )

        return StreamingResponse(
            stream(), media_type="text/event-stream", headers=SSE_HEADERS
        )

    async def handle_state(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "running": state.running,
                "shutting_down": state.shutting_down,
                "sse_connects": state.connects,
                "active_streams": len(state.active_streams),
                "tools": len(registry),
                "executor_state": executor.state.value,
                "pending_calls": executor.pending,
            }
        )

    routes = [
        Route("/sse", handle_sse, methods=["GET"], name="sse"),
        Route("/sse/", handle_sse, methods=["GET"]),
        Route("/state", handle_state, methods=["GET"], name="state"),
        Route("/", handle_message, methods=["POST"], name="root"),
    ]
    for path in MESSAGE_PATHS:
        name = path.strip("/")
        routes.append(Route(path, handle_message, methods=["POST"], name=name))
        routes.append(Route(f"{path}/", handle_message, methods=["POST"]))
    return routes


__all__ = ["MESSAGE_PATHS", "PING_COMMENT", "SSE_HEADERS", "endpoint_event", "make_routes"]
