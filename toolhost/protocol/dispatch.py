"""Method routing for decoded JSON-RPC calls."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from mcp import types

from ..executor import AffinityExecutor
from ..registry.coercion import coerce_arguments
from ..registry.registry import ToolRegistry
from ..registry.tool import Tool
from ..utils.config import ServerSettings
from ..utils.errors import ErrorCode, InternalError, InvalidParams, MethodNotFound, RpcError
from ..utils.logging import current_request, increment_counter, request_scope
from ..utils.serialization import dumps_result
from .jsonrpc import CallEnvelope, encode_error, encode_success, parse_request

MethodHandler = Callable[[Optional[Dict[str, Any]]], Awaitable[Any]]

_EMPTY: Dict[str, object] = {}


async def invoke_tool(
    executor: AffinityExecutor, tool: Tool, arguments: Mapping[str, Any]
) -> Any:
    """Run *tool* on the affinity context and surface failures as internal errors."""

    try:
        return await executor.call_async(tool.handler, arguments)
    except RpcError:
        raise
    except Exception as exc:
        raise InternalError(str(exc) or type(exc).__name__) from exc


class MessageDispatcher:
    """Decodes a request body, routes it by method and encodes the response."""

    def __init__(
        self,
        registry: ToolRegistry,
        executor: AffinityExecutor,
        settings: ServerSettings | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._registry = registry
        self._executor = executor
        self._settings = settings or ServerSettings.from_env()
        self._logger = logger or logging.getLogger("toolhost.rpc")
        self._methods: Dict[str, MethodHandler] = {
            "initialize": self._initialize,
            "initialized": self._empty,
            "notifications/initialized": self._empty,
            "ping": self._empty,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._methods)

    async def handle(self, body: bytes) -> bytes:
        """Process one request body; always returns an encoded envelope."""

        try:
            call = parse_request(body)
        except RpcError as exc:
            self._logger.warning(
                "rpc.rejected", extra={"code": int(exc.code), "error": exc.message}
            )
            return encode_error(None, exc.code, exc.message)

        with request_scope(
            call.method, rpc_id=call.id, has_id=call.has_id, logger=self._logger
        ) as scope:
            try:
                result = await self.execute(call)
            except RpcError as exc:
                scope.fail(exc.code, exc.message)
                return encode_error(call.id, exc.code, exc.message)
            except Exception as exc:  # noqa: BLE001 - reported to the client as -32603
                message = str(exc) or type(exc).__name__
                self._logger.exception("rpc.internal_error", extra=scope.extra())
                scope.fail(ErrorCode.INTERNAL_ERROR, message)
                return encode_error(call.id, ErrorCode.INTERNAL_ERROR, message)

            try:
                return encode_success(call.id, result)
            except (TypeError, ValueError) as exc:
                message = f"Result is not serializable: {exc}"
                scope.fail(ErrorCode.INTERNAL_ERROR, message)
                return encode_error(call.id, ErrorCode.INTERNAL_ERROR, message)

    async def execute(self, call: CallEnvelope) -> Any:
        handler = self._methods.get(call.method)
        if handler is None:
            raise MethodNotFound(f"Unknown method: {call.method}")
        return await handler(call.params)

    async def _empty(self, params: Optional[Dict[str, Any]]) -> Dict[str, object]:
        return dict(_EMPTY)

    async def _initialize(self, params: Optional[Dict[str, Any]]) -> Dict[str, object]:
        result = types.InitializeResult(
            protocolVersion=self._settings.protocol_version,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False)
            ),
            serverInfo=types.Implementation(
                name=self._settings.server_name,
                version=self._settings.server_version,
            ),
        )
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)

    async def _tools_list(self, params: Optional[Dict[str, Any]]) -> Dict[str, object]:
        return self._registry.list_tools()

    async def _tools_call(self, params: Optional[Dict[str, Any]]) -> Dict[str, object]:
        name = params.get("name") if params else None
        if not isinstance(name, str) or not name:
            raise InvalidParams("Missing tool name")

        tool = self._registry.get(name)
        if tool is None:
            raise MethodNotFound(f"Unknown tool: {name}")

        raw_arguments = params.get("arguments") if params else None
        arguments = coerce_arguments(
            tool.params, raw_arguments if isinstance(raw_arguments, dict) else None
        )

        scope = current_request()
        if scope is not None:
            scope.annotate(tool=tool.name)
        increment_counter("tool_calls")
        outcome = await invoke_tool(self._executor, tool, arguments)

        try:
            text = dumps_result(outcome)
        except (TypeError, ValueError) as exc:
            raise InternalError(f"Tool result is not serializable: {exc}") from exc

        result = types.CallToolResult(
            content=[types.TextContent(type="text", text=text)],
            isError=False,
        )
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["MessageDispatcher", "invoke_tool"]
