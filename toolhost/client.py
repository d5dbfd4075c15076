"""HTTP client for talking JSON-RPC to a running tool server."""
from __future__ import annotations

import itertools
import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx
from jsonschema import Draft202012Validator

from .protocol.jsonrpc import JSONRPC_VERSION, ResponseEnvelope, parse_response
from .utils.errors import RpcError
from .utils.logging import scoped_timer

logger = logging.getLogger("toolhost.client")

RESPONSE_SCHEMA: Dict[str, object] = {
    "type": "object",
    "required": ["jsonrpc", "id"],
    "properties": {
        "jsonrpc": {"const": JSONRPC_VERSION},
        "id": {"type": ["string", "integer", "null"]},
        "result": {},
        "error": {
            "type": "object",
            "required": ["code", "message"],
            "properties": {
                "code": {"type": "integer"},
                "message": {"type": "string"},
            },
        },
    },
    "oneOf": [{"required": ["result"]}, {"required": ["error"]}],
}


class ToolCallError(RuntimeError):
    """A response envelope that carried an ``error`` member."""

    def __init__(self, code: int, message: str, *, request_id: Any = None) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.request_id = request_id


class ToolClient:
    """Small synchronous wrapper around the message endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        path: str = "/mcp",
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path
        self._session = httpx.Client(
            base_url=self.base_url, timeout=timeout, transport=transport
        )
        self._ids = itertools.count(1)
        self._validator = Draft202012Validator(RESPONSE_SCHEMA)

    def __enter__(self) -> "ToolClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def send(self, method: str, params: Optional[Mapping[str, Any]] = None) -> ResponseEnvelope:
        """POST one call and return the decoded envelope, error or not."""

        request_id = next(self._ids)
        payload: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": request_id, "method": method}
        if params is not None:
            payload["params"] = dict(params)
        with scoped_timer(logger, "client.request", extra={"method": method}):
            response = self._session.post(self.path, json=payload)
        response.raise_for_status()
        errors = sorted(
            self._validator.iter_errors(response.json()), key=lambda err: list(err.path)
        )
        if errors:
            raise RpcError(f"Invalid response: {errors[0].message}")
        return parse_response(response.content)

    def request(self, method: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        envelope = self.send(method, params)
        if envelope.error is not None:
            raise ToolCallError(
                int(envelope.error["code"]),
                str(envelope.error["message"]),
                request_id=envelope.id,
            )
        return envelope.result

    def initialize(self) -> Dict[str, Any]:
        return self.request(
            "initialize",
            {
                "protocolVersion": "2024-11-05",
                "capabilities": {},
                "clientInfo": {"name": "toolhost-client", "version": "1.0.0"},
            },
        )

    def ping(self) -> None:
        self.request("ping")

    def list_tools(self) -> List[Dict[str, Any]]:
        return list(self.request("tools/list")["tools"])

    def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        """Invoke *name* and decode the JSON text it produced."""

        params: Dict[str, Any] = {"name": name}
        if arguments is not None:
            params["arguments"] = dict(arguments)
        result = self.request("tools/call", params)
        for content in result.get("content", []):
            if content.get("type") == "text":
                return json.loads(content["text"])
        raise RpcError(f"Tool {name} returned no text content")


__all__ = ["RESPONSE_SCHEMA", "ToolCallError", "ToolClient"]
