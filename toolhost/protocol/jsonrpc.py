"""JSON-RPC 2.0 request decoding and response envelope encoding."""
from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..utils.serialization import to_jsonable
from ..utils.errors import InvalidRequest, ParseError, make_error

JSONRPC_VERSION = "2.0"


@dataclass(frozen=True)
class CallEnvelope:
    """A decoded request. ``has_id`` is false for notifications."""

    method: str
    id: Any = None
    params: Optional[Dict[str, Any]] = None
    has_id: bool = False


@dataclass(frozen=True)
class ResponseEnvelope:
    id: Any = None
    result: Any = None
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _dumps(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(
        payload,
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
        default=to_jsonable,
    ).encode("utf-8")


def _reject_constant(token: str) -> Any:
    raise ParseError(f"Parse error: {token} is not valid JSON")


def _loads(payload: bytes | str) -> Any:
    if isinstance(payload, (bytes, bytearray)):
        try:
            text = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Parse error: {exc}") from exc
    else:
        text = payload
    if not text or not text.strip():
        raise ParseError("Empty request")
    # JSONDecodeError is a ValueError; so are integer literals over the digit limit.
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except ValueError as exc:
        raise ParseError(f"Parse error: {exc}") from exc
    except RecursionError as exc:
        raise ParseError("Parse error: nesting too deep") from exc


def _valid_id(value: Any) -> bool:
    if isinstance(value, float):
        return math.isfinite(value)
    return True


def parse_request(payload: bytes | str) -> CallEnvelope:
    data = _loads(payload)
    if not isinstance(data, dict):
        raise InvalidRequest("Invalid request: expected a JSON object")
    method = data.get("method")
    if not isinstance(method, str):
        raise InvalidRequest("Invalid request: missing method")
    if not _valid_id(data.get("id")):
        raise InvalidRequest("Invalid request: id must be a finite number, a string or null")
    params = data.get("params")
    return CallEnvelope(
        method=method,
        id=data.get("id"),
        params=params if isinstance(params, dict) else None,
        has_id="id" in data,
    )


def encode_success(id: Any, result: Any) -> bytes:
    return _dumps({"jsonrpc": JSONRPC_VERSION, "id": id, "result": result})


def encode_error(id: Any, code: int, message: str) -> bytes:
    """Encode an error envelope; an id that cannot be encoded is sent as null."""

    error = make_error(code, message)
    try:
        return _dumps({"jsonrpc": JSONRPC_VERSION, "id": id, "error": error})
    except (TypeError, ValueError):
        return _dumps({"jsonrpc": JSONRPC_VERSION, "id": None, "error": error})


def parse_response(payload: bytes | str) -> ResponseEnvelope:
    """Decode a response envelope (client side)."""

    data = _loads(payload)
    if not isinstance(data, dict) or ("result" in data) == ("error" in data):
        raise InvalidRequest("Invalid response: expected exactly one of result or error")
    error = data.get("error")
    if error is not None and not isinstance(error, dict):
        raise InvalidRequest("Invalid response: malformed error member")
    return ResponseEnvelope(id=data.get("id"), result=data.get("result"), error=error)


__all__ = [
    "CallEnvelope",
    "JSONRPC_VERSION",
    "ResponseEnvelope",
    "encode_error",
    "encode_success",
    "parse_request",
    "parse_response",
]
