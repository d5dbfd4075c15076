"""Error codes and exceptions for the JSON-RPC protocol layer."""
from __future__ import annotations

from enum import IntEnum
from typing import Dict, Mapping, Optional

from mcp import types


class ErrorCode(IntEnum):
    """Reserved JSON-RPC error codes surfaced in response envelopes."""

    PARSE_ERROR = types.PARSE_ERROR
    INVALID_REQUEST = types.INVALID_REQUEST
    METHOD_NOT_FOUND = types.METHOD_NOT_FOUND
    INVALID_PARAMS = types.INVALID_PARAMS
    INTERNAL_ERROR = types.INTERNAL_ERROR


_DEFAULT_MESSAGES: Mapping[ErrorCode, str] = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}


class RpcError(Exception):
    """Protocol-level failure carrying a JSON-RPC error code."""

    code: int = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: Optional[str] = None, *, code: Optional[int] = None):
        if code is not None:
            self.code = _resolve(code)
        self.message = message if message else _default_message(self.code)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, object]:
        return make_error(self.code, self.message)


class ParseError(RpcError):
    code = ErrorCode.PARSE_ERROR


class InvalidRequest(RpcError):
    code = ErrorCode.INVALID_REQUEST


class MethodNotFound(RpcError):
    code = ErrorCode.METHOD_NOT_FOUND


class InvalidParams(RpcError):
    code = ErrorCode.INVALID_PARAMS


class InternalError(RpcError):
    code = ErrorCode.INTERNAL_ERROR


def _resolve(code: int) -> int:
    """Reserved codes become :class:`ErrorCode` members; others stay plain ints."""

    try:
        return ErrorCode(code)
    except ValueError:
        return int(code)


def _default_message(code: int) -> str:
    return _DEFAULT_MESSAGES.get(code, "Error")  # type: ignore[call-overload]


def make_error(code: int, message: Optional[str] = None) -> Dict[str, object]:
    """Create the JSON-serialisable ``error`` member of a response envelope.

    Application code may use codes outside the reserved range.
    """

    resolved = _resolve(code)
    return {"code": int(resolved), "message": message or _default_message(resolved)}


__all__ = [
    "ErrorCode",
    "InternalError",
    "InvalidParams",
    "InvalidRequest",
    "RpcError",
    "MethodNotFound",
    "ParseError",
    "make_error",
]
