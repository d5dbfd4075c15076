"""JSON conversion hook for tool results."""
from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from pydantic import BaseModel


def to_jsonable(value: Any) -> Any:
    """``default=`` hook for :func:`json.dumps` covering common result types."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return str(value)


def dumps_result(value: Any) -> str:
    """Serialize a tool result into the text carried by ``tools/call``."""

    return json.dumps(value, ensure_ascii=False, allow_nan=False, default=to_jsonable)


__all__ = ["dumps_result", "to_jsonable"]
