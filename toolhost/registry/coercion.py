"""Permissive conversion of loosely-typed client arguments into declared kinds.

Scalar targets never fail: text that cannot be converted falls back to the kind's
zero value. Only a missing required parameter is reported to the client.
"""
from __future__ import annotations

import copy
import math
from typing import Any, Dict, Mapping, Optional, Sequence

from ..utils.address import parse_address, to_unsigned
from ..utils.errors import InvalidParams
from .tool import Param, ValueKind

_ZERO_VALUES: Mapping[ValueKind, Any] = {
    ValueKind.STRING: "",
    ValueKind.BOOLEAN: False,
    ValueKind.INTEGER: 0,
    ValueKind.NUMBER: 0.0,
    ValueKind.ADDRESS: 0,
}


def zero_value(kind: ValueKind) -> Any:
    return _ZERO_VALUES.get(kind)


def _to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return round(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            return 0
    return 0


def _to_number(value: Any) -> float:
    if isinstance(value, (bool, int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return result if math.isfinite(result) else 0.0


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return ""


def _to_address(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return to_unsigned(value)
    if isinstance(value, float):
        return to_unsigned(int(value)) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            return parse_address(value)
        except ValueError:
            return 0
    return 0


_SCALARS = {
    ValueKind.STRING: _to_string,
    ValueKind.BOOLEAN: _to_boolean,
    ValueKind.INTEGER: _to_integer,
    ValueKind.NUMBER: _to_number,
    ValueKind.ADDRESS: _to_address,
}


def coerce_value(value: Any, kind: ValueKind, *, items: Optional[ValueKind] = None) -> Any:
    """Convert *value* to *kind*; ``None`` stays ``None``."""

    if value is None:
        return None

    converter = _SCALARS.get(kind)
    if converter is not None:
        return converter(value)

    if kind is ValueKind.OBJECT:
        return dict(value) if isinstance(value, Mapping) else None

    if kind is ValueKind.INT_MAP:
        if not isinstance(value, Mapping):
            return None
        return {str(key): _to_integer(item) for key, item in value.items()}

    if kind is ValueKind.ARRAY:
        if not isinstance(value, (list, tuple)):
            return None
        if items is None:
            return list(value)
        return [coerce_value(item, items) for item in value]

    raise ValueError(f"Unsupported value kind: {kind!r}")


def coerce_arguments(
    params: Sequence[Param], bag: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    """Build the argument mapping for a tool, in declared parameter order."""

    supplied: Mapping[str, Any] = bag if isinstance(bag, Mapping) else {}
    arguments: Dict[str, Any] = {}
    for param in params:
        value = supplied.get(param.name)
        if value is not None:
            arguments[param.name] = coerce_value(value, param.kind, items=param.items)
        elif not param.required:
            arguments[param.name] = copy.deepcopy(param.default)
        elif param.nullable:
            arguments[param.name] = None
        else:
            raise InvalidParams(f"Missing required parameter: {param.name}")
    return arguments


__all__ = ["coerce_arguments", "coerce_value", "zero_value"]
