"""Tool declarations, the registry and argument coercion."""
from __future__ import annotations

from .coercion import coerce_arguments, coerce_value
from .registry import ToolProvider, ToolRegistry
from .tool import NO_DEFAULT, CapabilityProvider, Param, Tool, ToolSpec, ValueKind, tool

__all__ = [
    "CapabilityProvider",
    "NO_DEFAULT",
    "Param",
    "Tool",
    "ToolProvider",
    "ToolRegistry",
    "ToolSpec",
    "ValueKind",
    "coerce_arguments",
    "coerce_value",
    "tool",
]
