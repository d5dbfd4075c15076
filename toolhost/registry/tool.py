"""Tool declarations: parameter kinds, manifests and the registered tool record."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from mcp import types

ToolHandler = Callable[[Mapping[str, Any]], Any]


class ValueKind(str, Enum):
    """Declared value kind of a tool parameter."""

    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    ADDRESS = "address"
    ARRAY = "array"
    OBJECT = "object"
    INT_MAP = "int_map"

    @property
    def json_type(self) -> str:
        return _JSON_TYPES[self]


_JSON_TYPES: Mapping[ValueKind, str] = {
    ValueKind.STRING: "string",
    ValueKind.BOOLEAN: "boolean",
    ValueKind.INTEGER: "integer",
    ValueKind.NUMBER: "number",
    ValueKind.ADDRESS: "integer",
    ValueKind.ARRAY: "array",
    ValueKind.OBJECT: "object",
    ValueKind.INT_MAP: "object",
}


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"

    def __bool__(self) -> bool:
        return False


NO_DEFAULT: Any = _NoDefault()


@dataclass(frozen=True)
class Param:
    """A single declared tool parameter.

    ``default`` distinguishes "no default" (:data:`NO_DEFAULT`, the parameter is
    required) from an explicit ``None`` default (optional, passed as ``None``).
    ``nullable`` lets a required parameter be omitted and receive ``None``.
    """

    name: str
    kind: ValueKind = ValueKind.STRING
    default: Any = NO_DEFAULT
    nullable: bool = False
    items: Optional[ValueKind] = None
    description: str = ""

    @property
    def required(self) -> bool:
        return self.default is NO_DEFAULT

    def schema(self) -> Dict[str, object]:
        schema: Dict[str, object] = {
            "type": self.kind.json_type,
            "description": self.description or self.name,
        }
        if self.kind is ValueKind.ARRAY and self.items is not None:
            schema["items"] = {"type": self.items.json_type}
        elif self.kind is ValueKind.INT_MAP:
            schema["additionalProperties"] = {"type": "integer"}
        return schema


@dataclass(frozen=True)
class ToolSpec:
    """An operation declared by a capability provider's manifest."""

    name: str
    handler: ToolHandler
    description: str = ""
    params: Sequence[Param] = ()


@dataclass(frozen=True)
class Tool:
    """A registered, immutable tool."""

    name: str
    description: str
    params: Tuple[Param, ...]
    handler: ToolHandler = field(repr=False, compare=False)

    @classmethod
    def from_spec(cls, spec: ToolSpec) -> "Tool":
        name = (spec.name or "").strip()
        if not name:
            raise ValueError("Tool name cannot be empty")
        if not callable(spec.handler):
            raise TypeError(f"Tool {name!r} has a non-callable handler")
        seen: set[str] = set()
        for param in spec.params:
            if param.name in seen:
                raise ValueError(f"Tool {name!r} declares parameter {param.name!r} twice")
            seen.add(param.name)
        return cls(
            name=name,
            description=spec.description or "",
            params=tuple(spec.params),
            handler=spec.handler,
        )

    @property
    def key(self) -> str:
        return self.name.casefold()

    def required(self) -> List[str]:
        return [param.name for param in self.params if param.required]

    def input_schema(self) -> Dict[str, object]:
        return {
            "type": "object",
            "properties": {param.name: param.schema() for param in self.params},
            "required": self.required(),
        }

    def describe(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )


_DECLARATION_ATTR = "__toolhost_declaration__"


@dataclass(frozen=True)
class _Declaration:
    name: str
    description: str
    params: Tuple[Param, ...]


def tool(
    name: str, description: str = "", *, params: Iterable[Param] = ()
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a provider method as a tool.

    The method receives the coerced argument mapping as its only argument::

        @tool("echo", "Echo text back", params=[Param("text")])
        def echo(self, args):
            return {"text": args["text"]}
    """

    declaration = _Declaration(name=name, description=description, params=tuple(params))

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        setattr(func, _DECLARATION_ATTR, declaration)
        return func

    return decorator


class CapabilityProvider:
    """Base class building a manifest from methods marked with :func:`tool`."""

    def manifest(self) -> List[ToolSpec]:
        # Base classes first so tools keep their definition order.
        attrs: Dict[str, None] = {}
        for klass in reversed(type(self).__mro__):
            for attr in vars(klass):
                attrs.setdefault(attr, None)

        specs: List[ToolSpec] = []
        for attr in attrs:
            declaration = getattr(getattr(type(self), attr, None), _DECLARATION_ATTR, None)
            if declaration is None:
                continue
            specs.append(
                ToolSpec(
                    name=declaration.name,
                    description=declaration.description,
                    params=declaration.params,
                    handler=getattr(self, attr),
                )
            )
        return specs


__all__ = [
    "CapabilityProvider",
    "NO_DEFAULT",
    "Param",
    "Tool",
    "ToolHandler",
    "ToolSpec",
    "ValueKind",
    "tool",
]
