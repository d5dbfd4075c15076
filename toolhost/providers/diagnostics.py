"""Built-in tools describing the server itself."""
from __future__ import annotations

import platform
import threading
from typing import Any, Dict, Mapping

from ..registry.registry import ToolRegistry
from ..registry.tool import CapabilityProvider, Param, ValueKind, tool
from ..utils.config import ServerSettings
from ..utils.pagination import filter_items, paginate
from ._shared import tool_error

MAX_ECHO_TIMES = 1000


class DiagnosticsApi(CapabilityProvider):
    """Introspection tools that every server exposes."""

    def __init__(self, registry: ToolRegistry, settings: ServerSettings | None = None) -> None:
        self._registry = registry
        self._settings = settings or ServerSettings.from_env()

    @tool(
        "echo",
        "Echo text back, optionally repeated",
        params=[
            Param("text", ValueKind.STRING, description="Text to echo"),
            Param(
                "times",
                ValueKind.INTEGER,
                default=1,
                description=f"Repeat count, at most {MAX_ECHO_TIMES}",
            ),
        ],
    )
    def echo(self, args: Mapping[str, Any]) -> Dict[str, object]:
        times = min(max(int(args["times"]), 0), MAX_ECHO_TIMES)
        return {"text": args["text"] * times, "times": times}

    @tool("server_info", "Get server name, version and runtime information")
    def server_info(self, args: Mapping[str, Any]) -> Dict[str, object]:
        return {
            "name": self._settings.server_name,
            "version": self._settings.server_version,
            "protocolVersion": self._settings.protocol_version,
            "python": platform.python_version(),
            "thread": threading.current_thread().name,
            "tools": len(self._registry),
        }

    @tool(
        "list_tool_names",
        "List registered tool names, filtered and paged",
        params=[
            Param("filter", ValueKind.STRING, default=None, description="Glob or substring"),
            Param("offset", ValueKind.INTEGER, default=0),
            Param("count", ValueKind.INTEGER, default=50),
        ],
    )
    def list_tool_names(self, args: Mapping[str, Any]) -> Dict[str, object]:
        names = filter_items(self._registry.names(), args["filter"], key=lambda name: name)
        page = paginate(names, args["offset"], args["count"])
        return {
            "items": page.items,
            "total": page.total,
            "offset": page.offset,
            "count": page.count,
            "hasMore": page.has_more,
            "nextOffset": page.next_offset,
        }

    @tool(
        "describe_tool",
        "Get the parameter schema of a registered tool",
        params=[Param("name", ValueKind.STRING, description="Tool name")],
    )
    def describe_tool(self, args: Mapping[str, Any]) -> Dict[str, object]:
        found = self._registry.get(args["name"])
        if found is None:
            return tool_error(f"Tool not found: {args['name']}")
        return {
            "name": found.name,
            "description": found.description,
            "inputSchema": found.input_schema(),
        }


__all__ = ["DiagnosticsApi", "MAX_ECHO_TIMES"]
