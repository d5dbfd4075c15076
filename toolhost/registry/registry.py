"""Catalog of invocable tools keyed by case-insensitive name."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Protocol, runtime_checkable

from .tool import Tool, ToolSpec

logger = logging.getLogger("toolhost.registry")


@runtime_checkable
class ToolProvider(Protocol):
    """Anything that can declare tools."""

    def manifest(self) -> Iterable[ToolSpec]:
        ...


class ToolRegistry:
    """Tool catalog built once at startup.

    Registering a tool whose name matches an existing one (case-insensitively)
    replaces it without a warning: the last registration wins.
    """

    def __init__(self) -> None:
        self._tools: Dict[str, Tool] = {}

    def register(self, provider: ToolProvider) -> List[Tool]:
        manifest = getattr(provider, "manifest", None)
        if not callable(manifest):
            raise TypeError(
                f"{type(provider).__name__} does not declare a tool manifest"
            )
        registered: List[Tool] = []
        for spec in manifest():
            tool = Tool.from_spec(spec)
            self._tools[tool.key] = tool
            registered.append(tool)
        logger.info(
            "registry.register",
            extra={
                "provider": type(provider).__name__,
                "tools": [tool.name for tool in registered],
            },
        )
        return registered

    def register_all(self, providers: Iterable[ToolProvider]) -> None:
        for provider in providers:
            self.register(provider)

    def get(self, name: str) -> Optional[Tool]:
        if not isinstance(name, str):
            return None
        return self._tools.get(name.casefold())

    def names(self) -> List[str]:
        return [tool.name for tool in self._tools.values()]

    def list_tools(self) -> Dict[str, object]:
        return {
            "tools": [
                tool.describe().model_dump(mode="json", by_alias=True, exclude_none=True)
                for tool in self._tools.values()
            ]
        }

    def __iter__(self) -> Iterator[Tool]:
        return iter(list(self._tools.values()))

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None


__all__ = ["ToolProvider", "ToolRegistry"]
