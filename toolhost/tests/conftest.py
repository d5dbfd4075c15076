"""Test configuration helpers to ensure package imports work from the repository root."""
from __future__ import annotations

import sys
import threading
import time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
REPO_ROOT = ROOT.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from toolhost.executor import AffinityExecutor  # noqa: E402
from toolhost.providers._shared import tool_error, tool_failure  # noqa: E402
from toolhost.registry import CapabilityProvider, Param, ToolRegistry, ValueKind, tool  # noqa: E402
from toolhost.utils.config import ServerSettings  # noqa: E402


class SampleApi(CapabilityProvider):
    """Tools with observable side effects used across the suite."""

    def __init__(self, delay: float = 0.2) -> None:
        self.delay = delay
        self.intervals: List[Tuple[float, float]] = []
        self.threads: List[str] = []

    @tool(
        "sleep",
        "Sleep and record the execution interval",
        params=[Param("label", ValueKind.STRING, default="")],
    )
    def sleep(self, args: Mapping[str, Any]) -> Dict[str, object]:
        start = time.monotonic()
        self.threads.append(threading.current_thread().name)
        time.sleep(self.delay)
        end = time.monotonic()
        self.intervals.append((start, end))
        return {"label": args["label"], "start": start, "end": end}

    @tool("explode", "Raise an uncaught exception")
    def explode(self, args: Mapping[str, Any]) -> Dict[str, object]:
        raise RuntimeError("kaboom")

    @tool(
        "lookup",
        "Return a domain-level error for unknown keys",
        params=[Param("key", ValueKind.STRING)],
    )
    def lookup(self, args: Mapping[str, Any]) -> Dict[str, object]:
        if args["key"] != "known":
            return tool_error(f"No such key: {args['key']}")
        return {"key": "known", "value": 1}

    @tool(
        "rename",
        "Pretend to rename an address",
        params=[
            Param("address", ValueKind.ADDRESS),
            Param("name", ValueKind.STRING),
        ],
    )
    def rename(self, args: Mapping[str, Any]) -> Dict[str, object]:
        if not args["name"]:
            return tool_failure("Name cannot be empty", address=args["address"])
        return {"ok": True, "address": args["address"], "name": args["name"]}

    @tool("unserializable", "Return a value JSON cannot represent")
    def unserializable(self, args: Mapping[str, Any]) -> float:
        return float("nan")


@pytest.fixture
def anyio_backend() -> str:
    """Force the anyio pytest plugin to use the asyncio backend."""

    return "asyncio"


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(keepalive_seconds=0.05, shutdown_grace_seconds=1.0, providers=())


@pytest.fixture
def sample_api() -> SampleApi:
    return SampleApi()


@pytest.fixture
def registry(settings: ServerSettings, sample_api: SampleApi) -> ToolRegistry:
    from toolhost.app import build_registry

    return build_registry(settings, providers=[sample_api])


@pytest.fixture
def executor() -> Iterator[AffinityExecutor]:
    executor = AffinityExecutor(name="test-affinity")
    executor.start()
    try:
        yield executor
    finally:
        executor.shutdown(timeout=5)
