"""Connection bookkeeping shared by the HTTP routes and the server wrapper."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Optional, Set


@dataclass(slots=True)
class ServerState:
    """Mutable diagnostics for the SSE endpoint and shutdown signalling."""

    connects: int = 0
    active_streams: Set[str] = field(default_factory=set)
    running: bool = False
    shutting_down: bool = False
    shutdown: asyncio.Event = field(default_factory=asyncio.Event)
    loop: Optional[asyncio.AbstractEventLoop] = None

    def bind_loop(self) -> None:
        self.loop = asyncio.get_running_loop()

    def request_shutdown(self) -> None:
        """Wake every open stream so it can close. Safe from any thread."""

        self.shutting_down = True
        loop = self.loop
        if loop is None or loop.is_closed():
            self.shutdown.set()
            return
        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None
        if current is loop:
            self.shutdown.set()
        else:
            loop.call_soon_threadsafe(self.shutdown.set)


__all__ = ["ServerState"]
