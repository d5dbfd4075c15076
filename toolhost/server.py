"""Lifecycle wrapper running the app under uvicorn."""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional

import uvicorn

from .app import create_app
from .executor import AffinityExecutor
from .registry.registry import ToolRegistry
from .transport.session import ServerState
from .utils.config import ServerSettings

logger = logging.getLogger("toolhost.server")


class ServerStartError(RuntimeError):
    """Raised when the listener cannot be started, e.g. the port is taken."""


class _UvicornServer(uvicorn.Server):
    """uvicorn server that wakes open streams before draining connections."""

    def __init__(self, config: uvicorn.Config, on_shutdown: Callable[[], None]) -> None:
        super().__init__(config)
        self._on_shutdown = on_shutdown

    async def shutdown(self, sockets: Optional[List] = None) -> None:
        self._on_shutdown()
        await super().shutdown(sockets=sockets)


class ToolServer:
    """Owns one listener, one executor and one registry.

    ``serve()`` blocks the calling thread. ``start()`` runs the listener on a
    background thread and returns once it accepts connections; ``stop()`` undoes it.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        settings: ServerSettings | None = None,
        executor: AffinityExecutor | None = None,
        run_executor: bool = True,
    ) -> None:
        self.settings = settings or ServerSettings.from_env()
        self.registry = registry
        self.executor = executor or AffinityExecutor()
        self.state = ServerState()
        self.app = create_app(
            registry,
            self.executor,
            self.settings,
            state=self.state,
            manage_executor=False,
        )
        self._run_executor = run_executor
        self._server: Optional[_UvicornServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._server is not None and self._server.started

    @property
    def port(self) -> Optional[int]:
        """Bound port once started; resolves an ephemeral ``port=0``."""

        server = self._server
        if server is None or not server.started:
            return None
        for listener in getattr(server, "servers", []):
            for sock in listener.sockets:
                return sock.getsockname()[1]
        return self.settings.port

    def _build_server(self) -> _UvicornServer:
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level="debug" if self.settings.debug else "info",
            timeout_graceful_shutdown=max(int(self.settings.shutdown_grace_seconds), 1),
            lifespan="on",
        )
        return _UvicornServer(config, self.state.request_shutdown)

    def serve(self) -> None:
        """Run until interrupted, then stop streams and the executor."""

        if self._run_executor:
            self.executor.start()
        self._server = self._build_server()
        logger.info(
            "server.listen",
            extra={"host": self.settings.host, "port": self.settings.port},
        )
        try:
            self._server.run()
        finally:
            self._shutdown_executor()
        if not self._server.started:
            raise ServerStartError(
                f"Could not listen on {self.settings.host}:{self.settings.port}"
            )

    def start(self, timeout: float = 10.0) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        if self._run_executor:
            self.executor.start()
        server = self._build_server()
        self._server = server
        self._thread = threading.Thread(
            target=server.run, name="toolhost-listener", daemon=True
        )
        self._thread.start()

        deadline = time.monotonic() + timeout
        while not server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                server.should_exit = True
                self._thread.join(timeout=1.0)
                self._thread = None
                self._shutdown_executor()
                raise ServerStartError(
                    f"Could not listen on {self.settings.host}:{self.settings.port}"
                )
            time.sleep(0.05)
        logger.info(
            "server.listen",
            extra={"host": self.settings.host, "port": self.port},
        )

    def stop(self) -> None:
        server, thread = self._server, self._thread
        if server is None or thread is None:
            return
        self.state.request_shutdown()
        server.should_exit = True
        grace = self.settings.shutdown_grace_seconds
        thread.join(timeout=grace + 2.0)
        if thread.is_alive():
            logger.warning("server.force_exit", extra={"grace_s": grace})
            server.force_exit = True
            thread.join(timeout=2.0)
        self._thread = None
        self._shutdown_executor()

    def _shutdown_executor(self) -> None:
        if self._run_executor:
            self.executor.shutdown(wait=True, timeout=self.settings.shutdown_grace_seconds)


__all__ = ["ServerStartError", "ToolServer"]
