"""Application wiring for the tool server."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Iterable

from starlette.applications import Starlette
from starlette.middleware import Middleware

from .error_handlers import install_error_handlers
from .executor import AffinityExecutor
from .protocol.dispatch import MessageDispatcher
from .providers import load_providers
from .providers.diagnostics import DiagnosticsApi
from .registry.registry import ToolProvider, ToolRegistry
from .transport.cors import PermissiveCORSMiddleware
from .transport.routes import make_routes
from .transport.session import ServerState
from .utils.config import ServerSettings

logger = logging.getLogger("toolhost.app")


def build_registry(
    settings: ServerSettings | None = None,
    *,
    providers: Iterable[ToolProvider] = (),
) -> ToolRegistry:
    """Registry holding the diagnostics tools, configured providers and *providers*."""

    settings = settings or ServerSettings.from_env()
    registry = ToolRegistry()
    registry.register(DiagnosticsApi(registry, settings))
    registry.register_all(load_providers(settings.providers))
    registry.register_all(providers)
    return registry


def create_app(
    registry: ToolRegistry,
    executor: AffinityExecutor | None = None,
    settings: ServerSettings | None = None,
    *,
    state: ServerState | None = None,
    manage_executor: bool = True,
) -> Starlette:
    """Build the Starlette app serving *registry*.

    With ``manage_executor`` the app lifespan starts the executor and shuts it down
    again; otherwise the caller owns the executor's lifecycle.
    """

    settings = settings or ServerSettings.from_env()
    executor = executor or AffinityExecutor()
    state = state or ServerState()
    dispatcher = MessageDispatcher(registry, executor, settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        state.bind_loop()
        if manage_executor:
            executor.start()
        state.running = True
        logger.info(
            "server.start",
            extra={"tools": len(registry), "server_name": settings.server_name},
        )
        try:
            yield
        finally:
            state.running = False
            state.request_shutdown()
            if manage_executor:
                await asyncio.to_thread(
                    executor.shutdown, wait=True, timeout=settings.shutdown_grace_seconds
                )
            logger.info("server.stop", extra={"sse_connects": state.connects})

    app = Starlette(
        debug=settings.debug,
        routes=make_routes(dispatcher, registry, executor, state, settings),
        middleware=[Middleware(PermissiveCORSMiddleware)],
        lifespan=lifespan,
    )
    install_error_handlers(app)
    app.state.registry = registry
    app.state.executor = executor
    app.state.dispatcher = dispatcher
    app.state.server_state = state
    app.state.settings = settings
    return app


def create_default_app() -> Starlette:
    """Factory compatible with ``uvicorn --factory``."""

    settings = ServerSettings.from_env()
    return create_app(build_registry(settings), settings=settings)


__all__ = ["build_registry", "create_app", "create_default_app"]
