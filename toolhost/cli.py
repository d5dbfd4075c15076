"""Command line entry point for the tool server."""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from .app import build_registry
from .server import ToolServer
from .utils.config import HOST, KEEPALIVE_SECONDS, PORT, ServerSettings
from .utils.logging import configure_root

logger = logging.getLogger("toolhost.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve registered tools over JSON-RPC with an SSE endpoint"
    )
    parser.add_argument("--host", type=str, default=None, help=f"Bind host, default: {HOST}")
    parser.add_argument("--port", type=int, default=None, help=f"Bind port, default: {PORT}")
    parser.add_argument(
        "--provider",
        action="append",
        default=[],
        metavar="MODULE:ATTR",
        help="Capability provider to register (repeatable)",
    )
    parser.add_argument(
        "--keepalive",
        type=float,
        default=None,
        help=f"Seconds between SSE pings, default: {KEEPALIVE_SECONDS}",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_root(logging.DEBUG if args.debug else logging.INFO)

    base = ServerSettings.from_env()
    settings = base.with_overrides(
        host=args.host,
        port=args.port,
        keepalive_seconds=args.keepalive,
        providers=(*base.providers, *args.provider) if args.provider else None,
        debug=True if args.debug else None,
    )
    registry = build_registry(settings)
    logger.info(
        "cli.start",
        extra={"host": settings.host, "port": settings.port, "tools": registry.names()},
    )
    ToolServer(registry, settings=settings).serve()


if __name__ == "__main__":  # pragma: no cover
    main()
