"""Runtime configuration helpers for the tool server."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Final, Tuple


def _parse_bool(value: str | None, *, default: bool = False) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    return value in {"1", "true", "yes", "on"}


def _parse_int(value: str | None, *, default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float(value: str | None, *, default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_list(value: str | None) -> Tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_bool(name: str, *, default: bool = False) -> bool:
    return _parse_bool(os.getenv(name), default=default)


def _env_int(name: str, *, default: int) -> int:
    return _parse_int(os.getenv(name), default=default)


def _env_float(name: str, *, default: float) -> float:
    return _parse_float(os.getenv(name), default=default)


SERVER_NAME: Final[str] = "toolhost"
SERVER_VERSION: Final[str] = "1.0.0"
PROTOCOL_VERSION: Final[str] = "2024-11-05"

HOST: Final[str] = os.getenv("TOOLHOST_HOST", "127.0.0.1").strip() or "127.0.0.1"
PORT: Final[int] = _env_int("TOOLHOST_PORT", default=13338)
KEEPALIVE_SECONDS: Final[float] = _env_float("TOOLHOST_KEEPALIVE_SECONDS", default=30.0)
SHUTDOWN_GRACE_SECONDS: Final[float] = _env_float(
    "TOOLHOST_SHUTDOWN_GRACE_SECONDS", default=3.0
)
ADDRESS_BITS: Final[int] = 32 if _env_int("TOOLHOST_ADDRESS_BITS", default=64) == 32 else 64
PROVIDERS: Final[Tuple[str, ...]] = _parse_list(os.getenv("TOOLHOST_PROVIDERS"))
DEBUG: Final[bool] = _env_bool("TOOLHOST_DEBUG", default=False)


@dataclass(frozen=True)
class ServerSettings:
    """Settings shared by the transport, dispatcher and server lifecycle."""

    host: str = HOST
    port: int = PORT
    keepalive_seconds: float = KEEPALIVE_SECONDS
    shutdown_grace_seconds: float = SHUTDOWN_GRACE_SECONDS
    providers: Tuple[str, ...] = field(default=PROVIDERS)
    debug: bool = DEBUG
    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION
    protocol_version: str = PROTOCOL_VERSION

    @classmethod
    def from_env(cls) -> "ServerSettings":
        return cls()

    def with_overrides(self, **changes: object) -> "ServerSettings":
        """Return a copy with every non-``None`` override applied."""

        applied = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **applied)


__all__ = [
    "ADDRESS_BITS",
    "DEBUG",
    "HOST",
    "KEEPALIVE_SECONDS",
    "PORT",
    "PROTOCOL_VERSION",
    "PROVIDERS",
    "SERVER_NAME",
    "SERVER_VERSION",
    "SHUTDOWN_GRACE_SECONDS",
    "ServerSettings",
]
