"""Structured logging for JSON-RPC calls.

Each decoded call gets a :class:`CallScope` that carries the method, the client's
call id and the outcome. ``rpc.start`` and ``rpc.finish`` events share one
correlation id, which is the client's id when the call has one.
"""
from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import monotonic
from typing import Any, Dict, Iterator, Mapping, Optional

_CALL_SCOPE: contextvars.ContextVar["CallScope | None"] = contextvars.ContextVar(
    "toolhost_call_scope", default=None
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_root(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # uvicorn's access log repeats what rpc.finish already records.
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))


@contextmanager
def scoped_timer(
    logger: logging.Logger, event: str, *, extra: Optional[Mapping[str, object]] = None
) -> Iterator[None]:
    """Log *event* at debug level with the elapsed time of the block."""

    started = monotonic()
    try:
        yield
    finally:
        logger.debug(event, extra={**(extra or {}), "duration_s": monotonic() - started})


def correlation_id(rpc_id: Any, has_id: bool) -> str:
    if has_id and rpc_id is not None:
        return str(rpc_id)
    return uuid.uuid4().hex


@dataclass(slots=True)
class CallScope:
    """Per-call state attached to every event the call logs."""

    method: str
    correlation_id: str
    logger: logging.Logger
    rpc_id: Any = None
    notification: bool = False
    metadata: Dict[str, object] = field(default_factory=dict)
    counters: Dict[str, int] = field(default_factory=dict)
    error_code: Optional[int] = None
    error_message: Optional[str] = None
    started: float = field(default_factory=monotonic)

    @property
    def outcome(self) -> str:
        if self.error_code is not None:
            return "error"
        return "notification" if self.notification else "ok"

    def extra(self, **values: object) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "correlation_id": self.correlation_id,
            "method": self.method,
            "rpc_id": self.rpc_id,
            **self.metadata,
        }
        payload.update(values)
        return payload

    def log(
        self, level: int, event: str, *, extra: Optional[Mapping[str, object]] = None
    ) -> None:
        self.logger.log(level, event, extra=self.extra(**(dict(extra) if extra else {})))

    def annotate(self, **values: object) -> None:
        """Attach metadata (for example the tool name) to later events."""

        self.metadata.update(values)

    def increment(self, counter: str, amount: int = 1) -> int:
        value = self.counters.get(counter, 0) + amount
        self.counters[counter] = value
        return value

    def fail(self, code: int, message: str) -> None:
        """Record the error envelope this call is answered with."""

        self.error_code = int(code)
        self.error_message = message


@contextmanager
def request_scope(
    method: str,
    *,
    rpc_id: Any = None,
    has_id: bool = True,
    logger: Optional[logging.Logger] = None,
    extra: Optional[Mapping[str, object]] = None,
) -> Iterator[CallScope]:
    """Scope one decoded call; logs ``rpc.start`` and ``rpc.finish``.

    ``rpc.finish`` is a warning when the call was answered with an error
    envelope, and carries its code and message.
    """

    scope = CallScope(
        method=method,
        correlation_id=correlation_id(rpc_id, has_id),
        logger=logger or logging.getLogger("toolhost.rpc"),
        rpc_id=rpc_id,
        notification=not has_id,
        metadata=dict(extra or {}),
    )
    token = _CALL_SCOPE.set(scope)
    scope.log(logging.DEBUG, "rpc.start", extra={"notification": scope.notification})
    try:
        yield scope
    except Exception as exc:
        scope.fail(-32603, str(exc) or type(exc).__name__)
        scope.logger.exception("rpc.crash", extra=scope.extra())
        raise
    finally:
        finish: Dict[str, object] = {
            "outcome": scope.outcome,
            "duration_s": monotonic() - scope.started,
            "counters": dict(scope.counters),
        }
        if scope.error_code is not None:
            finish["code"] = scope.error_code
            finish["error"] = scope.error_message
        scope.log(
            logging.WARNING if scope.error_code is not None else logging.INFO,
            "rpc.finish",
            extra=finish,
        )
        _CALL_SCOPE.reset(token)


def current_request() -> Optional[CallScope]:
    """Return the scope of the call being handled, if any."""

    return _CALL_SCOPE.get()


def increment_counter(name: str, amount: int = 1) -> None:
    scope = current_request()
    if scope is not None:
        scope.increment(name, amount)


__all__ = [
    "CallScope",
    "LOG_FORMAT",
    "configure_root",
    "correlation_id",
    "current_request",
    "increment_counter",
    "request_scope",
    "scoped_timer",
]
