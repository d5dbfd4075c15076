"""Single-context executor that serializes every tool call.

Tool bodies touch host state that is not safe for concurrent access, so all of
them run on one designated thread. Connection handlers hand calls over through a
queue and wait on a future; at most one call executes at any instant.
"""
from __future__ import annotations

import asyncio
import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from time import monotonic
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger("toolhost.executor")


class CallState(str, Enum):
    IDLE = "idle"
    DISPATCHED = "dispatched"
    EXECUTING = "executing"
    COMPLETED = "completed"


@dataclass(slots=True)
class PendingCall:
    fn: Callable[..., Any]
    args: Tuple[Any, ...]
    kwargs: Dict[str, Any]
    future: Future = field(default_factory=Future)
    state: CallState = CallState.DISPATCHED
    enqueued_at: float = field(default_factory=monotonic)


_STOP = object()


class AffinityExecutor:
    """Runs submitted callables one at a time on a single affinity thread.

    ``start()`` spawns a dedicated worker thread. A host that must keep its own
    thread as the owner (for example a UI main loop) calls ``run_forever()`` on
    that thread instead.
    """

    def __init__(self, name: str = "toolhost-affinity") -> None:
        self._name = name
        self._queue: "queue.Queue[PendingCall | object]" = queue.Queue()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._owner: Optional[int] = None
        self._shutdown = False
        self._state = CallState.IDLE
        self._completed = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CallState:
        return self._state

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def completed(self) -> int:
        return self._completed

    @property
    def running(self) -> bool:
        return self._owner is not None

    def in_affinity_context(self) -> bool:
        return self._owner is not None and self._owner == threading.get_ident()

    def start(self) -> None:
        with self._lock:
            if self._shutdown:
                raise RuntimeError("executor is shut down")
            if self._thread is not None and self._thread.is_alive():
                return
            ready = threading.Event()
            self._thread = threading.Thread(
                target=self.run_forever,
                kwargs={"ready": ready},
                name=self._name,
                daemon=True,
            )
            self._thread.start()
        ready.wait()

    def run_forever(self, *, ready: Optional[threading.Event] = None) -> None:
        """Consume calls on the current thread until :meth:`shutdown`."""

        with self._lock:
            if self._shutdown:
                if ready is not None:
                    ready.set()
                return
            if self._owner is not None:
                raise RuntimeError("executor already has an affinity thread")
            self._owner = threading.get_ident()
        logger.info("executor.start", extra={"thread_name": threading.current_thread().name})
        if ready is not None:
            ready.set()
        try:
            while True:
                item = self._queue.get()
                if item is _STOP:
                    break
                self._execute(item)  # type: ignore[arg-type]
        finally:
            with self._lock:
                self._owner = None
            self._fail_pending()
            logger.info("executor.stop", extra={"completed": self._completed})

    def _execute(self, call: PendingCall) -> None:
        if not call.future.set_running_or_notify_cancel():
            return
        call.state = CallState.EXECUTING
        self._state = CallState.EXECUTING
        started = monotonic()
        try:
            result = call.fn(*call.args, **call.kwargs)
        except BaseException as exc:  # noqa: BLE001 - handed to the waiting caller
            call.future.set_exception(exc)
        else:
            call.future.set_result(result)
        finally:
            call.state = CallState.COMPLETED
            self._completed += 1
            self._state = CallState.IDLE
            logger.debug(
                "executor.call",
                extra={
                    "queued_s": started - call.enqueued_at,
                    "duration_s": monotonic() - started,
                },
            )

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future:
        """Queue *fn* for the affinity thread and return its future."""

        with self._lock:
            if self._shutdown:
                raise RuntimeError("executor is shut down")
            call = PendingCall(fn=fn, args=args, kwargs=kwargs)
            self._queue.put(call)
        return call.future

    def call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run *fn* on the affinity thread and block until it finishes."""

        if self.in_affinity_context():
            return fn(*args, **kwargs)
        return self.submit(fn, *args, **kwargs).result()

    async def call_async(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Await *fn* on the affinity thread without blocking the event loop."""

        return await asyncio.wrap_future(self.submit(fn, *args, **kwargs))

    def shutdown(self, *, wait: bool = True, timeout: Optional[float] = None) -> None:
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
            self._queue.put(_STOP)
            thread = self._thread
        if not self.running:
            self._fail_pending()
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _fail_pending(self) -> None:
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return
            if item is _STOP:
                continue
            call: PendingCall = item  # type: ignore[assignment]
            if call.future.set_running_or_notify_cancel():
                call.future.set_exception(RuntimeError("executor is shut down"))


__all__ = ["AffinityExecutor", "CallState", "PendingCall"]
