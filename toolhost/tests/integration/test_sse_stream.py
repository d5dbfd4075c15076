from __future__ import annotations

import anyio
import pytest

from toolhost.app import create_app
from toolhost.executor import AffinityExecutor
from toolhost.registry import ToolRegistry
from toolhost.utils.config import ServerSettings


def _sse_scope(path: str = "/sse") -> dict[str, object]:
    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.3"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("ascii"),
        "root_path": "",
        "query_string": b"",
        "headers": [(b"accept", b"text/event-stream"), (b"host", b"testserver")],
        "client": ("testclient", 12345),
        "server": ("testserver", 80),
    }


class _Recorder:
    def __init__(self) -> None:
        self.messages: list[dict[str, object]] = []
        self.pinged = anyio.Event()
        self.first_chunk = anyio.Event()
        self._requested = False

    async def receive(self) -> dict[str, object]:
        if not self._requested:
            self._requested = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await anyio.sleep_forever()

    async def send(self, message: dict[str, object]) -> None:
        self.messages.append(message)
        if message["type"] == "http.response.body" and message.get("body"):
            self.first_chunk.set()
            if b": ping" in message["body"]:
                self.pinged.set()

    @property
    def start(self) -> dict[str, object]:
        return next(m for m in self.messages if m["type"] == "http.response.start")

    @property
    def body(self) -> str:
        return "".join(
            m["body"].decode("utf-8")
            for m in self.messages
            if m["type"] == "http.response.body" and m.get("body")
        )


@pytest.mark.anyio
async def test_sse_emits_endpoint_then_pings(
    registry: ToolRegistry, settings: ServerSettings
) -> None:
    app = create_app(registry, AffinityExecutor(), settings, manage_executor=False)
    recorder = _Recorder()
    cancel_scope = anyio.CancelScope()

    async def run_app() -> None:
        with cancel_scope:
            await app(_sse_scope(), recorder.receive, recorder.send)

    async with anyio.create_task_group() as tg:
        tg.start_soon(run_app)
        with anyio.fail_after(2):
            await recorder.pinged.wait()
        assert app.state.server_state.active_streams
        cancel_scope.cancel()

    assert recorder.start["status"] == 200
    headers = {key.decode(): value.decode() for key, value in recorder.start["headers"]}
    assert headers["content-type"].startswith("text/event-stream")
    assert headers["cache-control"] == "no-cache"
    assert headers["x-accel-buffering"] == "no"
    assert headers["access-control-allow-origin"] == "*"

    body = recorder.body
    assert body.startswith("event: endpoint\r\ndata: http://testserver/message\r\n\r\n")
    assert ": ping\r\n\r\n" in body
    assert app.state.server_state.connects == 1


@pytest.mark.anyio
async def test_sse_stream_ends_on_shutdown(registry: ToolRegistry) -> None:
    settings = ServerSettings(keepalive_seconds=30, providers=())
    app = create_app(registry, AffinityExecutor(), settings, manage_executor=False)
    state = app.state.server_state
    recorder = _Recorder()
    finished = anyio.Event()

    async def run_app() -> None:
        await app(_sse_scope("/sse/"), recorder.receive, recorder.send)
        finished.set()

    async with anyio.create_task_group() as tg:
        tg.start_soon(run_app)
        with anyio.fail_after(2):
            await recorder.first_chunk.wait()
        state.request_shutdown()
        with anyio.fail_after(2):
            await finished.wait()

    assert recorder.body.startswith("event: endpoint")
    assert ": ping" not in recorder.body
    assert not state.active_streams
    assert state.shutting_down
