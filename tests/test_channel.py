from __future__ import annotations

import asyncio
import json

import websockets

from lograin.config.model import ChannelConfig
from lograin.io.channel import LogChannel, decode_record


class RecordingListener:
    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []

    def on_connect(self) -> None:
        self.events.append(("connect",))

    def on_message(self, message: str, level: str) -> None:
        self.events.append(("message", message, level))

    def on_disconnect(self, reason: str) -> None:
        self.events.append(("disconnect", reason))


def test_decode_record() -> None:
    assert decode_record('{"message": "hi", "level": "info"}') == ("hi", "info")
    assert decode_record(b'{"message": "hi", "level": "error", "extra": 1}') == ("hi", "error")
    assert decode_record("not json") is None
    assert decode_record("[1, 2]") is None
    assert decode_record('{"message": "hi"}') is None
    assert decode_record('{"message": "", "level": "info"}') is None
    assert decode_record('{"message": 5, "level": "info"}') is None


def test_connection_failure_reports_error_reason() -> None:
    listener = RecordingListener()
    channel = LogChannel(ChannelConfig(url="ws://127.0.0.1:1/ws"))

    reason = asyncio.run(channel.run(listener))

    assert reason.startswith("error:")
    assert listener.events == [("disconnect", reason)]


def test_streams_records_until_server_closes() -> None:
    listener = RecordingListener()

    async def handler(ws) -> None:  # noqa: ANN001
        await ws.send(json.dumps({"message": "first", "level": "warning"}))
        await ws.send("garbage")
        await ws.send(json.dumps({"message": "second", "level": "debug"}))

    async def _run() -> tuple[str, LogChannel]:
        async with websockets.serve(handler, "127.0.0.1", 0) as server:
            port = next(iter(server.sockets)).getsockname()[1]
            channel = LogChannel(ChannelConfig(url=f"ws://127.0.0.1:{port}/ws"))
            reason = await asyncio.wait_for(channel.run(listener), timeout=5)
            return reason, channel

    reason, channel = asyncio.run(_run())

    assert reason == "closed"
    assert listener.events == [
        ("connect",),
        ("message", "first", "warning"),
        ("message", "second", "debug"),
        ("disconnect", "closed"),
    ]
    assert channel.received == 2
    assert channel.rejected == 1
