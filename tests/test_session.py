from __future__ import annotations

import asyncio

import pytest
from helpers import make_config, make_session

from lograin.core.types import ConnectionState
from lograin.io.channel import ChannelListener
from lograin.render.surface import RecordingSurface
from lograin.runtime import visualizer
from lograin.runtime.visualizer import QUIT, ReloadPolicy, VisualizerSession, run_visualizer


class ScriptedChannel:
    """Delivers a fixed batch of records, stays open a while, then closes."""

    def __init__(self, records: list[tuple[str, str]], *, hold_s: float = 0.1, reason: str = "closed"):
        self._records = records
        self._hold_s = hold_s
        self._reason = reason

    async def run(self, listener: ChannelListener) -> str:
        listener.on_connect()
        for message, level in self._records:
            listener.on_message(message, level)
        await asyncio.sleep(self._hold_s)
        listener.on_disconnect(self._reason)
        return self._reason


class HangingChannel:
    async def run(self, listener: ChannelListener) -> str:
        listener.on_connect()
        await asyncio.Event().wait()
        return "unreachable"


def test_session_renders_records_and_reloads_after_close() -> None:
    session, surface, _clock = make_session(lanes=10)
    channel = ScriptedChannel([("alpha", "info"), ("beta", "error"), ("gamma", "debug")])

    reason = asyncio.run(session.run(channel))

    assert reason == "closed"
    assert session.reload.reloads == 1
    assert session.reload.last_reason == "closed"
    assert session.status.connection == ConnectionState.DISCONNECTED
    assert session.state.metrics.total_received == 3
    assert session.state.metrics.total_placed == 3
    assert surface.frames > 0
    assert not session.render_task.running
    assert not session.stats_task.running


def test_closing_the_window_ends_the_session() -> None:
    session, surface, _clock = make_session()
    surface.close()

    assert asyncio.run(session.run(HangingChannel())) == QUIT
    assert session.reload.reloads == 0


def test_closing_during_reload_delay_quits() -> None:
    cfg = make_config(reload_delay_ms=5000)
    surface = RecordingSurface(260, 600)
    policy = ReloadPolicy(delay_ms=5000)
    session = VisualizerSession(cfg, surface, reload=policy)

    async def _run() -> str:
        asyncio.get_running_loop().call_later(0.05, surface.close)
        return await session.run(ScriptedChannel([], hold_s=0, reason="error: refused"))

    assert asyncio.run(asyncio.wait_for(_run(), timeout=2)) == QUIT
    assert policy.reloads == 0
    assert policy.last_reason == "error: refused"


def test_run_visualizer_starts_fresh_sessions_until_closed(monkeypatch: pytest.MonkeyPatch) -> None:
    surface = RecordingSurface(260, 600)
    seen_states: list[object] = []

    class FailingThenHanging:
        attempts = 0

        def __init__(self, _cfg) -> None:  # noqa: ANN001
            pass

        async def run(self, listener: VisualizerSession) -> str:
            type(self).attempts += 1
            seen_states.append(listener.state)
            listener.on_message("hello", "info")
            if type(self).attempts >= 3:
                surface.close()
                await asyncio.Event().wait()
            listener.on_disconnect("error: refused")
            return "error: refused"

    monkeypatch.setattr(visualizer, "LogChannel", FailingThenHanging)

    reloads = asyncio.run(asyncio.wait_for(run_visualizer(make_config(reload_delay_ms=10), surface=surface), timeout=5))

    assert reloads == 2
    assert FailingThenHanging.attempts == 3
    # Every session starts from an empty state.
    assert len({id(s) for s in seen_states}) == 3
    assert all(s.metrics.total_received == 1 for s in seen_states)
