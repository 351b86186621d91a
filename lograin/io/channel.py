from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping, Protocol

import websockets

from lograin.config.model import ChannelConfig


logger = logging.getLogger(__name__)


class ChannelListener(Protocol):
    def on_connect(self) -> None: ...

    def on_message(self, message: str, level: str) -> None: ...

    def on_disconnect(self, reason: str) -> None: ...


def decode_record(raw: str | bytes) -> tuple[str, str] | None:
    """Parse one pushed `{message, level}` record; None if it is unusable."""

    try:
        data: Any = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, Mapping):
        return None
    message = data.get("message")
    level = data.get("level")
    if not isinstance(message, str) or not isinstance(level, str) or not message or not level:
        return None
    return message, level


class LogChannel:
    """Push channel from the relay; one connection per visualizer session.

    There is no reconnect loop: when the connection ends the
    listener is told why and the session decides what happens next.
    """

    def __init__(self, cfg: ChannelConfig):
        self._cfg = cfg
        self.received = 0
        self.rejected = 0

    async def run(self, listener: ChannelListener) -> str:
        """Stream records into `listener` until the connection ends; returns the reason."""

        try:
            async with websockets.connect(self._cfg.url, ping_interval=20, ping_timeout=20) as ws:
                logger.info("channel_connected", extra={"url": self._cfg.url})
                listener.on_connect()
                async for raw in ws:
                    record = decode_record(raw)
                    if record is None:
                        self.rejected += 1
                        if self.rejected <= 3:
                            logger.warning("channel_payload_rejected", extra={"payload": str(raw)[:200]})
                        continue
                    self.received += 1
                    listener.on_message(*record)
            reason = "closed"
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            reason = f"error: {e}"

        logger.warning(
            "channel_lost",
            extra={"url": self._cfg.url, "reason": reason, "received": self.received, "rejected": self.rejected},
        )
        listener.on_disconnect(reason)
        return reason
