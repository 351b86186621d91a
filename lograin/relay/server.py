"""Relay: accepts log entries over HTTP and pushes them to every visualizer.

POST /logs validates and normalizes `{message, level}`, then broadcasts the
entry to all clients connected on WS /ws. Nothing is stored.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from starlette.websockets import WebSocketState

from lograin.config.model import RelayConfig
from lograin.core.severity import SEVERITY_ORDER, normalize_level


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RelayStats:
    requests: int = 0
    messages: int = 0
    last_requests: int = 0
    last_messages: int = 0

    def roll(self) -> tuple[int, int]:
        """Per-interval deltas since the previous roll."""

        rps = self.requests - self.last_requests
        mps = self.messages - self.last_messages
        self.last_requests = self.requests
        self.last_messages = self.messages
        return rps, mps


class Hub:
    """The set of connected visualizers."""

    def __init__(self) -> None:
        self.clients: set[WebSocket] = set()

    async def broadcast(self, entry: dict[str, Any]) -> int:
        payload = json.dumps(entry, ensure_ascii=False)
        sent = 0
        for ws in list(self.clients):
            if ws.application_state != WebSocketState.CONNECTED:
                continue
            try:
                await ws.send_text(payload)
                sent += 1
            except Exception as e:  # noqa: BLE001
                self.clients.discard(ws)
                logger.info("relay_client_dropped", extra={"error": str(e)})
        return sent


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


def create_app(cfg: RelayConfig | None = None) -> FastAPI:
    """App factory used by uvicorn and tests."""

    cfg = cfg or RelayConfig()
    hub = Hub()
    stats = RelayStats()

    async def _report_stats() -> None:
        while True:
            await asyncio.sleep(cfg.stats_interval_s)
            rps, mps = stats.roll()
            logger.info(
                "relay_stats",
                extra={
                    "requests_per_interval": rps,
                    "messages_per_interval": mps,
                    "total_requests": stats.requests,
                    "total_messages": stats.messages,
                    "clients": len(hub.clients),
                },
            )

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        task = asyncio.create_task(_report_stats(), name="relay-stats")
        logger.info("relay_started", extra={"host": cfg.host, "port": cfg.port})
        try:
            yield
        finally:
            task.cancel()
            logger.info("relay_stopped", extra={"total_messages": stats.messages})

    app = FastAPI(title="lograin relay", version="0.1.0", lifespan=lifespan)
    app.state.hub = hub
    app.state.stats = stats

    @app.post("/logs")
    async def post_log(request: Request) -> Any:
        stats.requests += 1
        try:
            entry = await request.json()
        except ValueError:
            return _bad_request("Request body must be a JSON object")
        if not isinstance(entry, dict):
            return _bad_request("Request body must be a JSON object")

        if not entry.get("message") or not entry.get("level"):
            return _bad_request("Missing required fields: message and level")

        level = normalize_level(entry["level"])
        if level is None:
            return _bad_request(f"Invalid log level. Must be one of: {', '.join(SEVERITY_ORDER)}")
        entry["level"] = level

        await hub.broadcast(entry)
        stats.messages += 1
        return {"status": "success"}

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"ok": True, "clients": len(hub.clients)}

    @app.websocket("/ws")
    async def push_channel(ws: WebSocket) -> None:
        # Registered before accept(); broadcast skips sockets that are not open yet.
        hub.clients.add(ws)
        await ws.accept()
        logger.info("relay_client_connected", extra={"clients": len(hub.clients)})
        try:
            while True:
                await ws.receive_text()
        except WebSocketDisconnect:
            pass
        finally:
            hub.clients.discard(ws)
            logger.info("relay_client_disconnected", extra={"clients": len(hub.clients)})

    return app


def run_relay(cfg: RelayConfig) -> None:
    import uvicorn

    uvicorn.run(create_app(cfg), host=cfg.host, port=cfg.port, log_config=None)
