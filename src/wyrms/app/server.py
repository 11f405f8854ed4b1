from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Set

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import AppConfig, SimulationConfig
from ..sim.core.geometry import pixel_to_cell
from ..sim.core.grid import TileGrid

logger = logging.getLogger(__name__)

# Tick counts start negative, so "nothing sent yet" needs a value below any tick.
_NOTHING_SENT = -(2**31)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.grid = TileGrid(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._snapshot_queue: deque[QueuedSnapshot] = deque()
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._broadcast_task: asyncio.Task | None = None
        self._ticks_since_broadcast = 0

    @property
    def tick(self) -> int:
        return self.grid.tick_count

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.grid.reset()
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = _NOTHING_SENT
        await self._broadcast_snapshot()

    async def step(self) -> None:
        async with self._lock:
            self.grid.tick()
        self._ticks_since_broadcast += 1
        if self._ticks_since_broadcast >= self.broadcast_interval:
            self._ticks_since_broadcast = 0
            await self._broadcast_snapshot()

    async def click(self, pixel_x: int, pixel_y: int) -> bool:
        """Spawn at the clicked cell, then advance one tick and broadcast."""
        point = pixel_to_cell(pixel_x, pixel_y, self.config.render.cell_size)
        async with self._lock:
            spawned = self.grid.spawn(point) is not None
            self.grid.tick()
        self._ticks_since_broadcast = 0
        await self._broadcast_snapshot()
        return spawned

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.render.tick_interval_ms / 1000.0 / self.speed_multiplier)
            if not self.running:
                continue
            await self.step()

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def _serialize_snapshot(self) -> QueuedSnapshot:
        snapshot = self.grid.snapshot()
        payload = {
            "type": "snapshot",
            "tick": snapshot.tick,
            "payload": {
                "tick": snapshot.tick,
                "metrics": asdict(snapshot.metrics),
                "cells": snapshot.cells,
                "wyrms": snapshot.wyrms,
                "world": asdict(snapshot.world),
                "metadata": asdict(snapshot.metadata),
            },
        }
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, _NOTHING_SENT)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            # A click tick and a timer tick can land on the same tick number.
            if self._snapshot_queue and self._snapshot_queue[-1].tick == queued.tick:
                self._snapshot_queue.pop()
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            logger.info("dropping disconnected client")
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


def create_app(app_config: AppConfig | None = None) -> FastAPI:
    app_config = app_config if app_config is not None else AppConfig()
    controller = SimulationController(app_config.simulation, app_config.broadcast_interval)
    app = FastAPI(title="Wyrms Simulation")
    app.state.controller = controller

    @app.on_event("startup")
    async def _startup() -> None:
        logger.info("starting simulation loop (seed %d)", controller.config.seed)
        await controller.start()

    @app.get("/api/status")
    async def status() -> JSONResponse:
        snapshot = controller.grid.snapshot()
        return JSONResponse(
            {
                "running": controller.running,
                "tick": controller.tick,
                "population": len(controller.grid.wyrms),
                "metrics": asdict(snapshot.metrics),
            }
        )

    @app.post("/api/control/start")
    async def start_simulation() -> JSONResponse:
        controller.running = True
        return JSONResponse({"running": True})

    @app.post("/api/control/stop")
    async def stop_simulation() -> JSONResponse:
        controller.running = False
        return JSONResponse({"running": False})

    @app.post("/api/control/reset")
    async def reset_simulation() -> JSONResponse:
        await controller.reset()
        return JSONResponse({"running": controller.running, "tick": controller.tick})

    @app.post("/api/control/speed")
    async def set_speed(payload: dict) -> JSONResponse:
        speed = float(payload.get("multiplier", 1.0))
        controller.speed_multiplier = max(0.1, min(5.0, speed))
        return JSONResponse({"multiplier": controller.speed_multiplier})

    @app.post("/api/spawn")
    async def spawn(payload: dict) -> JSONResponse:
        spawned = await controller.click(int(payload.get("x", 0)), int(payload.get("y", 0)))
        return JSONResponse({"spawned": spawned, "tick": controller.tick})

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        controller.clients.add(websocket)
        controller._client_last_sent[websocket] = _NOTHING_SENT
        await controller._send_pending_snapshots(websocket)
        try:
            while True:
                message = await websocket.receive_text()
                try:
                    payload = json.loads(message)
                except json.JSONDecodeError:
                    continue
                kind = payload.get("type")
                if kind == "ack":
                    tick = payload.get("tick")
                    if isinstance(tick, int):
                        await controller.acknowledge(tick)
                elif kind == "click":
                    x = payload.get("x")
                    y = payload.get("y")
                    if isinstance(x, int) and isinstance(y, int):
                        await controller.click(x, y)
        except WebSocketDisconnect:
            controller.clients.discard(websocket)
            controller._client_last_sent.pop(websocket, None)

    return app


app = create_app()

__all__ = ["app", "create_app", "SimulationController"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the wyrm simulation over HTTP and websockets")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--broadcast-interval", type=int, default=1)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    simulation = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    uvicorn.run(
        create_app(AppConfig(simulation=simulation, broadcast_interval=args.broadcast_interval)),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
