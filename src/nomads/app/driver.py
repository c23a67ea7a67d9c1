from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ..sim.core.config import AppConfig, SimulationConfig
from ..sim.core.world import World
from ..sim.types.snapshot import Snapshot, snapshot_to_payload
from .palette import COLOR_RGB, faded_rgb, highlight_rgb

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Snapshot], None]


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


def render_payload(snapshot: Snapshot) -> Dict[str, Any]:
    """Snapshot payload with display colors resolved for a renderer."""
    payload = snapshot_to_payload(snapshot)
    for view, agent in zip(snapshot.agents, payload["agents"]):
        rgb = highlight_rgb(view.color) if view.highlighted else COLOR_RGB[view.color]
        agent["rgb"] = list(rgb)
    for view, trail in zip(snapshot.trails, payload["trails"]):
        trail["rgb"] = list(faded_rgb(view.color, view.opacity))
    return payload


class SimulationController:
    """Drives a world at a fixed cadence on one event loop.

    Every ``step`` runs under ``_lock`` so a tick never overlaps a reset or
    another tick.
    """

    def __init__(self, config: SimulationConfig, broadcast_interval: int = 1):
        self.config = config
        self.world = World(config)
        self.broadcast_interval = max(1, broadcast_interval)
        self.running = False
        self.tick = 0
        self.speed_multiplier = 1.0
        self.listeners: List[SnapshotListener] = []
        self._snapshot_queue: deque[QueuedSnapshot] = deque()
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    @classmethod
    def from_app_config(cls, app: AppConfig) -> "SimulationController":
        return cls(app.simulation, broadcast_interval=app.broadcast_interval)

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())
        self.running = True
        logger.info("Simulation started at tick %d", self.tick)

    async def stop(self) -> None:
        self.running = False
        logger.info("Simulation paused at tick %d", self.tick)

    async def shutdown(self) -> None:
        self.running = False
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

    async def reset(self) -> None:
        async with self._lock:
            self.world.reset()
            self.tick = 0
        async with self._queue_lock:
            self._snapshot_queue.clear()
        await self._broadcast_snapshot()

    def set_speed(self, multiplier: float) -> float:
        self.speed_multiplier = max(0.1, min(5.0, float(multiplier)))
        return self.speed_multiplier

    async def advance(self) -> None:
        async with self._lock:
            self.world.step(self.tick)
            self.tick += 1
        if self.tick % self.broadcast_interval == 0:
            await self._broadcast_snapshot()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.tick_interval / self.speed_multiplier)
            if not self.running:
                continue
            await self.advance()

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    async def pending(self) -> List[QueuedSnapshot]:
        async with self._queue_lock:
            return list(self._snapshot_queue)

    def _serialize_snapshot(self, snapshot: Snapshot) -> QueuedSnapshot:
        payload = {"type": "snapshot", "tick": snapshot.tick, "payload": render_payload(snapshot)}
        return QueuedSnapshot(tick=snapshot.tick, payload=json.dumps(payload))

    async def _broadcast_snapshot(self) -> None:
        snapshot = self.world.snapshot(self.tick)
        queued = self._serialize_snapshot(snapshot)
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        for listener in self.listeners:
            listener(snapshot)


__all__ = ["SimulationController", "QueuedSnapshot", "render_payload"]
