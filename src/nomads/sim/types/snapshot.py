from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Tuple

from ..core.agent import Action, Color, Personality
from .metrics import TickMetrics


@dataclass(frozen=True, slots=True)
class AgentView:
    id: int
    row: int
    column: int
    color: Color
    personality: Personality
    action: Action
    excitement: float
    highlighted: bool


@dataclass(frozen=True, slots=True)
class TrailView:
    id: int
    row: int
    column: int
    color: Color
    opacity: float


@dataclass(frozen=True, slots=True)
class SnapshotWorld:
    rows: int
    columns: int


@dataclass(frozen=True, slots=True)
class SnapshotMetadata:
    seed: int
    avoidance_range: float
    decay_rate: float
    config_version: str


@dataclass(frozen=True, slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics | None
    agents: Tuple[AgentView, ...]
    trails: Tuple[TrailView, ...]
    next_trail_id: int
    world: SnapshotWorld
    metadata: SnapshotMetadata


def snapshot_to_payload(snapshot: Snapshot) -> Dict[str, Any]:
    return {
        "tick": snapshot.tick,
        "metrics": None if snapshot.metrics is None else asdict(snapshot.metrics),
        "agents": [
            {**asdict(agent), "color": agent.color.value, "personality": agent.personality.value, "action": agent.action.value}
            for agent in snapshot.agents
        ],
        "trails": [{**asdict(trail), "color": trail.color.value} for trail in snapshot.trails],
        "next_trail_id": snapshot.next_trail_id,
        "world": asdict(snapshot.world),
        "metadata": asdict(snapshot.metadata),
    }


def snapshot_from_payload(payload: Dict[str, Any]) -> Snapshot:
    metrics = payload.get("metrics")
    return Snapshot(
        tick=int(payload["tick"]),
        metrics=None if metrics is None else TickMetrics(**metrics),
        agents=tuple(
            AgentView(
                id=int(agent["id"]),
                row=int(agent["row"]),
                column=int(agent["column"]),
                color=Color(agent["color"]),
                personality=Personality(agent["personality"]),
                action=Action(agent["action"]),
                excitement=float(agent["excitement"]),
                highlighted=bool(agent["highlighted"]),
            )
            for agent in payload["agents"]
        ),
        trails=tuple(
            TrailView(
                id=int(trail["id"]),
                row=int(trail["row"]),
                column=int(trail["column"]),
                color=Color(trail["color"]),
                opacity=float(trail["opacity"]),
            )
            for trail in payload["trails"]
        ),
        next_trail_id=int(payload["next_trail_id"]),
        world=SnapshotWorld(**payload["world"]),
        metadata=SnapshotMetadata(**payload["metadata"]),
    )
