from __future__ import annotations

import math
from typing import List, Sequence

from ..core.agent import NeighborInfo, Nomad
from ..core.topology import GridTopology


def refresh_neighbors(agents: Sequence[Nomad], topology: GridTopology) -> None:
    for agent in agents:
        infos: List[NeighborInfo] = []
        for other in agents:
            if other is agent:
                continue
            infos.append(
                NeighborInfo(
                    agent_id=other.id,
                    direction=topology.direction_to(agent.position, other.position),
                    distance=topology.distance(agent.position, other.position),
                    color=other.color,
                )
            )
        agent.update_neighbors(infos)


def apply_highlights(agents: Sequence[Nomad], radius: float) -> int:
    """Flag every agent whose nearest neighbor is closer than ``radius``, and that neighbor.

    Reads the cached neighbor lists, so ``refresh_neighbors`` must run first.
    Returns the number of highlighted agents.
    """
    by_id = {agent.id: agent for agent in agents}
    for agent in agents:
        agent.highlighted = False
    for agent in agents:
        nearest: NeighborInfo | None = None
        min_distance = math.inf
        for info in agent.neighbors:
            if info.distance < min_distance:
                nearest = info
                min_distance = info.distance
        if nearest is not None and min_distance < radius:
            agent.highlighted = True
            by_id[nearest.agent_id].highlighted = True
    return sum(1 for agent in agents if agent.highlighted)
