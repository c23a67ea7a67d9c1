from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

from pygame.math import Vector2

from ..core.agent import Action, Nomad, Personality
from ..core.errors import UnsupportedOperation
from ..core.rng import DeterministicRng
from ..core.topology import DIRECTIONS, GridTopology, Position

Policy = Callable[[Nomad, Sequence[Nomad], GridTopology, DeterministicRng, float], Tuple[Position, Action]]


def nearby(
    agent: Nomad, agents: Iterable[Nomad], personality: Personality, topology: GridTopology, radius: float
) -> List[Nomad]:
    return [
        other
        for other in agents
        if other is not agent
        and other.personality == personality
        and topology.distance(agent.position, other.position) <= radius
    ]


def random_walk(agent: Nomad, topology: GridTopology, rng: DeterministicRng) -> Position:
    direction = DIRECTIONS[rng.next_int(len(DIRECTIONS))]
    return topology.offset(agent.position, direction)


def evade(
    agent: Nomad, agents: Sequence[Nomad], topology: GridTopology, rng: DeterministicRng, radius: float
) -> Tuple[Position, Action]:
    threats = nearby(agent, agents, Personality.OFFENSIVE, topology, radius)
    if not threats:
        return random_walk(agent, topology, rng), Action.WANDER

    # Scored against absolute grid coordinates; the wrap-around path is ignored here.
    threat_points = [Vector2(t.position.row, t.position.column) for t in threats]
    best: Position | None = None
    best_score = 0.0
    for direction in DIRECTIONS:
        candidate = topology.offset(agent.position, direction)
        point = Vector2(candidate.row, candidate.column)
        score = sum(point.distance_to(threat) for threat in threat_points)
        if score > best_score:
            best = candidate
            best_score = score
    if best is None:
        return agent.position, Action.HOLD
    return best, Action.EVADE


def pursue(
    agent: Nomad, agents: Sequence[Nomad], topology: GridTopology, rng: DeterministicRng, radius: float
) -> Tuple[Position, Action]:
    targets = nearby(agent, agents, Personality.DEFENSIVE, topology, radius)
    if not targets:
        return random_walk(agent, topology, rng), Action.WANDER

    distances = [topology.distance(agent.position, t.position) for t in targets]
    closest = min(distances)
    target = rng.choice([t for t, d in zip(targets, distances) if d == closest])

    best = agent.position
    best_distance = math.inf
    for direction in DIRECTIONS:
        candidate = topology.offset(agent.position, direction)
        distance = topology.distance(candidate, target.position)
        if distance < best_distance:
            best = candidate
            best_distance = distance
    return best, Action.PURSUE


POLICIES: Dict[Personality, Policy] = {
    Personality.OFFENSIVE: pursue,
    Personality.DEFENSIVE: evade,
}


def act(
    agent: Nomad, agents: Sequence[Nomad], topology: GridTopology, rng: DeterministicRng, radius: float
) -> Action:
    """Move ``agent`` one step according to its personality.

    ``agents`` is read live, so agents that already moved this tick are seen
    at their new positions.
    """
    policy = POLICIES.get(agent.personality)
    if policy is None:
        raise UnsupportedOperation(f"Behavior for {agent.personality!r} not implemented")
    position, action = policy(agent, agents, topology, rng, radius)
    agent.position = position
    agent.action = action
    return action
