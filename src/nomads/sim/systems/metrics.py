from __future__ import annotations

from collections import Counter
from typing import Sequence

from ..core.agent import Action, Nomad
from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    agents: Sequence[Nomad],
    trail_count: int,
    trails_created: int,
    trails_removed: int,
    highlighted: int,
    duration_ms: float,
) -> TickMetrics:
    actions = Counter(agent.action for agent in agents)
    population = len(agents)
    excitement = 0.0 if population == 0 else sum(agent.excitement_level for agent in agents) / population
    return TickMetrics(
        tick=tick,
        population=population,
        trails=trail_count,
        trails_created=trails_created,
        trails_removed=trails_removed,
        wandering=actions[Action.WANDER],
        pursuing=actions[Action.PURSUE],
        evading=actions[Action.EVADE],
        holding=actions[Action.HOLD],
        average_excitement=excitement,
        highlighted=highlighted,
        tick_duration_ms=duration_ms,
    )
