from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    trails: int
    trails_created: int
    trails_removed: int
    wandering: int
    pursuing: int
    evading: int
    holding: int
    average_excitement: float
    highlighted: int
    tick_duration_ms: float = 0.0
