from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from .errors import ConfigurationError
from .topology import Direction, Position

EXCITEMENT_RADIUS = 5.0


class Color(str, Enum):
    RED = "Red"
    BLUE = "Blue"
    GRAY = "Gray"


class Personality(str, Enum):
    OFFENSIVE = "Offensive"
    DEFENSIVE = "Defensive"


class Action(str, Enum):
    IDLE = "Idle"
    WANDER = "Wander"
    PURSUE = "Pursue"
    EVADE = "Evade"
    HOLD = "Hold"


PERSONALITY_BY_COLOR = {
    Color.RED: Personality.OFFENSIVE,
    Color.BLUE: Personality.DEFENSIVE,
}


_FIXED_AFTER_INIT = frozenset({"color", "personality"})


def personality_for(color: Color) -> Personality:
    try:
        return PERSONALITY_BY_COLOR[color]
    except KeyError:
        raise ConfigurationError(f"Color {color!r} has no personality mapping") from None


@dataclass(frozen=True, slots=True)
class NeighborInfo:
    agent_id: int
    direction: Direction
    distance: float
    color: Color


@dataclass(slots=True)
class Nomad:
    id: int
    position: Position
    color: Color
    personality: Personality = field(init=False)
    neighbors: List[NeighborInfo] = field(default_factory=list)
    action: Action = Action.IDLE
    highlighted: bool = False
    excitement_radius: float = EXCITEMENT_RADIUS

    def __post_init__(self) -> None:
        self.personality = personality_for(self.color)

    def __setattr__(self, name: str, value: object) -> None:
        # color and personality are fixed once __post_init__ has run.
        if name in _FIXED_AFTER_INIT and hasattr(self, "personality"):
            raise AttributeError(f"Nomad.{name} cannot change after creation")
        object.__setattr__(self, name, value)

    @property
    def excitement_level(self) -> float:
        close = sum(1 for info in self.neighbors if info.distance < self.excitement_radius)
        return close / 10.0

    def update_neighbors(self, neighbors: List[NeighborInfo]) -> None:
        self.neighbors = neighbors
