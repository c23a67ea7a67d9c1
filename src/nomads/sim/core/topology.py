from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from pygame.math import Vector2

from .errors import ConfigurationError


class Direction(str, Enum):
    N = "N"
    NE = "NE"
    E = "E"
    SE = "SE"
    S = "S"
    SW = "SW"
    W = "W"
    NW = "NW"

    @property
    def offset(self) -> Tuple[int, int]:
        return _OFFSETS[self]


_OFFSETS = {
    Direction.N: (-1, 0),
    Direction.NE: (-1, 1),
    Direction.E: (0, 1),
    Direction.SE: (1, 1),
    Direction.S: (1, 0),
    Direction.SW: (1, -1),
    Direction.W: (0, -1),
    Direction.NW: (-1, -1),
}

# Enumeration order doubles as the tie-break order for every movement decision.
DIRECTIONS: Tuple[Direction, ...] = tuple(Direction)


@dataclass(frozen=True, slots=True)
class Position:
    row: int
    column: int


def wrapped_delta(a: int, b: int, size: int) -> int:
    d = abs(a - b)
    return min(d, size - d)


def normalize(position: Position, rows: int, columns: int) -> Position:
    return Position(position.row % rows, position.column % columns)


def nearest_direction(d_row: float, d_col: float) -> Direction:
    """Map an arbitrary (row, column) offset to the closest compass direction."""
    target = Vector2(d_row, d_col)
    best = DIRECTIONS[0]
    best_distance = math.inf
    for direction in DIRECTIONS:
        distance = target.distance_to(Vector2(direction.offset))
        if distance < best_distance:
            best = direction
            best_distance = distance
    return best


@dataclass(frozen=True, slots=True)
class GridTopology:
    rows: int
    columns: int

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.columns <= 0:
            raise ConfigurationError(f"Grid dimensions must be positive, got {self.rows}x{self.columns}")

    def normalize(self, position: Position) -> Position:
        return normalize(position, self.rows, self.columns)

    def contains(self, position: Position) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.column < self.columns

    def offset(self, position: Position, direction: Direction) -> Position:
        d_row, d_col = direction.offset
        return self.normalize(Position(position.row + d_row, position.column + d_col))

    def distance(self, first: Position, second: Position) -> float:
        d_row = wrapped_delta(first.row, second.row, self.rows)
        d_col = wrapped_delta(first.column, second.column, self.columns)
        return math.sqrt(d_row * d_row + d_col * d_col)

    def direction_to(self, origin: Position, target: Position) -> Direction:
        d_row = (target.row - origin.row + self.rows) % self.rows
        d_col = (target.column - origin.column + self.columns) % self.columns
        if d_row > self.rows / 2:
            d_row -= self.rows
        if d_col > self.columns / 2:
            d_col -= self.columns
        return nearest_direction(d_row, d_col)

    def random_position(self, rng) -> Position:
        return Position(rng.next_int(self.rows), rng.next_int(self.columns))
