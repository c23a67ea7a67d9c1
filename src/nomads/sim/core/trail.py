from __future__ import annotations

from dataclasses import dataclass

from .agent import Color
from .topology import Position

DEFAULT_DECAY_RATE = 0.4
# Residue left by repeated float subtraction counts as fully faded.
OPACITY_EPSILON = 1e-9


@dataclass(slots=True)
class Trail:
    id: int
    position: Position
    color: Color
    opacity: float = 1.0

    def fade(self, amount: float = DEFAULT_DECAY_RATE) -> None:
        opacity = self.opacity - amount
        self.opacity = 0.0 if opacity <= OPACITY_EPSILON else opacity

    @property
    def expired(self) -> bool:
        return self.opacity <= 0.0
