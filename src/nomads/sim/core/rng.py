from __future__ import annotations

import random
from typing import Any, Sequence, TypeVar

T = TypeVar("T")


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_int(self, max_value: int) -> int:
        return self._random.randrange(max_value)

    def choice(self, items: Sequence[T]) -> T:
        return self._random.choice(items)

    def get_state(self) -> tuple[Any, ...]:
        return self._random.getstate()

    def set_state(self, state: Sequence[Any]) -> None:
        # JSON round-trips turn the nested state tuple into lists.
        version, internal, gauss_next = state
        self._random.setstate((version, tuple(internal), gauss_next))
