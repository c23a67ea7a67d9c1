from __future__ import annotations

import logging
from typing import List, Tuple

from ..core.agent import Color
from ..core.topology import Position
from ..core.trail import Trail

logger = logging.getLogger(__name__)


def drop_trail(trails: List[Trail], trail_id: int, position: Position, color: Color) -> Trail:
    trail = Trail(id=trail_id, position=position, color=color)
    trails.append(trail)
    return trail


def decay_trails(trails: List[Trail], amount: float) -> Tuple[List[Trail], int]:
    """Fade every trail by ``amount`` and return the survivors with the removal count."""
    for trail in trails:
        trail.fade(amount)
    survivors = [trail for trail in trails if not trail.expired]
    removed = len(trails) - len(survivors)
    if removed:
        logger.debug("Removed %d expired trails, %d remain", removed, len(survivors))
    return survivors, removed
