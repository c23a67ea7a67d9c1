from __future__ import annotations

from typing import Dict, Tuple

from ..sim.core.agent import Color

RGB = Tuple[int, int, int]

BACKGROUND_RGB: RGB = (30, 30, 30)

COLOR_RGB: Dict[Color, RGB] = {
    Color.RED: (255, 69, 0),
    Color.BLUE: (30, 144, 255),
    Color.GRAY: BACKGROUND_RGB,
}


def _mix(a: RGB, b: RGB, t: float) -> RGB:
    t = max(0.0, min(1.0, t))
    return (
        round(a[0] + (b[0] - a[0]) * t),
        round(a[1] + (b[1] - a[1]) * t),
        round(a[2] + (b[2] - a[2]) * t),
    )


def faded_rgb(color: Color, opacity: float) -> RGB:
    """Blend a trail color toward the background by ``1 - opacity``."""
    return _mix(COLOR_RGB[color], BACKGROUND_RGB, 1.0 - opacity)


def highlight_rgb(color: Color, amount: float = 0.4) -> RGB:
    return _mix(COLOR_RGB[color], (255, 255, 255), amount)
