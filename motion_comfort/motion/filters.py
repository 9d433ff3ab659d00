# motion_comfort/motion/filters.py
"""
Filters and small math helpers shared by the analyzer and the effects.

The frame-rate independent smoothing factor lives here so the motion
analyzer and the adaptive FOV controller use exactly the same formula.
"""

import math


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def smoothing_factor(rate: float, delta_time: float) -> float:
    """
    Frame-rate independent lerp factor: 1 - exp(-rate * dt).

    Applying it every frame converges at the same speed whether the
    frames are 8ms or 33ms apart.
    """
    return 1.0 - math.exp(-rate * delta_time)
