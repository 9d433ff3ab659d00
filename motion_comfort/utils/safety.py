"""
Frame Safety Module

Guards the boundary between the host render loop and the comfort core.

The core assumes valid input. Anything a host can get wrong is checked
here, once per frame, before it reaches the analyzer:
    - elapsed time is capped so a stalled frame (tab in background,
      debugger pause) does not snap the smoothing straight to its target
    - poses must be finite and of the right size
    - orientations are renormalized when they drift off unit length

Usage:
    from motion_comfort.utils.safety import FrameLimiter, as_vector3, as_quaternion

    limiter = FrameLimiter(max_delta_time=0.1)
    dt = limiter.clamp_delta_time(raw_dt)
    position = as_vector3((0.0, 1.6, 0.0))
"""

import logging
import math
from typing import Sequence, Union

from motion_comfort.shared.types import Vector3, Quaternion

logger = logging.getLogger(__name__)

# Longest frame the smoothing is allowed to see (seconds)
DEFAULT_MAX_DELTA_TIME = 0.1

# Orientations further than this from unit length get renormalized
UNIT_TOLERANCE = 1e-3


class PoseError(ValueError):
    """Raised when a pose sample is non-finite or has the wrong dimensions."""


class FrameLimiter:
    """Caps elapsed frame time before it reaches the smoothing filters."""

    def __init__(self, max_delta_time: float = DEFAULT_MAX_DELTA_TIME):
        self.max_delta_time = max_delta_time
        self._warning_count = 0

    @property
    def warning_count(self) -> int:
        return self._warning_count

    def clamp_delta_time(self, delta_time: float) -> float:
        """
        Clamp elapsed time to [0, max_delta_time].

        Negative or non-finite values become 0, which the analyzer treats
        as a paused frame.
        """
        if not math.isfinite(delta_time) or delta_time < 0.0:
            logger.warning(f"Invalid frame time {delta_time}, treating as paused frame")
            self._warning_count += 1
            return 0.0

        if delta_time > self.max_delta_time:
            logger.warning(
                f"Frame time {delta_time * 1000:.1f}ms exceeds "
                f"{self.max_delta_time * 1000:.1f}ms, capping"
            )
            self._warning_count += 1
            return self.max_delta_time

        return delta_time


def as_vector3(value: Union[Vector3, Sequence[float]]) -> Vector3:
    """
    Coerce a position sample into a finite Vector3.

    Raises:
        PoseError: Wrong length or non-finite component
    """
    if not isinstance(value, Vector3):
        try:
            value = Vector3.from_sequence(value)
        except (TypeError, ValueError) as e:
            raise PoseError(f"Position must have 3 numeric components: {e}") from e

    if not value.is_finite():
        raise PoseError(f"Position is not finite: {value}")
    return value


def as_quaternion(value: Union[Quaternion, Sequence[float]]) -> Quaternion:
    """
    Coerce an orientation sample into a finite unit Quaternion.

    Raises:
        PoseError: Wrong length, non-finite component or zero length
    """
    if not isinstance(value, Quaternion):
        try:
            value = Quaternion.from_sequence(value)
        except (TypeError, ValueError) as e:
            raise PoseError(f"Orientation must have 4 numeric components (x, y, z, w): {e}") from e

    if not value.is_finite():
        raise PoseError(f"Orientation is not finite: {value}")

    length = value.length()
    if length == 0.0:
        raise PoseError("Orientation has zero length")

    if abs(length - 1.0) > UNIT_TOLERANCE:
        logger.debug(f"Renormalizing orientation with length {length:.4f}")
        value = value.normalized()

    return value
