"""
Motion Analyzer

Turns the observer's pose, sampled once per frame, into a smoothed
motion intensity in [0, 1]:

    linear speed  -> normalized by linear_threshold  -> * weight_linear
    angular speed -> normalized by angular_threshold -> * weight_angular
    sum, clamp, then exponential smoothing scaled by frame time

Both normalized speeds are clamped before weighting so a very low
threshold on one axis cannot push the other axis out of range.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from motion_comfort import DEBUG
from motion_comfort.motion.filters import clamp, lerp, smoothing_factor
from motion_comfort.shared.types import Vector3, Quaternion
from motion_comfort.utils.config import MotionConfig, DEFAULT_MOTION_CONFIG
from motion_comfort.utils.safety import PoseError

logger = logging.getLogger(__name__)

# frames shorter than this are treated as paused / duplicated
MIN_DELTA_TIME = 0.0001


@dataclass
class MotionState:
    """
    Per-observer state carried between frames.

    previous_position / previous_orientation are only meaningful once
    initialized is True.
    """

    previous_position: Vector3 = field(default_factory=Vector3)
    previous_orientation: Quaternion = field(default_factory=Quaternion.identity)
    smoothed_intensity: float = 0.0
    initialized: bool = False


@dataclass(frozen=True)
class MotionSample:
    """Intermediate values of the last computed frame, for debugging and logging."""

    linear_speed: float
    angular_speed: float
    raw_intensity: float


class MotionAnalyzer:
    """
    Computes motion intensity from consecutive poses.

    Call update() once per frame. The first call only records a baseline
    pose so there is no spike from an undefined previous pose.

    Example:
        analyzer = MotionAnalyzer()
        analyzer.update(position, orientation, dt)
        intensity = analyzer.motion_intensity
    """

    def __init__(self, config: Optional[MotionConfig] = None):
        self.config = config or DEFAULT_MOTION_CONFIG
        self._state = MotionState()
        self._last_sample: Optional[MotionSample] = None

    @property
    def motion_intensity(self) -> float:
        return self._state.smoothed_intensity

    @property
    def state(self) -> MotionState:
        return self._state

    @property
    def last_sample(self) -> Optional[MotionSample]:
        return self._last_sample

    def initialize(self, position: Vector3, orientation: Quaternion):
        """Record the starting pose and reset intensity to zero."""
        self._state.previous_position = position
        self._state.previous_orientation = orientation
        self._state.smoothed_intensity = 0.0
        self._state.initialized = True
        self._last_sample = None

    def update(self, position: Vector3, orientation: Quaternion, delta_time: float) -> float:
        """
        Update motion intensity from the current pose.

        Args:
            position: Current world position of the observer
            orientation: Current world orientation (unit quaternion)
            delta_time: Seconds since the previous frame

        Returns:
            The smoothed motion intensity after this frame

        Raises:
            PoseError: If the pose produces a non-finite speed. State is
                left untouched in that case.
        """
        state = self._state

        if not state.initialized:
            self.initialize(position, orientation)
            return state.smoothed_intensity

        # prevent division by zero on paused / duplicate frames
        if delta_time <= MIN_DELTA_TIME:
            return state.smoothed_intensity

        cfg = self.config

        linear_speed = state.previous_position.distance_to(position) / delta_time
        # angle_to is invariant to q vs -q
        angular_speed = state.previous_orientation.angle_to(orientation) / delta_time

        if not (math.isfinite(linear_speed) and math.isfinite(angular_speed)):
            raise PoseError(
                f"Non-finite speed from pose {position} / {orientation} "
                f"(dt={delta_time})"
            )

        normalized_linear = clamp(linear_speed / cfg.linear_threshold, 0.0, 1.0)
        normalized_angular = clamp(angular_speed / cfg.angular_threshold, 0.0, 1.0)

        raw_intensity = clamp(
            normalized_linear * cfg.weight_linear +
            normalized_angular * cfg.weight_angular,
            0.0,
            1.0
        )

        factor = smoothing_factor(cfg.transition_speed, delta_time)
        state.smoothed_intensity = lerp(state.smoothed_intensity, raw_intensity, factor)

        state.previous_position = position
        state.previous_orientation = orientation

        self._last_sample = MotionSample(linear_speed, angular_speed, raw_intensity)

        if DEBUG:
            logger.debug(
                f"speed={linear_speed:.2f}u/s rot={angular_speed:.2f}rad/s "
                f"raw={raw_intensity:.3f} smoothed={state.smoothed_intensity:.3f}"
            )

        return state.smoothed_intensity

    def set_config(self, changes=None, **kwargs):
        """Merge a partial mapping and/or keyword fields. Never resets state."""
        self.config = self.config.merged(changes, **kwargs)

    def reset(self):
        self._state = MotionState()
        self._last_sample = None
