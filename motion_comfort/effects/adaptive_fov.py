"""
Adaptive FOV Controller

Narrows the camera field of view as motion intensity rises:
    intensity 0 -> max_fov (wide, static)
    intensity 1 -> min_fov (narrow, fast)

The FOV itself is smoothed with the same time-scaled factor as the
analyzer so the camera never steps abruptly.
"""

from typing import Optional

from motion_comfort.motion.filters import lerp, smoothing_factor
from motion_comfort.shared.types import PerspectiveCamera
from motion_comfort.utils.config import MotionConfig, DEFAULT_MOTION_CONFIG

# Changes smaller than this (degrees) are not applied to the camera
FOV_TOLERANCE = 0.01


class AdaptiveFovController:
    """
    Maps motion intensity to a smoothed camera FOV.

    Holds no state of its own: the current FOV lives on the camera.
    """

    def __init__(self, config: Optional[MotionConfig] = None,
                 tolerance: float = FOV_TOLERANCE):
        self.config = config or DEFAULT_MOTION_CONFIG
        self.tolerance = tolerance

    def target_fov(self, motion_intensity: float) -> float:
        return lerp(self.config.max_fov, self.config.min_fov, motion_intensity)

    def update(self, current_fov: float, motion_intensity: float, delta_time: float) -> float:
        """
        Step the FOV one frame towards its target.

        Args:
            current_fov: Camera FOV in degrees before this frame
            motion_intensity: Smoothed motion intensity (0 to 1)
            delta_time: Seconds since last frame

        Returns:
            New FOV in degrees
        """
        target = self.target_fov(motion_intensity)
        factor = smoothing_factor(self.config.transition_speed, delta_time)
        return lerp(current_fov, target, factor)

    def apply(self, camera: PerspectiveCamera, motion_intensity: float, delta_time: float) -> bool:
        """
        Update a camera in place.

        The projection is only recomputed when the FOV moves by more than
        the tolerance, which removes micro-jitter updates.

        Note that the gate also stops convergence: once a single frame's
        step falls under the tolerance the camera stays where it is, up to
        tolerance / smoothing_factor(transition_speed, delta_time) short of
        the target (about 0.3 deg at 144fps with the defaults). Only a
        larger target change or a longer frame moves it again.

        Returns:
            True if the camera FOV was changed
        """
        new_fov = self.update(camera.fov, motion_intensity, delta_time)

        if abs(new_fov - camera.fov) <= self.tolerance:
            return False

        camera.fov = new_fov
        camera.update_projection_matrix()
        return True

    def set_config(self, changes=None, **kwargs):
        self.config = self.config.merged(changes, **kwargs)
