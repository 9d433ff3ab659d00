"""
Vignette Mapper

Maps motion intensity to the uniforms of the vignette pass:
    intensity = motion * vignette_max_intensity
    radius    = base_radius - motion * radius_shrink

More motion means a darker and tighter tunnel. Motion intensity is
already smoothed by the analyzer, so no extra smoothing happens here.
Rendering the mask is the compositor's job (see compositor.py).
"""

from typing import Optional

from motion_comfort.shared.types import VignetteUniforms
from motion_comfort.utils.config import MotionConfig, DEFAULT_MOTION_CONFIG

# Fixed constants of the mapping, not part of MotionConfig
BASE_RADIUS = 0.8
RADIUS_SHRINK = 0.3
DEFAULT_FEATHER = 0.4


class VignetteMapper:
    """Produces compositor uniforms from motion intensity."""

    def __init__(self, config: Optional[MotionConfig] = None,
                 feather: float = DEFAULT_FEATHER,
                 base_radius: float = BASE_RADIUS,
                 radius_shrink: float = RADIUS_SHRINK):
        self.config = config or DEFAULT_MOTION_CONFIG
        self.feather = feather
        self.base_radius = base_radius
        self.radius_shrink = radius_shrink

    def initial_uniforms(self) -> VignetteUniforms:
        """Uniforms for pass setup: no darkening, static feather."""
        return VignetteUniforms(
            intensity=0.0,
            radius=self.base_radius,
            feather=self.feather
        )

    def update(self, motion_intensity: float) -> VignetteUniforms:
        return VignetteUniforms(
            intensity=motion_intensity * self.config.vignette_max_intensity,
            radius=self.base_radius - motion_intensity * self.radius_shrink,
            feather=self.feather
        )

    def set_config(self, changes=None, **kwargs):
        self.config = self.config.merged(changes, **kwargs)
