"""
Reference Vignette Compositor

CPU version of the vignette fragment pass. A real host runs this on the
GPU; this module exists so the mask contract can be checked and used
offline (frame dumps, previews, tests).

Per pixel, with dist = distance of the pixel's UV from (0.5, 0.5):
    mask   = smoothstep(radius, radius - feather, dist)
    factor = mix(1.0, mask, intensity)
    rgb    = rgb * factor

So pixels at or beyond the radius are scaled by (1 - intensity), pixels
within radius - feather are untouched, and the band in between follows
the smoothstep curve.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from motion_comfort.shared.types import VignetteUniforms

ArrayOrFloat = Union[float, NDArray[np.float32]]


def smoothstep(edge0: float, edge1: float, x: ArrayOrFloat) -> ArrayOrFloat:
    """
    Hermite step with GLSL semantics.

    Reverse ranges (edge0 > edge1) are valid and give a falling curve.
    A zero-width range degrades to a hard step at edge0.
    """
    if edge0 == edge1:
        return np.where(np.asarray(x) < edge0, 0.0, 1.0)
    t = np.clip((np.asarray(x, dtype=np.float32) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def vignette_factor(distance: ArrayOrFloat, uniforms: VignetteUniforms) -> ArrayOrFloat:
    """
    Brightness multiplier for pixels at `distance` from screen center.

    Args:
        distance: Distance in UV space (scalar or array)
        uniforms: Current vignette uniforms

    Returns:
        Multiplier in [1 - intensity, 1]
    """
    if uniforms.feather <= 0.0:
        mask = np.where(np.asarray(distance) < uniforms.radius, 1.0, 0.0)
    else:
        mask = smoothstep(uniforms.radius, uniforms.radius - uniforms.feather, distance)
    return 1.0 + (mask - 1.0) * uniforms.intensity


class VignetteCompositor:
    """
    Applies the vignette to rendered frames.

    Acts as the compositor sink of the pipeline: set_uniforms() is fed
    every frame, apply() darkens a frame with the latest values.

    Example:
        compositor = VignetteCompositor()
        compositor.set_uniforms(mapper.update(intensity))
        out = compositor.apply(frame)
    """

    def __init__(self, uniforms: Optional[VignetteUniforms] = None):
        self.uniforms = uniforms or VignetteUniforms()
        self._distance_cache: Dict[Tuple[int, int], NDArray[np.float32]] = {}

    def set_uniforms(self, uniforms: VignetteUniforms):
        self.uniforms = uniforms

    def distance_map(self, height: int, width: int) -> NDArray[np.float32]:
        """UV distance from center for every pixel center, cached per size."""
        key = (height, width)
        if key not in self._distance_cache:
            u = (np.arange(width, dtype=np.float32) + 0.5) / width - 0.5
            v = (np.arange(height, dtype=np.float32) + 0.5) / height - 0.5
            self._distance_cache[key] = np.sqrt(v[:, np.newaxis] ** 2 + u[np.newaxis, :] ** 2)
        return self._distance_cache[key]

    def apply(
        self,
        frame: NDArray[np.uint8],
        uniforms: Optional[VignetteUniforms] = None,
    ) -> NDArray[np.uint8]:
        """
        Darken frame edges.

        Args:
            frame: H x W grayscale, or H x W x C with C = 2 (gray+alpha),
                3 (RGB) or 4 (RGBA)
            uniforms: Override for the stored uniforms

        Returns:
            New frame, same shape and dtype. Alpha is left untouched.
        """
        uniforms = uniforms or self.uniforms
        if frame.ndim not in (2, 3):
            raise ValueError(f"Expected H x W or H x W x C frame, got shape {frame.shape}")

        height, width = frame.shape[:2]
        factor = vignette_factor(self.distance_map(height, width), uniforms).astype(np.float32)

        result = frame.astype(np.float32)
        if frame.ndim == 2:
            result *= factor
        else:
            # gray+alpha and RGBA carry alpha in the last channel
            channels = frame.shape[2]
            color_channels = channels - 1 if channels in (2, 4) else channels
            result[:, :, :color_channels] *= factor[:, :, np.newaxis]

        return np.clip(np.rint(result), 0, 255).astype(np.uint8)
