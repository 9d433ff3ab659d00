"""
Shared type definitions for Motion Comfort.
"""

import math
from dataclasses import dataclass, field
from typing import Sequence, Tuple


@dataclass(frozen=True)
class Vector3:
    """
    3D point or displacement in world units.

    Immutable so a sampled pose can be stored as the previous pose
    without copying.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'Vector3':
        x, y, z = values
        return cls(float(x), float(y), float(z))

    def distance_to(self, other: 'Vector3') -> float:
        """Euclidean distance between two points."""
        return math.sqrt(
            (self.x - other.x) ** 2 +
            (self.y - other.y) ** 2 +
            (self.z - other.z) ** 2
        )

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z))

    def __str__(self):
        return f"Vector3({self.x:.3f}, {self.y:.3f}, {self.z:.3f})"


@dataclass(frozen=True)
class Quaternion:
    """
    Rotation quaternion, stored (x, y, z, w) like most engines do.

    q and -q describe the same rotation (double cover), so every
    comparison between orientations uses the absolute dot product.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    @classmethod
    def identity(cls) -> 'Quaternion':
        return cls(0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'Quaternion':
        x, y, z, w = values
        return cls(float(x), float(y), float(z), float(w))

    @classmethod
    def from_axis_angle(cls, axis: Vector3, angle: float) -> 'Quaternion':
        """Build a unit quaternion rotating `angle` radians around `axis`."""
        length = math.sqrt(axis.x ** 2 + axis.y ** 2 + axis.z ** 2)
        if length == 0.0:
            return cls.identity()
        s = math.sin(angle / 2.0) / length
        return cls(axis.x * s, axis.y * s, axis.z * s, math.cos(angle / 2.0))

    def dot(self, other: 'Quaternion') -> float:
        return (self.x * other.x + self.y * other.y +
                self.z * other.z + self.w * other.w)

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def normalized(self) -> 'Quaternion':
        length = self.length()
        if length == 0.0:
            return Quaternion.identity()
        return Quaternion(self.x / length, self.y / length,
                          self.z / length, self.w / length)

    def negated(self) -> 'Quaternion':
        return Quaternion(-self.x, -self.y, -self.z, -self.w)

    def angle_to(self, other: 'Quaternion') -> float:
        """
        Shortest rotation angle (radians) between two unit quaternions.

        Uses |dot| so that q and -q give 0, never pi.
        """
        d = min(abs(self.dot(other)), 1.0)
        return 2.0 * math.acos(d)

    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in (self.x, self.y, self.z, self.w))

    def __str__(self):
        return (f"Quaternion({self.x:.3f}, {self.y:.3f}, "
                f"{self.z:.3f}, {self.w:.3f})")


@dataclass(frozen=True)
class Pose:
    """Position + orientation of the observer for one frame."""

    position: Vector3 = field(default_factory=Vector3)
    orientation: Quaternion = field(default_factory=Quaternion.identity)


@dataclass(frozen=True)
class VignetteUniforms:
    """
    Values handed to the compositor each frame.

    Units:
        intensity: darkening strength at the edge, 0-1
        radius:    distance from screen center (UV space) where full
                   darkening starts
        feather:   width of the soft band inside the radius
    """

    intensity: float = 0.0
    radius: float = 0.8
    feather: float = 0.4

    def __str__(self):
        return (f"VignetteUniforms(intensity={self.intensity:.3f}, "
                f"radius={self.radius:.3f}, feather={self.feather:.3f})")


class PerspectiveCamera:
    """
    Minimal perspective camera used as the FOV sink.

    The projection matrix is derived state: it only changes when
    update_projection_matrix() is called, which is what the adaptive
    FOV controller tries to avoid doing on imperceptible changes.
    """

    def __init__(self, fov: float = 75.0, aspect: float = 16.0 / 9.0,
                 near: float = 0.1, far: float = 1000.0):
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.projection_updates = 0
        self.projection_matrix: Tuple[float, ...] = ()
        self.update_projection_matrix()

    def update_projection_matrix(self):
        # column-major OpenGL style, fov is vertical in degrees
        f = 1.0 / math.tan(math.radians(self.fov) / 2.0)
        depth = self.near - self.far
        self.projection_matrix = (
            f / self.aspect, 0.0, 0.0, 0.0,
            0.0, f, 0.0, 0.0,
            0.0, 0.0, (self.far + self.near) / depth, -1.0,
            0.0, 0.0, (2.0 * self.far * self.near) / depth, 0.0,
        )
        self.projection_updates += 1

    def __str__(self):
        return f"PerspectiveCamera(fov={self.fov:.2f}, aspect={self.aspect:.3f})"
