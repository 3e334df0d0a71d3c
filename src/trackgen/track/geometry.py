"""
Geometry helpers - 3D vectors and heading rotation.

Conventions:
- y is up, the driving plane is x/z
- Track starts at the origin facing +z
- Positive heading angles turn left
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np


@dataclass(frozen=True)
class Vec3:
    """Immutable 3D vector used for positions and directions."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_array(cls, values) -> "Vec3":
        """Build a vector from any 3-element sequence or array."""
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def scale(self, factor: float) -> "Vec3":
        return Vec3(self.x * factor, self.y * factor, self.z * factor)

    def with_y(self, y: float) -> "Vec3":
        return Vec3(self.x, y, self.z)

    def advance(self, direction: "Vec3", distance: float) -> "Vec3":
        """Move along a direction in the driving plane, keeping elevation.

        Args:
            direction: Forward direction
            distance: Distance to travel

        Returns:
            New position at the same height
        """
        return Vec3(
            self.x + direction.x * distance,
            self.y,
            self.z + direction.z * distance,
        )

    def planar_distance(self, other: "Vec3") -> float:
        """Distance to another point ignoring elevation."""
        return float(np.hypot(other.x - self.x, other.z - self.z))

    def get_state(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_state(cls, state: dict) -> "Vec3":
        return cls(float(state["x"]), float(state["y"]), float(state["z"]))


ORIGIN = Vec3(0.0, 0.0, 0.0)
FORWARD = Vec3(0.0, 0.0, 1.0)


def rotate_heading(vector: Vec3, angle: float) -> Vec3:
    """Rotate a vector about the vertical axis.

    Args:
        vector: Vector to rotate (y component is preserved)
        angle: Rotation in radians (positive = left)

    Returns:
        Rotated vector
    """
    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    rotation = np.array([
        [cos_a, 0.0, sin_a],
        [0.0, 1.0, 0.0],
        [-sin_a, 0.0, cos_a],
    ])
    return Vec3.from_array(rotation @ vector.as_array())


def interpolate(start: Vec3, end: Vec3, progress: float) -> Vec3:
    """Linear interpolation between two points.

    Args:
        start: Point at progress 0
        end: Point at progress 1
        progress: Fraction along the line

    Returns:
        Interpolated point
    """
    return Vec3(
        start.x + (end.x - start.x) * progress,
        start.y + (end.y - start.y) * progress,
        start.z + (end.z - start.z) * progress,
    )
