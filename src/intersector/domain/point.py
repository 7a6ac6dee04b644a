"""Planar point type.

Point doubles as a 2D vector: the intersection engine only needs a handful of
operations (difference, scaling, dot/cross products, interpolation and
distances), so they live here rather than in a separate vector class.
"""

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Point:
    """A point (or vector) in the plane.

    Immutable and hashable for use in sets/dicts. Shapes hold points by
    reference, so immutability is what keeps cached curve algebra valid.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Point":
        return Point(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def dot(self, other: "Point") -> float:
        """Dot product with another vector."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Point") -> float:
        """Z component of the cross product with another vector."""
        return self.x * other.y - self.y * other.x

    def lerp(self, other: "Point", t: float) -> "Point":
        """Linear interpolation towards ``other`` (t=0 is self, t=1 is other)."""
        return Point(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def squared_distance_to(self, other: "Point") -> float:
        dx = other.x - self.x
        dy = other.y - self.y
        return dx * dx + dy * dy

    def distance_to(self, other: "Point") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def snaps(self, other: "Point", squared_snap_distance: float) -> bool:
        """Check whether ``other`` lies within the snap distance of this point."""
        return self.squared_distance_to(other) < squared_snap_distance

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Point":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Point instance
        """
        return cls(x=float(data["x"]), y=float(data["y"]))
