"""Intersection result types.

An IntersectionResult is created fresh for every intersection call and owned
by the caller. Its only invariant is that no two stored points lie within the
snap distance of each other.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from intersector.config.settings import SQUARED_SNAP_DISTANCE
from intersector.domain.point import Point


class IntersectionStatus(str, Enum):
    """Classification of an intersection call."""

    NO_INTERSECTION = "NO INTERSECTION"
    INTERSECTION = "INTERSECTION"
    COINCIDENT = "COINCIDENT"
    PARALLEL = "PARALLEL"
    INSIDE = "INSIDE"
    OUTSIDE = "OUTSIDE"
    TANGENT = "TANGENT"


@dataclass
class IntersectionResult:
    """Status plus the deduplicated set of intersection points.

    Point order is insertion order and carries no geometric meaning.

    Attributes:
        status: Classification of the shape pair
        points: Intersection points, pairwise farther apart than the snap distance
        supported: False when no routine exists for the shape pair, so an empty
            point list means "not computed" rather than "no intersection"
        squared_snap_distance: Dedup threshold used by append_point
    """

    status: IntersectionStatus = IntersectionStatus.NO_INTERSECTION
    points: list[Point] = field(default_factory=list)
    supported: bool = True
    squared_snap_distance: float = field(default=SQUARED_SNAP_DISTANCE, repr=False)

    def append_point(self, point: Point) -> bool:
        """Add a point unless an existing point lies within the snap distance.

        Args:
            point: Candidate intersection point

        Returns:
            True if the point was added, False if it snapped to an existing one
        """
        for existing in reversed(self.points):
            if existing.snaps(point, self.squared_snap_distance):
                return False
        self.points.append(point)
        return True

    def merge(self, other: "IntersectionResult") -> None:
        """Append all points of another result, keeping deduplication."""
        for point in other.points:
            self.append_point(point)

    @property
    def has_points(self) -> bool:
        return bool(self.points)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with status, points and supported fields
        """
        return {
            "status": self.status.value,
            "points": [p.to_dict() for p in self.points],
            "supported": self.supported,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IntersectionResult":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a result

        Returns:
            IntersectionResult instance
        """
        return cls(
            status=IntersectionStatus(data["status"]),
            points=[Point.from_dict(p) for p in data["points"]],
            supported=data.get("supported", True),
        )

    def __str__(self) -> str:
        return f"Intersection: {self.status.value}"
