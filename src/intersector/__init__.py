"""Intersector - exact and numerically robust planar intersection primitives.

Intersector finds where two planar shapes meet (line segments, circles,
quadratic and cubic Bezier curves, and compound shapes built from them),
finds real roots of the low-degree polynomials those problems reduce to,
and locates the point of a cubic Bezier curve closest to a given point.

Example:
    >>> from intersector import Circle, Point, intersect
    >>> result = intersect(Circle(Point(0, 0), 1), Circle(Point(2, 0), 1))
    >>> result.status
    <IntersectionStatus.TANGENT: 'TANGENT'>
"""

__version__ = "0.1.0"
__author__ = "Intersector contributors"

from intersector.core import (
    ClosestPointSolver,
    Polynomial,
    closest_point,
    closest_t,
    intersect,
)
from intersector.domain import (
    Bezier2,
    Bezier3,
    Circle,
    IntersectionResult,
    IntersectionStatus,
    LineSegment,
    Path,
    Point,
    Polygon,
    Triangle,
)

__all__ = [
    "Bezier2",
    "Bezier3",
    "Circle",
    "ClosestPointSolver",
    "IntersectionResult",
    "IntersectionStatus",
    "LineSegment",
    "Path",
    "Point",
    "Polygon",
    "Polynomial",
    "Triangle",
    "__author__",
    "__version__",
    "closest_point",
    "closest_t",
    "intersect",
]
