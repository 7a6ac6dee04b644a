"""Domain models for intersector.

This module contains the value types the engine works on. All models are
designed to be:

- Cheap to copy and safe to share read-only between calls
- Serializable for inter-process communication (batch processing)
- Independent of the numerical algorithms that consume them

Key classes:
- Point: A 2D point / vector
- LineSegment, Circle, Bezier2, Bezier3: Primitive shapes
- Triangle, Polygon, Path: Compound shapes decomposed by the engine
- IntersectionResult: Status plus deduplicated intersection points
"""

from intersector.domain.point import Point
from intersector.domain.result import IntersectionResult, IntersectionStatus
from intersector.domain.shapes import (
    COMPOUND_KINDS,
    Bezier2,
    Bezier3,
    Circle,
    CubicAlgebra,
    LineSegment,
    Path,
    PathSegment,
    Polygon,
    QuadraticAlgebra,
    Shape,
    ShapeKind,
    Triangle,
    shape_from_dict,
)

__all__: list[str] = [
    # Enums
    "IntersectionStatus",
    "ShapeKind",
    "COMPOUND_KINDS",
    # Core types
    "Point",
    "LineSegment",
    "Circle",
    "Bezier2",
    "Bezier3",
    "QuadraticAlgebra",
    "CubicAlgebra",
    "Triangle",
    "Polygon",
    "Path",
    "PathSegment",
    "Shape",
    "IntersectionResult",
    "shape_from_dict",
]
