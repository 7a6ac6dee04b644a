"""Core numerical algorithms for intersector.

This module contains the core algorithms for:

- Polynomial evaluation and real root finding
- Curve algebra (power basis, implicit substitution, arc length)
- Pairwise intersection routines and the shape-pair dispatcher
- Nearest point on a Bezier curve
- Batch intersection across worker processes

All routines are designed to be:
- Stateless (safe for use in worker processes)
- Pure (every call allocates its own result)

Key functions:
- intersect: Intersect two shapes of any supported kinds
- closest_point / closest_t: Nearest point on a Bezier curve

Key classes:
- Polynomial: Coefficients plus closed-form and bisection root finding
- ClosestPointSolver: Graphics Gems nearest-point algorithm
- BatchIntersector: Runs many intersection calls in parallel
"""

from intersector.core.batch import BatchIntersector, intersect_pair
from intersector.core.closest_point import ClosestPointSolver, closest_point, closest_t
from intersector.core.curves import arc_length, circle_polynomial, line_polynomial, power_basis
from intersector.core.intersection import (
    bezier2_bezier2,
    bezier2_bezier3,
    bezier2_line,
    bezier3_bezier3,
    bezier3_line,
    circle_bezier2,
    circle_bezier3,
    circle_circle,
    circle_line,
    find_routine,
    intersect,
    line_line,
)
from intersector.core.polynomial import Polynomial

__all__ = [
    # Batch
    "BatchIntersector",
    # Nearest point
    "ClosestPointSolver",
    # Polynomial engine
    "Polynomial",
    # Curve algebra
    "arc_length",
    # Intersection routines
    "bezier2_bezier2",
    "bezier2_bezier3",
    "bezier2_line",
    "bezier3_bezier3",
    "bezier3_line",
    "circle_bezier2",
    "circle_bezier3",
    "circle_circle",
    "circle_line",
    "circle_polynomial",
    "closest_point",
    "closest_t",
    "find_routine",
    "intersect",
    "intersect_pair",
    "line_line",
    "line_polynomial",
    "power_basis",
]
