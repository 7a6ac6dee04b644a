"""Internal Bezier control polygon helpers.

This is an internal module containing helpers shared by curve subdivision
and the nearest-point solver. Not intended for public use.

Control polygons are plain lists of Points of any degree. The nearest-point
solver reuses them for Bernstein polynomials, with x holding the parameter
and y the polynomial value.
"""

import math

from intersector.domain import Point


def split_control_points(points: list[Point], t: float) -> tuple[list[Point], list[Point]]:
    """Split a control polygon at ``t`` using De Casteljau's algorithm.

    Args:
        points: Control points of a Bezier curve of any degree
        t: Split parameter

    Returns:
        Tuple of (left, right) control polygons, each as long as the input
    """
    left = [points[0]]
    right = [points[-1]]
    level = list(points)
    while len(level) > 1:
        level = [a.lerp(b, t) for a, b in zip(level, level[1:])]
        left.append(level[0])
        right.append(level[-1])
    right.reverse()
    return left, right


def control_polygon_flatness(points: list[Point]) -> float:
    """Largest distance of an interior control point from the chord.

    For a zero-length chord the distance to the shared endpoint is used.
    """
    if len(points) <= 2:
        return 0.0
    p0 = points[0]
    chord = points[-1] - p0
    length = math.hypot(chord.x, chord.y)
    if length == 0:
        return max(p0.distance_to(p) for p in points[1:-1])
    return max(abs(chord.cross(p - p0)) / length for p in points[1:-1])


def control_box(points: list[Point]) -> tuple[float, float, float, float]:
    """Return (min_x, min_y, max_x, max_y) of a control polygon."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


def boxes_overlap(
    a: tuple[float, float, float, float],
    b: tuple[float, float, float, float],
    padding: float = 0.0,
) -> bool:
    """Check whether two (min_x, min_y, max_x, max_y) boxes overlap."""
    return (
        a[0] <= b[2] + padding
        and b[0] <= a[2] + padding
        and a[1] <= b[3] + padding
        and b[1] <= a[3] + padding
    )
