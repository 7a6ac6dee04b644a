"""Intersection engine: a dispatcher plus pairwise intersection routines.

Every routine is a pure function of two shapes and a ToleranceConfig that
returns a fresh IntersectionResult. Routines either solve a small linear
system directly or build a Polynomial whose roots are converted back into
points and validated against the parameter domains of both shapes.

Key functions:
- intersect: Dispatch on the unordered pair of shape kinds
- line_line, circle_circle, circle_line: Closed-form routines
- bezier2_line, bezier3_line: Curve substituted into the implicit line
- bezier2_bezier2: Resultant of two quadratic curves
- bezier2_bezier3, bezier3_bezier3: Recursive subdivision with box culling
- circle_bezier2, circle_bezier3: Curve substituted into the circle equation

Degenerate geometry is reported through the result status and never raises.
"""

import logging
import math
from collections.abc import Callable
from typing import Any

from intersector.config.settings import DEFAULT_TOLERANCES, ToleranceConfig
from intersector.core._bezier import (
    boxes_overlap,
    control_box,
    control_polygon_flatness,
    split_control_points,
)
from intersector.core.closest_point import ClosestPointSolver
from intersector.core.curves import circle_polynomial, line_polynomial
from intersector.core.polynomial import Polynomial
from intersector.domain import (
    COMPOUND_KINDS,
    Bezier2,
    Bezier3,
    Circle,
    IntersectionResult,
    IntersectionStatus,
    LineSegment,
    Point,
    ShapeKind,
)
from intersector.exceptions import UnsupportedShapePairError

logger = logging.getLogger(__name__)

Routine = Callable[[Any, Any, ToleranceConfig], IntersectionResult]

# Upper bound on curve piece pairs examined by one subdivision run
MAX_SUBDIVISION_PAIRS = 200_000


def _new_result(config: ToleranceConfig) -> IntersectionResult:
    return IntersectionResult(squared_snap_distance=config.squared_snap_distance)


def _finish(result: IntersectionResult) -> IntersectionResult:
    result.status = (
        IntersectionStatus.INTERSECTION if result.points else IntersectionStatus.NO_INTERSECTION
    )
    return result


def _within_line(line: LineSegment, point: Point, padding: float) -> bool:
    """Check that a point known to lie on the line also lies on the segment.

    Bounded segments use their padded bounding box; rays and infinite lines
    fall back to the projected parameter.
    """
    if line.p1_end and line.p2_end:
        min_x, min_y, max_x, max_y = line.bounding_box()
        return (
            min_x - padding <= point.x <= max_x + padding
            and min_y - padding <= point.y <= max_y + padding
        )
    return line.contains_parameter(line.parameter_of(point), padding)


def line_line(
    a: LineSegment, b: LineSegment, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect two line segments with Cramer's rule.

    A determinant within tolerance means PARALLEL, or COINCIDENT when both
    numerators vanish as well. Otherwise both parameters must lie in [0, 1]
    (with slack, and subject to the end flags).
    """
    result = _new_result(config)
    a1, a2, b1, b2 = a.p1, a.p2, b.p1, b.p2

    ua_t = (b2.x - b1.x) * (a1.y - b1.y) - (b2.y - b1.y) * (a1.x - b1.x)
    ub_t = (a2.x - a1.x) * (a1.y - b1.y) - (a2.y - a1.y) * (a1.x - b1.x)
    u_b = (b2.y - b1.y) * (a2.x - a1.x) - (b2.x - b1.x) * (a2.y - a1.y)

    if abs(u_b) > config.tolerance:
        ua = ua_t / u_b
        ub = ub_t / u_b
        if a.contains_parameter(ua, config.parameter_slack) and b.contains_parameter(
            ub, config.parameter_slack
        ):
            result.status = IntersectionStatus.INTERSECTION
            result.append_point(a1.lerp(a2, ua))
    elif abs(ua_t) <= config.tolerance and abs(ub_t) <= config.tolerance:
        result.status = IntersectionStatus.COINCIDENT
    else:
        result.status = IntersectionStatus.PARALLEL
    return result


def circle_circle(
    a: Circle, b: Circle, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect two circles.

    Exactly one classification applies: COINCIDENT, TANGENT (one point),
    OUTSIDE, INSIDE, or INTERSECTION (two points on the radical line).
    """
    result = _new_result(config)
    tol = config.tolerance
    c1, r1, c2, r2 = a.center, a.radius, b.center, b.radius

    r_max = r1 + r2
    r_min = abs(r1 - r2)
    dist = c1.distance_to(c2)

    if dist <= tol and r_min <= tol:
        result.status = IntersectionStatus.COINCIDENT
    elif abs(dist - r_max) <= tol or (dist > tol and abs(dist - r_min) <= tol):
        result.status = IntersectionStatus.TANGENT
        if dist == 0:
            result.append_point(c1)
        else:
            along = (r1 * r1 - r2 * r2 + dist * dist) / (2 * dist)
            result.append_point(c1.lerp(c2, along / dist))
    elif dist > r_max:
        result.status = IntersectionStatus.OUTSIDE
    elif dist < r_min:
        result.status = IntersectionStatus.INSIDE
    else:
        result.status = IntersectionStatus.INTERSECTION
        along = min((r1 * r1 - r2 * r2 + dist * dist) / (2 * dist), r1)
        h = math.sqrt(max(r1 * r1 - along * along, 0.0))
        mid = c1.lerp(c2, along / dist)
        b_off = h / dist
        dx = c2.x - c1.x
        dy = c2.y - c1.y
        result.append_point(Point(mid.x - b_off * dy, mid.y + b_off * dx))
        result.append_point(Point(mid.x + b_off * dy, mid.y - b_off * dx))
    return result


def circle_line(
    circle: Circle, line: LineSegment, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect a circle with a line segment.

    The line's parametric form substituted into the circle equation gives a
    quadratic in the line parameter; its discriminant separates OUTSIDE,
    TANGENT and secant lines. A secant whose crossings both fall outside the
    segment is INSIDE (segment within the circle) or OUTSIDE.
    """
    result = _new_result(config)
    tol = config.tolerance
    p1, c, r = line.p1, circle.center, circle.radius
    d = line.direction

    a = d.dot(d)
    b = 2 * d.dot(p1 - c)
    cc = c.dot(c) + p1.dot(p1) - 2 * c.dot(p1) - r * r

    if a == 0:
        dist = p1.distance_to(c)
        if abs(dist - r) <= tol:
            result.status = IntersectionStatus.TANGENT
            result.append_point(p1)
        elif dist < r:
            result.status = IntersectionStatus.INSIDE
        else:
            result.status = IntersectionStatus.OUTSIDE
        return result

    deter = b * b - 4 * a * cc
    if abs(deter) <= tol:
        u = -b / (2 * a)
        if line.contains_parameter(u, config.parameter_slack):
            result.status = IntersectionStatus.TANGENT
            result.append_point(line.point_at(u))
        else:
            result.status = IntersectionStatus.OUTSIDE
    elif deter < 0:
        result.status = IntersectionStatus.OUTSIDE
    else:
        e = math.sqrt(deter)
        u1 = (-b + e) / (2 * a)
        u2 = (-b - e) / (2 * a)
        valid1 = line.contains_parameter(u1, config.parameter_slack)
        valid2 = line.contains_parameter(u2, config.parameter_slack)
        if not valid1 and not valid2:
            if (u1 < 0 and u2 < 0) or (u1 > 1 and u2 > 1):
                result.status = IntersectionStatus.OUTSIDE
            else:
                result.status = IntersectionStatus.INSIDE
        else:
            result.status = IntersectionStatus.INTERSECTION
            if valid1:
                result.append_point(line.point_at(u1))
            if valid2:
                result.append_point(line.point_at(u2))
    return result


def _bezier_line(
    curve: Bezier2 | Bezier3, line: LineSegment, config: ToleranceConfig
) -> IntersectionResult:
    result = _new_result(config)
    slack = config.curve_parameter_slack
    d = line.direction
    if d.x == 0 and d.y == 0:
        # A zero-length segment is a point: on the curve or not
        _, _, distance = ClosestPointSolver(config).closest(curve, line.p1)
        if distance <= config.tolerance:
            result.status = IntersectionStatus.INTERSECTION
            result.append_point(line.p1)
        else:
            result.status = IntersectionStatus.NO_INTERSECTION
        return result

    poly = line_polynomial(curve, line, config).simplify()
    if poly.degree < 0:
        # The whole curve lies on the line
        result.status = IntersectionStatus.COINCIDENT
        return result

    for t in poly.get_roots():
        if -slack <= t <= 1 + slack:
            point = curve.point_at(min(max(t, 0.0), 1.0))
            if _within_line(line, point, slack):
                result.append_point(point)
    return _finish(result)


def bezier2_line(
    curve: Bezier2, line: LineSegment, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect a quadratic Bezier curve with a line segment."""
    return _bezier_line(curve, line, config)


def bezier3_line(
    curve: Bezier3, line: LineSegment, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect a cubic Bezier curve with a line segment.

    The curve's power-basis coefficients substituted into the implicit line
    ``nx*x + ny*y + c = 0`` give a cubic in t. Roots in [0, 1] are evaluated
    on the curve and kept if they fall within the segment's padded box.
    """
    return _bezier_line(curve, line, config)


def _inner_roots(coefficients: list[float], config: ToleranceConfig) -> list[float] | None:
    """Roots of a quadratic, or None if it vanishes identically."""
    poly = Polynomial.from_config(coefficients, config).simplify()
    if poly.degree < 0:
        return None
    return poly.get_roots()


def bezier2_bezier2(
    a: Bezier2, b: Bezier2, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect two quadratic Bezier curves through their resultant.

    Eliminating the parameter of ``a`` gives a quartic in the parameter s of
    ``b``. Every root s in [0, 1] is cross-checked by solving the x and y
    equations of ``a`` for its own parameter t: a solution t in [0, 1] at
    which both equations hold within tolerance (scaled by the size of the
    control points) confirms the point.
    """
    result = _new_result(config)
    tol = config.tolerance
    slack = config.curve_parameter_slack
    alg1 = a.algebra
    alg2 = b.algebra
    c12x, c12y, c11x, c11y, c10x, c10y = alg1.ax, alg1.ay, alg1.bx, alg1.by, alg1.x0, alg1.y0
    c22x, c22y, c21x, c21y, c20x, c20y = alg2.ax, alg2.ay, alg2.bx, alg2.by, alg2.x0, alg2.y0

    if abs(c12y) <= tol:
        v0 = c12x * (c10y - c20y)
        v1 = v0 - c11x * c11y
        v3 = c11y * c11y
        coefs = [
            c12x * c22y * c22y,
            2 * c12x * c21y * c22y,
            c12x * c21y * c21y - c22x * v3 - c22y * v0 - c22y * v1,
            -c21x * v3 - c21y * v0 - c21y * v1,
            (c10x - c20x) * v3 + (c10y - c20y) * v1,
        ]
    else:
        v0 = c12x * c22y - c12y * c22x
        v1 = c12x * c21y - c21x * c12y
        v2 = c11x * c12y - c11y * c12x
        v3 = c10y - c20y
        v4 = c12y * (c10x - c20x) - c12x * v3
        v5 = -c11y * v2 + c12y * v4
        v6 = v2 * v2
        coefs = [
            v0 * v0,
            2 * v0 * v1,
            (-c22y * v6 + c12y * v1 * v1 + c12y * v0 * v4 + v0 * v5) / c12y,
            (-c21y * v6 + c12y * v1 * v4 + v1 * v5) / c12y,
            (v3 * v6 + v4 * v5) / c12y,
        ]

    scale = max(abs(c) for c in coefs)
    if scale <= tol:
        result.status = IntersectionStatus.COINCIDENT
        return result
    # Normalised so that dropping near-zero leading terms is scale free
    outer = Polynomial.from_config([c / scale for c in coefs], config).simplify()

    controls = (*a.control_points, *b.control_points)
    reach = tol * max(1.0, *(max(abs(p.x), abs(p.y)) for p in controls))
    for s in outer.get_roots():
        if not -slack <= s <= 1 + slack:
            continue
        s = min(max(s, 0.0), 1.0)
        x_roots = _inner_roots([c12x, c11x, c10x - c20x - s * c21x - s * s * c22x], config)
        y_roots = _inner_roots([c12y, c11y, c10y - c20y - s * c21y - s * s * c22y], config)
        candidates = (x_roots or []) + (y_roots or [])
        target = b.point_at(s)
        for t in candidates:
            if not -slack <= t <= 1 + slack:
                continue
            point = a.point_at(min(max(t, 0.0), 1.0))
            if abs(point.x - target.x) <= reach and abs(point.y - target.y) <= reach:
                result.append_point(target)
                break
    return _finish(result)


def _chord_parameters(
    p0: Point, p1: Point, q0: Point, q1: Point, slack: float
) -> tuple[float, float] | None:
    """Parameters where chord p0-p1 crosses chord q0-q1, if they do.

    Uses a determinant test relative to the chord lengths, since chords of
    deeply subdivided curves are far shorter than the absolute tolerance.
    """
    da = p1 - p0
    db = q1 - q0
    denom = da.cross(db)
    scale = math.sqrt(da.dot(da) * db.dot(db))
    if scale == 0 or abs(denom) <= 1e-12 * scale:
        return None
    r = q0 - p0
    ua = r.cross(db) / denom
    ub = r.cross(da) / denom
    if -slack <= ua <= 1 + slack and -slack <= ub <= 1 + slack:
        return ua, ub
    return None


def _subdivision_intersect(
    a: Bezier3, b: Bezier3, config: ToleranceConfig
) -> IntersectionResult:
    """Intersect two cubic curves by recursive subdivision.

    Pairs of pieces whose control boxes do not overlap are discarded. Once
    both pieces are flat (or the depth limit is hit) their chords are
    intersected and the chord parameter is mapped back onto curve ``a``.
    """
    result = _new_result(config)
    flatness = config.subdivision_flatness
    slack = config.curve_parameter_slack
    stack = [(list(a.control_points), 0.0, 1.0, list(b.control_points), 0)]
    examined = 0

    while stack:
        pa, ta0, ta1, pb, depth = stack.pop()
        examined += 1
        if examined > MAX_SUBDIVISION_PAIRS:
            logger.debug("Subdivision limit reached with %d pairs pending", len(stack))
            break
        if not boxes_overlap(control_box(pa), control_box(pb), flatness):
            continue

        flat_a = control_polygon_flatness(pa) <= flatness
        flat_b = control_polygon_flatness(pb) <= flatness
        if (flat_a and flat_b) or depth >= config.max_subdivision_depth:
            hit = _chord_parameters(pa[0], pa[-1], pb[0], pb[-1], slack)
            if hit is not None:
                t = ta0 + (ta1 - ta0) * min(max(hit[0], 0.0), 1.0)
                result.append_point(a.point_at(t))
            continue

        tm = 0.5 * (ta0 + ta1)
        halves_a = [(pa, ta0, ta1)]
        if not flat_a:
            left, right = split_control_points(pa, 0.5)
            halves_a = [(left, ta0, tm), (right, tm, ta1)]
        halves_b = [pb]
        if not flat_b:
            halves_b = list(split_control_points(pb, 0.5))
        for piece_a, t0, t1 in halves_a:
            for piece_b in halves_b:
                stack.append((piece_a, t0, t1, piece_b, depth + 1))

    return _finish(result)


def bezier3_bezier3(
    a: Bezier3, b: Bezier3, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect two cubic Bezier curves by subdivision and box culling."""
    return _subdivision_intersect(a, b, config)


def bezier2_bezier3(
    a: Bezier2, b: Bezier3, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect a quadratic with a cubic curve (quadratic elevated to cubic)."""
    return _subdivision_intersect(a.elevate(), b, config)


def _circle_bezier(
    circle: Circle, curve: Bezier2 | Bezier3, config: ToleranceConfig
) -> IntersectionResult:
    result = _new_result(config)
    poly = circle_polynomial(curve, circle, config)
    for t in poly.get_roots_in_interval(0.0, 1.0):
        result.append_point(curve.point_at(t))
    if result.points:
        result.status = IntersectionStatus.INTERSECTION
    elif circle.contains_point(curve.p1):
        result.status = IntersectionStatus.INSIDE
    else:
        result.status = IntersectionStatus.OUTSIDE
    return result


def circle_bezier2(
    circle: Circle, curve: Bezier2, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect a circle with a quadratic Bezier curve (degree-4 equation)."""
    return _circle_bezier(circle, curve, config)


def circle_bezier3(
    circle: Circle, curve: Bezier3, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> IntersectionResult:
    """Intersect a circle with a cubic Bezier curve (degree-6 equation)."""
    return _circle_bezier(circle, curve, config)


# Ellipses are not a supported shape, so no ellipse pairs are routed here
_ROUTINES: dict[tuple[ShapeKind, ShapeKind], Routine] = {
    (ShapeKind.LINE_SEGMENT, ShapeKind.LINE_SEGMENT): line_line,
    (ShapeKind.CIRCLE, ShapeKind.CIRCLE): circle_circle,
    (ShapeKind.CIRCLE, ShapeKind.LINE_SEGMENT): circle_line,
    (ShapeKind.BEZIER2, ShapeKind.LINE_SEGMENT): bezier2_line,
    (ShapeKind.BEZIER3, ShapeKind.LINE_SEGMENT): bezier3_line,
    (ShapeKind.BEZIER2, ShapeKind.BEZIER2): bezier2_bezier2,
    (ShapeKind.BEZIER2, ShapeKind.BEZIER3): bezier2_bezier3,
    (ShapeKind.BEZIER3, ShapeKind.BEZIER3): bezier3_bezier3,
    (ShapeKind.CIRCLE, ShapeKind.BEZIER2): circle_bezier2,
    (ShapeKind.CIRCLE, ShapeKind.BEZIER3): circle_bezier3,
}


def find_routine(kind_a: ShapeKind, kind_b: ShapeKind) -> tuple[Routine, bool] | None:
    """Look up the routine for an unordered pair of primitive shape kinds.

    Returns:
        Tuple of (routine, swapped), where swapped means the routine expects
        the shapes in reverse order; None if no routine exists
    """
    routine = _ROUTINES.get((kind_a, kind_b))
    if routine is not None:
        return routine, False
    routine = _ROUTINES.get((kind_b, kind_a))
    if routine is not None:
        return routine, True
    return None


def _parts(shape: Any) -> list[Any]:
    if shape.kind is ShapeKind.PATH:
        return shape.segments()
    return shape.sides()


def _intersect_compound(
    a: Any, b: Any, config: ToleranceConfig, strict: bool
) -> IntersectionResult:
    """Union the intersections of one compound shape's parts with the other shape."""
    result = _new_result(config)
    if getattr(a, "kind", None) not in COMPOUND_KINDS:
        a, b = b, a
    for part in _parts(a):
        sub = intersect(part, b, config, strict=strict)
        if not sub.supported:
            result.supported = False
        result.merge(sub)
    return _finish(result)


def intersect(
    shape_a: Any,
    shape_b: Any,
    config: ToleranceConfig | None = None,
    *,
    strict: bool = False,
) -> IntersectionResult:
    """Intersect two shapes, dispatching on the unordered pair of their kinds.

    Compound shapes (triangles, polygons, paths) are decomposed into their
    sides or segments and the partial results are merged.

    Args:
        shape_a: First shape
        shape_b: Second shape
        config: Tolerances (defaults to the engine-wide defaults)
        strict: Raise instead of returning an unsupported result

    Returns:
        A fresh IntersectionResult. When no routine exists the result has
        status NO_INTERSECTION and ``supported=False``.

    Raises:
        UnsupportedShapePairError: If strict and no routine exists
    """
    if config is None:
        config = DEFAULT_TOLERANCES
    kind_a = getattr(shape_a, "kind", None)
    kind_b = getattr(shape_b, "kind", None)

    if kind_a in COMPOUND_KINDS or kind_b in COMPOUND_KINDS:
        return _intersect_compound(shape_a, shape_b, config, strict)

    match = find_routine(kind_a, kind_b) if kind_a and kind_b else None
    if match is None:
        name_a = kind_a.value if kind_a else type(shape_a).__name__
        name_b = kind_b.value if kind_b else type(shape_b).__name__
        if strict:
            raise UnsupportedShapePairError(name_a, name_b)
        logger.warning("No intersection routine for %s and %s", name_a, name_b)
        result = _new_result(config)
        result.supported = False
        return result

    routine, swapped = match
    if swapped:
        return routine(shape_b, shape_a, config)
    return routine(shape_a, shape_b, config)
