"""Nearest point on a Bezier curve to an external point.

Implements the "NearestPoint" algorithm from Graphics Gems (Philip J.
Schneider, 1990). The stationary points of the distance between a cubic
curve and a query point are the roots of a degree-5 polynomial, built here
directly in Bernstein form. Its roots are isolated by recursive
subdivision of the control polygon:

- No sign change in the control polygon: no root in the interval
- One sign change and a flat polygon: the chord's x-intercept is the root
- Otherwise: split at t=0.5 with de Casteljau and recurse on both halves

Recursion stops at ``max_depth``, where the interval midpoint is taken.
Candidates plus both curve endpoints are compared by squared distance.
"""

from intersector.config.settings import DEFAULT_TOLERANCES, ToleranceConfig
from intersector.core._bezier import split_control_points
from intersector.core.curves import distance_bernstein_form
from intersector.domain import Bezier2, Bezier3, Point


def _sign(value: float) -> int:
    return -1 if value < 0 else 1


class ClosestPointSolver:
    """Finds the point of a Bezier curve nearest to a query point.

    Attributes:
        config: Tolerances; ``max_depth`` and ``epsilon`` bound the recursion
    """

    def __init__(self, config: ToleranceConfig | None = None):
        self.config = config or DEFAULT_TOLERANCES

    @staticmethod
    def crossing_count(points: list[Point]) -> int:
        """Count sign changes in the y values of a control polygon (zero counts as positive)."""
        count = 0
        old_sign = _sign(points[0].y)
        for point in points[1:]:
            sign = _sign(point.y)
            if sign != old_sign:
                count += 1
            old_sign = sign
        return count

    def control_polygon_flat_enough(self, points: list[Point]) -> bool:
        """Check whether the control polygon is flat enough to use its chord.

        The interior points' largest deviations above and below the chord
        define two parallel lines; the spread of their x-axis intercepts is
        compared against ``epsilon``.
        """
        first = points[0]
        last = points[-1]
        a = first.y - last.y
        b = last.x - first.x
        c = first.x * last.y - last.x * first.y
        if a == 0:
            return False

        max_above = 0.0
        max_below = 0.0
        for point in points[1:-1]:
            value = a * point.x + b * point.y + c
            if value > max_above:
                max_above = value
            elif value < max_below:
                max_below = value

        # Intercepts of a*x + b*y + (c - dist) = 0 with y = 0
        intercept_1 = -(c - max_above) / a
        intercept_2 = -(c - max_below) / a
        error = max(intercept_1, intercept_2) - min(intercept_1, intercept_2)
        return error < self.config.epsilon

    @staticmethod
    def compute_x_intercept(points: list[Point]) -> float:
        """Where the chord from the first to the last control point crosses y = 0."""
        first = points[0]
        last = points[-1]
        return first.x - first.y * (last.x - first.x) / (last.y - first.y)

    def find_roots(self, points: list[Point], depth: int = 0) -> list[float]:
        """Find the roots of a Bernstein polynomial given as a control polygon.

        Args:
            points: Control polygon with x holding the parameter
            depth: Current recursion depth

        Returns:
            Parameters of the roots, in ascending order
        """
        crossings = self.crossing_count(points)
        if crossings == 0:
            return []
        if depth >= self.config.max_depth:
            return [(points[0].x + points[-1].x) / 2]
        if crossings == 1 and self.control_polygon_flat_enough(points):
            return [self.compute_x_intercept(points)]

        left, right = split_control_points(points, 0.5)
        return self.find_roots(left, depth + 1) + self.find_roots(right, depth + 1)

    def closest(self, curve: Bezier2 | Bezier3, point: Point) -> tuple[Point, float, float]:
        """Find the nearest point on a curve.

        Quadratic curves are elevated to cubics, which leaves the curve
        unchanged.

        Args:
            curve: Quadratic or cubic Bezier curve
            point: Query point

        Returns:
            Tuple of (nearest point, its parameter t, distance to the query)
        """
        if isinstance(curve, Bezier2):
            curve = curve.elevate()

        candidates = self.find_roots(distance_bernstein_form(curve, point))

        best_t = 0.0
        best_point = curve.p1
        best_distance = point.squared_distance_to(best_point)
        for t in [*candidates, 1.0]:
            t = min(max(t, 0.0), 1.0)
            candidate = curve.point_at(t)
            distance = point.squared_distance_to(candidate)
            if distance < best_distance:
                best_t = t
                best_point = candidate
                best_distance = distance
        return best_point, best_t, best_distance**0.5

    def closest_point(self, curve: Bezier2 | Bezier3, point: Point) -> Point:
        return self.closest(curve, point)[0]

    def closest_t(self, curve: Bezier2 | Bezier3, point: Point) -> float:
        return self.closest(curve, point)[1]


def closest_point(
    curve: Bezier2 | Bezier3, point: Point, config: ToleranceConfig | None = None
) -> Point:
    """Nearest point on ``curve`` to ``point``."""
    return ClosestPointSolver(config).closest_point(curve, point)


def closest_t(
    curve: Bezier2 | Bezier3, point: Point, config: ToleranceConfig | None = None
) -> float:
    """Parameter of the nearest point on ``curve`` to ``point``."""
    return ClosestPointSolver(config).closest_t(curve, point)
