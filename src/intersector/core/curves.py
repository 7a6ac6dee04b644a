"""Curve algebra for Bezier curves.

Converts curve control points into the forms the intersection engine and
the nearest-point solver work with:
- Power-basis polynomials x(t), y(t)
- Substitution of a curve into an implicit line or a circle equation
- Bernstein control polygon of the squared-distance derivative
- Arc length by recursive section subdivision
"""

from collections.abc import Callable

from intersector.config.settings import DEFAULT_TOLERANCES, ToleranceConfig
from intersector.core.polynomial import Polynomial
from intersector.domain import Bezier2, Bezier3, Circle, LineSegment, Point

CURVE_LENGTH_PRECISION = 31

# Precomputed "z" for cubics: binomial weights of the degree-5 product of the
# degree-3 curve offset and its degree-2 derivative
CUBIC_Z = (
    (1.0, 0.6, 0.3, 0.1),
    (0.4, 0.6, 0.6, 0.4),
    (0.1, 0.3, 0.6, 1.0),
)


def power_basis(
    curve: Bezier2 | Bezier3, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> tuple[Polynomial, Polynomial]:
    """Return the power-basis polynomials (x(t), y(t)) of a curve."""
    alg = curve.algebra
    if isinstance(curve, Bezier3):
        x_coefs = [alg.ax, alg.bx, alg.gx, alg.x0]
        y_coefs = [alg.ay, alg.by, alg.gy, alg.y0]
    else:
        x_coefs = [alg.ax, alg.bx, alg.x0]
        y_coefs = [alg.ay, alg.by, alg.y0]
    return Polynomial.from_config(x_coefs, config), Polynomial.from_config(y_coefs, config)


def implicit_line(line: LineSegment) -> tuple[float, float, float]:
    """Return (nx, ny, c) with nx*x + ny*y + c = 0 on the line through p1, p2."""
    a1, a2 = line.p1, line.p2
    nx = a1.y - a2.y
    ny = a2.x - a1.x
    c = a1.x * a2.y - a2.x * a1.y
    return nx, ny, c


def line_polynomial(
    curve: Bezier2 | Bezier3, line: LineSegment, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> Polynomial:
    """Substitute the curve into the line's implicit equation.

    The roots of the result are the curve parameters where the curve meets
    the infinite line.
    """
    nx, ny, c = implicit_line(line)
    x_poly, y_poly = power_basis(curve, config)
    coefs = [nx * cx + ny * cy for cx, cy in zip(x_poly.coefs, y_poly.coefs)]
    coefs[0] += c
    return Polynomial.from_config(reversed(coefs), config)


def circle_polynomial(
    curve: Bezier2 | Bezier3, circle: Circle, config: ToleranceConfig = DEFAULT_TOLERANCES
) -> Polynomial:
    """Substitute the curve into (x - cx)^2 + (y - cy)^2 - r^2.

    Degree four for quadratic curves and six for cubic curves.
    """
    x_poly, y_poly = power_basis(curve, config)
    x_poly.coefs[0] -= circle.center.x
    y_poly.coefs[0] -= circle.center.y
    result = x_poly.mult(x_poly)
    y_squared = y_poly.mult(y_poly)
    result.coefs = [a + b for a, b in zip(result.coefs, y_squared.coefs)]
    result.coefs[0] -= circle.radius * circle.radius
    return result


def distance_bernstein_form(curve: Bezier3, point: Point) -> list[Point]:
    """Bernstein control polygon of (B(t) - point) . B'(t) for a cubic curve.

    The result has six control points whose x values are i/5 and whose y
    values are the degree-5 Bernstein coefficients. Its roots are the
    parameters where the distance from ``point`` is stationary.
    """
    controls = curve.control_points
    degree = len(controls) - 1
    c = [p - point for p in controls]
    d = [(controls[i + 1] - controls[i]) * degree for i in range(degree)]

    cd_table = [[d[row].dot(c[col]) for col in range(degree + 1)] for row in range(degree)]

    w_degree = 2 * degree - 1
    ys = [0.0] * (w_degree + 1)
    for k in range(w_degree + 1):
        lb = max(0, k - (degree - 1))
        ub = min(k, degree)
        for i in range(lb, ub + 1):
            j = k - i
            ys[i + j] += cd_table[j][i] * CUBIC_Z[j][i]
    return [Point(i / w_degree, y) for i, y in enumerate(ys)]


def _section_length(
    point_at: Callable[[float], Point],
    t0: float,
    t1: float,
    t2: float,
    pt0: Point,
    pt1: Point,
    pt2: Point,
) -> float:
    """Length of the curve between t0 and t2, recursing while too curved.

    t1 is the midpoint; the three points are precomputed by the caller.
    """
    k_epsilon = 1e-5
    k_epsilon2 = 1e-6
    k_max_arc = 1.05
    k_len_ratio = 1.2

    d1 = pt0.distance_to(pt2)
    da = pt0.distance_to(pt1)
    db = pt1.distance_to(pt2)
    d2 = da + db

    if d2 < k_epsilon:
        return d2 + (d2 - d1) / 3

    if (
        (d1 < k_epsilon or d2 / d1 > k_max_arc)
        or (da < k_epsilon2 or db / da > k_len_ratio)
        or (db < k_epsilon2 or da / db > k_len_ratio)
    ):
        mid_t = (t0 + t1) / 2
        len_1 = _section_length(point_at, t0, mid_t, t1, pt0, point_at(mid_t), pt1)
        mid_t = (t1 + t2) / 2
        len_2 = _section_length(point_at, t1, mid_t, t2, pt1, point_at(mid_t), pt2)
        return len_1 + len_2

    return d2 + (d2 - d1) / 3


def arc_length(
    point_at: Callable[[float], Point], precision: int = CURVE_LENGTH_PRECISION
) -> float:
    """Arc length of a parametric curve over t in [0, 1].

    Args:
        point_at: Curve evaluation function
        precision: Number of initial samples (forced odd)

    Returns:
        Estimated arc length
    """
    n_eval_pts = precision if precision & 1 else precision + 1
    ts = [i / (n_eval_pts - 1) for i in range(n_eval_pts)]
    pts = [point_at(t) for t in ts]

    length = 0.0
    for i in range(0, n_eval_pts - 1, 2):
        length += _section_length(point_at, ts[i], ts[i + 1], ts[i + 2], pts[i], pts[i + 1], pts[i + 2])
    return length
