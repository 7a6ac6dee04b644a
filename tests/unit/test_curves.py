"""Tests for curve algebra and control polygon helpers."""

import math

import pytest

from intersector.core._bezier import (
    boxes_overlap,
    control_box,
    control_polygon_flatness,
    split_control_points,
)
from intersector.core.curves import (
    CUBIC_Z,
    arc_length,
    circle_polynomial,
    distance_bernstein_form,
    implicit_line,
    line_polynomial,
    power_basis,
)
from intersector.domain import Bezier2, Bezier3, Circle, LineSegment, Point

# Cubic approximation of a unit quarter circle
KAPPA = 0.5522847498


@pytest.fixture
def s_curve() -> Bezier3:
    """Cubic crossing the x axis at x = 0, 1.5 and 3."""
    return Bezier3(Point(0, 0), Point(1, 2), Point(2, -2), Point(3, 0))


@pytest.fixture
def arch() -> Bezier2:
    """Quadratic arch with apex (1, 1)."""
    return Bezier2(Point(0, 0), Point(1, 2), Point(2, 0))


class TestPowerBasis:
    """Tests for power_basis and implicit_line."""

    def test_cubic_matches_point_at(self, s_curve: Bezier3) -> None:
        x_poly, y_poly = power_basis(s_curve)
        assert x_poly.degree == 3
        for t in (0.0, 0.25, 0.6, 1.0):
            point = s_curve.point_at(t)
            assert x_poly.evaluate(t) == pytest.approx(point.x)
            assert y_poly.evaluate(t) == pytest.approx(point.y)

    def test_quadratic_matches_point_at(self, arch: Bezier2) -> None:
        x_poly, y_poly = power_basis(arch)
        assert y_poly.coefficients == [-4.0, 4.0, 0.0]
        assert x_poly.evaluate(0.3) == pytest.approx(arch.point_at(0.3).x)

    def test_implicit_line(self) -> None:
        nx, ny, c = implicit_line(LineSegment(Point(0, 0), Point(1, 1)))
        assert (nx, ny, c) == (-1, 1, 0)

    def test_implicit_line_vanishes_on_line(self) -> None:
        line = LineSegment(Point(1, 2), Point(4, -3))
        nx, ny, c = implicit_line(line)
        for t in (-1.0, 0.5, 2.0):
            p = line.point_at(t)
            assert nx * p.x + ny * p.y + c == pytest.approx(0.0, abs=1e-12)


class TestSubstitution:
    """Tests for line_polynomial and circle_polynomial."""

    def test_line_polynomial_roots(self, arch: Bezier2) -> None:
        line = LineSegment(Point(0, 0.5), Point(2, 0.5))
        roots = sorted(line_polynomial(arch, line).get_roots())
        half = math.sqrt(0.5) / 2
        assert roots == pytest.approx([0.5 - half, 0.5 + half])

    def test_circle_polynomial_is_power_of_distance(self, s_curve: Bezier3) -> None:
        circle = Circle(Point(1, 0.5), 1.25)
        poly = circle_polynomial(s_curve, circle)
        assert poly.degree == 6
        for t in (0.0, 0.3, 0.7, 1.0):
            expected = s_curve.point_at(t).squared_distance_to(circle.center) - 1.25**2
            assert poly.evaluate(t) == pytest.approx(expected)


class TestDistanceBernsteinForm:
    """Tests for the degree-5 Bernstein polygon of the nearest-point problem."""

    def test_cubic_z_is_binomial_ratio(self) -> None:
        for j in range(3):
            for i in range(4):
                expected = math.comb(3, i) * math.comb(2, j) / math.comb(5, i + j)
                assert CUBIC_Z[j][i] == pytest.approx(expected)

    def test_matches_direct_evaluation(self, s_curve: Bezier3) -> None:
        query = Point(1.2, 0.7)
        polygon = distance_bernstein_form(s_curve, query)
        assert [p.x for p in polygon] == pytest.approx([0, 0.2, 0.4, 0.6, 0.8, 1.0])

        p0, p1, p2, p3 = s_curve.control_points
        for t in (0.0, 0.35, 0.8, 1.0):
            bernstein = sum(
                math.comb(5, k) * t**k * (1 - t) ** (5 - k) * polygon[k].y for k in range(6)
            )
            derivative = (
                (p1 - p0) * (3 * (1 - t) ** 2)
                + (p2 - p1) * (6 * t * (1 - t))
                + (p3 - p2) * (3 * t**2)
            )
            direct = (s_curve.point_at(t) - query).dot(derivative)
            assert bernstein == pytest.approx(direct, abs=1e-9)


class TestArcLength:
    """Tests for the recursive arc length estimator."""

    def test_straight_line(self) -> None:
        assert arc_length(lambda t: Point(3 * t, 4 * t)) == pytest.approx(5.0)

    def test_quarter_circle(self) -> None:
        curve = Bezier3(Point(1, 0), Point(1, KAPPA), Point(KAPPA, 1), Point(0, 1))
        assert curve.length == pytest.approx(math.pi / 2, rel=1e-3)

    def test_even_precision_is_made_odd(self) -> None:
        assert arc_length(lambda t: Point(t, 0), precision=4) == pytest.approx(1.0)


class TestControlPolygons:
    """Tests for the internal control polygon helpers."""

    def test_split_linear(self) -> None:
        left, right = split_control_points([Point(0, 0), Point(2, 2)], 0.25)
        assert left == [Point(0, 0), Point(0.5, 0.5)]
        assert right == [Point(0.5, 0.5), Point(2, 2)]

    def test_split_keeps_degree(self, s_curve: Bezier3) -> None:
        left, right = split_control_points(list(s_curve.control_points), 0.5)
        assert len(left) == len(right) == 4
        assert left[-1] == right[0]

    def test_flatness(self) -> None:
        assert control_polygon_flatness([Point(0, 0), Point(1, 1), Point(2, 0)]) == 1.0
        assert control_polygon_flatness([Point(0, 0), Point(2, 0)]) == 0.0

    def test_flatness_zero_length_chord(self) -> None:
        assert control_polygon_flatness([Point(0, 0), Point(1, 0), Point(0, 0)]) == 1.0

    def test_control_box(self, s_curve: Bezier3) -> None:
        assert control_box(list(s_curve.control_points)) == (0, -2, 3, 2)

    def test_boxes_overlap(self) -> None:
        a = (0.0, 0.0, 1.0, 1.0)
        assert boxes_overlap(a, (1.0, 1.0, 2.0, 2.0))
        assert not boxes_overlap(a, (1.5, 0.0, 2.0, 1.0))
        assert boxes_overlap(a, (1.5, 0.0, 2.0, 1.0), padding=0.5)
