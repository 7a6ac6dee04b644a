"""Tests for the nearest-point solver."""

import pytest

from intersector.config import ToleranceConfig
from intersector.core.closest_point import ClosestPointSolver, closest_point, closest_t
from intersector.domain import Bezier2, Bezier3, Point


@pytest.fixture
def solver() -> ClosestPointSolver:
    return ClosestPointSolver()


@pytest.fixture
def s_curve() -> Bezier3:
    return Bezier3(Point(0, 0), Point(1, 2), Point(2, -2), Point(3, 0))


def sampled_min_distance(curve: Bezier3 | Bezier2, point: Point, samples: int = 1000) -> float:
    return min(point.distance_to(curve.point_at(i / (samples - 1))) for i in range(samples))


class TestHelpers:
    """Tests for the control polygon root finding helpers."""

    def test_crossing_count_treats_zero_as_positive(self) -> None:
        ys = [1, -1, 0, 0, -2, 3]
        points = [Point(i / 5, y) for i, y in enumerate(ys)]
        assert ClosestPointSolver.crossing_count(points) == 4

    def test_crossing_count_none(self) -> None:
        points = [Point(i / 5, 1.0 + i) for i in range(6)]
        assert ClosestPointSolver.crossing_count(points) == 0

    def test_compute_x_intercept(self) -> None:
        points = [Point(0.0, -1.0), Point(0.5, 0.0), Point(1.0, 1.0)]
        assert ClosestPointSolver.compute_x_intercept(points) == 0.5

    def test_flat_polygon(self, solver: ClosestPointSolver) -> None:
        points = [Point(0.0, -1.0), Point(0.5, 0.0), Point(1.0, 1.0)]
        assert solver.control_polygon_flat_enough(points)

    def test_bent_polygon_is_not_flat(self, solver: ClosestPointSolver) -> None:
        points = [Point(0.0, -1.0), Point(0.5, 2.0), Point(1.0, 1.0)]
        assert not solver.control_polygon_flat_enough(points)

    def test_find_roots_linear(self, solver: ClosestPointSolver) -> None:
        points = [Point(i / 5, i / 5 - 0.5) for i in range(6)]
        assert solver.find_roots(points) == pytest.approx([0.5])

    def test_find_roots_no_crossing(self, solver: ClosestPointSolver) -> None:
        points = [Point(i / 5, 2.0) for i in range(6)]
        assert solver.find_roots(points) == []

    def test_shallow_depth_returns_midpoint(self) -> None:
        solver = ClosestPointSolver(ToleranceConfig(max_depth=8))
        points = [Point(0.0, -1.0), Point(0.5, 3.0), Point(1.0, 1.0)]
        roots = solver.find_roots(points)
        assert len(roots) == 1
        assert 0.0 < roots[0] < 0.5


class TestClosestPoint:
    """Tests for ClosestPointSolver.closest and the module functions."""

    def test_point_on_curve(self, solver: ClosestPointSolver, s_curve: Bezier3) -> None:
        target = s_curve.point_at(0.3)
        point, t, distance = solver.closest(s_curve, target)
        assert t == pytest.approx(0.3, abs=1e-6)
        assert distance == pytest.approx(0.0, abs=1e-9)
        assert point.x == pytest.approx(target.x)

    def test_straight_curve(self, solver: ClosestPointSolver) -> None:
        straight = Bezier3(Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0))
        point, t, distance = solver.closest(straight, Point(1.5, 2))
        assert t == pytest.approx(0.5)
        assert point.x == pytest.approx(1.5)
        assert distance == pytest.approx(2.0)

    def test_endpoint_wins(self, solver: ClosestPointSolver, s_curve: Bezier3) -> None:
        _, t, distance = solver.closest(s_curve, Point(-3, 0))
        assert t == 0.0
        assert distance == pytest.approx(3.0)

    def test_far_endpoint_wins(self, solver: ClosestPointSolver, s_curve: Bezier3) -> None:
        assert solver.closest_t(s_curve, Point(6, 0)) == 1.0

    def test_quadratic_curve(self, solver: ClosestPointSolver) -> None:
        arch = Bezier2(Point(0, 0), Point(1, 2), Point(2, 0))
        point = solver.closest_point(arch, Point(1, 3))
        assert point.x == pytest.approx(1.0)
        assert point.y == pytest.approx(1.0)

    def test_module_functions(self, s_curve: Bezier3) -> None:
        query = Point(1.0, 1.0)
        assert closest_t(s_curve, query) == ClosestPointSolver().closest_t(s_curve, query)
        assert closest_point(s_curve, query) == ClosestPointSolver().closest_point(s_curve, query)

    @pytest.mark.parametrize(
        "query",
        [Point(1.0, 1.0), Point(1.5, -0.2), Point(0.2, 3.0), Point(2.9, -1.1), Point(-1.0, -1.0)],
    )
    def test_never_worse_than_sampling(
        self, solver: ClosestPointSolver, s_curve: Bezier3, query: Point
    ) -> None:
        _, _, distance = solver.closest(s_curve, query)
        assert distance <= sampled_min_distance(s_curve, query) + 1e-9

    @pytest.mark.parametrize(
        "curve",
        [
            Bezier3(Point(0, 0), Point(0, 1), Point(1, 1), Point(1, 0)),
            Bezier3(Point(0, 0), Point(3, 3), Point(-2, 3), Point(1, 0)),
            Bezier3(Point(0, 0), Point(1, 1), Point(1, 1), Point(2, 2)),
        ],
    )
    def test_never_worse_than_sampling_on_shapes(
        self, solver: ClosestPointSolver, curve: Bezier3
    ) -> None:
        query = Point(0.5, 0.4)
        _, _, distance = solver.closest(curve, query)
        assert distance <= sampled_min_distance(curve, query) + 1e-9
