"""Shape types consumed by the intersection engine.

This module defines the planar shapes the engine knows how to intersect:
- ShapeKind: Enum tagging every shape class, used for dispatch
- LineSegment: Segment, ray or infinite line between two points
- Circle: Center and radius
- Bezier2 / Bezier3: Quadratic and cubic Bezier curves with cached algebra
- Triangle, Polygon, Path: Compound shapes that decompose into the above
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from intersector.domain.point import Point
from intersector.exceptions import ShapeError


class ShapeKind(str, Enum):
    """Tag of a shape class.

    Values match the ``type`` field of serialized shapes.
    """

    LINE_SEGMENT = "LineSegment"
    CIRCLE = "Circle"
    BEZIER2 = "Bezier2"
    BEZIER3 = "Bezier3"
    TRIANGLE = "Triangle"
    POLYGON = "Polygon"
    PATH = "Path"


COMPOUND_KINDS = frozenset({ShapeKind.TRIANGLE, ShapeKind.POLYGON, ShapeKind.PATH})


@dataclass
class LineSegment:
    """A line between two points.

    The end flags mirror the original segment semantics: when ``p1_end`` is
    False the line extends beyond ``p1`` (and likewise for ``p2``), so a
    segment with both flags cleared is an infinite line.

    Attributes:
        p1: Start point (parameter 0)
        p2: End point (parameter 1)
        p1_end: Whether the line stops at p1
        p2_end: Whether the line stops at p2
    """

    kind: ClassVar[ShapeKind] = ShapeKind.LINE_SEGMENT

    p1: Point
    p2: Point
    p1_end: bool = True
    p2_end: bool = True

    @property
    def direction(self) -> Point:
        return self.p2 - self.p1

    @property
    def length(self) -> float:
        return self.p1.distance_to(self.p2)

    @property
    def normal(self) -> Point:
        """Unit normal (direction rotated a quarter turn counterclockwise).

        A zero-length segment yields the zero vector.
        """
        d = self.direction
        length = self.length
        if length == 0:
            return Point(0.0, 0.0)
        return Point(-d.y / length, d.x / length)

    def point_at(self, t: float) -> Point:
        return self.p1.lerp(self.p2, t)

    def parameter_of(self, point: Point) -> float:
        """Parameter of the orthogonal projection of ``point`` onto the line.

        Returns 0.0 for a zero-length segment.
        """
        d = self.direction
        dd = d.dot(d)
        if dd == 0:
            return 0.0
        return (point - self.p1).dot(d) / dd

    def contains_parameter(self, t: float, slack: float = 0.0) -> bool:
        """Check whether parameter ``t`` lies on the segment, honoring end flags."""
        return (t >= -slack or not self.p1_end) and (t <= 1.0 + slack or not self.p2_end)

    def closest_point_on_line(self, point: Point) -> Point:
        """Closest point on the infinite line through p1 and p2."""
        d = self.direction
        dd = d.dot(d)
        if dd == 0:
            return self.p1
        return self.p1.lerp(self.p2, (point - self.p1).dot(d) / dd)

    def closest_point(self, point: Point) -> Point:
        """Closest point on the segment itself (clamped to p1/p2)."""
        d = self.direction
        t = (point - self.p1).dot(d)
        if t <= 0:
            return self.p1
        dd = d.dot(d)
        if t >= dd:
            return self.p2
        return self.p1.lerp(self.p2, t / dd)

    def squared_distance_to_point(self, point: Point) -> float:
        return self.closest_point(point).squared_distance_to(point)

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Return (min_x, min_y, max_x, max_y) of the two endpoints."""
        return (
            min(self.p1.x, self.p2.x),
            min(self.p1.y, self.p2.y),
            max(self.p1.x, self.p2.x),
            max(self.p1.y, self.p2.y),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "p1": self.p1.to_dict(),
            "p2": self.p2.to_dict(),
            "p1_end": self.p1_end,
            "p2_end": self.p2_end,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LineSegment":
        return cls(
            p1=Point.from_dict(data["p1"]),
            p2=Point.from_dict(data["p2"]),
            p1_end=data.get("p1_end", True),
            p2_end=data.get("p2_end", True),
        )


@dataclass
class Circle:
    """A circle given by center and radius.

    Attributes:
        center: Center point
        radius: Non-negative radius
    """

    kind: ClassVar[ShapeKind] = ShapeKind.CIRCLE

    center: Point
    radius: float

    def __post_init__(self) -> None:
        if self.radius < 0:
            raise ShapeError(f"Circle radius must be non-negative, got {self.radius}")

    def contains_point(self, point: Point) -> bool:
        return self.center.squared_distance_to(point) < self.radius * self.radius

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "center": self.center.to_dict(), "radius": self.radius}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Circle":
        return cls(center=Point.from_dict(data["center"]), radius=float(data["radius"]))


@dataclass(frozen=True, slots=True)
class QuadraticAlgebra:
    """Power-basis form of a quadratic Bezier: P(t) = a*t^2 + b*t + p0."""

    ax: float
    bx: float
    ay: float
    by: float
    x0: float
    y0: float


@dataclass(frozen=True, slots=True)
class CubicAlgebra:
    """Power-basis form of a cubic Bezier: P(t) = a*t^3 + b*t^2 + g*t + p0."""

    ax: float
    bx: float
    gx: float
    ay: float
    by: float
    gy: float
    x0: float
    y0: float


def _control_point(name: str) -> property:
    attr = f"_{name}"

    def getter(self: "_BezierCurve") -> Point:
        return getattr(self, attr)

    def setter(self: "_BezierCurve", value: Point) -> None:
        setattr(self, attr, value)
        self.invalidate()

    return property(getter, setter, doc=f"Control point ``{name}``; assigning it invalidates the cache.")


class _BezierCurve:
    """Shared cache handling for Bezier curves.

    Derived state (power-basis algebra and arc length) is computed lazily and
    dropped by ``invalidate()``, which every control point setter calls.
    """

    kind: ClassVar[ShapeKind]
    _point_names: ClassVar[tuple[str, ...]]

    _algebra: Any
    _length: float | None

    def invalidate(self) -> None:
        """Drop cached algebra and length after a control point change."""
        self._algebra = None
        self._length = None

    @property
    def control_points(self) -> tuple[Point, ...]:
        return tuple(getattr(self, name) for name in self._point_names)

    @property
    def length(self) -> float:
        """Arc length, estimated by recursive section subdivision and cached."""
        if self._length is None:
            from intersector.core.curves import arc_length

            self._length = arc_length(self.point_at)
        return self._length

    def point_at(self, t: float) -> Point:
        raise NotImplementedError

    def bounding_box(self) -> tuple[float, float, float, float]:
        """Return (min_x, min_y, max_x, max_y) of the control hull.

        The hull contains the curve, which is all subdivision culling needs.
        """
        xs = [p.x for p in self.control_points]
        ys = [p.y for p in self.control_points]
        return (min(xs), min(ys), max(xs), max(ys))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind.value}
        for name in self._point_names:
            data[name] = getattr(self, name).to_dict()
        return data

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.control_points == other.control_points  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        points = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._point_names)
        return f"{type(self).__name__}({points})"


class Bezier2(_BezierCurve):
    """Quadratic Bezier curve with start point, one control point and end point."""

    kind: ClassVar[ShapeKind] = ShapeKind.BEZIER2
    _point_names: ClassVar[tuple[str, ...]] = ("p1", "c", "p2")

    p1 = _control_point("p1")
    c = _control_point("c")
    p2 = _control_point("p2")

    def __init__(self, p1: Point, c: Point, p2: Point) -> None:
        self._p1 = p1
        self._c = c
        self._p2 = p2
        self.invalidate()

    @property
    def algebra(self) -> QuadraticAlgebra:
        if self._algebra is None:
            a = self._p1 - self._c * 2 + self._p2
            b = (self._c - self._p1) * 2
            self._algebra = QuadraticAlgebra(a.x, b.x, a.y, b.y, self._p1.x, self._p1.y)
        return self._algebra

    def point_at(self, t: float) -> Point:
        alg = self.algebra
        return Point((alg.ax * t + alg.bx) * t + alg.x0, (alg.ay * t + alg.by) * t + alg.y0)

    def elevate(self) -> "Bezier3":
        """Return the identical curve expressed as a cubic Bezier."""
        return Bezier3(
            self._p1,
            self._p1 + (self._c - self._p1) * (2.0 / 3.0),
            self._p2 + (self._c - self._p2) * (2.0 / 3.0),
            self._p2,
        )

    def split(self, t: float = 0.5) -> tuple["Bezier2", "Bezier2"]:
        """Split the curve at ``t`` into two quadratic curves."""
        from intersector.core._bezier import split_control_points

        left, right = split_control_points(list(self.control_points), t)
        return Bezier2(*left), Bezier2(*right)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bezier2":
        return cls(*(Point.from_dict(data[name]) for name in cls._point_names))


class Bezier3(_BezierCurve):
    """Cubic Bezier curve with start point, two control points and end point."""

    kind: ClassVar[ShapeKind] = ShapeKind.BEZIER3
    _point_names: ClassVar[tuple[str, ...]] = ("p1", "c1", "c2", "p2")

    p1 = _control_point("p1")
    c1 = _control_point("c1")
    c2 = _control_point("c2")
    p2 = _control_point("p2")

    def __init__(self, p1: Point, c1: Point, c2: Point, p2: Point) -> None:
        self._p1 = p1
        self._c1 = c1
        self._c2 = c2
        self._p2 = p2
        self.invalidate()

    @property
    def algebra(self) -> CubicAlgebra:
        if self._algebra is None:
            p1, c1, c2, p2 = self._p1, self._c1, self._c2, self._p2
            gx = 3 * (c1.x - p1.x)
            bx = 3 * (c2.x - c1.x) - gx
            ax = p2.x - p1.x - bx - gx
            gy = 3 * (c1.y - p1.y)
            by = 3 * (c2.y - c1.y) - gy
            ay = p2.y - p1.y - by - gy
            self._algebra = CubicAlgebra(ax, bx, gx, ay, by, gy, p1.x, p1.y)
        return self._algebra

    def point_at(self, t: float) -> Point:
        alg = self.algebra
        return Point(
            ((alg.ax * t + alg.bx) * t + alg.gx) * t + alg.x0,
            ((alg.ay * t + alg.by) * t + alg.gy) * t + alg.y0,
        )

    def split(self, t: float = 0.5) -> tuple["Bezier3", "Bezier3"]:
        """Split the curve at ``t`` into two cubic curves."""
        from intersector.core._bezier import split_control_points

        left, right = split_control_points(list(self.control_points), t)
        return Bezier3(*left), Bezier3(*right)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Bezier3":
        return cls(*(Point.from_dict(data[name]) for name in cls._point_names))


@dataclass
class Triangle:
    """A triangle given by its three corners."""

    kind: ClassVar[ShapeKind] = ShapeKind.TRIANGLE

    p1: Point
    p2: Point
    p3: Point

    def sides(self) -> list[LineSegment]:
        return [
            LineSegment(self.p1, self.p2),
            LineSegment(self.p2, self.p3),
            LineSegment(self.p3, self.p1),
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "points": [self.p1.to_dict(), self.p2.to_dict(), self.p3.to_dict()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Triangle":
        points = [Point.from_dict(p) for p in data["points"]]
        if len(points) != 3:
            raise ShapeError(f"Triangle needs 3 points, got {len(points)}")
        return cls(*points)


@dataclass
class Polygon:
    """A polygon (closed) or polyline (open) through a list of points.

    Attributes:
        points: Vertices in order
        closed: Whether the last vertex connects back to the first
    """

    kind: ClassVar[ShapeKind] = ShapeKind.POLYGON

    points: list[Point]
    closed: bool = True

    def __post_init__(self) -> None:
        if len(self.points) < 2:
            raise ShapeError(f"Polygon needs at least 2 points, got {len(self.points)}")

    def sides(self) -> list[LineSegment]:
        n = len(self.points)
        count = n if self.closed and n > 2 else n - 1
        return [LineSegment(self.points[i], self.points[(i + 1) % n]) for i in range(count)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "points": [p.to_dict() for p in self.points],
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Polygon":
        return cls(
            points=[Point.from_dict(p) for p in data["points"]],
            closed=data.get("closed", True),
        )


PathSegment = LineSegment | Bezier2 | Bezier3


@dataclass
class Path:
    """A mixed path made of line and Bezier segments.

    Attributes:
        parts: Segments in drawing order
    """

    kind: ClassVar[ShapeKind] = ShapeKind.PATH

    parts: list[PathSegment] = field(default_factory=list)

    def __post_init__(self) -> None:
        for part in self.parts:
            if not isinstance(part, LineSegment | Bezier2 | Bezier3):
                raise ShapeError(f"Path segments must be lines or Bezier curves, got {type(part).__name__}")

    def segments(self) -> list[PathSegment]:
        return list(self.parts)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind.value, "parts": [part.to_dict() for part in self.parts]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Path":
        parts = [shape_from_dict(part) for part in data["parts"]]
        return cls(parts=parts)  # type: ignore[arg-type]


Shape = LineSegment | Circle | Bezier2 | Bezier3 | Triangle | Polygon | Path

_SHAPE_TYPES: dict[str, Any] = {
    ShapeKind.LINE_SEGMENT.value: LineSegment,
    ShapeKind.CIRCLE.value: Circle,
    ShapeKind.BEZIER2.value: Bezier2,
    ShapeKind.BEZIER3.value: Bezier3,
    ShapeKind.TRIANGLE.value: Triangle,
    ShapeKind.POLYGON.value: Polygon,
    ShapeKind.PATH.value: Path,
}


def shape_from_dict(data: dict[str, Any]) -> Shape:
    """Deserialize any shape from its ``to_dict()`` form.

    Raises:
        ShapeError: If the type is unknown or the data is malformed
    """
    shape_type = data.get("type")
    shape_cls = _SHAPE_TYPES.get(shape_type)  # type: ignore[arg-type]
    if shape_cls is None:
        raise ShapeError(f"Unknown shape type: {shape_type!r}")
    try:
        return shape_cls.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ShapeError(f"Malformed {shape_type} data: {e}") from e
