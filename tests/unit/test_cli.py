"""Tests for the command-line interface."""

import json
from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from intersector import __version__
from intersector.cli.app import app
from intersector.domain import Bezier3, Circle, LineSegment, Point
from intersector.utils import configure_logging

runner = CliRunner()

UNIT_CIRCLE = json.dumps(Circle(Point(0, 0), 1).to_dict())
SHIFTED_CIRCLE = json.dumps(Circle(Point(1, 0), 1).to_dict())
STRAIGHT_CURVE = json.dumps(
    Bezier3(Point(0, 0), Point(1, 0), Point(2, 0), Point(3, 0)).to_dict()
)


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Drop handlers bound to the runner's captured streams."""
    yield
    configure_logging(quiet=True)


@pytest.fixture
def pairs_file(tmp_path: Path) -> Path:
    pairs = [
        {"id": "overlap", "a": json.loads(UNIT_CIRCLE), "b": json.loads(SHIFTED_CIRCLE)},
        {
            "id": "cross",
            "a": LineSegment(Point(0, 0), Point(2, 2)).to_dict(),
            "b": LineSegment(Point(0, 2), Point(2, 0)).to_dict(),
        },
    ]
    path = tmp_path / "pairs.json"
    path.write_text(json.dumps(pairs), encoding="utf-8")
    return path


class TestGlobalOptions:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_log_file(self, tmp_path: Path, pairs_file: Path) -> None:
        log_file = tmp_path / "run.log"
        result = runner.invoke(
            app, ["--log-file", str(log_file), "--quiet", "batch", str(pairs_file), "-j", "1"]
        )
        assert result.exit_code == 0
        assert log_file.exists()
        assert "Batch complete" in log_file.read_text(encoding="utf-8")


class TestRootsCommand:
    def test_quadratic_json(self) -> None:
        result = runner.invoke(app, ["roots", "--json", "--", "1", "0", "-4"])
        assert result.exit_code == 0
        assert json.loads(result.stdout) == pytest.approx([-2.0, 2.0])

    def test_interval(self) -> None:
        result = runner.invoke(
            app, ["roots", "--json", "--min", "0", "--max", "3", "--", "1", "0", "-4"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout) == pytest.approx([2.0], abs=1e-6)

    def test_pretty_output(self) -> None:
        result = runner.invoke(app, ["roots", "--", "1", "-3", "2"])
        assert result.exit_code == 0
        assert "2 real roots" in result.stdout

    def test_high_degree_needs_interval(self) -> None:
        result = runner.invoke(app, ["roots", "1", "0", "0", "0", "0", "1"])
        assert result.exit_code == 1
        assert "no closed-form solver" in result.stdout

    def test_half_open_interval(self) -> None:
        result = runner.invoke(app, ["roots", "--min", "0", "1", "2"])
        assert result.exit_code == 1

    def test_empty_interval(self) -> None:
        result = runner.invoke(app, ["roots", "--min", "2", "--max", "1", "1", "2"])
        assert result.exit_code == 1


class TestIntersectCommand:
    def test_circles_json(self) -> None:
        result = runner.invoke(app, ["intersect", "--json", UNIT_CIRCLE, SHIFTED_CIRCLE])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "INTERSECTION"
        assert sorted(p["y"] for p in data["points"]) == pytest.approx(
            [-(3**0.5) / 2, 3**0.5 / 2]
        )
        assert all(p["x"] == pytest.approx(0.5) for p in data["points"])

    def test_shape_from_file(self, tmp_path: Path) -> None:
        shape_file = tmp_path / "circle.json"
        shape_file.write_text(SHIFTED_CIRCLE, encoding="utf-8")
        result = runner.invoke(app, ["intersect", "--json", UNIT_CIRCLE, f"@{shape_file}"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["status"] == "INTERSECTION"

    def test_pretty_output(self) -> None:
        result = runner.invoke(app, ["intersect", UNIT_CIRCLE, SHIFTED_CIRCLE])
        assert result.exit_code == 0
        assert "INTERSECTION" in result.stdout

    def test_invalid_json(self) -> None:
        result = runner.invoke(app, ["intersect", "{not json", UNIT_CIRCLE])
        assert result.exit_code == 1

    def test_unknown_shape(self) -> None:
        result = runner.invoke(app, ["intersect", '{"type": "Ellipse"}', UNIT_CIRCLE])
        assert result.exit_code == 1
        assert "Ellipse" in result.stdout


class TestClosestCommand:
    def test_straight_curve(self) -> None:
        result = runner.invoke(app, ["closest", "--json", STRAIGHT_CURVE, "1.5", "2"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["t"] == pytest.approx(0.5)
        assert data["distance"] == pytest.approx(2.0)
        assert data["point"]["x"] == pytest.approx(1.5)

    def test_rejects_non_curve(self) -> None:
        result = runner.invoke(app, ["closest", UNIT_CIRCLE, "0", "0"])
        assert result.exit_code == 1
        assert "Circle" in result.stdout


class TestBatchCommand:
    def test_quiet_prints_json(self, pairs_file: Path) -> None:
        result = runner.invoke(app, ["--quiet", "batch", str(pairs_file), "-j", "1"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert list(data) == ["overlap", "cross"]
        assert data["cross"]["points"] == [{"x": 1.0, "y": 1.0}]

    def test_output_file(self, tmp_path: Path, pairs_file: Path) -> None:
        out = tmp_path / "results.json"
        result = runner.invoke(app, ["batch", str(pairs_file), "-j", "1", "-o", str(out)])
        assert result.exit_code == 0
        assert "Complete" in result.stdout
        assert json.loads(out.read_text(encoding="utf-8"))["overlap"]["status"] == "INTERSECTION"

    def test_errors_exit_code(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps([{"id": "bad", "a": {"type": "Ellipse"}, "b": json.loads(UNIT_CIRCLE)}]),
            encoding="utf-8",
        )
        result = runner.invoke(app, ["--quiet", "batch", str(path), "-j", "1"])
        assert result.exit_code == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["batch", str(tmp_path / "missing.json")])
        assert result.exit_code == 1

    def test_not_a_list(self, tmp_path: Path) -> None:
        path = tmp_path / "pairs.json"
        path.write_text("{}", encoding="utf-8")
        result = runner.invoke(app, ["batch", str(path)])
        assert result.exit_code == 1
