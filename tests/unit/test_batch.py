"""Tests for batch intersection runs."""

from unittest.mock import Mock, patch

import pytest

from intersector.config import BatchConfig, IntersectorSettings
from intersector.core.batch import BatchIntersector, intersect_pair
from intersector.domain import Circle, IntersectionStatus, LineSegment, Point
from intersector.exceptions import BatchCancelledError

TOLERANCES = IntersectorSettings().tolerances.model_dump()


def circle(x: float, y: float, r: float) -> dict:
    return Circle(Point(x, y), r).to_dict()


def line(x1: float, y1: float, x2: float, y2: float) -> dict:
    return LineSegment(Point(x1, y1), Point(x2, y2)).to_dict()


@pytest.fixture
def pairs() -> list[dict]:
    return [
        {"id": "overlap", "a": circle(0, 0, 1), "b": circle(1, 0, 1)},
        {"id": "apart", "a": circle(0, 0, 1), "b": circle(5, 0, 1)},
        {"id": "cross", "a": line(0, 0, 2, 2), "b": line(0, 2, 2, 0)},
    ]


@pytest.fixture
def bad_pair() -> dict:
    return {"id": "bad", "a": {"type": "Ellipse"}, "b": circle(0, 0, 1)}


class TestIntersectPair:
    """Tests for the picklable worker function."""

    def test_success(self, pairs: list[dict]) -> None:
        outcome = intersect_pair(pairs[0], TOLERANCES)
        assert outcome["id"] == "overlap"
        assert outcome["kinds"] == ["Circle", "Circle"]
        assert outcome["result"]["status"] == IntersectionStatus.INTERSECTION.value
        assert len(outcome["result"]["points"]) == 2
        assert outcome["duration_ms"] >= 0

    def test_error_is_returned_not_raised(self, bad_pair: dict) -> None:
        outcome = intersect_pair(bad_pair, TOLERANCES)
        assert outcome["id"] == "bad"
        assert "Ellipse" in outcome["error"]
        assert "ShapeError" in outcome["traceback"]
        assert "result" not in outcome

    def test_missing_id(self, pairs: list[dict]) -> None:
        pair = {"a": pairs[0]["a"], "b": pairs[0]["b"]}
        assert intersect_pair(pair, TOLERANCES)["id"] == "unknown"

    @pytest.mark.parametrize("entry", [["not", "a", "pair"], None, {"id": "half", "a": {}}])
    def test_malformed_entry_is_an_error(self, entry: object) -> None:
        outcome = intersect_pair(entry, TOLERANCES)
        assert "result" not in outcome
        assert "'a' and 'b'" in outcome["error"]
        assert "ShapeError" in outcome["traceback"]

    def test_uses_given_tolerances(self) -> None:
        pair = {"id": "near", "a": circle(0, 0, 1), "b": circle(2.001, 0, 1)}
        strict = intersect_pair(pair, TOLERANCES)
        loose = intersect_pair(pair, {**TOLERANCES, "tolerance": 1e-2})
        assert strict["result"]["status"] == IntersectionStatus.OUTSIDE.value
        assert loose["result"]["status"] == IntersectionStatus.TANGENT.value


class TestBatchIntersector:
    """Tests for BatchIntersector.run."""

    def test_serial_run(self, pairs: list[dict]) -> None:
        runner = BatchIntersector(IntersectorSettings())
        results, stats = runner.run(pairs, max_workers=1)

        assert list(results) == ["overlap", "apart", "cross"]
        assert results["overlap"].status == IntersectionStatus.INTERSECTION
        assert results["apart"].status == IntersectionStatus.OUTSIDE
        assert results["cross"].points[0].x == pytest.approx(1.0)
        assert stats.processed_count == 3
        assert stats.error_count == 0
        assert stats.intersection_count == 2
        assert stats.point_count == 3
        assert len(stats.pair_timings_ms) == 3
        assert stats.duration_seconds >= 0

    def test_errors_are_collected(self, pairs: list[dict], bad_pair: dict) -> None:
        runner = BatchIntersector(IntersectorSettings())
        results, stats = runner.run([*pairs, bad_pair], max_workers=1)

        assert "bad" not in results
        assert len(results) == 3
        assert stats.error_count == 1
        assert stats.errors[0][0] == "bad"

    def test_progress_callback(self, pairs: list[dict], bad_pair: dict) -> None:
        callback = Mock()
        runner = BatchIntersector(IntersectorSettings())
        runner.run([pairs[0], bad_pair], max_workers=1, progress_callback=callback)

        assert callback.call_count == 2
        callback.assert_any_call(1, 2, "overlap", True)
        callback.assert_any_call(2, 2, "bad", False)

    def test_pairs_without_id_use_position(self, pairs: list[dict]) -> None:
        anonymous = [{"a": pair["a"], "b": pair["b"]} for pair in pairs]
        results, _ = BatchIntersector(IntersectorSettings()).run(anonymous, max_workers=1)
        assert list(results) == ["0", "1", "2"]

    def test_duplicate_ids_are_kept_apart(self, pairs: list[dict]) -> None:
        twins = [pairs[0], {**pairs[1], "id": "overlap"}]
        results, stats = BatchIntersector(IntersectorSettings()).run(twins, max_workers=1)

        assert list(results) == ["overlap", "overlap#1"]
        assert results["overlap"].status == IntersectionStatus.INTERSECTION
        assert results["overlap#1"].status == IntersectionStatus.OUTSIDE
        assert stats.processed_count == 2

    def test_non_object_entries_are_reported(self, pairs: list[dict]) -> None:
        results, stats = BatchIntersector(IntersectorSettings()).run(
            [pairs[0], "oops", 42], max_workers=1
        )

        assert list(results) == ["overlap"]
        assert stats.error_count == 2
        assert [pair_id for pair_id, _ in stats.errors] == ["1", "2"]

    def test_workers_default_from_settings(self, pairs: list[dict]) -> None:
        settings = IntersectorSettings(batch=BatchConfig(max_workers=1))
        runner = BatchIntersector(settings)
        with patch.object(runner, "_run_parallel") as run_parallel:
            results, stats = runner.run(pairs)
        run_parallel.assert_not_called()
        assert stats.processed_count == 3
        assert len(results) == 3

    def test_parallel_run_keeps_input_order(self, pairs: list[dict], bad_pair: dict) -> None:
        runner = BatchIntersector(IntersectorSettings())
        results, stats = runner.run([bad_pair, *pairs], max_workers=2)

        assert list(results) == ["overlap", "apart", "cross"]
        assert results["overlap"].points == runner.run(pairs, max_workers=1)[0]["overlap"].points
        assert stats.processed_count == 3
        assert stats.error_count == 1

    def test_cancellation(self, pairs: list[dict]) -> None:
        runner = BatchIntersector(IntersectorSettings())
        with patch("intersector.core.batch.intersect_pair", side_effect=KeyboardInterrupt):
            with pytest.raises(BatchCancelledError) as exc_info:
                runner.run(pairs, max_workers=1)

        assert exc_info.value.processed_count == 0
        assert exc_info.value.pending_count == 3
