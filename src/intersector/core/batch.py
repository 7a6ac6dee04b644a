"""Batch intersection of many shape pairs with ProcessPoolExecutor.

Every intersection call is independent and works on freshly deserialized
value objects, so pairs can be spread across worker processes without any
locking.

Key components:
- intersect_pair: Top-level picklable function for parallel execution
- BatchIntersector: Orchestrator that runs pairs and collects statistics
"""

import time
import traceback
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from typing import Any

from intersector.config import IntersectorSettings, ToleranceConfig
from intersector.core.intersection import intersect
from intersector.domain import IntersectionResult, shape_from_dict
from intersector.exceptions import BatchCancelledError, ShapeError
from intersector.utils import BatchLogger, BatchStats, configure_logging

ProgressCallback = Callable[[int, int, str, bool], None]


def intersect_pair(pair_dict: Any, config_dict: dict[str, Any]) -> dict[str, Any]:
    """Intersect one serialized shape pair.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes both shapes, runs the dispatcher and returns the result.

    Args:
        pair_dict: ``{"id": str, "a": shape_dict, "b": shape_dict}``; anything
            else is reported as an error
        config_dict: Serialized tolerance configuration

    Returns:
        Dictionary containing either:
        - Success: {"id": str, "result": result_dict, "duration_ms": float}
        - Error: {"id": str, "error": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()
    is_dict = isinstance(pair_dict, dict)
    pair_id = str(pair_dict.get("id", "unknown")) if is_dict else "unknown"

    try:
        if not is_dict or "a" not in pair_dict or "b" not in pair_dict:
            raise ShapeError(f"Pair must be an object with 'a' and 'b' shapes, got {pair_dict!r}")
        shape_a = shape_from_dict(pair_dict["a"])
        shape_b = shape_from_dict(pair_dict["b"])
        config = ToleranceConfig(**config_dict)

        result = intersect(shape_a, shape_b, config)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "id": pair_id,
            "kinds": [shape_a.kind.value, shape_b.kind.value],
            "result": result.to_dict(),
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        return {
            "id": pair_id,
            "error": str(e),
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


class BatchIntersector:
    """Runs many intersection calls, in parallel or serially.

    Example:
        settings = IntersectorSettings()
        batch = BatchIntersector(settings)
        results, stats = batch.run(pairs, max_workers=4)
    """

    def __init__(self, settings: IntersectorSettings) -> None:
        """Initialize the batch runner.

        Args:
            settings: Settings with tolerances, batch and logging config
        """
        self.settings = settings
        self.logger = configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=False,
        )

    def run(
        self,
        pairs: Iterable[Any],
        max_workers: int | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> tuple[dict[str, IntersectionResult], BatchStats]:
        """Intersect every pair.

        Pairs without an ``id`` are numbered by their position. A repeated id
        gets ``#<position>`` appended, and entries that are not objects are
        kept under their position and fail like any other bad pair.

        Args:
            pairs: Serialized pairs, ``{"id": str, "a": shape_dict, "b": shape_dict}``
            max_workers: Worker processes (None = config default, 1 = serial)
            progress_callback: Optional callback(completed, total, pair_id, success)

        Returns:
            Tuple of (results by pair id in input order, statistics). Failed
            pairs are absent from the results and listed in the statistics.

        Raises:
            BatchCancelledError: If interrupted; carries processed/pending counts
        """
        tasks: dict[str, Any] = {}
        for index, pair in enumerate(pairs):
            is_dict = isinstance(pair, dict)
            pair_id = str(pair.get("id", index)) if is_dict else str(index)
            if pair_id in tasks:
                renamed = f"{pair_id}#{index}"
                self.logger.warning("Duplicate pair id", pair_id=pair_id, renamed=renamed)
                pair_id = renamed
            tasks[pair_id] = {**pair, "id": pair_id} if is_dict else pair

        if max_workers is None:
            max_workers = self.settings.batch.max_workers

        batch_logger = BatchLogger(self.logger)
        stats = batch_logger.stats
        stats.start_time = time.time()

        self.logger.info("Starting batch", pair_count=len(tasks), max_workers=max_workers)

        config_dict = self.settings.tolerances.model_dump()
        collected: dict[str, IntersectionResult] = {}
        if max_workers == 1:
            self._run_serial(tasks, config_dict, batch_logger, collected, progress_callback)
        else:
            self._run_parallel(
                tasks, config_dict, max_workers, batch_logger, collected, progress_callback
            )

        stats.end_time = time.time()
        self.logger.info(
            "Batch complete",
            processed=stats.processed_count,
            errors=stats.error_count,
            intersecting=stats.intersection_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )

        results = {pair_id: collected[pair_id] for pair_id in tasks if pair_id in collected}
        return results, stats

    def _record(
        self,
        pair_id: str,
        outcome: dict[str, Any],
        batch_logger: BatchLogger,
        collected: dict[str, IntersectionResult],
    ) -> bool:
        """Record one worker outcome. Returns True on success."""
        if "error" in outcome:
            batch_logger.log_pair_error(
                pair_id=pair_id,
                error=Exception(outcome["error"]),
                traceback=outcome.get("traceback"),
            )
            return False

        result = IntersectionResult.from_dict(outcome["result"])
        collected[pair_id] = result
        if not result.supported:
            batch_logger.log_pair_unsupported(pair_id, tuple(outcome["kinds"]))
        duration_ms = outcome.get("duration_ms", 0.0)
        batch_logger.log_pair_complete(
            pair_id=pair_id,
            status=result.status.value,
            point_count=len(result.points),
            duration_ms=duration_ms,
        )
        batch_logger.stats.pair_timings_ms.append(duration_ms)
        return True

    def _run_serial(
        self,
        tasks: dict[str, Any],
        config_dict: dict[str, Any],
        batch_logger: BatchLogger,
        collected: dict[str, IntersectionResult],
        progress_callback: ProgressCallback | None,
    ) -> None:
        total = len(tasks)
        completed = 0
        try:
            for pair_id, pair in tasks.items():
                batch_logger.log_pair_start(pair_id)
                success = self._record(
                    pair_id, intersect_pair(pair, config_dict), batch_logger, collected
                )
                completed += 1
                if progress_callback is not None:
                    progress_callback(completed, total, pair_id, success)
        except KeyboardInterrupt as e:
            self.logger.info("Cancellation requested by user")
            batch_logger.stats.was_cancelled = True
            batch_logger.stats.cancelled_count = total - completed
            raise BatchCancelledError(completed, total - completed) from e

    def _run_parallel(
        self,
        tasks: dict[str, Any],
        config_dict: dict[str, Any],
        max_workers: int | None,
        batch_logger: BatchLogger,
        collected: dict[str, IntersectionResult],
        progress_callback: ProgressCallback | None,
    ) -> None:
        total = len(tasks)
        completed = 0
        pending_futures: dict[Future[dict[str, Any]], str] = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for pair_id, pair in tasks.items():
                future = executor.submit(intersect_pair, pair, config_dict)
                pending_futures[future] = pair_id

            try:
                for future in as_completed(list(pending_futures)):
                    pair_id = pending_futures.pop(future)
                    success = False

                    try:
                        success = self._record(pair_id, future.result(), batch_logger, collected)
                    except Exception as e:
                        # Executor-level error
                        batch_logger.log_pair_error(
                            pair_id=pair_id,
                            error=e,
                            traceback=traceback.format_exc(),
                        )

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, pair_id, success)

            except KeyboardInterrupt as e:
                self.logger.info("Cancellation requested by user")
                for pending in pending_futures:
                    pending.cancel()
                batch_logger.stats.was_cancelled = True
                batch_logger.stats.cancelled_count = len(pending_futures)
                executor.shutdown(wait=True, cancel_futures=True)
                raise BatchCancelledError(completed, len(pending_futures)) from e
