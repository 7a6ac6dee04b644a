"""Logging utilities for intersector."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog

# Marks handlers installed by configure_logging so a second call replaces them
_HANDLER_MARKER = "_intersector_handler"


@dataclass
class BatchStats:
    """Statistics from a batch run."""

    processed_count: int = 0
    error_count: int = 0
    intersection_count: int = 0
    point_count: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    pair_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None
    was_cancelled: bool = False
    cancelled_count: int = 0

    @property
    def duration_seconds(self) -> float:
        """Calculate batch duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def mean_pair_ms(self) -> float:
        if not self.pair_timings_ms:
            return 0.0
        return sum(self.pair_timings_ms) / len(self.pair_timings_ms)


def _install(handler: logging.Handler, level: str, fmt: str) -> None:
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(logging.Formatter(fmt))
    setattr(handler, _HANDLER_MARKER, True)
    logging.getLogger().addHandler(handler)


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "WARNING",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure console and optional file logging with structlog on top.

    Args:
        log_file: Path to log file (no file logging if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output except errors

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            root_logger.removeHandler(handler)
            handler.close()

    if log_file is not None:
        _install(
            logging.FileHandler(log_file, encoding="utf-8"),
            file_level,
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        )

    _install(logging.StreamHandler(), "ERROR" if quiet else console_level, "%(message)s")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger = structlog.get_logger("intersector")
    logger.debug(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=console_level,
    )

    return logger


class BatchLogger:
    """Logger for tracking batch progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = BatchStats()

    def log_pair_start(self, pair_id: str) -> None:
        """Log start of a pair."""
        self._logger.debug("Intersecting pair", pair=pair_id)

    def log_pair_complete(
        self,
        pair_id: str,
        status: str,
        point_count: int,
        duration_ms: float,
    ) -> None:
        """Log a successfully intersected pair."""
        self._logger.info(
            "Pair intersected",
            pair=pair_id,
            status=status,
            points=point_count,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.processed_count += 1
        self._stats.point_count += point_count
        if point_count:
            self._stats.intersection_count += 1

    def log_pair_unsupported(self, pair_id: str, kinds: tuple[str, str]) -> None:
        self._logger.warning("No routine for shape pair", pair=pair_id, kinds=list(kinds))

    def log_pair_error(
        self,
        pair_id: str,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log a pair that failed."""
        self._logger.error(
            "Pair intersection failed",
            pair=pair_id,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((pair_id, str(error)))

    @property
    def stats(self) -> BatchStats:
        """Get current batch statistics."""
        return self._stats
