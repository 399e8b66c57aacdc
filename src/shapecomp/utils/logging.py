"""Logging utilities for Shapecomp."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import structlog

# Names of the handlers installed by configure_logging
FILE_HANDLER_NAME = "shapecomp.file"
CONSOLE_HANDLER_NAME = "shapecomp.console"


@dataclass
class BatchStats:
    """Statistics from a batch clipping run."""

    completed_count: int = 0
    error_count: int = 0
    cancelled_count: int = 0
    result_shapes: int = 0
    was_cancelled: bool = False
    errors: list[tuple[int, str]] = field(default_factory=list)
    task_timings_ms: list[float] = field(default_factory=list)
    start_time: float | None = None
    end_time: float | None = None

    @property
    def duration_seconds(self) -> float:
        """Calculate processing duration."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return 0.0

    @property
    def avg_task_time_ms(self) -> float | None:
        """Average time per task, None before any task finished."""
        if not self.task_timings_ms:
            return None
        return sum(self.task_timings_ms) / len(self.task_timings_ms)

    @property
    def min_task_time_ms(self) -> float | None:
        return min(self.task_timings_ms) if self.task_timings_ms else None

    @property
    def max_task_time_ms(self) -> float | None:
        return max(self.task_timings_ms) if self.task_timings_ms else None


def configure_logging(
    log_file: Path | None = None,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    quiet: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Configure dual-output structured logging.

    Handlers from an earlier call are closed and replaced, so repeated calls
    never duplicate output.

    Args:
        log_file: Path to log file (no file output if None)
        console_level: Logging level for console output
        file_level: Logging level for file output
        quiet: If True, suppress console output

    Returns:
        Configured structlog logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    owned = (FILE_HANDLER_NAME, CONSOLE_HANDLER_NAME)
    for handler in [h for h in root_logger.handlers if h.get_name() in owned]:
        root_logger.removeHandler(handler)
        handler.close()

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.set_name(FILE_HANDLER_NAME)
        file_handler.setLevel(getattr(logging, file_level.upper()))
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")
        )
        root_logger.addHandler(file_handler)

    if not quiet:
        console_handler = logging.StreamHandler()
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        console_handler.setLevel(getattr(logging, console_level.upper()))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(console_handler)

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

    logger = structlog.get_logger("shapecomp")
    logger.info(
        "Logging initialized",
        log_file=str(log_file) if log_file else None,
        level=console_level,
    )

    return logger


class BatchLogger:
    """Logger for tracking batch clipping progress and statistics."""

    def __init__(self, logger: structlog.stdlib.BoundLogger) -> None:
        self._logger = logger
        self._stats = BatchStats()

    def log_task_complete(self, index: int, shapes: int, duration_ms: float) -> None:
        """Log a successful clip task."""
        self._logger.debug(
            "Clip task complete",
            index=index,
            shapes=shapes,
            duration_ms=round(duration_ms, 2),
        )
        self._stats.completed_count += 1
        self._stats.result_shapes += shapes
        self._stats.task_timings_ms.append(duration_ms)

    def log_task_error(
        self,
        index: int,
        error: Exception,
        traceback: str | None = None,
    ) -> None:
        """Log a failed clip task."""
        self._logger.error(
            "Clip task failed",
            index=index,
            error=str(error),
            error_type=type(error).__name__,
            traceback=traceback,
        )
        self._stats.error_count += 1
        self._stats.errors.append((index, str(error)))

    def log_cancelled(self, pending: int) -> None:
        """Log cancellation of the remaining tasks."""
        self._logger.info("Batch cancelled", pending=pending)
        self._stats.was_cancelled = True
        self._stats.cancelled_count = pending

    @property
    def stats(self) -> BatchStats:
        """Get current batch statistics."""
        return self._stats
