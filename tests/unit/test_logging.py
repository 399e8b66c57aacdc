"""Tests for batch logging utilities."""

import logging
from unittest.mock import Mock

import pytest

from shapecomp.exceptions import ClipTaskError
from shapecomp.utils import BatchLogger, BatchStats, configure_logging
from shapecomp.utils.logging import CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME


class TestBatchStats:
    """Tests for BatchStats."""

    def test_empty_stats(self) -> None:
        stats = BatchStats()
        assert stats.duration_seconds == 0.0
        assert stats.avg_task_time_ms is None
        assert stats.min_task_time_ms is None
        assert stats.max_task_time_ms is None

    def test_duration(self) -> None:
        stats = BatchStats(start_time=10.0, end_time=12.5)
        assert stats.duration_seconds == 2.5


class TestBatchLogger:
    """Tests for BatchLogger."""

    def test_task_complete(self) -> None:
        logger = Mock()
        batch_logger = BatchLogger(logger)
        batch_logger.log_task_complete(index=0, shapes=2, duration_ms=5.0)
        batch_logger.log_task_complete(index=1, shapes=1, duration_ms=7.0)

        stats = batch_logger.stats
        assert stats.completed_count == 2
        assert stats.result_shapes == 3
        assert stats.avg_task_time_ms == 6.0
        assert logger.debug.call_count == 2

    def test_task_error(self) -> None:
        logger = Mock()
        batch_logger = BatchLogger(logger)
        batch_logger.log_task_error(index=3, error=ClipTaskError(3, "bad"), traceback="tb")

        stats = batch_logger.stats
        assert stats.error_count == 1
        assert stats.errors == [(3, "Clip task 3 failed: bad")]
        _, kwargs = logger.error.call_args
        assert kwargs["error_type"] == "ClipTaskError"

    def test_cancelled(self) -> None:
        batch_logger = BatchLogger(Mock())
        batch_logger.log_cancelled(4)
        assert batch_logger.stats.was_cancelled
        assert batch_logger.stats.cancelled_count == 4


@pytest.fixture
def own_handlers():
    """Yield a function listing configure_logging's handlers; remove them afterwards."""
    root = logging.getLogger()
    names = (FILE_HANDLER_NAME, CONSOLE_HANDLER_NAME)

    def current() -> list[logging.Handler]:
        return [h for h in root.handlers if h.get_name() in names]

    yield current
    for handler in current():
        root.removeHandler(handler)
        handler.close()


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_repeated_calls_replace_handlers(self, own_handlers, tmp_path) -> None:
        log_file = tmp_path / "run.log"
        configure_logging(log_file=log_file)
        first = own_handlers()
        configure_logging(log_file=log_file)
        configure_logging(log_file=log_file)

        handlers = own_handlers()
        assert len(handlers) == 2
        assert not any(h in first for h in handlers)

    def test_quiet_has_no_console_handler(self, own_handlers) -> None:
        configure_logging()
        configure_logging(quiet=True)
        assert own_handlers() == []

    def test_other_handlers_survive(self, own_handlers) -> None:
        root = logging.getLogger()
        foreign = logging.NullHandler()
        root.addHandler(foreign)
        try:
            configure_logging()
            configure_logging()
            assert foreign in root.handlers
            assert len(own_handlers()) == 1
        finally:
            root.removeHandler(foreign)
