"""Tests for parallel batch clipping."""

from unittest.mock import MagicMock, Mock, patch

import pytest

from shapecomp.config import GeometryConfig, ShapecompSettings
from shapecomp.core.batch import ShapeBatchClipper, clip_shape
from shapecomp.core.boolean import BooleanOp
from shapecomp.domain import Rectangle, Shape


@pytest.fixture
def subject() -> Shape:
    return Rectangle(0.0, 0.0, 10.0, 10.0).shape


@pytest.fixture
def clip() -> Shape:
    return Rectangle(5.0, 0.0, 10.0, 10.0).shape


@pytest.fixture
def settings() -> ShapecompSettings:
    """Create test settings."""
    return ShapecompSettings(geometry=GeometryConfig(flatten_tolerance=0.1))


def make_executor(results: list[dict]) -> tuple[MagicMock, list[MagicMock]]:
    """Build a mock executor whose submit() hands out one future per result."""
    futures = []
    for result in results:
        future = MagicMock()
        future.result.return_value = result
        futures.append(future)

    executor = MagicMock()
    executor.submit.side_effect = futures
    executor.__enter__.return_value = executor
    executor.__exit__.return_value = None
    return executor, futures


class TestClipShape:
    """Tests for clip_shape function."""

    def test_difference(self, subject: Shape, clip: Shape) -> None:
        """Test clipping one serialized subject."""
        result = clip_shape(subject.to_dict(), clip.to_dict(), "difference", 0.25)

        assert "error" not in result
        assert result["duration_ms"] >= 0
        shapes = [Shape.from_dict(s) for s in result["shapes"]]
        assert len(shapes) == 1
        assert shapes[0].area == pytest.approx(50.0)

    def test_disjoint_intersection_is_empty(self, subject: Shape) -> None:
        far = Rectangle(100.0, 100.0, 1.0, 1.0).shape
        result = clip_shape(subject.to_dict(), far.to_dict(), "intersection", 0.25)
        assert result["shapes"] == []

    def test_handles_bad_op(self, subject: Shape, clip: Shape) -> None:
        """Test that clip_shape reports errors instead of raising."""
        result = clip_shape(subject.to_dict(), clip.to_dict(), "xor", 0.25)

        assert "error" in result
        assert "traceback" in result
        assert "shapes" not in result

    def test_handles_malformed_shape(self, clip: Shape) -> None:
        result = clip_shape({"contours": [{"closed": True}]}, clip.to_dict(), "union", 0.25)
        assert "error" in result


class TestShapeBatchClipper:
    """Tests for ShapeBatchClipper class."""

    def test_init(self, settings: ShapecompSettings) -> None:
        """Test ShapeBatchClipper initialization."""
        with patch("shapecomp.core.batch.configure_logging") as mock_logging:
            mock_logging.return_value = Mock()
            clipper = ShapeBatchClipper(settings)

            assert clipper.settings == settings
            mock_logging.assert_called_once()

    @patch("shapecomp.core.batch.configure_logging")
    @patch("shapecomp.core.batch.ProcessPoolExecutor")
    def test_no_subjects(
        self, mock_executor_class, mock_logging, settings: ShapecompSettings, clip: Shape
    ) -> None:
        """Test that an empty batch never starts workers."""
        mock_logging.return_value = Mock()

        results, stats = ShapeBatchClipper(settings).clip([], clip, BooleanOp.DIFFERENCE)

        assert results == []
        assert stats.completed_count == 0
        mock_executor_class.assert_not_called()

    @patch("shapecomp.core.batch.configure_logging")
    @patch("shapecomp.core.batch.ProcessPoolExecutor")
    def test_results_in_subject_order(
        self,
        mock_executor_class,
        mock_logging,
        settings: ShapecompSettings,
        subject: Shape,
        clip: Shape,
    ) -> None:
        """Test that results land at their subject index whatever the completion order."""
        mock_logging.return_value = Mock()
        small = Rectangle(0.0, 0.0, 1.0, 1.0).shape
        executor, futures = make_executor(
            [
                {"shapes": [subject.to_dict()], "duration_ms": 2.0},
                {"shapes": [small.to_dict(), small.to_dict()], "duration_ms": 4.0},
            ]
        )
        mock_executor_class.return_value = executor

        with patch("shapecomp.core.batch.as_completed") as mock_as_completed:
            mock_as_completed.return_value = list(reversed(futures))

            results, stats = ShapeBatchClipper(settings).clip(
                [subject, small], clip, BooleanOp.UNION, max_workers=2
            )

        mock_executor_class.assert_called_once_with(max_workers=2)
        assert results[0] == [subject]
        assert results[1] == [small, small]
        assert stats.completed_count == 2
        assert stats.result_shapes == 3
        assert stats.error_count == 0
        assert stats.avg_task_time_ms == pytest.approx(3.0)
        assert stats.min_task_time_ms == 2.0
        assert stats.max_task_time_ms == 4.0

    @patch("shapecomp.core.batch.configure_logging")
    @patch("shapecomp.core.batch.ProcessPoolExecutor")
    def test_submits_serialized_tasks(
        self,
        mock_executor_class,
        mock_logging,
        settings: ShapecompSettings,
        subject: Shape,
        clip: Shape,
    ) -> None:
        mock_logging.return_value = Mock()
        executor, futures = make_executor([{"shapes": [], "duration_ms": 1.0}])
        mock_executor_class.return_value = executor

        with patch("shapecomp.core.batch.as_completed") as mock_as_completed:
            mock_as_completed.return_value = futures
            ShapeBatchClipper(settings).clip([subject], clip, BooleanOp.INTERSECTION)

        executor.submit.assert_called_once_with(
            clip_shape, subject.to_dict(), clip.to_dict(), "intersection", 0.1
        )

    @patch("shapecomp.core.batch.configure_logging")
    @patch("shapecomp.core.batch.ProcessPoolExecutor")
    def test_handles_errors(
        self,
        mock_executor_class,
        mock_logging,
        settings: ShapecompSettings,
        subject: Shape,
        clip: Shape,
    ) -> None:
        """Test that task and executor failures are counted, not raised."""
        mock_logging.return_value = Mock()
        executor, futures = make_executor(
            [
                {"error": "bad shape", "traceback": "...", "duration_ms": 1.0},
                {},
            ]
        )
        futures[1].result.side_effect = RuntimeError("worker died")
        mock_executor_class.return_value = executor
        progress: list[tuple[int, int, int, bool]] = []

        with patch("shapecomp.core.batch.as_completed") as mock_as_completed:
            mock_as_completed.return_value = futures

            results, stats = ShapeBatchClipper(settings).clip(
                [subject, subject],
                clip,
                BooleanOp.DIFFERENCE,
                progress_callback=lambda *args: progress.append(args),
            )

        assert results == [[], []]
        assert stats.error_count == 2
        assert stats.completed_count == 0
        assert [index for index, _ in stats.errors] == [0, 1]
        assert "bad shape" in stats.errors[0][1]
        assert progress == [(1, 2, 0, False), (2, 2, 1, False)]

    @patch("shapecomp.core.batch.configure_logging")
    @patch("shapecomp.core.batch.ProcessPoolExecutor")
    def test_progress_callback(
        self,
        mock_executor_class,
        mock_logging,
        settings: ShapecompSettings,
        subject: Shape,
        clip: Shape,
    ) -> None:
        mock_logging.return_value = Mock()
        executor, futures = make_executor([{"shapes": [], "duration_ms": 1.0}])
        mock_executor_class.return_value = executor
        callback = Mock()

        with patch("shapecomp.core.batch.as_completed") as mock_as_completed:
            mock_as_completed.return_value = futures
            ShapeBatchClipper(settings).clip(
                [subject], clip, BooleanOp.DIFFERENCE, progress_callback=callback
            )

        callback.assert_called_once_with(1, 1, 0, True)

    @patch("shapecomp.core.batch.configure_logging")
    @patch("shapecomp.core.batch.ProcessPoolExecutor")
    def test_keyboard_interrupt_cancels_pending(
        self,
        mock_executor_class,
        mock_logging,
        settings: ShapecompSettings,
        subject: Shape,
        clip: Shape,
    ) -> None:
        """Test that cancellation cancels outstanding futures and re-raises."""
        mock_logging.return_value = Mock()
        executor, futures = make_executor([{}, {}])
        mock_executor_class.return_value = executor

        with patch("shapecomp.core.batch.as_completed") as mock_as_completed:
            mock_as_completed.side_effect = KeyboardInterrupt

            with pytest.raises(KeyboardInterrupt):
                ShapeBatchClipper(settings).clip([subject, subject], clip, BooleanOp.DIFFERENCE)

        for future in futures:
            future.cancel.assert_called_once()
        executor.shutdown.assert_called_once_with(wait=True, cancel_futures=True)
