"""Parallel batch clipping.

The geometry kernel is pure, so many subject shapes can be clipped against
one clip shape in worker processes using ProcessPoolExecutor.

Key components:
- clip_shape: Top-level picklable function for parallel execution
- ShapeBatchClipper: Orchestrator fanning clip tasks out to workers
"""

import time
import traceback
from collections.abc import Callable
from concurrent.futures import Future, ProcessPoolExecutor, as_completed
from typing import Any

from shapecomp.config import ShapecompSettings, get_default_settings
from shapecomp.core.boolean import BooleanOp, combine
from shapecomp.domain.shape import Shape
from shapecomp.exceptions import ClipTaskError
from shapecomp.utils import BatchLogger, BatchStats, configure_logging


def clip_shape(
    subject_dict: dict[str, Any],
    clip_dict: dict[str, Any],
    op: str,
    tolerance: float,
) -> dict[str, Any]:
    """Clip one subject shape.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.
    Deserializes both shapes, applies the boolean operator, and returns the result.

    Args:
        subject_dict: Serialized subject (from Shape.to_dict())
        clip_dict: Serialized clip shape
        op: BooleanOp value ("union", "intersection" or "difference")
        tolerance: Flattening tolerance for the overlay

    Returns:
        Dictionary containing either:
        - Success: {"shapes": [shape_dict, ...], "duration_ms": float}
        - Error: {"error": str, "traceback": str, "duration_ms": float}
    """
    start_time = time.time()

    try:
        subject = Shape.from_dict(subject_dict)
        clip = Shape.from_dict(clip_dict)
        shapes = combine(subject, clip, BooleanOp(op), tolerance)

        duration_ms = (time.time() - start_time) * 1000
        return {
            "shapes": [s.to_dict() for s in shapes],
            "duration_ms": duration_ms,
        }

    except Exception as e:
        duration_ms = (time.time() - start_time) * 1000
        return {
            "error": str(e),
            "traceback": traceback.format_exc(),
            "duration_ms": duration_ms,
        }


class ShapeBatchClipper:
    """Clips many subject shapes against one clip shape in parallel.

    Failed tasks are logged and counted; their slot in the result list is
    an empty list.

    Example:
        clipper = ShapeBatchClipper(ShapecompSettings())
        results, stats = clipper.clip(
            subjects=[Rectangle(0, 0, 10, 10).shape],
            clip=Circle(Vector2(5, 5), 4).shape,
            op=BooleanOp.DIFFERENCE,
            max_workers=4,
        )
    """

    def __init__(self, settings: ShapecompSettings | None = None) -> None:
        """Initialize the clipper.

        Args:
            settings: Settings providing tolerances, worker count and logging
        """
        self.settings = settings if settings is not None else get_default_settings()
        self.logger = configure_logging(
            log_file=self.settings.logging.log_file,
            console_level=self.settings.logging.log_level,
            file_level=self.settings.logging.file_log_level,
            quiet=False,
        )

    def clip(
        self,
        subjects: list[Shape],
        clip: Shape,
        op: BooleanOp,
        max_workers: int | None = None,
        progress_callback: Callable[[int, int, int, bool], None] | None = None,
    ) -> tuple[list[list[Shape]], BatchStats]:
        """Clip every subject against clip.

        Args:
            subjects: Subject shapes
            clip: Clip shape
            op: Boolean operator
            max_workers: Maximum worker processes (settings default if None)
            progress_callback: Optional callback(completed, total, index, success)
                for progress updates

        Returns:
            Tuple of (results in subject order, batch statistics)

        Raises:
            KeyboardInterrupt: If processing is cancelled by user
        """
        batch_logger = BatchLogger(self.logger)
        stats = batch_logger.stats
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.settings.processing.max_workers

        results: list[list[Shape]] = [[] for _ in subjects]
        total = len(subjects)
        self.logger.info(
            "Starting batch clip",
            subjects=total,
            op=op.value,
            max_workers=max_workers,
        )

        if subjects:
            self._run(subjects, clip, op, max_workers, results, batch_logger, progress_callback)

        stats.end_time = time.time()
        self.logger.info(
            "Batch clip complete",
            completed=stats.completed_count,
            errors=stats.error_count,
            shapes=stats.result_shapes,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return results, stats

    def _run(
        self,
        subjects: list[Shape],
        clip: Shape,
        op: BooleanOp,
        max_workers: int | None,
        results: list[list[Shape]],
        batch_logger: BatchLogger,
        progress_callback: Callable[[int, int, int, bool], None] | None,
    ) -> None:
        clip_dict = clip.to_dict()
        tolerance = self.settings.geometry.flatten_tolerance
        total = len(subjects)
        completed = 0
        pending_futures: dict[Future, int] = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for index, subject in enumerate(subjects):
                future = executor.submit(clip_shape, subject.to_dict(), clip_dict, op.value, tolerance)
                pending_futures[future] = index

            try:
                for future in as_completed(list(pending_futures)):
                    index = pending_futures.pop(future)
                    success = False

                    try:
                        result = future.result()

                        if "error" in result:
                            batch_logger.log_task_error(
                                index=index,
                                error=ClipTaskError(index, result["error"]),
                                traceback=result.get("traceback"),
                            )
                        else:
                            success = True
                            shapes = [Shape.from_dict(s) for s in result["shapes"]]
                            results[index] = shapes
                            batch_logger.log_task_complete(
                                index=index,
                                shapes=len(shapes),
                                duration_ms=result.get("duration_ms", 0.0),
                            )

                    except Exception as e:
                        # Executor-level error
                        batch_logger.log_task_error(
                            index=index,
                            error=e,
                            traceback=traceback.format_exc(),
                        )

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, index, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()
                batch_logger.log_cancelled(len(pending_futures))
                executor.shutdown(wait=True, cancel_futures=True)
                raise
