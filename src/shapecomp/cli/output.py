"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from shapecomp.domain import Rectangle, Segment, Shape, Vector2
from shapecomp.utils import BatchStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for batch clipping.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Shapecomp[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def _fmt_point(p: Vector2) -> str:
    return f"({p.x:.4g}, {p.y:.4g})"


def _fmt_rect(r: Rectangle) -> str:
    return f"x={r.x:.4g} y={r.y:.4g} w={r.width:.4g} h={r.height:.4g}"


def _fmt_params(ts: list[float]) -> str:
    return ", ".join(f"{t:.4f}" for t in ts) if ts else "none"


def print_segment_report(segment: Segment, t: float, offset: float | None = None) -> None:
    """Print the metrics of a segment.

    Args:
        segment: Segment to describe
        t: Parameter for position/normal evaluation
        offset: Optional offset distance to report
    """
    kinds = {1: "line", 2: "quadratic", 3: "cubic"}
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()

    table.add_row("Kind", kinds[segment.degree])
    table.add_row("Points", " ".join(_fmt_point(p) for p in segment.points))
    table.add_row("Length", f"{segment.length:.6g}")
    table.add_row("Bounds", _fmt_rect(segment.bounds))
    table.add_row(f"Position @ {t:g}", _fmt_point(segment.position(t)))
    table.add_row(f"Normal @ {t:g}", _fmt_point(segment.normal(t)))
    table.add_row("Extrema", _fmt_params(segment.extrema()))
    table.add_row("Inflections", _fmt_params(segment.inflections()))
    table.add_row("Simple", "yes" if segment.is_simple else "no")
    table.add_row("Reduced pieces", str(len(segment.reduced())))
    if offset is not None:
        table.add_row(f"Offset {offset:g}", f"{len(segment.offset(offset))} segments")

    console.print(table)


def print_clip_results(results: list[list[Shape]]) -> None:
    """Print one row per result shape.

    Args:
        results: Result shapes per subject
    """
    table = Table(box=None, padding=(0, 2))
    table.add_column("Subject", justify="right")
    table.add_column("Shape", justify="right")
    table.add_column("Contours", justify="right")
    table.add_column("Area", justify="right")
    table.add_column("Bounds")

    for subject_index, shapes in enumerate(results):
        if not shapes:
            table.add_row(str(subject_index), "-", "0", "0", "empty")
            continue
        for shape_index, shape in enumerate(shapes):
            table.add_row(
                str(subject_index),
                str(shape_index),
                str(len(shape.contours)),
                f"{shape.area:.6g}",
                _fmt_rect(shape.bounds),
            )

    console.print(table)


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_success(stats: BatchStats) -> None:
    """Print success message with summary.

    Args:
        stats: Statistics of the finished batch
    """
    time_str = _format_time(stats.duration_seconds)
    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    error_style = "red" if stats.error_count > 0 else "green"
    console.print(
        f"  {stats.completed_count} subjects {SYM_DOT} {stats.result_shapes} shapes {SYM_DOT} "
        f"[{error_style}]{stats.error_count} errors[/{error_style}]"
    )

    if stats.avg_task_time_ms is not None:
        timing_str = f"{stats.avg_task_time_ms:.1f}ms avg"
        if stats.min_task_time_ms is not None and stats.max_task_time_ms is not None:
            timing_str += f" ({stats.min_task_time_ms:.1f}-{stats.max_task_time_ms:.1f}ms range)"
        console.print(f"  {timing_str}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_summary(completed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        completed: Number of subjects clipped before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {completed} subjects completed {SYM_DOT} {cancelled} tasks cancelled")
