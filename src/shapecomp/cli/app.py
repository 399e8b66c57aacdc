"""CLI application entry point for shapecomp.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated

import typer

from shapecomp import __version__
from shapecomp.cli.output import (
    console,
    create_progress,
    print_cancellation_summary,
    print_clip_results,
    print_error,
    print_header,
    print_segment_report,
    print_step,
    print_success,
)
from shapecomp.config import LoggingConfig, ProcessingConfig, ShapecompSettings
from shapecomp.core import BooleanOp, ShapeBatchClipper
from shapecomp.domain import Circle, Rectangle, Segment, Shape, Vector2
from shapecomp.exceptions import ShapecompError

# Create the Typer app
app = typer.Typer(
    name="shapecomp",
    help="Inspect curve segments and run boolean clipping on shapes.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Shapecomp[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Shapecomp command-line tools."""


def _parse_floats(text: str, count: int, option: str) -> list[float]:
    """Parse a comma-separated list of exactly count numbers."""
    try:
        values = [float(part) for part in text.split(",")]
    except ValueError:
        raise typer.BadParameter(f"{option} expects numbers, got '{text}'") from None
    if len(values) != count:
        raise typer.BadParameter(f"{option} expects {count} comma-separated numbers, got '{text}'")
    return values


@app.command()
def segment(
    coords: Annotated[
        list[float],
        typer.Argument(
            help="Curve points as X0 Y0 [CX CY [CX CY]] X1 Y1",
            show_default=False,
        ),
    ],
    at: Annotated[
        float,
        typer.Option(
            "--at",
            "-t",
            help="Parameter at which to evaluate position and normal",
        ),
    ] = 0.5,
    offset: Annotated[
        float | None,
        typer.Option(
            "--offset",
            "-d",
            help="Report the offset curve at this distance",
        ),
    ] = None,
) -> None:
    """Print the metrics of a line, quadratic or cubic segment.

    Example:
        shapecomp segment 0 0 100 100 50 100 0 100 --offset 10
    """
    if len(coords) not in (4, 6, 8):
        print_error(
            f"Expected 4, 6 or 8 coordinates, got {len(coords)}",
            details="Give the start point, up to two control points and the end point.",
        )
        raise typer.Exit(code=1)

    points = [Vector2(coords[i], coords[i + 1]) for i in range(0, len(coords), 2)]
    print_segment_report(Segment.from_points(points), at, offset)


@app.command()
def clip(
    subjects: Annotated[
        list[str],
        typer.Option(
            "--subject",
            "-s",
            help="Subject rectangle as x,y,w,h (repeatable)",
            show_default=False,
        ),
    ],
    op: Annotated[
        str,
        typer.Option(
            "--op",
            help="Boolean operation (union|intersection|difference)",
        ),
    ] = "difference",
    clip_rect: Annotated[
        str | None,
        typer.Option(
            "--clip",
            help="Clip rectangle as x,y,w,h",
        ),
    ] = None,
    clip_circle: Annotated[
        str | None,
        typer.Option(
            "--clip-circle",
            help="Clip circle as cx,cy,r",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers (default: auto)",
            min=1,
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Clip subject rectangles against a rectangle or circle.

    Example:
        shapecomp clip --op difference --subject 0,0,100,100 --clip-circle 50,50,25
    """
    if (clip_rect is None) == (clip_circle is None):
        print_error("Give exactly one of --clip and --clip-circle")
        raise typer.Exit(code=1)

    try:
        boolean_op = BooleanOp(op.lower())
    except ValueError:
        print_error(
            f"Invalid operation: {op}",
            details="Valid values: union, intersection, difference",
        )
        raise typer.Exit(code=1)

    try:
        subject_shapes = [
            Rectangle(*_parse_floats(s, 4, "--subject")).shape for s in subjects
        ]
        if clip_rect is not None:
            clip_shape: Shape = Rectangle(*_parse_floats(clip_rect, 4, "--clip")).shape
        else:
            cx, cy, r = _parse_floats(clip_circle or "", 3, "--clip-circle")
            clip_shape = Circle(Vector2(cx, cy), r).shape
    except typer.BadParameter as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if not quiet:
        print_header(__version__)
        print_step(f"Clipping {len(subject_shapes)} subjects ({boolean_op.value})")

    settings = ShapecompSettings(
        processing=ProcessingConfig(max_workers=workers),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )

    completed = 0

    def track(done: int, *_: object) -> None:
        nonlocal completed
        completed = done

    try:
        clipper = ShapeBatchClipper(settings)
        if not quiet:
            with create_progress() as progress:
                task_id = progress.add_task("Clipping", total=len(subject_shapes))

                def update_progress(done: int, *_: object) -> None:
                    track(done)
                    progress.update(task_id, completed=done)

                results, stats = clipper.clip(
                    subject_shapes, clip_shape, boolean_op, workers, update_progress
                )
        else:
            results, stats = clipper.clip(subject_shapes, clip_shape, boolean_op, workers, track)
    except KeyboardInterrupt:
        if not quiet:
            print_cancellation_summary(completed, len(subject_shapes) - completed)
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code
    except ShapecompError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    print_clip_results(results)
    if not quiet:
        print_success(stats)
    if stats.error_count:
        raise typer.Exit(code=1)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
