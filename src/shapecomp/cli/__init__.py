"""Command-line interface for shapecomp.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Segment inspection (length, bounds, extrema, reduction, offsets)
- Batch clipping with a progress bar
- Detailed error reporting
"""

from shapecomp.cli.app import cli, main

__all__ = ["cli", "main"]
