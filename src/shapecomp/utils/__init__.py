"""Utility functions for shapecomp.

This module provides utility functions including:

- Logging setup and configuration
- Batch statistics and progress logging
"""

from shapecomp.utils.logging import (
    BatchLogger,
    BatchStats,
    configure_logging,
)

__all__ = [
    "BatchLogger",
    "BatchStats",
    "configure_logging",
]
