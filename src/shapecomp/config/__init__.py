"""Configuration management for shapecomp.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- GeometryConfig: Flattening, intersection and nearest-point tolerances
- CompositionConfig: Drawer and document defaults
- ProcessingConfig: Batch clipping settings
- LoggingConfig: Logging settings
- ShapecompSettings: Main application settings
"""

from shapecomp.config.settings import (
    CompositionConfig,
    GeometryConfig,
    LoggingConfig,
    ProcessingConfig,
    ShapecompSettings,
    get_default_settings,
)

__all__ = [
    "CompositionConfig",
    "GeometryConfig",
    "LoggingConfig",
    "ProcessingConfig",
    "ShapecompSettings",
    "get_default_settings",
]
