"""Configuration settings for Shapecomp."""

from pathlib import Path

from pydantic import BaseModel, Field


class GeometryConfig(BaseModel):
    """Configuration for geometry operations.

    Tolerances are absolute values in composition units.
    """

    flatten_tolerance: float = Field(
        default=0.01,
        ge=0.001,
        le=10.0,
        description="Maximum deviation when flattening curves for boolean operations",
    )
    intersection_tolerance: float = Field(
        default=1e-4,
        ge=1e-9,
        le=1.0,
        description="Size at which curve subdivision stops during intersection search",
    )
    nearest_samples: int = Field(
        default=16,
        ge=4,
        le=256,
        description="Coarse samples per segment before nearest-point refinement",
    )


class CompositionConfig(BaseModel):
    """Configuration for composition building."""

    document_width: float = Field(
        default=2676.0,
        gt=0.0,
        description="Default document width",
    )
    document_height: float = Field(
        default=2048.0,
        gt=0.0,
        description="Default document height",
    )
    merge_threshold: float = Field(
        default=0.5,
        description="Distance below which intersection results are merged (<= 0 disables)",
    )
    stroke_weight: float = Field(
        default=1.0,
        ge=0.0,
        description="Initial drawer stroke weight",
    )


class ProcessingConfig(BaseModel):
    """Configuration for batch processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class ShapecompSettings(BaseModel):
    """Main application settings."""

    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    composition: CompositionConfig = Field(default_factory=CompositionConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> ShapecompSettings:
    """Get default application settings."""
    return ShapecompSettings()
