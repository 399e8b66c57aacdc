"""Tests for configuration settings."""

import pytest
from pydantic import ValidationError

from shapecomp.config import (
    CompositionConfig,
    GeometryConfig,
    LoggingConfig,
    ProcessingConfig,
    ShapecompSettings,
    get_default_settings,
)


class TestDefaults:
    """Tests for default values."""

    def test_geometry_defaults(self) -> None:
        config = GeometryConfig()
        assert config.flatten_tolerance == 0.01
        assert config.intersection_tolerance == 1e-4
        assert config.nearest_samples == 16

    def test_composition_defaults(self) -> None:
        config = CompositionConfig()
        assert (config.document_width, config.document_height) == (2676.0, 2048.0)
        assert config.merge_threshold == 0.5
        assert config.stroke_weight == 1.0

    def test_processing_and_logging_defaults(self) -> None:
        assert ProcessingConfig().max_workers is None
        logging_config = LoggingConfig()
        assert logging_config.log_file is None
        assert logging_config.log_level == "WARNING"
        assert logging_config.file_log_level == "DEBUG"

    def test_get_default_settings(self) -> None:
        settings = get_default_settings()
        assert isinstance(settings, ShapecompSettings)
        assert settings == ShapecompSettings()


class TestValidation:
    """Tests for field validation."""

    def test_rejects_non_positive_document_size(self) -> None:
        with pytest.raises(ValidationError):
            CompositionConfig(document_width=0.0)

    def test_rejects_tiny_flatten_tolerance(self) -> None:
        with pytest.raises(ValidationError):
            GeometryConfig(flatten_tolerance=0.0)

    def test_rejects_too_few_samples(self) -> None:
        with pytest.raises(ValidationError):
            GeometryConfig(nearest_samples=1)

    def test_negative_merge_threshold_allowed(self) -> None:
        """Test that merging can be disabled with a non-positive threshold."""
        assert CompositionConfig(merge_threshold=-1.0).merge_threshold == -1.0

    def test_nested_override(self) -> None:
        settings = ShapecompSettings(geometry={"flatten_tolerance": 0.5})
        assert settings.geometry.flatten_tolerance == 0.5
        assert settings.composition.merge_threshold == 0.5
