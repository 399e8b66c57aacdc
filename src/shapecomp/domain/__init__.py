"""Domain models for shapecomp.

This module contains the value types of the geometry kernel and the
composition tree. Geometry models are designed to be:

- Immutable (frozen dataclasses; every operation returns new values)
- Serializable for inter-process communication (parallel processing)
- Safe to share between threads and worker processes

Key classes:
- Vector2, Matrix44: Coordinates and transforms
- Rectangle: Axis-aligned bounds
- ColorRGBa: Opaque color value
- Segment: Line, quadratic or cubic Bezier segment
- ShapeContour: Open or closed chain of segments
- Shape: One or more contours with a topology flag
- Circle: Circle primitive built from cubic segments
- CompositionNode and its variants: The scene graph
"""

from shapecomp.domain.color import ColorRGBa
from shapecomp.domain.composition import (
    DEFAULT_COMPOSITION_BOUNDS,
    INHERIT,
    Composition,
    CompositionNode,
    Explicit,
    GroupNode,
    ImageNode,
    Inherit,
    ShapeNode,
    TextNode,
    UserData,
)
from shapecomp.domain.contour import (
    ContourIntersection,
    ContourPoint,
    ShapeContour,
    WindingDirection,
)
from shapecomp.domain.primitives import Circle, line_segment_contour
from shapecomp.domain.rectangle import Rectangle, rectangle_bounds
from shapecomp.domain.segment import Segment, SegmentIntersection, SegmentPoint
from shapecomp.domain.shape import Shape, ShapeTopology
from shapecomp.domain.vector import Matrix44, Vector2

__all__: list[str] = [
    # Enums
    "Inherit",
    "ShapeTopology",
    "WindingDirection",
    # Values
    "Vector2",
    "Matrix44",
    "Rectangle",
    "ColorRGBa",
    "rectangle_bounds",
    # Geometry
    "Segment",
    "SegmentPoint",
    "SegmentIntersection",
    "ShapeContour",
    "ContourPoint",
    "ContourIntersection",
    "Shape",
    "Circle",
    "line_segment_contour",
    # Composition
    "DEFAULT_COMPOSITION_BOUNDS",
    "INHERIT",
    "Explicit",
    "CompositionNode",
    "GroupNode",
    "ShapeNode",
    "ImageNode",
    "TextNode",
    "UserData",
    "Composition",
]
