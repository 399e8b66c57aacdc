"""Core algorithms for shapecomp.

This module contains the algorithms operating on the domain models:

- Polygon operations (signed area, point-in-polygon, line intersection)
- Intersection search between segments and contours
- Boolean operations on shapes (union, intersection, difference)
- Composition building (drawer with transform/style stacks and clipping)
- Parallel batch clipping

Geometry services are designed to be:
- Stateless (safe for use in worker processes)
- Pure (no side effects)

Key functions:
- union, intersection, difference: Boolean operations returning shape lists
- segment_intersections, contour_intersections: Intersection search
- merge_intersections: Greedy clustering of intersection results
- draw_composition: Build a composition from a draw function

Key classes:
- CompositionDrawer: Imperative composition builder
- ShapeBatchClipper: Parallel clipping orchestrator
"""

from shapecomp.core.batch import ShapeBatchClipper, clip_shape
from shapecomp.core.boolean import BooleanOp, combine, difference, intersection, union
from shapecomp.core.drawer import (
    ClipMode,
    ClipOp,
    CompositionDrawer,
    ShapeNodeIntersection,
    ShapeNodeNearestContour,
    draw_composition,
    merge_intersections,
)
from shapecomp.core.geometry import (
    line_intersection,
    line_parameters,
    point_in_polygon,
    signed_area,
)
from shapecomp.core.intersections import (
    coincident,
    contour_intersections,
    contours_cross,
    segment_intersections,
)

__all__ = [
    # Boolean operations
    "BooleanOp",
    "combine",
    "difference",
    "intersection",
    "union",
    # Drawer
    "ClipMode",
    "ClipOp",
    "CompositionDrawer",
    "ShapeNodeIntersection",
    "ShapeNodeNearestContour",
    "draw_composition",
    "merge_intersections",
    # Batch
    "ShapeBatchClipper",
    "clip_shape",
    # Geometry functions
    "coincident",
    "contour_intersections",
    "contours_cross",
    "line_intersection",
    "line_parameters",
    "point_in_polygon",
    "segment_intersections",
    "signed_area",
]
