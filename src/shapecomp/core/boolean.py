"""Boolean path operations on shapes.

Operations resolve in order:
1. Empty operands
2. Open operands; an open subject is split at every crossing and its
   pieces are filtered by containment
3. Disjoint bounding boxes
4. Single-contour operands whose boundaries never cross, classified by
   containment so curved inputs come back untouched
5. Everything else: flattened contours overlaid with shapely and
   re-stitched into closed line contours

Overlay results are lists of shapes, largest area first. A union whose
operands stay separate returns both operands, subject first. An empty list
means the operation left no area.
"""

from enum import Enum
from functools import reduce
from typing import Any

import structlog
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import unary_union
from shapely.validation import make_valid

from shapecomp.core.intersections import contours_cross
from shapecomp.domain._bezier import DEFAULT_FLATTEN_TOLERANCE
from shapecomp.domain.contour import ShapeContour
from shapecomp.domain.segment import Segment
from shapecomp.domain.shape import Shape, ShapeTopology
from shapecomp.domain.vector import Vector2

logger = structlog.get_logger(__name__)

# Output polygons smaller than this are numerical debris
SLIVER_AREA = 1e-9


class BooleanOp(Enum):
    """Boolean operator applied to a pair of shapes."""

    UNION = "union"
    INTERSECTION = "intersection"
    DIFFERENCE = "difference"


def union(a: Shape, b: Shape, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> list[Shape]:
    """Area covered by a or b. Separate inputs come back as [a, b]."""
    return combine(a, b, BooleanOp.UNION, tolerance)


def intersection(a: Shape, b: Shape, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> list[Shape]:
    """Area covered by both a and b."""
    return combine(a, b, BooleanOp.INTERSECTION, tolerance)


def difference(a: Shape, b: Shape, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> list[Shape]:
    """Area covered by a but not by b."""
    return combine(a, b, BooleanOp.DIFFERENCE, tolerance)


def combine(
    a: Shape, b: Shape, op: BooleanOp, tolerance: float = DEFAULT_FLATTEN_TOLERANCE
) -> list[Shape]:
    """Apply a boolean operator to two shapes.

    Args:
        a: Subject shape
        b: Clip shape
        op: Operator to apply
        tolerance: Flattening tolerance for the polygon overlay

    Returns:
        Resulting shapes
    """
    if a.empty or b.empty:
        return _combine_empty(a, b, op)

    if a.topology is ShapeTopology.OPEN or b.topology is ShapeTopology.OPEN:
        return _combine_open(a, b, op)

    if not a.bounds.intersects(b.bounds):
        logger.debug("boolean resolved by bounds", op=op.value)
        return _combine_disjoint(a, b, op)

    if len(a.contours) == 1 and len(b.contours) == 1:
        resolved = _combine_simple(a, b, op)
        if resolved is not None:
            logger.debug("boolean resolved by containment", op=op.value)
            return resolved

    return _overlay(a, b, op, tolerance)


def shape_area(shape: Shape, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> float:
    """Even-odd filled area of a closed shape."""
    return to_geometry(shape, tolerance).area


def to_geometry(shape: Shape, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> BaseGeometry:
    """Convert the closed contours of a shape to a valid shapely geometry.

    Contours combine with the even-odd rule.
    """
    polygons: list[BaseGeometry] = []
    for contour in shape.contours:
        if not contour.closed:
            continue
        points = contour.adaptive_positions(tolerance)
        if len(points) < 3:
            continue
        polygons.append(_polygonal(make_valid(Polygon([p.to_tuple() for p in points]))))

    if not polygons:
        return Polygon()
    return reduce(lambda acc, g: acc.symmetric_difference(g), polygons)


def from_geometry(geometry: BaseGeometry) -> list[Shape]:
    """Convert a shapely geometry to shapes, one per polygon.

    Outer contours wind counter-clockwise and holes clockwise.
    """
    shapes: list[tuple[float, Shape]] = []
    for polygon in _polygons(geometry):
        if polygon.area < SLIVER_AREA:
            continue
        polygon = orient(polygon, sign=1.0)
        contours = [_ring_contour(polygon.exterior.coords)]
        contours.extend(
            _ring_contour(ring.coords)
            for ring in polygon.interiors
            if Polygon(ring).area >= SLIVER_AREA
        )
        shapes.append((polygon.area, Shape(tuple(contours))))

    shapes.sort(key=lambda item: item[0], reverse=True)
    return [shape for _, shape in shapes]


def _polygons(geometry: BaseGeometry) -> list[Polygon]:
    if geometry.is_empty:
        return []
    if isinstance(geometry, Polygon):
        return [geometry]
    if isinstance(geometry, (MultiPolygon, GeometryCollection)):
        result: list[Polygon] = []
        for part in geometry.geoms:
            result.extend(_polygons(part))
        return result
    return []


def _polygonal(geometry: BaseGeometry) -> BaseGeometry:
    """Drop the line and point debris make_valid can leave behind."""
    polygons = _polygons(geometry)
    if not polygons:
        return Polygon()
    return unary_union(polygons)


def _ring_contour(coords: Any) -> ShapeContour:
    points = [Vector2(float(x), float(y)) for x, y in list(coords)[:-1]]
    return ShapeContour.from_points(points, closed=True)


def _combine_empty(a: Shape, b: Shape, op: BooleanOp) -> list[Shape]:
    if op is BooleanOp.UNION:
        return [s for s in (a, b) if not s.empty]
    if op is BooleanOp.INTERSECTION:
        return []
    return [] if a.empty else [a]


def _combine_disjoint(a: Shape, b: Shape, op: BooleanOp) -> list[Shape]:
    if op is BooleanOp.UNION:
        return [a, b]
    if op is BooleanOp.INTERSECTION:
        return []
    return [a]


def _inside_by_vote(contour: ShapeContour, other: ShapeContour) -> bool:
    """Majority vote of segment midpoints lying inside other."""
    votes = sum(1 for s in contour.segments if other.contains(s.position(0.5)))
    return votes * 2 > len(contour.segments)


def _combine_simple(a: Shape, b: Shape, op: BooleanOp) -> list[Shape] | None:
    """Resolve non-crossing single-contour operands, or None when they cross."""
    ca = a.contours[0]
    cb = b.contours[0]
    if contours_cross(ca, cb):
        return None

    if _inside_by_vote(ca, cb):
        if op is BooleanOp.UNION:
            return [b]
        if op is BooleanOp.INTERSECTION:
            return [a]
        return []

    if _inside_by_vote(cb, ca):
        if op is BooleanOp.UNION:
            return [a]
        if op is BooleanOp.INTERSECTION:
            return [b]
        return [Shape((ca.counter_clockwise, cb.clockwise))]

    return _combine_disjoint(a, b, op)


def _combine_open(a: Shape, b: Shape, op: BooleanOp) -> list[Shape]:
    """Boolean with at least one open operand.

    Open shapes have no area: a union keeps both operands and clipping by an
    open shape removes nothing. An open subject clipped by a closed shape is
    cut at every crossing and its pieces are kept by midpoint containment.
    """
    if op is BooleanOp.UNION:
        return [a, b]
    if b.topology is ShapeTopology.OPEN:
        return [] if op is BooleanOp.INTERSECTION else [a]
    if a.topology is ShapeTopology.CLOSED:
        # Closed subject clipped by an open operand
        return [] if op is BooleanOp.INTERSECTION else [a]

    keep_inside = op is BooleanOp.INTERSECTION
    if not a.bounds.intersects(b.bounds):
        return [] if keep_inside else [a]

    contours: list[ShapeContour] = []
    for contour in a.contours:
        contours.extend(_clip_open_contour(contour, b, keep_inside))
    if not contours:
        return []
    return [Shape(tuple(contours))]


def _clip_open_contour(contour: ShapeContour, clip: Shape, keep_inside: bool) -> list[ShapeContour]:
    pieces: list[Segment] = []
    for segment in contour.segments:
        ts: set[float] = set()
        for clip_contour in clip.contours:
            for clip_segment in clip_contour.segments:
                ts.update(hit.a_t for hit in segment.intersections(clip_segment))
        cuts = sorted(t for t in ts if 0.0 < t < 1.0)
        bounds = [0.0, *cuts, 1.0]
        pieces.extend(segment.sub(t0, t1) for t0, t1 in zip(bounds, bounds[1:]) if t1 > t0)

    result: list[ShapeContour] = []
    run: list[Segment] = []
    for piece in pieces:
        if clip.contains(piece.position(0.5)) == keep_inside:
            run.append(piece)
        elif run:
            result.append(ShapeContour(tuple(run), False))
            run = []
    if run:
        result.append(ShapeContour(tuple(run), False))
    return result


def _overlay(a: Shape, b: Shape, op: BooleanOp, tolerance: float) -> list[Shape]:
    ga = to_geometry(a, tolerance)
    gb = to_geometry(b, tolerance)
    if op is BooleanOp.UNION:
        result = ga.union(gb)
    elif op is BooleanOp.INTERSECTION:
        result = ga.intersection(gb)
    else:
        result = ga.difference(gb)

    shapes = from_geometry(make_valid(result))
    logger.debug("boolean resolved by overlay", op=op.value, shapes=len(shapes))
    return shapes
