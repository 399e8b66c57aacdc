"""Straight-line helpers for flattened contours and control polygons.

- signed_area: shoelace area, positive for counter-clockwise rings
- point_in_polygon: even-odd crossing count
- line_parameters / line_intersection: where two lines meet
"""

from collections.abc import Sequence

from shapecomp.domain.vector import Vector2

# Cross products below this fraction of the squared leg lengths are parallel
_PARALLEL_EPSILON = 1e-12


def _edges(points: Sequence[Vector2]) -> list[tuple[Vector2, Vector2]]:
    return list(zip(points, [*points[1:], points[0]]))


def signed_area(points: Sequence[Vector2]) -> float:
    """Area enclosed by a ring of points.

    Examples:
        >>> square = [Vector2(0, 0), Vector2(1, 0), Vector2(1, 1), Vector2(0, 1)]
        >>> signed_area(square)
        1.0
        >>> signed_area(square[::-1])
        -1.0
    """
    if len(points) < 3:
        return 0.0
    return 0.5 * sum(p.cross(q) for p, q in _edges(points))


def point_in_polygon(point: Vector2, polygon: Sequence[Vector2]) -> bool:
    """Even-odd test counting ring edges crossed by a ray towards +x."""
    if len(polygon) < 3:
        return False

    crossings = 0
    for p, q in _edges(polygon):
        if (p.y > point.y) == (q.y > point.y):
            continue
        x_at = p.x + (point.y - p.y) * (q.x - p.x) / (q.y - p.y)
        if point.x < x_at:
            crossings += 1
    return crossings % 2 == 1


def line_parameters(
    a0: Vector2, a1: Vector2, b0: Vector2, b1: Vector2
) -> tuple[float, float] | None:
    """Parameters (t, u) where the infinite lines a0-a1 and b0-b1 meet.

    a0 + (a1 - a0) * t == b0 + (b1 - b0) * u. Parallel lines give None.
    """
    da = a1 - a0
    db = b1 - b0
    denom = da.cross(db)
    if abs(denom) < _PARALLEL_EPSILON * max(da.squared_length, db.squared_length, 1.0):
        return None
    offset = b0 - a0
    return offset.cross(db) / denom, offset.cross(da) / denom


def line_intersection(
    p1: Vector2, p2: Vector2, p3: Vector2, p4: Vector2
) -> tuple[float, float] | None:
    """Parameters where segment p1-p2 crosses segment p3-p4.

    Returns:
        (t, u) on each segment, or None when they miss or are parallel
    """
    params = line_parameters(p1, p2, p3, p4)
    if params is None:
        return None
    t, u = params
    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return params
    return None
