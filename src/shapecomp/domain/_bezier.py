"""Internal Bezier curve evaluation and flattening algorithms.

This is an internal module containing helper functions for Segment.
Not intended for public use.
"""

import math
from collections.abc import Sequence

from shapecomp.domain.vector import Vector2

DEFAULT_FLATTEN_TOLERANCE = 0.01

# Recursion guard for degenerate or huge curves
_MAX_DEPTH = 16


def de_casteljau(points: Sequence[Vector2], t: float) -> Vector2:
    """Evaluate a Bezier curve of any degree at t."""
    work = list(points)
    n = len(work)
    for level in range(1, n):
        for i in range(n - level):
            work[i] = work[i].mix(work[i + 1], t)
    return work[0]


def de_casteljau_split(
    points: Sequence[Vector2], t: float
) -> tuple[list[Vector2], list[Vector2]]:
    """Split Bezier control points at t.

    Returns:
        Tuple of (left, right) control point lists. The last left point and
        the first right point are the same object.
    """
    left = [points[0]]
    right = [points[-1]]
    work = list(points)
    n = len(work)
    for level in range(1, n):
        for i in range(n - level):
            work[i] = work[i].mix(work[i + 1], t)
        left.append(work[0])
        right.append(work[n - level - 1])
    right.reverse()
    right[0] = left[-1]
    return left, right


def derivative_points(points: Sequence[Vector2]) -> list[Vector2]:
    """Control points of the hodograph (first derivative curve)."""
    degree = len(points) - 1
    return [(points[i + 1] - points[i]) * degree for i in range(degree)]


def _distance_to_chord(point: Vector2, start: Vector2, end: Vector2) -> float:
    chord = end - start
    length = chord.length
    if length < 1e-12:
        return point.distance_to(start)
    return abs(chord.cross(point - start)) / length


def is_flat(points: Sequence[Vector2], tolerance: float) -> bool:
    """Check whether all inner control points lie within tolerance of the chord."""
    start, end = points[0], points[-1]
    return all(_distance_to_chord(p, start, end) <= tolerance for p in points[1:-1])


def flatten_quadratic(
    points: Sequence[Vector2], tolerance: float, depth: int = 0
) -> list[Vector2]:
    """Flatten a quadratic Bezier curve using recursive subdivision.

    Args:
        points: List of 3 control points [p0, p1, p2]
        tolerance: Maximum distance from true curve
        depth: Current recursion depth

    Returns:
        List of points approximating the curve
    """
    p0, p1, p2 = points

    if depth >= _MAX_DEPTH or is_flat(points, tolerance):
        # Flat enough, return endpoints
        return [p0, p2]

    # Subdivide at t=0.5
    q1 = p0.mix(p1, 0.5)
    r1 = p1.mix(p2, 0.5)
    mid = q1.mix(r1, 0.5)

    # Recursively flatten both halves
    left = flatten_quadratic([p0, q1, mid], tolerance, depth + 1)
    right = flatten_quadratic([mid, r1, p2], tolerance, depth + 1)

    # Combine, avoiding duplicate midpoint
    return left[:-1] + right


def flatten_cubic(
    points: Sequence[Vector2], tolerance: float, depth: int = 0
) -> list[Vector2]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: List of 4 control points [p0, p1, p2, p3]
        tolerance: Maximum distance from true curve
        depth: Current recursion depth

    Returns:
        List of points approximating the curve
    """
    p0, p1, p2, p3 = points

    if depth >= _MAX_DEPTH or is_flat(points, tolerance):
        return [p0, p3]

    # First level
    q1 = p0.mix(p1, 0.5)
    q2 = p1.mix(p2, 0.5)
    q3 = p2.mix(p3, 0.5)

    # Second level
    r1 = q1.mix(q2, 0.5)
    r2 = q2.mix(q3, 0.5)

    # Third level (midpoint)
    mid = r1.mix(r2, 0.5)

    left = flatten_cubic([p0, q1, r1, mid], tolerance, depth + 1)
    right = flatten_cubic([mid, r2, q3, p3], tolerance, depth + 1)

    return left[:-1] + right


def curve_length(points: Sequence[Vector2], tolerance: float, depth: int = 0) -> float:
    """Arc length of a Bezier curve by adaptive subdivision.

    Each piece is estimated with Gravesen's formula
    ``(2 * chord + (n - 1) * polygon) / (n + 1)`` once the control polygon
    and the chord agree within the relative tolerance.
    """
    degree = len(points) - 1
    chord = points[0].distance_to(points[-1])
    polygon = sum(points[i].distance_to(points[i + 1]) for i in range(degree))

    if polygon < 1e-12:
        return 0.0
    if depth >= _MAX_DEPTH or polygon - chord <= tolerance * polygon:
        return (2.0 * chord + (degree - 1) * polygon) / (degree + 1)

    left, right = de_casteljau_split(points, 0.5)
    return curve_length(left, tolerance, depth + 1) + curve_length(right, tolerance, depth + 1)


def nearest_on_line(point: Vector2, start: Vector2, end: Vector2) -> float:
    """Parameter of the closest point on a line segment.

    Projects the point onto the infinite line, then clamps to [0, 1].
    Zero-length segments return 0.0.
    """
    d = end - start
    length_sq = d.squared_length
    if length_sq < 1e-20:
        return 0.0
    t = (point - start).dot(d) / length_sq
    return max(0.0, min(1.0, t))


def angle_between(a: Vector2, b: Vector2) -> float:
    """Unsigned angle between two vectors in radians (0 for zero vectors)."""
    la = a.length
    lb = b.length
    if la < 1e-12 or lb < 1e-12:
        return 0.0
    cos_a = a.dot(b) / (la * lb)
    return math.acos(max(-1.0, min(1.0, cos_a)))
