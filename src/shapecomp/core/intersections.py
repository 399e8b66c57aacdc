"""Intersection search between segments and contours.

Strategy per segment pair:
- Bounding-box rejection on the control polygons
- Line/line: closed form
- Line/curve: the curve is expressed in the line's frame and the signed
  distance polynomial is solved in closed form
- Curve/curve: recursive control-hull subdivision down to the tolerance,
  with near-duplicate hits folded together

Segments that trace the same curve have no isolated crossings and yield no
hits; contours_cross still reports them as touching.
"""

from typing import TYPE_CHECKING

import structlog

from shapecomp.core.geometry import line_intersection
from shapecomp.domain._roots import solve_cubic, solve_quadratic
from shapecomp.domain.segment import Segment, SegmentIntersection

if TYPE_CHECKING:
    from shapecomp.domain.contour import ContourIntersection, ShapeContour

logger = structlog.get_logger(__name__)

DEFAULT_TOLERANCE = 1e-4

# Hits closer than this many tolerances are the same crossing
_FOLD_FACTOR = 10.0
# Upper bound on subdivision work for a single curve pair
_MAX_PAIRS = 1 << 16
_MAX_DEPTH = 48


def segment_intersections(
    a: Segment, b: Segment, tolerance: float = DEFAULT_TOLERANCE, first: bool = False
) -> list[SegmentIntersection]:
    """Find all intersections between two segments.

    Parallel lines and coincident segments yield no hits.

    Args:
        a: First segment
        b: Second segment
        tolerance: Positional tolerance for curve/curve search
        first: Stop the curve/curve search at the first hit

    Returns:
        Intersections sorted by parameter on the first segment
    """
    if not a.control_bounds.intersects(b.control_bounds, margin=tolerance):
        return []

    if coincident(a, b, tolerance):
        return []

    if a.linear and b.linear:
        params = line_intersection(a.start, a.end, b.start, b.end)
        if params is None:
            return []
        t, u = params
        return [SegmentIntersection(t, u, a.position(t))]

    if a.linear:
        return _line_curve(a, b, tolerance, swap=False)
    if b.linear:
        return _line_curve(b, a, tolerance, swap=True)
    return _curve_curve(a, b, tolerance, first)


def coincident(a: Segment, b: Segment, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Whether two segments share their control polygon, in either direction."""
    if a.degree != b.degree:
        return False
    limit = tolerance * tolerance
    pa = a.points
    pb = b.points
    return all(p.squared_distance_to(q) <= limit for p, q in zip(pa, pb)) or all(
        p.squared_distance_to(q) <= limit for p, q in zip(pa, reversed(pb))
    )


def contours_cross(
    a: "ShapeContour", b: "ShapeContour", tolerance: float = DEFAULT_TOLERANCE
) -> bool:
    """Whether two contours touch, cross or run along each other.

    Stops at the first hit, so boundaries that overlap along a curve are
    answered without a full subdivision search.
    """
    if a.empty or b.empty:
        return False
    if not a.bounds.intersects(b.bounds, margin=tolerance):
        return False

    for sa in a.segments:
        for sb in b.segments:
            if coincident(sa, sb, tolerance):
                return True
            if segment_intersections(sa, sb, tolerance, first=True):
                return True
    return False


def contour_intersections(
    a: "ShapeContour", b: "ShapeContour", tolerance: float = DEFAULT_TOLERANCE
) -> list["ContourIntersection"]:
    """Find intersections between every segment pair of two contours.

    Hits are reported per segment pair; a crossing exactly at a shared
    segment endpoint may appear once for each adjacent segment.
    """
    from shapecomp.domain.contour import ContourIntersection, ContourPoint

    if a.empty or b.empty:
        return []
    if not a.bounds.intersects(b.bounds, margin=tolerance):
        return []

    a_count = len(a.segments)
    b_count = len(b.segments)
    result: list[ContourIntersection] = []
    for i, sa in enumerate(a.segments):
        for j, sb in enumerate(b.segments):
            for hit in segment_intersections(sa, sb, tolerance):
                result.append(
                    ContourIntersection(
                        a=ContourPoint(
                            contour_t=(i + hit.a_t) / a_count,
                            segment_index=i,
                            segment=sa,
                            segment_t=hit.a_t,
                            position=hit.position,
                        ),
                        b=ContourPoint(
                            contour_t=(j + hit.b_t) / b_count,
                            segment_index=j,
                            segment=sb,
                            segment_t=hit.b_t,
                            position=hit.position,
                        ),
                        position=hit.position,
                    )
                )
    return result


def _line_curve(
    line: Segment, curve: Segment, tolerance: float, swap: bool
) -> list[SegmentIntersection]:
    direction = line.end - line.start
    length_sq = direction.squared_length
    line_length = direction.length
    if length_sq < 1e-24:
        return []

    # Signed distances of the control points from the line
    d = [direction.cross(p - line.start) for p in curve.points]
    if curve.degree == 2:
        d0, d1, d2 = d
        roots = solve_quadratic(d0 - 2.0 * d1 + d2, 2.0 * (d1 - d0), d0)
    else:
        d0, d1, d2, d3 = d
        roots = solve_cubic(
            -d0 + 3.0 * d1 - 3.0 * d2 + d3,
            3.0 * d0 - 6.0 * d1 + 3.0 * d2,
            -3.0 * d0 + 3.0 * d1,
            d0,
        )

    epsilon = tolerance / max(line_length, 1.0)
    hits: list[SegmentIntersection] = []
    for t in roots:
        if not -epsilon <= t <= 1.0 + epsilon:
            continue
        t = min(max(t, 0.0), 1.0)
        position = curve.position(t)
        if abs(direction.cross(position - line.start)) > tolerance * line_length:
            continue
        u = (position - line.start).dot(direction) / length_sq
        if not -epsilon <= u <= 1.0 + epsilon:
            continue
        u = min(max(u, 0.0), 1.0)
        if swap:
            hits.append(SegmentIntersection(t, u, position))
        else:
            hits.append(SegmentIntersection(u, t, position))

    hits.sort(key=lambda hit: hit.a_t)
    return _fold(hits, tolerance)


def _curve_curve(
    a: Segment, b: Segment, tolerance: float, first: bool = False
) -> list[SegmentIntersection]:
    candidates: list[SegmentIntersection] = []
    stack = [(a, 0.0, 1.0, b, 0.0, 1.0, 0)]
    visited = 0

    while stack:
        sa, a0, a1, sb, b0, b1, depth = stack.pop()
        visited += 1
        if visited > _MAX_PAIRS:
            logger.debug("curve intersection search truncated", pairs=visited)
            break

        ra = sa.control_bounds
        rb = sb.control_bounds
        if not ra.intersects(rb, margin=tolerance):
            continue

        a_small = max(ra.width, ra.height) <= tolerance
        b_small = max(rb.width, rb.height) <= tolerance
        if (a_small and b_small) or depth >= _MAX_DEPTH:
            at = (a0 + a1) / 2.0
            bt = (b0 + b1) / 2.0
            candidates.append(SegmentIntersection(at, bt, a.position(at)))
            if first:
                break
            continue

        am = (a0 + a1) / 2.0
        bm = (b0 + b1) / 2.0
        a_parts = [(sa, a0, a1)] if a_small else _halves(sa, a0, am, a1)
        b_parts = [(sb, b0, b1)] if b_small else _halves(sb, b0, bm, b1)
        for pa, pa0, pa1 in a_parts:
            for pb, pb0, pb1 in b_parts:
                stack.append((pa, pa0, pa1, pb, pb0, pb1, depth + 1))

    candidates.sort(key=lambda hit: hit.a_t)
    return _fold(candidates, tolerance)


def _halves(
    segment: Segment, t0: float, tm: float, t1: float
) -> list[tuple[Segment, float, float]]:
    left, right = segment.split(0.5)
    return [(left, t0, tm), (right, tm, t1)]


def _fold(hits: list[SegmentIntersection], tolerance: float) -> list[SegmentIntersection]:
    """Drop hits within the fold distance of an already kept hit."""
    radius_sq = (tolerance * _FOLD_FACTOR) ** 2
    kept: list[SegmentIntersection] = []
    for hit in hits:
        if any(hit.position.squared_distance_to(k.position) <= radius_sq for k in kept):
            continue
        kept.append(hit)
    return kept
