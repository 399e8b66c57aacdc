"""Parametric curve segments.

This module defines the curve kernel:
- Segment: A line, quadratic or cubic Bezier segment
- SegmentPoint: A parameter/position pair on a segment
- SegmentIntersection: An intersection between two segments

Segments are immutable; every operation returns new segments.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from shapecomp.domain._bezier import (
    DEFAULT_FLATTEN_TOLERANCE,
    angle_between,
    curve_length,
    de_casteljau,
    de_casteljau_split,
    derivative_points,
    flatten_cubic,
    flatten_quadratic,
    nearest_on_line,
)
from shapecomp.domain._roots import solve_linear, solve_quadratic
from shapecomp.domain.rectangle import Rectangle
from shapecomp.domain.vector import Vector2
from shapecomp.exceptions import SegmentError

if TYPE_CHECKING:
    from shapecomp.domain.vector import Matrix44

LENGTH_TOLERANCE = 1e-4
OFFSET_TOLERANCE = 0.05
NEAREST_SAMPLES = 16

# Parameters closer than this to 0 or 1 are not reported as interior roots
_PARAM_EPSILON = 1e-9
_MAX_SIMPLIFY_DEPTH = 8
_MAX_OFFSET_DEPTH = 6
_SIMPLE_ANGLE = math.pi / 3.0


@dataclass(frozen=True, slots=True)
class SegmentPoint:
    """A point on a segment.

    Attributes:
        segment_t: Parameter on the segment
        position: Position at that parameter
    """

    segment_t: float
    position: Vector2


@dataclass(frozen=True, slots=True)
class SegmentIntersection:
    """An intersection between two segments.

    Attributes:
        a_t: Parameter on the first segment
        b_t: Parameter on the second segment
        position: Intersection position
    """

    a_t: float
    b_t: float
    position: Vector2


@dataclass(frozen=True)
class Segment:
    """A line (no control points), quadratic (one) or cubic (two) Bezier segment.

    Attributes:
        start: First point on the curve
        end: Last point on the curve
        control: Zero, one or two off-curve control points
    """

    start: Vector2
    end: Vector2
    control: tuple[Vector2, ...] = ()

    def __post_init__(self) -> None:
        control = tuple(self.control)
        if len(control) > 2:
            raise SegmentError(f"Expected at most 2 control points, got {len(control)}")
        object.__setattr__(self, "control", control)

    @classmethod
    def line(cls, start: Vector2, end: Vector2) -> "Segment":
        return cls(start, end)

    @classmethod
    def quadratic_bezier(cls, start: Vector2, c0: Vector2, end: Vector2) -> "Segment":
        return cls(start, end, (c0,))

    @classmethod
    def cubic_bezier(cls, start: Vector2, c0: Vector2, c1: Vector2, end: Vector2) -> "Segment":
        return cls(start, end, (c0, c1))

    @classmethod
    def from_points(cls, points: list[Vector2]) -> "Segment":
        """Build a segment from 2 to 4 control points, in curve order.

        Raises:
            SegmentError: If the point count is not 2, 3 or 4
        """
        if not 2 <= len(points) <= 4:
            raise SegmentError(f"Expected 2-4 points for a segment, got {len(points)}")
        return cls(points[0], points[-1], tuple(points[1:-1]))

    @property
    def degree(self) -> int:
        return len(self.control) + 1

    @property
    def points(self) -> list[Vector2]:
        """All control points in curve order, endpoints included."""
        return [self.start, *self.control, self.end]

    @property
    def linear(self) -> bool:
        return not self.control

    def position(self, t: float) -> Vector2:
        """Evaluate the curve at t."""
        if self.linear:
            return self.start.mix(self.end, t)
        return de_casteljau(self.points, t)

    def derivative(self, t: float) -> Vector2:
        """First derivative (unnormalized tangent) at t."""
        if self.linear:
            return self.end - self.start
        return de_casteljau(derivative_points(self.points), t)

    def _tangent(self, t: float) -> Vector2:
        d = self.derivative(t)
        if d.squared_length > 1e-24:
            return d

        # Coincident control points at an endpoint: use the first distinct one
        points = self.points
        if t <= _PARAM_EPSILON:
            for p in points[1:]:
                if p.squared_distance_to(self.start) > 1e-24:
                    return p - self.start
        elif t >= 1.0 - _PARAM_EPSILON:
            for p in reversed(points[:-1]):
                if p.squared_distance_to(self.end) > 1e-24:
                    return self.end - p
        return Vector2.ZERO

    def direction(self, t: float) -> Vector2:
        """Unit tangent at t, or the zero vector at a cusp."""
        return self._tangent(t).normalized

    def normal(self, t: float) -> Vector2:
        """Unit normal at t: the unit tangent rotated 90 degrees counter-clockwise.

        Returns the zero vector when the tangent vanishes.
        """
        return self._tangent(t).normalized.perpendicular

    def split(self, t: float) -> tuple["Segment", ...]:
        """Split at t into two segments.

        Splitting at t <= 0 or t >= 1 is a no-op that returns only this segment.
        """
        if t <= 0.0 or t >= 1.0:
            return (self,)
        left, right = de_casteljau_split(self.points, t)
        return (Segment.from_points(left), Segment.from_points(right))

    def sub(self, t0: float, t1: float) -> "Segment":
        """Sub-curve over [t0, t1].

        A reversed range yields the reversed sub-curve and an empty range
        yields a degenerate segment collapsed onto a single point.
        """
        if t0 > t1:
            return self.sub(t1, t0).reverse
        if t0 <= 0.0 and t1 >= 1.0:
            return self
        if t0 == t1 or t0 >= 1.0 or t1 <= 0.0:
            p = self.position(min(max(t0, 0.0), 1.0))
            return Segment(p, p, tuple(p for _ in self.control))

        right = self if t0 <= 0.0 else self.split(t0)[-1]
        if t1 >= 1.0:
            return right
        local = t1 if t0 <= 0.0 else (t1 - t0) / (1.0 - t0)
        return right.split(local)[0]

    @property
    def reverse(self) -> "Segment":
        return Segment(self.end, self.start, tuple(reversed(self.control)))

    @property
    def length(self) -> float:
        """Arc length; exact for lines, adaptive for curves."""
        if self.linear:
            return self.start.distance_to(self.end)
        return curve_length(self.points, LENGTH_TOLERANCE)

    def extrema(self) -> list[float]:
        """Parameters in (0, 1) where the x or y derivative is zero."""
        if self.linear:
            return []

        points = self.points
        roots: list[float] = []
        if self.degree == 2:
            p0, p1, p2 = points
            a = p1 - p0
            b = p2 - p1
            for ca, cb in ((a.x, b.x), (a.y, b.y)):
                roots.extend(solve_linear(cb - ca, ca))
        else:
            p0, p1, p2, p3 = points
            a = p1 - p0
            b = p2 - p1
            c = p3 - p2
            for ca, cb, cc in ((a.x, b.x, c.x), (a.y, b.y, c.y)):
                roots.extend(solve_quadratic(ca - 2.0 * cb + cc, 2.0 * (cb - ca), ca))
        return _interior(roots)

    def inflections(self) -> list[float]:
        """Parameters in (0, 1) where the curvature changes sign (cubics only)."""
        if self.degree != 3:
            return []

        p0, p1, p2, p3 = self.points
        a = p1 - p0
        b = p2 - p1
        c = p3 - p2
        # B'(t) / 3 = qa t^2 + qb t + qc, B''(t) / 6 = qa t + qb / 2
        qa = a - b * 2.0 + c
        qb = (b - a) * 2.0
        qc = a
        roots = solve_quadratic(-0.5 * qa.cross(qb), qc.cross(qa), 0.5 * qc.cross(qb))
        return _interior(roots)

    @property
    def is_simple(self) -> bool:
        """Whether the segment is free of sharp turns and control-point crossover.

        Lines are always simple. Curves must keep their control points on one
        side of the chord and turn by less than 60 degrees.
        """
        if self.linear:
            return True
        if self.degree == 3:
            chord = self.end - self.start
            s0 = chord.cross(self.control[0] - self.start)
            s1 = chord.cross(self.control[1] - self.start)
            if s0 * s1 < 0.0:
                return False
        return angle_between(self.normal(0.0), self.normal(1.0)) < _SIMPLE_ANGLE

    def reduced(self) -> list["Segment"]:
        """Split into simple pieces at extrema and inflections.

        Pieces that are still not simple are halved until they are.
        """
        if self.linear:
            return [self]

        ts = sorted(set([0.0, *self.extrema(), *self.inflections(), 1.0]))
        pieces = [
            self.sub(t0, t1) for t0, t1 in zip(ts, ts[1:]) if t1 - t0 > _PARAM_EPSILON
        ]

        result: list[Segment] = []
        for piece in pieces:
            result.extend(_simplify(piece, 0))
        return result

    def offset(self, distance: float, tolerance: float = OFFSET_TOLERANCE) -> list["Segment"]:
        """Approximate the curve displaced by distance along its normals.

        Lines yield a single segment; zero-length lines yield nothing.
        Curves are reduced first and each simple piece is offset with the
        Tiller-Hanson construction, subdividing while the midpoint error
        exceeds tolerance.
        """
        if self.linear:
            n = self.normal(0.0)
            if n.squared_length == 0.0:
                return []
            shift = n * distance
            return [Segment(self.start + shift, self.end + shift)]

        result: list[Segment] = []
        for piece in self.reduced():
            result.extend(_offset_piece(piece, distance, tolerance, 0))
        return result

    @property
    def quadratic(self) -> "Segment":
        """Quadratic form; exact for lines, best fit for cubics."""
        if self.degree == 1:
            return Segment(self.start, self.end, (self.start.mix(self.end, 0.5),))
        if self.degree == 2:
            return self
        c0, c1 = self.control
        fit = (c0 * 3.0 - self.start + c1 * 3.0 - self.end) / 4.0
        return Segment(self.start, self.end, (fit,))

    @property
    def cubic(self) -> "Segment":
        """Cubic form; always exact."""
        if self.degree == 1:
            return Segment(
                self.start,
                self.end,
                (self.start.mix(self.end, 1.0 / 3.0), self.start.mix(self.end, 2.0 / 3.0)),
            )
        if self.degree == 2:
            c = self.control[0]
            return Segment(
                self.start,
                self.end,
                (self.start.mix(c, 2.0 / 3.0), self.end.mix(c, 2.0 / 3.0)),
            )
        return self

    @property
    def bounds(self) -> Rectangle:
        """Tight bounds from the endpoints and the extrema."""
        return Rectangle.bounds_of(
            [self.start, self.end, *(self.position(t) for t in self.extrema())]
        )

    @property
    def control_bounds(self) -> Rectangle:
        """Bounds of the control polygon (conservative, cheap)."""
        return Rectangle.bounds_of(self.points)

    def adaptive_positions(self, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> list[Vector2]:
        """Flatten into a polyline within tolerance of the curve."""
        if self.degree == 1:
            return [self.start, self.end]
        if self.degree == 2:
            return flatten_quadratic(self.points, tolerance)
        return flatten_cubic(self.points, tolerance)

    def nearest(self, point: Vector2, samples: int = NEAREST_SAMPLES) -> SegmentPoint:
        """Closest point on the segment.

        Lines are projected directly. Curves are sampled coarsely and the best
        sample is refined with a golden-section search.
        """
        if self.linear:
            t = nearest_on_line(point, self.start, self.end)
            return SegmentPoint(t, self.position(t))

        best_t = 0.0
        best_d = math.inf
        for i in range(samples + 1):
            t = i / samples
            d = self.position(t).squared_distance_to(point)
            if d < best_d:
                best_t, best_d = t, d

        lo = max(0.0, best_t - 1.0 / samples)
        hi = min(1.0, best_t + 1.0 / samples)
        t = _golden_section(lambda u: self.position(u).squared_distance_to(point), lo, hi)
        if self.position(t).squared_distance_to(point) > best_d:
            t = best_t
        return SegmentPoint(t, self.position(t))

    def intersections(self, other: "Segment", tolerance: float = 1e-4) -> list[SegmentIntersection]:
        """Intersections with another segment."""
        from shapecomp.core.intersections import segment_intersections

        return segment_intersections(self, other, tolerance)

    def transform(self, matrix: "Matrix44") -> "Segment":
        if matrix.is_identity:
            return self
        return Segment(
            matrix.transform(self.start),
            matrix.transform(self.end),
            tuple(matrix.transform(c) for c in self.control),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with start, end and control fields
        """
        return {
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "control": [c.to_dict() for c in self.control],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Segment":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a segment

        Returns:
            Segment instance
        """
        return cls(
            Vector2.from_dict(data["start"]),
            Vector2.from_dict(data["end"]),
            tuple(Vector2.from_dict(c) for c in data["control"]),
        )


def _interior(roots: list[float]) -> list[float]:
    """Sorted, de-duplicated roots strictly inside (0, 1)."""
    result: list[float] = []
    for t in sorted(roots):
        if _PARAM_EPSILON < t < 1.0 - _PARAM_EPSILON:
            if not result or t - result[-1] > _PARAM_EPSILON:
                result.append(t)
    return result


def _simplify(segment: Segment, depth: int) -> list[Segment]:
    if depth >= _MAX_SIMPLIFY_DEPTH or segment.is_simple:
        return [segment]
    left, right = segment.split(0.5)
    return _simplify(left, depth + 1) + _simplify(right, depth + 1)


def _golden_section(f: Any, lo: float, hi: float, iterations: int = 48) -> float:
    ratio = (math.sqrt(5.0) - 1.0) / 2.0
    a, b = lo, hi
    c = b - ratio * (b - a)
    d = a + ratio * (b - a)
    fc, fd = f(c), f(d)
    for _ in range(iterations):
        if fc < fd:
            b, d, fd = d, c, fc
            c = b - ratio * (b - a)
            fc = f(c)
        else:
            a, c, fc = c, d, fd
            d = a + ratio * (b - a)
            fd = f(d)
    return (a + b) / 2.0


def _tiller_hanson(segment: Segment, distance: float) -> Segment | None:
    """Offset the control polygon legs and intersect consecutive offset legs."""
    from shapecomp.core.geometry import line_parameters

    legs: list[tuple[Vector2, Vector2]] = []
    for p, q in zip(segment.points, segment.points[1:]):
        leg = q - p
        if leg.squared_length < 1e-24:
            continue
        shift = leg.normalized.perpendicular * distance
        legs.append((p + shift, q + shift))

    if not legs:
        return None

    points = [legs[0][0]]
    for (a0, a1), (b0, b1) in zip(legs, legs[1:]):
        params = line_parameters(a0, a1, b0, b1)
        points.append(a0 + (a1 - a0) * params[0] if params is not None else a1.mix(b0, 0.5))
    points.append(legs[-1][1])
    return Segment.from_points(points)


def _offset_piece(segment: Segment, distance: float, tolerance: float, depth: int) -> list[Segment]:
    offset = _tiller_hanson(segment, distance)
    if offset is None:
        return []

    expected = segment.position(0.5) + segment.normal(0.5) * distance
    error = offset.position(0.5).distance_to(expected)
    if error <= tolerance or depth >= _MAX_OFFSET_DEPTH:
        return [offset]

    left, right = segment.split(0.5)
    return _offset_piece(left, distance, tolerance, depth + 1) + _offset_piece(
        right, distance, tolerance, depth + 1
    )
