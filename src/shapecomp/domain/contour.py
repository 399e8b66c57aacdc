"""Contours: ordered chains of segments.

This module defines:
- ShapeContour: An open or closed path made of C0-continuous segments
- ContourPoint: A located point on a contour
- ContourIntersection: An intersection between two contours
- WindingDirection: Enum for contour winding direction
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from functools import cached_property
from typing import TYPE_CHECKING, Any, ClassVar

from shapecomp.domain._bezier import DEFAULT_FLATTEN_TOLERANCE
from shapecomp.domain.rectangle import Rectangle, rectangle_bounds
from shapecomp.domain.segment import NEAREST_SAMPLES, Segment
from shapecomp.domain.vector import Vector2
from shapecomp.exceptions import ContourError

if TYPE_CHECKING:
    from shapecomp.domain.shape import Shape
    from shapecomp.domain.vector import Matrix44

# Maximum gap between consecutive segment endpoints, relative to contour size
CONTINUITY_EPSILON = 1e-6


class WindingDirection(Enum):
    """Contour winding direction.

    With the y axis pointing up:
    - Outer contours wind counter-clockwise (positive signed area)
    - Inner contours (holes) wind clockwise (negative signed area)
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()


@dataclass(frozen=True, slots=True)
class ContourPoint:
    """A point located on a contour.

    Attributes:
        contour_t: Parameter on the contour, spread uniformly over segments
        segment_index: Index of the segment holding the point
        segment: The segment holding the point
        segment_t: Parameter on that segment
        position: Position of the point
        distance: Distance to the query point, for nearest-point results
    """

    contour_t: float
    segment_index: int
    segment: Segment
    segment_t: float
    position: Vector2
    distance: float = 0.0


@dataclass(frozen=True, slots=True)
class ContourIntersection:
    """An intersection between two contours.

    Attributes:
        a: Location on the first contour
        b: Location on the second contour
        position: Intersection position
    """

    a: ContourPoint
    b: ContourPoint
    position: Vector2


@dataclass(frozen=True)
class ShapeContour:
    """An open or closed path made of segments.

    Consecutive segments must share endpoints, and a closed contour must end
    where it starts.

    Attributes:
        segments: Segments in path order
        closed: Whether the path is closed
    """

    segments: tuple[Segment, ...] = field(default_factory=tuple)
    closed: bool = False

    EMPTY: ClassVar["ShapeContour"]

    def __post_init__(self) -> None:
        segments = tuple(self.segments)
        object.__setattr__(self, "segments", segments)
        if not segments:
            return

        scale = max(
            [1.0]
            + [abs(c) for s in segments for p in (s.start, s.end) for c in (p.x, p.y)]
        )
        epsilon = CONTINUITY_EPSILON * scale
        for i, (a, b) in enumerate(zip(segments, segments[1:])):
            if a.end.distance_to(b.start) > epsilon:
                raise ContourError(
                    f"Segment {i} ends at {a.end.to_tuple()} but segment {i + 1} "
                    f"starts at {b.start.to_tuple()}"
                )
        if self.closed and segments[-1].end.distance_to(segments[0].start) > epsilon:
            raise ContourError(
                f"Closed contour ends at {segments[-1].end.to_tuple()} "
                f"but starts at {segments[0].start.to_tuple()}"
            )

    @classmethod
    def from_points(cls, points: list[Vector2], closed: bool = False) -> "ShapeContour":
        """Build a polyline contour.

        A closed contour gets a closing line unless the last point already
        equals the first.
        """
        if len(points) < 2:
            return cls.EMPTY
        segments = [Segment.line(a, b) for a, b in zip(points, points[1:])]
        if closed and points[-1] != points[0]:
            segments.append(Segment.line(points[-1], points[0]))
        return cls(tuple(segments), closed)

    @classmethod
    def from_segments(cls, segments: list[Segment], closed: bool = False) -> "ShapeContour":
        return cls(tuple(segments), closed)

    @property
    def empty(self) -> bool:
        return not self.segments

    @property
    def start(self) -> Vector2:
        if self.empty:
            raise ContourError("Empty contour has no start point")
        return self.segments[0].start

    @property
    def end(self) -> Vector2:
        if self.empty:
            raise ContourError("Empty contour has no end point")
        return self.segments[-1].end

    def segment_at(self, ut: float) -> tuple[int, float]:
        """Map a contour parameter to (segment index, segment parameter).

        The parameter is spread uniformly over segments regardless of their
        length, and clamped to [0, 1].
        """
        if self.empty:
            raise ContourError("Empty contour has no segments")
        count = len(self.segments)
        t = min(max(ut, 0.0), 1.0) * count
        index = min(int(t), count - 1)
        return index, t - index

    def position(self, ut: float) -> Vector2:
        index, t = self.segment_at(ut)
        return self.segments[index].position(t)

    def normal(self, ut: float) -> Vector2:
        index, t = self.segment_at(ut)
        return self.segments[index].normal(t)

    @cached_property
    def bounds(self) -> Rectangle:
        return rectangle_bounds(s.bounds for s in self.segments)

    @property
    def length(self) -> float:
        return sum(s.length for s in self.segments)

    @property
    def reversed(self) -> "ShapeContour":
        return ShapeContour(tuple(s.reverse for s in reversed(self.segments)), self.closed)

    def sub(self, t0: float, t1: float) -> "ShapeContour":
        """Open sub-path over [t0, t1] of the contour parameter.

        A reversed range yields the reversed sub-path.
        """
        if self.empty:
            return ShapeContour.EMPTY
        if t0 > t1:
            return self.sub(t1, t0).reversed

        i0, l0 = self.segment_at(t0)
        i1, l1 = self.segment_at(t1)
        if l1 == 0.0 and i1 > i0:
            i1, l1 = i1 - 1, 1.0

        if i0 == i1:
            return ShapeContour((self.segments[i0].sub(l0, l1),), False)

        segments = [self.segments[i0].sub(l0, 1.0)]
        segments.extend(self.segments[i0 + 1 : i1])
        segments.append(self.segments[i1].sub(0.0, l1))
        return ShapeContour(tuple(segments), False)

    def transform(self, matrix: "Matrix44") -> "ShapeContour":
        if matrix.is_identity:
            return self
        return ShapeContour(tuple(s.transform(matrix) for s in self.segments), self.closed)

    def adaptive_positions(self, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> list[Vector2]:
        """Flatten into a polyline.

        Shared segment endpoints appear once. For closed contours the final
        point, which repeats the first, is dropped.
        """
        points: list[Vector2] = []
        for segment in self.segments:
            positions = segment.adaptive_positions(tolerance)
            if points and points[-1] == positions[0]:
                positions = positions[1:]
            points.extend(positions)
        if self.closed and len(points) > 1 and points[-1].distance_to(points[0]) < 1e-9:
            points.pop()
        return points

    @cached_property
    def _polygon(self) -> list[Vector2]:
        return self.adaptive_positions()

    @cached_property
    def signed_area(self) -> float:
        """Signed area of the flattened contour.

        Positive for counter-clockwise winding, negative for clockwise.
        Open contours are treated as implicitly closed.
        """
        from shapecomp.core.geometry import signed_area

        return signed_area(self._polygon)

    @property
    def winding(self) -> WindingDirection:
        if self.signed_area < 0.0:
            return WindingDirection.CLOCKWISE
        return WindingDirection.COUNTER_CLOCKWISE

    @property
    def clockwise(self) -> "ShapeContour":
        """This contour wound clockwise."""
        if self.winding == WindingDirection.CLOCKWISE:
            return self
        return self.reversed

    @property
    def counter_clockwise(self) -> "ShapeContour":
        """This contour wound counter-clockwise."""
        if self.winding == WindingDirection.COUNTER_CLOCKWISE:
            return self
        return self.reversed

    def contains(self, point: Vector2) -> bool:
        """Check if point is inside the contour using ray casting.

        Open contours contain nothing.
        """
        if not self.closed or self.empty:
            return False
        if not self.bounds.contains(point):
            return False

        from shapecomp.core.geometry import point_in_polygon

        return point_in_polygon(point, self._polygon)

    def nearest(self, point: Vector2, samples: int = NEAREST_SAMPLES) -> ContourPoint | None:
        """Find the closest point on the contour.

        The first segment reaching the minimum distance wins ties.

        Args:
            point: Query point
            samples: Coarse samples per curved segment before refinement

        Returns:
            ContourPoint with its distance, or None for an empty contour
        """
        best: ContourPoint | None = None
        count = len(self.segments)
        for index, segment in enumerate(self.segments):
            hit = segment.nearest(point, samples)
            distance = hit.position.distance_to(point)
            if best is None or distance < best.distance:
                best = ContourPoint(
                    contour_t=(index + hit.segment_t) / count,
                    segment_index=index,
                    segment=segment,
                    segment_t=hit.segment_t,
                    position=hit.position,
                    distance=distance,
                )
        return best

    def intersections(
        self, other: "ShapeContour", tolerance: float = 1e-4
    ) -> list[ContourIntersection]:
        """Intersections with another contour; near-duplicates are not merged."""
        from shapecomp.core.intersections import contour_intersections

        return contour_intersections(self, other, tolerance)

    @property
    def shape(self) -> "Shape":
        from shapecomp.domain.shape import Shape

        return Shape((self,))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the contour
        """
        return {
            "segments": [s.to_dict() for s in self.segments],
            "closed": self.closed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShapeContour":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a contour

        Returns:
            ShapeContour instance
        """
        segments = tuple(Segment.from_dict(s) for s in data["segments"])
        return cls(segments, data["closed"])


ShapeContour.EMPTY = ShapeContour((), False)
