"""Convenience primitives built on the contour kernel."""

from dataclasses import dataclass

from shapecomp.domain.contour import ShapeContour
from shapecomp.domain.rectangle import Rectangle
from shapecomp.domain.segment import Segment
from shapecomp.domain.shape import Shape
from shapecomp.domain.vector import Vector2

# Control point distance for a quarter circle, as a fraction of the radius
KAPPA = 0.5522847498


@dataclass(frozen=True, slots=True)
class Circle:
    """A circle given by center and radius.

    Attributes:
        center: Center point
        radius: Radius
    """

    center: Vector2
    radius: float

    @property
    def bounds(self) -> Rectangle:
        return Rectangle(
            self.center.x - self.radius,
            self.center.y - self.radius,
            2.0 * self.radius,
            2.0 * self.radius,
        )

    @property
    def contour(self) -> ShapeContour:
        """Closed contour of four cubic arcs, counter-clockwise from the bottom."""
        cx, cy = self.center.x, self.center.y
        r = self.radius
        k = KAPPA * r
        bottom = Vector2(cx, cy - r)
        right = Vector2(cx + r, cy)
        top = Vector2(cx, cy + r)
        left = Vector2(cx - r, cy)
        return ShapeContour.from_segments(
            [
                Segment.cubic_bezier(bottom, Vector2(cx + k, cy - r), Vector2(cx + r, cy - k), right),
                Segment.cubic_bezier(right, Vector2(cx + r, cy + k), Vector2(cx + k, cy + r), top),
                Segment.cubic_bezier(top, Vector2(cx - k, cy + r), Vector2(cx - r, cy + k), left),
                Segment.cubic_bezier(left, Vector2(cx - r, cy - k), Vector2(cx - k, cy - r), bottom),
            ],
            closed=True,
        )

    @property
    def shape(self) -> Shape:
        return self.contour.shape


def line_segment_contour(start: Vector2, end: Vector2) -> ShapeContour:
    """Open contour holding a single line."""
    return ShapeContour.from_segments([Segment.line(start, end)], closed=False)
