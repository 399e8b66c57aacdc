"""Axis-aligned rectangles used for bounds."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from shapecomp.domain.vector import Vector2

if TYPE_CHECKING:
    from shapecomp.domain.contour import ShapeContour
    from shapecomp.domain.shape import Shape


@dataclass(frozen=True, slots=True)
class Rectangle:
    """An axis-aligned rectangle.

    Attributes:
        x: Minimum x coordinate
        y: Minimum y coordinate
        width: Extent along x
        height: Extent along y
    """

    x: float
    y: float
    width: float
    height: float

    EMPTY: ClassVar["Rectangle"]

    @property
    def corner(self) -> Vector2:
        return Vector2(self.x, self.y)

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.height

    @classmethod
    def bounds_of(cls, points: Iterable[Vector2]) -> "Rectangle":
        """Smallest rectangle containing all points (EMPTY for no points)."""
        xs: list[float] = []
        ys: list[float] = []
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
        if not xs:
            return cls.EMPTY
        min_x, min_y = min(xs), min(ys)
        return cls(min_x, min_y, max(xs) - min_x, max(ys) - min_y)

    def union(self, other: "Rectangle") -> "Rectangle":
        min_x = min(self.x, other.x)
        min_y = min(self.y, other.y)
        return Rectangle(
            min_x,
            min_y,
            max(self.x_max, other.x_max) - min_x,
            max(self.y_max, other.y_max) - min_y,
        )

    def intersects(self, other: "Rectangle", margin: float = 0.0) -> bool:
        """Overlap test; touching edges count as intersecting."""
        return not (
            other.x > self.x_max + margin
            or other.x_max < self.x - margin
            or other.y > self.y_max + margin
            or other.y_max < self.y - margin
        )

    def contains(self, point: Vector2) -> bool:
        return self.x <= point.x <= self.x_max and self.y <= point.y <= self.y_max

    @property
    def contour(self) -> "ShapeContour":
        """Closed contour running (x, y) -> (x_max, y) -> (x_max, y_max) -> (x, y_max)."""
        from shapecomp.domain.contour import ShapeContour

        return ShapeContour.from_points(
            [
                Vector2(self.x, self.y),
                Vector2(self.x_max, self.y),
                Vector2(self.x_max, self.y_max),
                Vector2(self.x, self.y_max),
            ],
            closed=True,
        )

    @property
    def shape(self) -> "Shape":
        return self.contour.shape


Rectangle.EMPTY = Rectangle(0.0, 0.0, 0.0, 0.0)


def rectangle_bounds(rectangles: Iterable[Rectangle]) -> Rectangle:
    """Bounds of several rectangles (EMPTY when there are none)."""
    result: Rectangle | None = None
    for rect in rectangles:
        result = rect if result is None else result.union(rect)
    return result if result is not None else Rectangle.EMPTY
