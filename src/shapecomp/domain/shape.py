"""Shapes: one or more contours with a topology flag."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, ClassVar

from shapecomp.domain.contour import ShapeContour
from shapecomp.domain.rectangle import Rectangle, rectangle_bounds
from shapecomp.domain.vector import Vector2

if TYPE_CHECKING:
    from shapecomp.domain.vector import Matrix44


class ShapeTopology(Enum):
    """Whether a shape encloses area.

    - CLOSED: At least one contour and every contour closed
    - OPEN: Anything else, including the empty shape
    """

    OPEN = auto()
    CLOSED = auto()


@dataclass(frozen=True)
class Shape:
    """One or more contours.

    A compound shape holds several closed contours; regions are filled with
    the even-odd rule, so a contour nested inside another is a hole.

    Attributes:
        contours: Contours in order; the first is the outline
    """

    contours: tuple[ShapeContour, ...] = field(default_factory=tuple)

    EMPTY: ClassVar["Shape"]

    def __post_init__(self) -> None:
        contours = tuple(c for c in self.contours if not c.empty)
        object.__setattr__(self, "contours", contours)

    @classmethod
    def compound(cls, shapes: list["Shape"]) -> "Shape":
        """Merge the contours of several shapes into one shape."""
        return cls(tuple(c for s in shapes for c in s.contours))

    @property
    def empty(self) -> bool:
        return not self.contours

    @property
    def topology(self) -> ShapeTopology:
        if self.contours and all(c.closed for c in self.contours):
            return ShapeTopology.CLOSED
        return ShapeTopology.OPEN

    @property
    def bounds(self) -> Rectangle:
        return rectangle_bounds(c.bounds for c in self.contours)

    @property
    def outline(self) -> ShapeContour:
        return self.contours[0] if self.contours else ShapeContour.EMPTY

    @property
    def hole_contours(self) -> list[ShapeContour]:
        return list(self.contours[1:])

    def transform(self, matrix: "Matrix44") -> "Shape":
        if matrix.is_identity:
            return self
        return Shape(tuple(c.transform(matrix) for c in self.contours))

    def contains(self, point: Vector2) -> bool:
        """Even-odd containment over the closed contours."""
        inside = False
        for contour in self.contours:
            if contour.contains(point):
                inside = not inside
        return inside

    @property
    def area(self) -> float:
        """Filled area under the even-odd rule (0.0 for open shapes)."""
        if self.topology is not ShapeTopology.CLOSED:
            return 0.0

        from shapecomp.core.boolean import shape_area

        return shape_area(self)

    def union(self, other: "Shape") -> list["Shape"]:
        from shapecomp.core import boolean

        return boolean.union(self, other)

    def intersection(self, other: "Shape") -> list["Shape"]:
        from shapecomp.core import boolean

        return boolean.intersection(self, other)

    def difference(self, other: "Shape") -> list["Shape"]:
        from shapecomp.core import boolean

        return boolean.difference(self, other)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with the contour list
        """
        return {"contours": [c.to_dict() for c in self.contours]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Shape":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a shape

        Returns:
            Shape instance
        """
        return cls(tuple(ShapeContour.from_dict(c) for c in data["contours"]))


Shape.EMPTY = Shape(())
