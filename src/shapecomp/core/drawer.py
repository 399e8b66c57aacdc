"""Imperative builder for composition trees.

The drawer keeps a model transform, a draw style and a cursor group. Draw
calls append leaves at the cursor or, when a clip mode is active, combine
the incoming closed shape with shapes already in the tree.

Key components:
- ClipOp / ClipMode: Boolean operator and scope used for clipping
- CompositionDrawer: The builder session
- ShapeNodeNearestContour / ShapeNodeIntersection: Query results
- merge_intersections: Greedy clustering of intersection results
- draw_composition: Build a composition from a draw function
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

import structlog

from shapecomp.config import ShapecompSettings, get_default_settings
from shapecomp.core import boolean
from shapecomp.domain.color import ColorRGBa
from shapecomp.domain.composition import (
    Composition,
    CompositionNode,
    Explicit,
    GroupNode,
    ImageNode,
    ShapeNode,
    TextNode,
)
from shapecomp.domain.contour import ContourIntersection, ContourPoint, ShapeContour
from shapecomp.domain.primitives import Circle, line_segment_contour
from shapecomp.domain.rectangle import Rectangle
from shapecomp.domain.shape import Shape, ShapeTopology
from shapecomp.domain.vector import Matrix44, Vector2
from shapecomp.exceptions import UnsupportedClipOpError

logger = structlog.get_logger(__name__)


class ClipOp(Enum):
    """Boolean operator applied when clipping."""

    DISABLED = "disabled"
    DIFFERENCE = "difference"
    INTERSECT = "intersect"
    UNION = "union"


class ClipMode(Enum):
    """Clip operator plus scope.

    Grouped modes only affect shapes under the cursor; the others affect
    every shape in the composition.
    """

    DISABLED = (False, ClipOp.DISABLED)
    DIFFERENCE = (False, ClipOp.DIFFERENCE)
    DIFFERENCE_GROUP = (True, ClipOp.DIFFERENCE)
    INTERSECT = (False, ClipOp.INTERSECT)
    INTERSECT_GROUP = (True, ClipOp.INTERSECT)
    UNION = (False, ClipOp.UNION)
    UNION_GROUP = (True, ClipOp.UNION)

    def __init__(self, grouped: bool, op: ClipOp) -> None:
        self.grouped = grouped
        self.op = op


@dataclass(frozen=True, slots=True)
class ShapeNodeIntersection:
    """An intersection between a query contour and a shape node's contour."""

    node: ShapeNode
    intersection: ContourIntersection


@dataclass(frozen=True, slots=True)
class ShapeNodeNearestContour:
    """The nearest point on a shape node's contours.

    Attributes:
        node: Shape node owning the contour
        point: Nearest point, in world coordinates
        distance_direction: Vector from the nearest point to the query point
        distance: Distance to the query point
    """

    node: ShapeNode
    point: ContourPoint
    distance_direction: Vector2
    distance: float


def merge_intersections(
    items: list[ShapeNodeIntersection], threshold: float = 0.5
) -> list[ShapeNodeIntersection]:
    """Drop results closer than threshold to an already kept result.

    Greedy in input order; the outcome is not a globally optimal clustering.
    """
    threshold_sq = threshold * threshold
    kept: list[ShapeNodeIntersection] = []
    for item in items:
        position = item.intersection.position
        nearest = min(
            (k.intersection.position.squared_distance_to(position) for k in kept),
            default=None,
        )
        if nearest is None or nearest >= threshold_sq:
            kept.append(item)
    return kept


@dataclass(slots=True)
class _DrawStyle:
    fill: ColorRGBa | None = None
    stroke: ColorRGBa | None = ColorRGBa.BLACK
    stroke_weight: float = 1.0
    clip_mode: ClipMode = ClipMode.DISABLED


class CompositionDrawer:
    """Builds a composition through draw calls.

    The drawer is a single-threaded session object. push/pop pairs are not
    checked: a missing pop leaves later drawing with the wrong transform or
    style, and popping an empty stack raises IndexError. Prefer the
    isolated(), group() and within() context managers, which restore state
    even when the block raises.

    Example:
        drawer = CompositionDrawer()
        drawer.fill = ColorRGBa.WHITE
        with drawer.group("marks"):
            drawer.rectangle(0, 0, 100, 100)
            drawer.clip_mode = ClipMode.DIFFERENCE
            drawer.circle(50, 50, 25)
    """

    def __init__(
        self,
        document_bounds: Rectangle | None = None,
        composition: Composition | None = None,
        settings: ShapecompSettings | None = None,
    ) -> None:
        """Initialize the drawer.

        Args:
            document_bounds: Bounds for a new composition (settings default if None)
            composition: Existing composition to draw into
            settings: Tolerances and defaults (package defaults if None)
        """
        self.settings = settings if settings is not None else get_default_settings()
        if document_bounds is None:
            document_bounds = Rectangle(
                0.0,
                0.0,
                self.settings.composition.document_width,
                self.settings.composition.document_height,
            )
        self.composition = (
            composition if composition is not None else Composition(GroupNode(), document_bounds)
        )

        root = self.composition.root
        if not isinstance(root, GroupNode):
            raise TypeError(f"Composition root must be a GroupNode, got {type(root).__name__}")
        self._cursor: GroupNode = root

        self.model = Matrix44.IDENTITY
        self._style = _DrawStyle(stroke_weight=self.settings.composition.stroke_weight)
        self._model_stack: list[Matrix44] = []
        self._style_stack: list[_DrawStyle] = []

    @property
    def root(self) -> GroupNode:
        return self.composition.root  # type: ignore[return-value]

    @property
    def cursor(self) -> GroupNode:
        """The group receiving new nodes."""
        return self._cursor

    @property
    def fill(self) -> ColorRGBa | None:
        return self._style.fill

    @fill.setter
    def fill(self, value: ColorRGBa | None) -> None:
        self._style.fill = value

    @property
    def stroke(self) -> ColorRGBa | None:
        return self._style.stroke

    @stroke.setter
    def stroke(self, value: ColorRGBa | None) -> None:
        self._style.stroke = value

    @property
    def stroke_weight(self) -> float:
        return self._style.stroke_weight

    @stroke_weight.setter
    def stroke_weight(self, value: float) -> None:
        self._style.stroke_weight = value

    @property
    def clip_mode(self) -> ClipMode:
        return self._style.clip_mode

    @clip_mode.setter
    def clip_mode(self, value: ClipMode) -> None:
        self._style.clip_mode = value

    def push_model(self) -> None:
        self._model_stack.append(self.model)

    def pop_model(self) -> None:
        self.model = self._model_stack.pop()

    def push_style(self) -> None:
        self._style_stack.append(replace(self._style))

    def pop_style(self) -> None:
        self._style = self._style_stack.pop()

    @contextmanager
    def isolated(self) -> Iterator["CompositionDrawer"]:
        """Restore the model and style on exit, even on error."""
        self.push_model()
        self.push_style()
        try:
            yield self
        finally:
            self.pop_style()
            self.pop_model()

    @contextmanager
    def group(self, id: str | None = None) -> Iterator[GroupNode]:
        """Append a new group at the cursor and draw into it."""
        node = self._cursor.append(GroupNode(id=id))
        with self.within(node) as group:  # type: ignore[arg-type]
            yield group

    @contextmanager
    def within(self, group: GroupNode) -> Iterator[GroupNode]:
        """Draw into an existing group, restoring the cursor on exit."""
        previous = self._cursor
        self._cursor = group
        try:
            yield group
        finally:
            self._cursor = previous

    def translate(self, x: float | Vector2, y: float = 0.0) -> None:
        if isinstance(x, Vector2):
            x, y = x.x, x.y
        self.model = self.model * Matrix44.translate(x, y)

    def rotate(self, degrees: float) -> None:
        self.model = self.model * Matrix44.rotate_z(degrees)

    def scale(self, x: float, y: float | None = None) -> None:
        """Scale uniformly, or per axis when y is given."""
        if y is None:
            self.model = self.model * Matrix44.scale(x, x, x)
        else:
            self.model = self.model * Matrix44.scale(x, y, 1.0)

    def shape(self, shape: Shape) -> ShapeNode | None:
        """Append a shape, or clip existing shapes with it.

        Open shapes are always appended. Closed shapes are appended when
        clipping is disabled; otherwise they combine with the shapes in scope
        and no node is created.

        Returns:
            The new node, or None when the shape was used for clipping

        Raises:
            UnsupportedClipOpError: If the clip mode carries an operator that
                cannot combine shapes
        """
        clip_mode = self.clip_mode if shape.topology is ShapeTopology.CLOSED else ClipMode.DISABLED
        if clip_mode is ClipMode.DISABLED:
            node = ShapeNode(
                shape,
                transform=self.model,
                fill=Explicit(self.fill),
                stroke=Explicit(self.stroke),
                stroke_weight=Explicit(self.stroke_weight),
            )
            self._cursor.append(node)
            return node

        self._clip(shape, clip_mode)
        return None

    def _clip(self, shape: Shape, clip_mode: ClipMode) -> None:
        op = clip_mode.op
        tolerance = self.settings.geometry.flatten_tolerance
        if op is ClipOp.INTERSECT:
            operate = boolean.intersection
        elif op is ClipOp.UNION:
            operate = boolean.union
        elif op is ClipOp.DIFFERENCE:
            operate = boolean.difference
        else:
            raise UnsupportedClipOpError(op)

        nodes = self._cursor.find_shapes() if clip_mode.grouped else self.composition.find_shapes()
        world = shape.transform(self._cursor.effective_transform * self.model)
        logger.debug("clipping shapes", op=op.value, grouped=clip_mode.grouped, nodes=len(nodes))

        for node in nodes:
            transform = node.effective_transform
            local = world if transform.is_identity else world.transform(transform.inversed)
            operated = operate(node.shape, local, tolerance)
            if op is ClipOp.UNION:
                operated = operated[:1]

            if not operated:
                node.remove()
            elif len(operated) == 1:
                node.shape = operated[0]
            else:
                # Several pieces stay in one node as a compound shape
                node.shape = Shape.compound(operated)

    def shapes(self, shapes: list[Shape]) -> list[ShapeNode | None]:
        return [self.shape(s) for s in shapes]

    def contour(self, contour: ShapeContour) -> ShapeNode | None:
        return self.shape(Shape((contour,)))

    def contours(self, contours: list[ShapeContour]) -> list[ShapeNode | None]:
        return [self.contour(c) for c in contours]

    def rectangle(
        self,
        x: float | Rectangle,
        y: float = 0.0,
        width: float = 0.0,
        height: float = 0.0,
    ) -> ShapeNode | None:
        """Draw a rectangle given as a Rectangle or as x, y, width, height."""
        rect = x if isinstance(x, Rectangle) else Rectangle(x, y, width, height)
        return self.contour(rect.contour)

    def rectangles(
        self,
        items: list[Rectangle] | list[Vector2],
        width: float | None = None,
        height: float | None = None,
    ) -> list[ShapeNode | None]:
        """Draw rectangles, or same-sized rectangles at positions.

        Raises:
            ValueError: If positions come without both width and height
        """
        if width is not None and height is not None:
            return [self.rectangle(p.x, p.y, width, height) for p in items]  # type: ignore[union-attr]
        if width is not None or height is not None or not all(
            isinstance(r, Rectangle) for r in items
        ):
            raise ValueError("rectangles at positions need both width and height")
        return [self.rectangle(r) for r in items]  # type: ignore[arg-type]

    def circle(
        self,
        x: float | Vector2 | Circle,
        y: float | None = None,
        radius: float | None = None,
    ) -> ShapeNode | None:
        """Draw a circle given as a Circle, as (center, radius) or as x, y, radius."""
        if isinstance(x, Circle):
            circle = x
        elif isinstance(x, Vector2):
            circle = Circle(x, radius if radius is not None else float(y or 0.0))
        else:
            circle = Circle(Vector2(x, float(y or 0.0)), float(radius or 0.0))
        return self.contour(circle.contour)

    def circles(
        self,
        items: list[Circle] | list[Vector2],
        radius: float | list[float] | None = None,
    ) -> list[ShapeNode | None]:
        """Draw circles, or circles at positions with one radius or a radius each."""
        if radius is None:
            return [self.circle(c) for c in items]  # type: ignore[arg-type]
        radii = radius if isinstance(radius, list) else [radius] * len(items)
        return [self.circle(Circle(p, r)) for p, r in zip(items, radii)]  # type: ignore[arg-type]

    def line_segment(self, start: Vector2, end: Vector2) -> ShapeNode | None:
        return self.contour(line_segment_contour(start, end))

    def line_segments(self, segments: list[tuple[Vector2, Vector2]]) -> list[ShapeNode | None]:
        return [self.line_segment(start, end) for start, end in segments]

    def line_strip(self, points: list[Vector2]) -> ShapeNode | None:
        return self.contour(ShapeContour.from_points(points, closed=False))

    def line_loop(self, points: list[Vector2]) -> ShapeNode | None:
        return self.contour(ShapeContour.from_points(points, closed=True))

    def text(self, text: str, position: Vector2) -> TextNode:
        """Append text inside a group translated to position."""
        group = GroupNode(transform=Matrix44.translate(position.x, position.y))
        node = TextNode(text, None, fill=Explicit(self.fill))
        group.append(node)
        self._cursor.append(group)
        return node

    def texts(self, texts: list[str], positions: list[Vector2]) -> list[TextNode]:
        return [self.text(t, p) for t, p in zip(texts, positions)]

    def text_on_contour(self, text: str, contour: ShapeContour) -> TextNode:
        node = TextNode(text, contour)
        self._cursor.append(node)
        return node

    def image(
        self,
        image: Any,
        x: float = 0.0,
        y: float = 0.0,
        width: float | None = None,
        height: float | None = None,
    ) -> ImageNode:
        """Append an image; the size defaults to the image's own width and height."""
        node = ImageNode(
            image,
            x,
            y,
            float(width if width is not None else getattr(image, "width", 0.0)),
            float(height if height is not None else getattr(image, "height", 0.0)),
            transform=self.model,
        )
        self._cursor.append(node)
        return node

    def nearest(
        self, point: Vector2, search_from: CompositionNode | None = None
    ) -> ShapeNodeNearestContour | None:
        """Nearest point on any shape contour in the search scope, in world space.

        Args:
            point: Query point in world coordinates
            search_from: Subtree to search (whole composition if None)

        Returns:
            The nearest result, or None when the scope has no contours
        """
        scope = search_from if search_from is not None else self.composition.root
        samples = self.settings.geometry.nearest_samples
        best: ShapeNodeNearestContour | None = None
        for node in scope.find_shapes():
            for contour in node.effective_shape.contours:
                hit = contour.nearest(point, samples)
                if hit is None:
                    continue
                if best is None or hit.distance < best.distance:
                    best = ShapeNodeNearestContour(node, hit, point - hit.position, hit.distance)
        return best

    def intersections(
        self,
        query: ShapeContour | Shape,
        search_from: CompositionNode | None = None,
        merge_threshold: float | None = None,
    ) -> list[ShapeNodeIntersection]:
        """Intersections of a contour or shape with the shapes in scope, in world space.

        Args:
            query: Contour or shape in world coordinates
            search_from: Subtree to search (whole composition if None)
            merge_threshold: Merge distance (settings default if None; <= 0 disables)

        Returns:
            Intersections with the query as the first contour
        """
        if merge_threshold is None:
            merge_threshold = self.settings.composition.merge_threshold
        scope = search_from if search_from is not None else self.composition.root
        queries = list(query.contours) if isinstance(query, Shape) else [query]
        tolerance = self.settings.geometry.intersection_tolerance

        results: list[ShapeNodeIntersection] = []
        for contour in queries:
            found: list[ShapeNodeIntersection] = []
            for node in scope.find_shapes():
                for other in node.effective_shape.contours:
                    found.extend(
                        ShapeNodeIntersection(node, hit)
                        for hit in contour.intersections(other, tolerance)
                    )
            if merge_threshold > 0.0:
                found = merge_intersections(found, merge_threshold)
            results.extend(found)
        return results


def draw_composition(
    draw_function: Callable[[CompositionDrawer], None],
    document_bounds: Rectangle | None = None,
    composition: Composition | None = None,
    settings: ShapecompSettings | None = None,
) -> Composition:
    """Run draw_function against a fresh drawer and return the composition."""
    drawer = CompositionDrawer(document_bounds, composition, settings)
    draw_function(drawer)
    return drawer.composition
