"""Composition tree: a scene graph of groups, shapes, images and text.

This module defines:
- Inherit / Explicit: Tagged values for inheritable attributes
- CompositionNode: Base node with transform and inheritable style
- GroupNode, ShapeNode, ImageNode, TextNode: Node variants
- UserData: Descriptor exposing a user_data entry as an attribute
- Composition: A tree root plus document metadata

Parents are held through weak references; a group owns its children.
"""

import weakref
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from shapecomp.domain.color import ColorRGBa
from shapecomp.domain.contour import ShapeContour
from shapecomp.domain.rectangle import Rectangle, rectangle_bounds
from shapecomp.domain.shape import Shape
from shapecomp.domain.vector import Matrix44
from shapecomp.exceptions import NodeAttachedError, NodeDetachedError

T = TypeVar("T")

DEFAULT_COMPOSITION_BOUNDS = Rectangle(0.0, 0.0, 2676.0, 2048.0)
DEFAULT_STROKE_WEIGHT = 1.0


class Inherit(Enum):
    """Marker for an attribute resolved from the nearest ancestor."""

    INHERIT = "inherit"


INHERIT = Inherit.INHERIT


@dataclass(frozen=True, slots=True)
class Explicit(Generic[T]):
    """An attribute value set on the node itself. None is a valid value."""

    value: T


Inheritable = Union[Inherit, Explicit[T]]


@dataclass(eq=False, kw_only=True)
class CompositionNode(ABC):
    """Base class for composition nodes.

    Nodes compare by identity. Style attributes are either INHERIT or an
    Explicit value; the effective_* properties resolve them by walking up
    the parent chain.

    Attributes:
        id: Optional identifier
        transform: Local transform
        fill: Fill color
        stroke: Stroke color
        stroke_weight: Stroke weight
        shade_style: Opaque shading handle
        attributes: Free-form string attributes
        user_data: Arbitrary user values
    """

    id: str | None = None
    transform: Matrix44 = Matrix44.IDENTITY
    fill: Inheritable[ColorRGBa | None] = INHERIT
    stroke: Inheritable[ColorRGBa | None] = INHERIT
    stroke_weight: Inheritable[float] = INHERIT
    shade_style: Inheritable[Any] = INHERIT
    attributes: dict[str, str | None] = field(default_factory=dict)
    user_data: dict[str, Any] = field(default_factory=dict)
    _parent: "weakref.ReferenceType[GroupNode] | None" = field(
        default=None, init=False, repr=False
    )

    @property
    def parent(self) -> "GroupNode | None":
        return self._parent() if self._parent is not None else None

    def _ancestry(self) -> Iterator["CompositionNode"]:
        node: CompositionNode | None = self
        while node is not None:
            yield node
            node = node.parent

    def _resolve(self, name: str, default: Any) -> Any:
        for node in self._ancestry():
            value = getattr(node, name)
            if isinstance(value, Explicit):
                return value.value
        return default

    @property
    def effective_fill(self) -> ColorRGBa | None:
        """Fill resolved through ancestors; black when nobody sets one."""
        return self._resolve("fill", ColorRGBa.BLACK)

    @property
    def effective_stroke(self) -> ColorRGBa | None:
        return self._resolve("stroke", None)

    @property
    def effective_stroke_weight(self) -> float:
        return self._resolve("stroke_weight", DEFAULT_STROKE_WEIGHT)

    @property
    def effective_shade_style(self) -> Any:
        return self._resolve("shade_style", None)

    @property
    def effective_transform(self) -> Matrix44:
        """Ancestor transforms composed root to leaf, then the node's own.

        Recomputed on every access.
        """
        matrix = Matrix44.IDENTITY
        for node in reversed(list(self._ancestry())):
            if not node.transform.is_identity:
                matrix = matrix * node.transform
        return matrix

    @property
    def bounds(self) -> Rectangle:
        return Rectangle.EMPTY

    def remove(self) -> None:
        """Detach this node from its parent.

        Raises:
            NodeDetachedError: If the node has no parent
        """
        parent = self.parent
        if parent is None:
            raise NodeDetachedError(self.id)
        parent.children.remove(self)
        self._parent = None

    @abstractmethod
    def copy(self) -> "CompositionNode":
        """Copy of this node and its subtree, detached from any parent."""

    def _copy_style(self, target: "CompositionNode") -> "CompositionNode":
        target.stroke_weight = self.stroke_weight
        target.shade_style = self.shade_style
        target.attributes = dict(self.attributes)
        target.user_data = dict(self.user_data)
        return target

    def find_terminals(self, predicate: Callable[["CompositionNode"], bool]) -> list["CompositionNode"]:
        """Pre-order search testing only non-group nodes."""
        return [
            node
            for node in self._preorder()
            if not isinstance(node, GroupNode) and predicate(node)
        ]

    def find_all(self, predicate: Callable[["CompositionNode"], bool]) -> list["CompositionNode"]:
        """Pre-order search testing every node, groups included."""
        return [node for node in self._preorder() if predicate(node)]

    def find_shapes(self) -> list["ShapeNode"]:
        return self.find_terminals(lambda n: isinstance(n, ShapeNode))  # type: ignore[return-value]

    def find_images(self) -> list["ImageNode"]:
        return self.find_terminals(lambda n: isinstance(n, ImageNode))  # type: ignore[return-value]

    def find_groups(self) -> list["GroupNode"]:
        return self.find_all(lambda n: isinstance(n, GroupNode))  # type: ignore[return-value]

    def visit_all(self, visitor: Callable[["CompositionNode"], None]) -> None:
        """Call visitor on every node in pre-order.

        The node list is captured before the first call, so the visitor may
        mutate the tree.
        """
        for node in self._preorder():
            visitor(node)

    def _preorder(self) -> list["CompositionNode"]:
        result: list[CompositionNode] = []
        stack: list[CompositionNode] = [self]
        while stack:
            node = stack.pop()
            result.append(node)
            if isinstance(node, GroupNode):
                stack.extend(reversed(node.children))
        return result


@dataclass(eq=False)
class GroupNode(CompositionNode):
    """A node owning an ordered list of children."""

    children: list[CompositionNode] = field(default_factory=list)

    def __post_init__(self) -> None:
        children = list(self.children)
        self.children = []
        for child in children:
            self.append(child)

    def _adopt(self, child: CompositionNode) -> CompositionNode:
        if child.parent is not None:
            raise NodeAttachedError(child.id)
        child._parent = weakref.ref(self)
        return child

    def append(self, child: CompositionNode) -> CompositionNode:
        """Attach child as the last child.

        Raises:
            NodeAttachedError: If child already has a parent
        """
        self.children.append(self._adopt(child))
        return child

    def insert(self, index: int, child: CompositionNode) -> CompositionNode:
        self.children.insert(index, self._adopt(child))
        return child

    def replace(self, old: CompositionNode, new: CompositionNode) -> CompositionNode:
        """Put new in place of old, detaching old."""
        index = self.children.index(old)
        self._adopt(new)
        self.children[index] = new
        old._parent = None
        return new

    @property
    def bounds(self) -> Rectangle:
        return rectangle_bounds(
            b for b in (child.bounds for child in self.children) if b is not Rectangle.EMPTY
        )

    def copy(
        self,
        id: str | None = None,
        transform: Matrix44 | None = None,
        fill: Inheritable[ColorRGBa | None] | None = None,
        stroke: Inheritable[ColorRGBa | None] | None = None,
        children: list[CompositionNode] | None = None,
    ) -> "GroupNode":
        """Detached copy; children are copied unless replacements are given."""
        copied = GroupNode(
            id=id if id is not None else self.id,
            transform=transform if transform is not None else self.transform,
            fill=fill if fill is not None else self.fill,
            stroke=stroke if stroke is not None else self.stroke,
            children=children if children is not None else [c.copy() for c in self.children],
        )
        return self._copy_style(copied)  # type: ignore[return-value]


@dataclass(eq=False)
class ShapeNode(CompositionNode):
    """A leaf holding a shape in local coordinates."""

    shape: Shape = field(default_factory=lambda: Shape.EMPTY)

    @property
    def effective_shape(self) -> Shape:
        """The shape in world coordinates."""
        return self.shape.transform(self.effective_transform)

    @property
    def bounds(self) -> Rectangle:
        if self.shape.empty:
            return Rectangle.EMPTY
        matrix = self.effective_transform
        if matrix.is_identity:
            return self.shape.bounds
        return self.shape.bounds.contour.transform(matrix).bounds

    def conflate(self) -> "ShapeNode":
        """Detached node whose transform is this node's effective transform."""
        return ShapeNode(
            self.shape,
            id=self.id,
            fill=self.fill,
            stroke=self.stroke,
            transform=self.effective_transform,
        )

    def flatten(self) -> "ShapeNode":
        """Detached node with the effective transform baked into the shape."""
        return ShapeNode(
            self.shape.transform(self.effective_transform),
            id=self.id,
            fill=self.fill,
            stroke=self.stroke,
            transform=Matrix44.IDENTITY,
        )

    def copy(
        self,
        id: str | None = None,
        transform: Matrix44 | None = None,
        fill: Inheritable[ColorRGBa | None] | None = None,
        stroke: Inheritable[ColorRGBa | None] | None = None,
        shape: Shape | None = None,
    ) -> "ShapeNode":
        copied = ShapeNode(
            shape if shape is not None else self.shape,
            id=id if id is not None else self.id,
            transform=transform if transform is not None else self.transform,
            fill=fill if fill is not None else self.fill,
            stroke=stroke if stroke is not None else self.stroke,
        )
        return self._copy_style(copied)  # type: ignore[return-value]


@dataclass(eq=False)
class ImageNode(CompositionNode):
    """A leaf placing an opaque image in a rectangle."""

    image: Any = None
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def bounds(self) -> Rectangle:
        return Rectangle(self.x, self.y, self.width, self.height).contour.transform(
            self.effective_transform
        ).bounds

    def copy(self) -> "ImageNode":
        copied = ImageNode(
            self.image,
            self.x,
            self.y,
            self.width,
            self.height,
            id=self.id,
            transform=self.transform,
            fill=self.fill,
            stroke=self.stroke,
        )
        return self._copy_style(copied)  # type: ignore[return-value]


@dataclass(eq=False)
class TextNode(CompositionNode):
    """A leaf holding text, optionally laid out along a contour."""

    text: str = ""
    contour: ShapeContour | None = None

    @property
    def bounds(self) -> Rectangle:
        if self.contour is None or self.contour.empty:
            return Rectangle.EMPTY
        return self.contour.transform(self.effective_transform).bounds

    def copy(self) -> "TextNode":
        copied = TextNode(
            self.text,
            self.contour,
            id=self.id,
            transform=self.transform,
            fill=self.fill,
            stroke=self.stroke,
        )
        return self._copy_style(copied)  # type: ignore[return-value]


class UserData(Generic[T]):
    """Descriptor mapping an attribute onto a node's user_data entry.

    Example:
        >>> class WeightedShape(ShapeNode):
        ...     weight = UserData("weight", 1.0)
    """

    def __init__(self, name: str, initial: T) -> None:
        self.name = name
        self.initial = initial

    def __get__(self, node: CompositionNode | None, owner: type | None = None) -> Any:
        if node is None:
            return self
        return node.user_data.get(self.name, self.initial)

    def __set__(self, node: CompositionNode, value: T) -> None:
        node.user_data[self.name] = value


class Composition:
    """A composition tree with its document bounds and namespaces."""

    def __init__(
        self,
        root: CompositionNode | None = None,
        document_bounds: Rectangle = DEFAULT_COMPOSITION_BOUNDS,
    ) -> None:
        self.root = root if root is not None else GroupNode()
        self.document_bounds = document_bounds
        self.namespaces: dict[str, str] = {}

    def find_shapes(self) -> list[ShapeNode]:
        return self.root.find_shapes()

    def find_shape(self, id: str) -> ShapeNode | None:
        return next((n for n in self.find_shapes() if n.id == id), None)

    def find_images(self) -> list[ImageNode]:
        return self.root.find_images()

    def find_image(self, id: str) -> ImageNode | None:
        return next((n for n in self.find_images() if n.id == id), None)

    def find_groups(self) -> list[GroupNode]:
        return self.root.find_groups()

    def find_group(self, id: str) -> GroupNode | None:
        return next((n for n in self.find_groups() if n.id == id), None)
