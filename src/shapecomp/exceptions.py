"""Exception hierarchy for Shapecomp."""


class ShapecompError(Exception):
    """Base exception for all Shapecomp errors."""

    pass


class GeometryError(ShapecompError):
    """Errors in geometric construction or calculations."""

    pass


class SegmentError(GeometryError):
    """Invalid segment data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ContourError(GeometryError):
    """Error with contour data or operations."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class CompositionError(ShapecompError):
    """Errors related to composition tree structure."""

    pass


class NodeDetachedError(CompositionError):
    """Operation requires a node that has a parent."""

    def __init__(self, node_id: str | None) -> None:
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' has no parent")


class NodeAttachedError(CompositionError):
    """Node already belongs to a group."""

    def __init__(self, node_id: str | None) -> None:
        self.node_id = node_id
        super().__init__(f"Node '{node_id}' already has a parent")


class UnsupportedClipOpError(CompositionError):
    """Clip operator cannot be used to combine shapes."""

    def __init__(self, op: object) -> None:
        self.op = op
        super().__init__(f"Unsupported clip operation: {op}")


class BatchError(ShapecompError):
    """Errors related to batch clipping."""

    pass


class ClipTaskError(BatchError):
    """A single clip task failed inside a worker."""

    def __init__(self, index: int, reason: str) -> None:
        self.index = index
        self.reason = reason
        super().__init__(f"Clip task {index} failed: {reason}")
