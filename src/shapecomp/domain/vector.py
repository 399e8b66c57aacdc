"""Vector and matrix value types.

This module defines the coordinate types shared by the whole kernel:
- Vector2: An immutable 2D vector/point
- Matrix44: An immutable 4x4 transformation matrix
"""

import math
from dataclasses import dataclass
from typing import Any, ClassVar

import numpy as np


@dataclass(frozen=True, slots=True)
class Vector2:
    """A point or direction in 2D space.

    Immutable and hashable for use in sets/dicts.

    Attributes:
        x: X coordinate
        y: Y coordinate
    """

    x: float
    y: float

    ZERO: ClassVar["Vector2"]

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2":
        return Vector2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> "Vector2":
        return Vector2(self.x * scalar, self.y * scalar)

    def __truediv__(self, scalar: float) -> "Vector2":
        return Vector2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> "Vector2":
        return Vector2(-self.x, -self.y)

    def dot(self, other: "Vector2") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vector2") -> float:
        """Z component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    @property
    def length(self) -> float:
        return math.hypot(self.x, self.y)

    @property
    def squared_length(self) -> float:
        return self.x * self.x + self.y * self.y

    @property
    def normalized(self) -> "Vector2":
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length
        if length < 1e-12:
            return Vector2.ZERO
        return Vector2(self.x / length, self.y / length)

    @property
    def perpendicular(self) -> "Vector2":
        """Rotate 90 degrees counter-clockwise: (x, y) -> (-y, x)."""
        return Vector2(-self.y, self.x)

    def distance_to(self, other: "Vector2") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def squared_distance_to(self, other: "Vector2") -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def mix(self, other: "Vector2", t: float) -> "Vector2":
        """Linear interpolation towards other."""
        return Vector2(self.x + (other.x - self.x) * t, self.y + (other.y - self.y) * t)

    def to_tuple(self) -> tuple[float, float]:
        """Convert to simple (x, y) tuple.

        Returns:
            Tuple of (x, y) coordinates
        """
        return (self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary with x and y fields
        """
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vector2":
        """Deserialize from dictionary.

        Args:
            data: Dictionary with x and y fields

        Returns:
            Vector2 instance
        """
        return cls(x=data["x"], y=data["y"])


Vector2.ZERO = Vector2(0.0, 0.0)


class Matrix44:
    """An immutable 4x4 transformation matrix.

    Matrices compose with ``*`` in column-vector convention: ``(a * b)``
    applies ``b`` first, then ``a``. Only the affine 2D part is used when
    transforming points.
    """

    __slots__ = ("_m",)

    IDENTITY: ClassVar["Matrix44"]

    def __init__(self, m: Any = None) -> None:
        array = np.identity(4) if m is None else np.array(m, dtype=float)
        if array.shape != (4, 4):
            raise ValueError(f"Expected a 4x4 matrix, got shape {array.shape}")
        array.setflags(write=False)
        self._m = array

    @property
    def m(self) -> np.ndarray:
        """Read-only numpy view of the matrix."""
        return self._m

    @classmethod
    def translate(cls, x: float, y: float, z: float = 0.0) -> "Matrix44":
        m = np.identity(4)
        m[0, 3] = x
        m[1, 3] = y
        m[2, 3] = z
        return cls(m)

    @classmethod
    def scale(cls, x: float, y: float, z: float = 1.0) -> "Matrix44":
        return cls(np.diag([x, y, z, 1.0]))

    @classmethod
    def rotate_z(cls, degrees: float) -> "Matrix44":
        radians = math.radians(degrees)
        cos_a = math.cos(radians)
        sin_a = math.sin(radians)
        m = np.identity(4)
        m[0, 0] = cos_a
        m[0, 1] = -sin_a
        m[1, 0] = sin_a
        m[1, 1] = cos_a
        return cls(m)

    def __mul__(self, other: "Matrix44") -> "Matrix44":
        return Matrix44(self._m @ other._m)

    @property
    def inversed(self) -> "Matrix44":
        if self.is_identity:
            return self
        return Matrix44(np.linalg.inv(self._m))

    @property
    def is_identity(self) -> bool:
        return bool(np.array_equal(self._m, _IDENTITY_ARRAY))

    def transform(self, v: Vector2) -> Vector2:
        """Transform a 2D point (z = 0, w = 1)."""
        m = self._m
        return Vector2(
            float(m[0, 0] * v.x + m[0, 1] * v.y + m[0, 3]),
            float(m[1, 0] * v.x + m[1, 1] * v.y + m[1, 3]),
        )

    def to_list(self) -> list[list[float]]:
        return self._m.tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix44):
            return NotImplemented
        return bool(np.array_equal(self._m, other._m))

    def __hash__(self) -> int:
        return hash(self._m.tobytes())

    def __repr__(self) -> str:
        return f"Matrix44({np.around(self._m, 4).tolist()})"


_IDENTITY_ARRAY = np.identity(4)
Matrix44.IDENTITY = Matrix44()
