"""Opaque color values carried by composition nodes."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class ColorRGBa:
    """An RGBA color with components in [0, 1].

    The kernel only interpolates colors; encoding conversions live elsewhere.
    """

    r: float
    g: float
    b: float
    a: float = 1.0

    BLACK: ClassVar["ColorRGBa"]
    WHITE: ClassVar["ColorRGBa"]
    TRANSPARENT: ClassVar["ColorRGBa"]

    def mix(self, other: "ColorRGBa", t: float) -> "ColorRGBa":
        """Component-wise linear interpolation towards other."""
        return ColorRGBa(
            self.r + (other.r - self.r) * t,
            self.g + (other.g - self.g) * t,
            self.b + (other.b - self.b) * t,
            self.a + (other.a - self.a) * t,
        )


ColorRGBa.BLACK = ColorRGBa(0.0, 0.0, 0.0, 1.0)
ColorRGBa.WHITE = ColorRGBa(1.0, 1.0, 1.0, 1.0)
ColorRGBa.TRANSPARENT = ColorRGBa(0.0, 0.0, 0.0, 0.0)


def mix(a: ColorRGBa, b: ColorRGBa, t: float) -> ColorRGBa:
    """Interpolate between two colors."""
    return a.mix(b, t)
