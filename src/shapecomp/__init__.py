"""Shapecomp - 2D curve geometry and composition trees.

Shapecomp provides a geometry kernel for line, quadratic and cubic Bezier
segments, contours and shapes (including boolean union, intersection and
difference), plus a composition scene graph with inherited style and
transform state that is built through an imperative drawer.

Example:
    >>> from shapecomp.core import ClipMode, draw_composition
    >>> def draw(d):
    ...     d.rectangle(0, 0, 100, 100)
    ...     d.clip_mode = ClipMode.DIFFERENCE
    ...     d.circle(50, 50, 25)
    >>> composition = draw_composition(draw)
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
