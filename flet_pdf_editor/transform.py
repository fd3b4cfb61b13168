"""
Coordinate transforms between canvas space and document space.

Canvas space has a top-left origin and is measured in screen pixels.
Stored elements use document units with the same top-left origin, so
converting between the two is a pure scale by ``zoom``. PDF pages use a
bottom-left origin; that flip is applied once, at export, by ``flip_y``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import Point, Rect


def flip_y(page_height: float, y: float, height: float) -> float:
    """Convert a top-left ``y`` to the bottom-left ``y`` of the same box.

    Applying it to the result with the same ``page_height`` and ``height``
    gives back the original ``y``.
    """
    return page_height - y - height


@dataclass
class CoordinateTransform:
    """Scale between canvas pixels and document units."""

    zoom: float = 1.0

    def to_document(self, value: float) -> float:
        return value / self.zoom

    def to_canvas(self, value: float) -> float:
        return value * self.zoom

    def point_to_document(self, x: float, y: float) -> Point:
        """Convert a canvas point to a top-left document point."""
        return (x / self.zoom, y / self.zoom)

    def rect_to_canvas(self, x: float, y: float, width: float, height: float) -> Rect:
        """Convert document bounds to canvas (x, y, width, height)."""
        return (
            x * self.zoom,
            y * self.zoom,
            width * self.zoom,
            height * self.zoom,
        )
