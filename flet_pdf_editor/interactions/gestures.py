"""
Pointer gestures - short-lived contexts for move, resize and draw.

A gesture is created on pointer-down and dropped on pointer-up. All
positions are document units (top-left origin).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..types import AnyElement, ElementKind, Handle, Rect, ShapeElement, ShapeStyle


@dataclass
class MoveGesture:
    """Drag an element by its body."""

    element: AnyElement
    start_x: float
    start_y: float
    origin_x: float
    origin_y: float

    @classmethod
    def begin(cls, element: AnyElement, x: float, y: float) -> "MoveGesture":
        return cls(element, x, y, element.x, element.y)

    def update(self, x: float, y: float) -> None:
        self.element.x = self.origin_x + (x - self.start_x)
        self.element.y = self.origin_y + (y - self.start_y)

    def cancel(self) -> None:
        self.element.x = self.origin_x
        self.element.y = self.origin_y


@dataclass
class ResizeGesture:
    """Drag one corner handle of an element.

    East/south handles grow the size with the pointer; west/north handles
    shrink it and move the origin. Sizes never go below ``min_size``; when
    floored, the opposite edge stays put.
    """

    element: AnyElement
    handle: Handle
    start_x: float
    start_y: float
    origin: Rect  # (x, y, width, height) at gesture start
    min_size: float = 20.0

    @classmethod
    def begin(
        cls,
        element: AnyElement,
        handle: Handle,
        x: float,
        y: float,
        min_size: float = 20.0,
    ) -> "ResizeGesture":
        origin = (element.x, element.y, element.width, element.height)
        return cls(element, handle, x, y, origin, min_size)

    def update(self, x: float, y: float) -> None:
        dx = x - self.start_x
        dy = y - self.start_y
        left, top, width, height = self.origin
        corner = self.handle.value

        new_x, new_y, new_width, new_height = left, top, width, height

        if "e" in corner:
            new_width = max(self.min_size, width + dx)
        if "w" in corner:
            new_width = max(self.min_size, width - dx)
            new_x = left + width - new_width
        if "s" in corner:
            new_height = max(self.min_size, height + dy)
        if "n" in corner:
            new_height = max(self.min_size, height - dy)
            new_y = top + height - new_height

        self.element.x = new_x
        self.element.y = new_y
        self.element.width = new_width
        self.element.height = new_height

    def cancel(self) -> None:
        (
            self.element.x,
            self.element.y,
            self.element.width,
            self.element.height,
        ) = self.origin


@dataclass
class DrawGesture:
    """Drag out a new rectangle-family element from an anchor point."""

    kind: ElementKind
    page: int
    style: ShapeStyle
    anchor_x: float
    anchor_y: float
    end_x: float
    end_y: float

    @classmethod
    def begin(
        cls, kind: ElementKind, page: int, style: ShapeStyle, x: float, y: float
    ) -> "DrawGesture":
        return cls(kind, page, style, x, y, x, y)

    def update(self, x: float, y: float) -> None:
        self.end_x = x
        self.end_y = y

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Normalized (x, y, width, height) between anchor and pointer."""
        x = min(self.anchor_x, self.end_x)
        y = min(self.anchor_y, self.end_y)
        return (x, y, abs(self.end_x - self.anchor_x), abs(self.end_y - self.anchor_y))

    def is_degenerate(self, min_size: float) -> bool:
        _, _, width, height = self.bounds
        return width <= min_size or height <= min_size

    def build(self, element_id: str) -> ShapeElement:
        """Build the element described by the current bounds."""
        x, y, width, height = self.bounds
        return ShapeElement(
            id=element_id,
            page=self.page,
            x=x,
            y=y,
            width=width,
            height=height,
            kind=self.kind,
            fill_color=self.style.fill_color,
            stroke_color=self.style.stroke_color,
            stroke_width=self.style.stroke_width,
            opacity=self.style.opacity,
        )

    def preview(self) -> ShapeElement:
        """The transient element shown while dragging."""
        return self.build("transient")


def corner_points(
    x: float, y: float, width: float, height: float
) -> Dict[Handle, Tuple[float, float]]:
    """Positions of the four resize handles of a box."""
    return {
        Handle.NW: (x, y),
        Handle.NE: (x + width, y),
        Handle.SW: (x, y + height),
        Handle.SE: (x + width, y + height),
    }
