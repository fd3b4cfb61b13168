"""
Compositor - converts the editor state to Flet canvas shapes.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import flet as ft
import flet.canvas as cv

from ..images import to_base64
from ..interactions.gestures import corner_points
from ..model import EditorState
from ..transform import CoordinateTransform
from ..types import (
    AnyElement,
    ImageElement,
    ShapeElement,
    TextElement,
)

DISPLAY_FONTS = {
    "helvetica": "Helvetica",
    "times": "Times New Roman",
    "courier": "Courier New",
}


@dataclass
class ImageOverlay:
    """An image element placed over the canvas, in canvas pixels."""

    element_id: str
    src_base64: str
    x: float
    y: float
    width: float
    height: float


@dataclass
class CanvasLayer:
    """A run of consecutive canvas shapes."""

    shapes: List[Any] = field(default_factory=list)


Layer = Union[CanvasLayer, ImageOverlay]


@dataclass
class Frame:
    """Everything needed to draw the current page.

    ``layers`` are stacked in order. Images are separate controls, so the
    shapes around them are split into layers to keep the paint order.
    """

    width: float
    height: float
    backdrop: str  # Base64 PNG
    layers: List[Layer] = field(default_factory=list)
    element_ids: List[str] = field(default_factory=list)

    @property
    def shapes(self) -> List[Any]:
        """All canvas shapes, in paint order."""
        return [s for layer in self.layers if isinstance(layer, CanvasLayer) for s in layer.shapes]


class Compositor:
    """Draws the backdrop and the elements of the current page.

    ``compose`` only reads the editor state. Encoded image payloads are
    cached per element until its data changes.
    """

    def __init__(self, selection_color: str = "#08CF65", handle_size: float = 10.0):
        self.selection_color = selection_color
        self.handle_size = handle_size
        self._encoded: Dict[str, Tuple[Union[bytes, str], str]] = {}

    def compose(
        self,
        state: EditorState,
        transient: Optional[ShapeElement] = None,
        backdrop: Optional[str] = None,
    ) -> Frame:
        """Build the frame for the current page.

        ``backdrop`` is the page image already encoded as base64; it is
        encoded here only when not given.
        """
        page = state.page
        transform = state.transform
        if backdrop is None:
            backdrop = base64.b64encode(page.image).decode("ascii")
        frame = Frame(
            width=transform.to_canvas(page.width),
            height=transform.to_canvas(page.height),
            backdrop=backdrop,
        )

        for element in state.elements_on_page(state.current_page):
            self._draw_element(frame, element, transform, state.editing_id)
            frame.element_ids.append(element.id)

        if transient is not None and transient.page == state.current_page:
            self._draw_transient(frame, transient, transform)

        selected = state.selected
        if selected is not None and selected.page == state.current_page:
            self._draw_selection(frame, selected, transform)

        return frame

    def _shapes(self, frame: Frame) -> List[Any]:
        """Shape list of the topmost canvas layer, opening one if needed."""
        if not frame.layers or not isinstance(frame.layers[-1], CanvasLayer):
            frame.layers.append(CanvasLayer())
        return frame.layers[-1].shapes

    def _draw_element(
        self,
        frame: Frame,
        element: AnyElement,
        transform: CoordinateTransform,
        editing_id: Optional[str],
    ) -> None:
        x, y, width, height = transform.rect_to_canvas(
            element.x, element.y, element.width, element.height
        )

        if isinstance(element, ShapeElement):
            self._draw_shape(self._shapes(frame), element, x, y, width, height, transform)

        elif isinstance(element, TextElement):
            # The in-place editor draws the text being edited
            if element.id != editing_id:
                self._draw_text(self._shapes(frame), element, x, y, width, transform)

        elif isinstance(element, ImageElement):
            frame.layers.append(
                ImageOverlay(
                    element_id=element.id,
                    src_base64=self._encode(element),
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                )
            )

    def _encode(self, element: ImageElement) -> str:
        cached = self._encoded.get(element.id)
        if cached is None or cached[0] is not element.image_data:
            cached = (element.image_data, to_base64(element.image_data))
            self._encoded[element.id] = cached
        return cached[1]

    def _draw_shape(
        self,
        shapes: List[Any],
        element: ShapeElement,
        x: float,
        y: float,
        width: float,
        height: float,
        transform: CoordinateTransform,
    ) -> None:
        shapes.append(
            cv.Rect(
                x=x,
                y=y,
                width=width,
                height=height,
                paint=ft.Paint(
                    color=ft.Colors.with_opacity(element.opacity, element.fill_color),
                    style=ft.PaintingStyle.FILL,
                ),
            )
        )
        if element.stroke_width > 0 and element.stroke_color:
            shapes.append(
                cv.Rect(
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                    paint=ft.Paint(
                        stroke_width=transform.to_canvas(element.stroke_width),
                        color=element.stroke_color,
                        style=ft.PaintingStyle.STROKE,
                    ),
                )
            )

    def _draw_text(
        self,
        shapes: List[Any],
        element: TextElement,
        x: float,
        y: float,
        width: float,
        transform: CoordinateTransform,
    ) -> None:
        style = ft.TextStyle(
            size=transform.to_canvas(element.font_size),
            font_family=DISPLAY_FONTS.get(element.font_family, "Helvetica"),
            color=element.color,
        )
        if element.bold:
            style.weight = ft.FontWeight.BOLD

        shapes.append(
            cv.Text(
                x=x,
                y=y,
                text=element.content,
                style=style,
                max_width=width,
            )
        )

    def _draw_transient(
        self, frame: Frame, element: ShapeElement, transform: CoordinateTransform
    ) -> None:
        """Uncommitted draw-gesture: preset fill with a dashed outline."""
        x, y, width, height = transform.rect_to_canvas(
            element.x, element.y, element.width, element.height
        )
        shapes = self._shapes(frame)
        shapes.append(
            cv.Rect(
                x=x,
                y=y,
                width=width,
                height=height,
                paint=ft.Paint(
                    color=ft.Colors.with_opacity(element.opacity, element.fill_color),
                    style=ft.PaintingStyle.FILL,
                ),
            )
        )
        shapes.append(
            cv.Rect(
                x=x,
                y=y,
                width=width,
                height=height,
                paint=ft.Paint(
                    stroke_width=1,
                    color=self.selection_color,
                    style=ft.PaintingStyle.STROKE,
                    stroke_dash_pattern=[6, 4],
                ),
            )
        )

    def _draw_selection(
        self, frame: Frame, element: AnyElement, transform: CoordinateTransform
    ) -> None:
        """Outline plus four corner handles."""
        rect = transform.rect_to_canvas(element.x, element.y, element.width, element.height)
        x, y, width, height = rect
        shapes = self._shapes(frame)
        shapes.append(
            cv.Rect(
                x=x,
                y=y,
                width=width,
                height=height,
                paint=ft.Paint(
                    stroke_width=2,
                    color=self.selection_color,
                    style=ft.PaintingStyle.STROKE,
                ),
            )
        )

        half = self.handle_size / 2
        for hx, hy in corner_points(*rect).values():
            shapes.append(
                cv.Rect(
                    x=hx - half,
                    y=hy - half,
                    width=self.handle_size,
                    height=self.handle_size,
                    paint=ft.Paint(color="#ffffff", style=ft.PaintingStyle.FILL),
                )
            )
            shapes.append(
                cv.Rect(
                    x=hx - half,
                    y=hy - half,
                    width=self.handle_size,
                    height=self.handle_size,
                    paint=ft.Paint(
                        color=self.selection_color,
                        style=ft.PaintingStyle.STROKE,
                        stroke_width=1,
                    ),
                )
            )
