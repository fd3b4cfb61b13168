"""
Tool state machine - turns pointer and keyboard input into scene edits.

Pointer positions arrive in canvas pixels and are converted to document
units through the state's zoom before touching any element.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Tuple, Union

from ..model import EditorState
from ..types import (
    HIGHLIGHT_STYLE,
    SHAPE_TOOLS,
    WHITEOUT_STYLE,
    AnyElement,
    ElementKind,
    Handle,
    ImageElement,
    ShapeElement,
    ShapeStyle,
    TextElement,
    TextStyle,
    Tool,
)
from .gestures import DrawGesture, MoveGesture, ResizeGesture, corner_points

logger = logging.getLogger(__name__)

Gesture = Union[MoveGesture, ResizeGesture, DrawGesture]

DELETE_KEYS = ("Delete", "Backspace")


class ToolStateMachine:
    """Interprets input according to the active tool.

    Only one gesture is in flight at a time. It is created on
    ``pointer_down`` and always released on ``pointer_up``.
    """

    def __init__(
        self,
        state: EditorState,
        on_change: Optional[Callable[[], None]] = None,
        on_image_request: Optional[Callable[[], None]] = None,
        measure_image: Optional[Callable[[bytes], Tuple[int, int]]] = None,
    ):
        self._state = state
        self._on_change = on_change
        self._on_image_request = on_image_request
        self._measure_image = measure_image
        self._gesture: Optional[Gesture] = None
        self.text_style: TextStyle = replace(state.config.text_style)
        self.shape_style: ShapeStyle = replace(state.config.shape_style)

    # Properties

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def active_tool(self) -> Tool:
        return self._state.active_tool

    @property
    def gesture(self) -> Optional[Gesture]:
        """The gesture in flight, if any."""
        return self._gesture

    @property
    def transient(self) -> Optional[ShapeElement]:
        """Uncommitted element of an in-progress draw-gesture."""
        if isinstance(self._gesture, DrawGesture):
            return self._gesture.preview()
        return None

    # Tools

    def select_tool(self, tool: Tool) -> None:
        """Switch tools. The image tool asks the host for a file right away."""
        self.cancel_gesture()
        self._state.active_tool = tool
        self._state.end_text_edit()
        self._changed()
        if tool == Tool.IMAGE and self._on_image_request:
            self._on_image_request()

    def set_text_style(self, **changes) -> None:
        """Update text options; a selected text element follows them."""
        self.text_style = replace(self.text_style, **changes)
        selected = self._state.selected
        if isinstance(selected, TextElement):
            for name, value in changes.items():
                setattr(selected, name, value)
        self._changed()

    def set_shape_style(self, **changes) -> None:
        self.shape_style = replace(self.shape_style, **changes)
        self._changed()

    def style_for(self, kind: ElementKind) -> ShapeStyle:
        if kind == ElementKind.HIGHLIGHT:
            return HIGHLIGHT_STYLE
        if kind == ElementKind.WHITEOUT:
            return WHITEOUT_STYLE
        return self.shape_style

    # Pointer input

    def tap(self, x: float, y: float) -> Optional[AnyElement]:
        """A click without drag, in canvas pixels."""
        tool = self._state.active_tool

        if tool in SHAPE_TOOLS:
            # Press and release in place: a zero-area draw
            self.pointer_down(x, y)
            return self.pointer_up(x, y)

        px, py = self._state.transform.point_to_document(x, y)
        hit = self._state.element_at(px, py)

        if tool == Tool.TEXT and hit is None:
            return self._create_text(px, py)

        if tool in (Tool.SELECT, Tool.TEXT):
            if hit is None:
                self._state.clear_selection()
            elif isinstance(hit, TextElement):
                self._state.begin_text_edit(hit.id)
            else:
                self._state.select(hit.id)
            self._changed()
        return hit

    def pointer_down(self, x: float, y: float) -> Optional[Gesture]:
        """Start a gesture. Any gesture still in flight is cancelled first."""
        self.cancel_gesture()
        state = self._state
        tool = state.active_tool
        px, py = state.transform.point_to_document(x, y)

        if tool in SHAPE_TOOLS:
            kind = SHAPE_TOOLS[tool]
            self._gesture = DrawGesture.begin(
                kind, state.current_page, self.style_for(kind), px, py
            )

        elif tool == Tool.SELECT:
            handle = self.handle_at(x, y)
            selected = state.selected
            if handle is not None and selected is not None:
                self._gesture = ResizeGesture.begin(
                    selected, handle, px, py, state.config.min_resize
                )
            else:
                hit = state.element_at(px, py)
                if hit is None:
                    state.clear_selection()
                else:
                    if state.editing_id != hit.id:
                        state.select(hit.id)
                    self._gesture = MoveGesture.begin(hit, px, py)

        self._changed()
        return self._gesture

    def pointer_move(self, x: float, y: float) -> None:
        if self._gesture is None:
            return
        self._gesture.update(*self._state.transform.point_to_document(x, y))
        self._changed()

    def pointer_up(
        self, x: Optional[float] = None, y: Optional[float] = None
    ) -> Optional[AnyElement]:
        """Finish the gesture in flight.

        Draw-gestures commit their element unless it is degenerate, and the
        tool returns to select either way. The position may be omitted when
        the release happens off-canvas.
        """
        gesture, self._gesture = self._gesture, None
        try:
            if gesture is None:
                return None
            if x is not None and y is not None:
                gesture.update(*self._state.transform.point_to_document(x, y))
            if isinstance(gesture, DrawGesture):
                return self._commit_draw(gesture)
            return None
        finally:
            if isinstance(gesture, DrawGesture):
                self._state.active_tool = Tool.SELECT
            self._changed()

    def cancel_gesture(self) -> None:
        """Drop the gesture in flight, restoring any element it was changing."""
        gesture, self._gesture = self._gesture, None
        if isinstance(gesture, (MoveGesture, ResizeGesture)):
            gesture.cancel()

    def handle_at(self, x: float, y: float) -> Optional[Handle]:
        """Resize handle of the selected element under a canvas point."""
        selected = self._state.selected
        if selected is None or selected.page != self._state.current_page:
            return None
        rect = self._state.transform.rect_to_canvas(
            selected.x, selected.y, selected.width, selected.height
        )
        reach = self._state.config.handle_size / 2 + 2
        for handle, (hx, hy) in corner_points(*rect).items():
            if abs(x - hx) <= reach and abs(y - hy) <= reach:
                return handle
        return None

    # Keyboard input

    def key_down(self, key: str) -> bool:
        """Handle a key press. Returns True when the key was used."""
        if key in DELETE_KEYS:
            # Text being edited in place consumes its own keys
            if self._state.editing_id:
                return False
            return self.delete_selected()

        if key == "Escape":
            self.cancel_gesture()
            self._state.active_tool = Tool.SELECT
            self._state.clear_selection()
            self._changed()
            return True

        return False

    def delete_selected(self) -> bool:
        selected_id = self._state.selected_id
        if selected_id is None:
            return False
        self.cancel_gesture()
        removed = self._state.remove(selected_id)
        self._changed()
        return removed

    def end_text_edit(self) -> None:
        self._state.end_text_edit()
        self._changed()

    # Creation

    def place_image(
        self, data: bytes, natural_size: Optional[Tuple[int, int]] = None
    ) -> ImageElement:
        """Add an image on the current page, sized from its natural dimensions."""
        state = self._state
        config = state.config
        try:
            if natural_size is None:
                if self._measure_image is None:
                    raise ValueError("No image measurer available")
                natural_size = self._measure_image(data)
            width, height = natural_size
            if width <= 0 or height <= 0:
                raise ValueError(f"Invalid image size {width}x{height}")

            fit = min(1.0, config.max_image_size / width, config.max_image_size / height)
            x, y = config.image_origin
            element = ImageElement(
                id=state.next_id(ElementKind.IMAGE),
                page=state.current_page,
                x=x,
                y=y,
                width=width * fit,
                height=height * fit,
                image_data=data,
            )
            state.add(element)
            state.select(element.id)
            return element
        finally:
            state.active_tool = Tool.SELECT
            self._changed()

    def _create_text(self, x: float, y: float) -> TextElement:
        state = self._state
        width, height = state.config.text_box
        element = TextElement(
            id=state.next_id(ElementKind.TEXT),
            page=state.current_page,
            x=x,
            y=y,
            width=width,
            height=height,
            content=state.config.default_text,
            font_size=self.text_style.font_size,
            font_family=self.text_style.font_family,
            color=self.text_style.color,
            bold=self.text_style.bold,
        )
        state.add(element)
        state.begin_text_edit(element.id)
        state.active_tool = Tool.SELECT
        self._changed()
        return element

    def _commit_draw(self, gesture: DrawGesture) -> Optional[ShapeElement]:
        min_size = self._state.config.min_draw_size
        if gesture.is_degenerate(min_size):
            logger.debug("Discarded degenerate %s draw", gesture.kind.value)
            return None
        element = gesture.build(self._state.next_id(gesture.kind))
        self._state.add(element)
        self._state.select(element.id)
        return element

    def _changed(self) -> None:
        if self._on_change:
            self._on_change()
