"""
PDF Editor - Main editor component.

Composes the rasterizer, tool state machine, compositor and exporter into a
single Flet component.
"""

from __future__ import annotations

import base64
import copy
import io
import logging
from functools import partial
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import flet as ft
import flet.canvas as cv

from .backends.pymupdf import PyMuPDFBackend, image_size
from .config import EditorConfig
from .errors import ExportError, LoadError, SaveInProgressError
from .export import Exporter
from .interactions.tools import ToolStateMachine
from .model import EditorState
from .rendering.compositor import CanvasLayer, Compositor, Frame, ImageOverlay
from .rendering.rasterizer import load_pages
from .types import FONT_FAMILIES, TextElement, Tool

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, io.BytesIO]

COLORS = ["#000000", "#374151", "#6B7280", "#DC2626", "#EA580C", "#F59E0B"]

TOOL_BUTTONS = [
    (Tool.SELECT, ft.Icons.NEAR_ME, "Select (Esc)"),
    (Tool.TEXT, ft.Icons.TEXT_FIELDS, "Add text"),
    (Tool.IMAGE, ft.Icons.IMAGE_OUTLINED, "Add image"),
    (Tool.RECTANGLE, ft.Icons.CROP_SQUARE, "Rectangle"),
    (Tool.HIGHLIGHT, ft.Icons.BORDER_COLOR, "Highlight"),
    (Tool.WHITEOUT, ft.Icons.FORMAT_COLOR_RESET, "Whiteout"),
]


def read_source(source: Source, fetcher: Optional[Callable[[str], bytes]] = None) -> bytes:
    """Resolve a document reference to bytes.

    URLs are only supported through ``fetcher``; the editor does no network
    I/O of its own.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, io.BytesIO):
        return source.getvalue()
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        if fetcher is None:
            raise LoadError(f"No fetcher configured for {source}")
        try:
            return fetcher(source)
        except (OSError, ValueError) as e:
            raise LoadError(f"Cannot fetch {source}: {e}") from e
    if isinstance(source, (str, Path)):
        try:
            return Path(source).read_bytes()
        except OSError as e:
            raise LoadError(f"Cannot read {source}: {e}") from e
    raise TypeError(f"Unsupported source type: {type(source)}")


class PdfEditor:
    """
    PDF overlay editor component.

    Usage:
        from flet_pdf_editor import PdfEditor

        editor = PdfEditor("/path/to/file.pdf", on_save=upload)
        page.on_keyboard_event = editor.on_keyboard_event
        page.add(editor.control)

    Raises:
        LoadError: If the document cannot be read or a page cannot be rendered
    """

    def __init__(
        self,
        source: Source,
        on_save: Optional[Callable[[bytes], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        config: Optional[EditorConfig] = None,
        password: Optional[str] = None,
        fetcher: Optional[Callable[[str], bytes]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        exporter: Optional[Exporter] = None,
    ):
        self._config = config or EditorConfig()
        self._on_save = on_save
        self._on_cancel = on_cancel
        self._on_error = on_error

        # The original bytes are kept untouched for export
        self._source_bytes = read_source(source, fetcher)
        pages = load_pages(
            self._source_bytes,
            self._config.raster_scale,
            opener=partial(PyMuPDFBackend, password=password),
        )

        # Components
        self._state = EditorState(pages, self._config)
        self._tools = ToolStateMachine(
            self._state,
            on_change=self._refresh,
            on_image_request=self._request_image,
            measure_image=image_size,
        )
        self._compositor = Compositor(self._config.selection_color, self._config.handle_size)
        self._exporter = exporter or Exporter(password=password)
        self._saving = False

        # UI state
        self._wrapper: Optional[ft.Container] = None
        self._page_stack: Optional[ft.Stack] = None
        self._backdrop: Optional[ft.Image] = None
        self._overlay: Optional[ft.Stack] = None
        self._thumbnails: Optional[ft.Column] = None
        self._toolbar: Optional[ft.Row] = None
        self._save_button: Optional[ft.ElevatedButton] = None
        self._zoom_label: Optional[ft.Text] = None
        self._text_field: Optional[ft.TextField] = None
        self._file_picker: Optional[ft.FilePicker] = None
        self._frame: Optional[Frame] = None
        self._thumbnails_page: Optional[int] = None
        self._view: Optional[tuple] = None
        self._toolbar_key: Optional[tuple] = None
        self._image_controls: Dict[str, ft.Container] = {}
        self._backdrops = [base64.b64encode(p.image).decode("ascii") for p in pages]

        self._build()
        logger.info("Editor ready with %d pages", len(pages))

    # Properties

    @property
    def control(self) -> ft.Control:
        """The Flet control to add to a page."""
        return self._wrapper

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def tools(self) -> ToolStateMachine:
        return self._tools

    @property
    def frame(self) -> Optional[Frame]:
        """The last composed frame."""
        return self._frame

    @property
    def source_bytes(self) -> bytes:
        return self._source_bytes

    @property
    def saving(self) -> bool:
        """Whether an export is running."""
        return self._saving

    @property
    def current_page(self) -> int:
        return self._state.current_page

    @current_page.setter
    def current_page(self, value: int):
        if self._state.set_page(value):
            self._refresh()

    @property
    def zoom(self) -> float:
        return self._state.zoom

    @zoom.setter
    def zoom(self, value: float):
        self._state.set_zoom(value)
        self._refresh()

    # Navigation

    def next_page(self) -> bool:
        changed = self._state.next_page()
        if changed:
            self._refresh()
        return changed

    def previous_page(self) -> bool:
        changed = self._state.previous_page()
        if changed:
            self._refresh()
        return changed

    def zoom_in(self):
        self._state.zoom_in()
        self._refresh()

    def zoom_out(self):
        self._state.zoom_out()
        self._refresh()

    # Actions

    def select_tool(self, tool: Tool):
        self._tools.select_tool(tool)

    def delete_selected(self) -> bool:
        return self._tools.delete_selected()

    def open_image(self, data: bytes) -> None:
        """Place image bytes on the current page (for hosts without a file picker)."""
        try:
            self._tools.place_image(data)
        except ValueError as e:
            self._report_error(f"Cannot add image: {e}")

    async def save(self) -> bytes:
        """Export the edited document and pass it to ``on_save``.

        Only one save runs at a time. The editor state is left untouched
        whether the export succeeds or not.

        Raises:
            SaveInProgressError: If a save is already running
            ExportError: If the document cannot be reopened or serialized
        """
        if self._saving:
            raise SaveInProgressError("A save is already in progress")

        self._saving = True
        self._update_save_button()
        try:
            snapshot = copy.deepcopy(self._state.elements)
            data = await self._exporter.export_async(self._source_bytes, snapshot)
        except ExportError as e:
            self._report_error(f"Failed to save the PDF: {e}")
            raise
        finally:
            self._saving = False
            self._update_save_button()

        if self._on_save:
            self._on_save(data)
        return data

    def cancel(self):
        self._tools.cancel_gesture()
        if self._on_cancel:
            self._on_cancel()

    def on_keyboard_event(self, e: ft.KeyboardEvent):
        """Page-level keyboard handler; assign to ``page.on_keyboard_event``."""
        self._tools.key_down(e.key)

    # Private methods

    def _build(self):
        """Build the editor UI."""
        self._file_picker = ft.FilePicker(on_result=self._on_file_picked)
        # The backdrop only changes with page or zoom; gestures touch the overlay
        self._backdrop = ft.Image(src_base64=self._backdrops[0], fit=ft.ImageFit.FILL)
        self._overlay = ft.Stack(controls=[])
        self._page_stack = ft.Stack(controls=[self._backdrop, self._overlay])

        gesture_detector = ft.GestureDetector(
            content=self._page_stack,
            on_tap_up=self._on_tap,
            on_pan_start=self._on_pan_start,
            on_pan_update=self._on_pan_update,
            on_pan_end=self._on_pan_end,
            drag_interval=10,
        )

        page_area = ft.Container(
            content=ft.Column(
                controls=[gesture_detector],
                scroll=ft.ScrollMode.AUTO,
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
            ),
            expand=True,
            alignment=ft.alignment.top_center,
            padding=24,
        )

        self._thumbnails = ft.Column(controls=[], scroll=ft.ScrollMode.AUTO, width=110)
        self._toolbar = ft.Row(controls=[], spacing=4, wrap=True)

        self._wrapper = ft.Container(
            content=ft.Column(
                controls=[
                    self._build_header(),
                    self._toolbar,
                    ft.Row(controls=[self._thumbnails, page_area], expand=True),
                ],
                expand=True,
            ),
            expand=True,
        )
        self._refresh()

    def _build_header(self) -> ft.Control:
        self._save_button = ft.ElevatedButton(
            "Apply changes",
            icon=ft.Icons.SAVE,
            on_click=self._on_save_click,
        )
        return ft.Row(
            controls=[
                ft.Text("Edit PDF", size=16, weight=ft.FontWeight.BOLD),
                ft.Container(expand=True),
                ft.TextButton("Cancel", on_click=lambda e: self.cancel()),
                self._save_button,
            ],
        )

    def _build_toolbar(self) -> List[ft.Control]:
        controls: List[ft.Control] = []
        for tool, icon, tooltip in TOOL_BUTTONS:
            controls.append(
                ft.IconButton(
                    icon=icon,
                    tooltip=tooltip,
                    selected=self._state.active_tool == tool,
                    on_click=lambda e, t=tool: self.select_tool(t),
                )
            )

        selected = self._state.selected
        if self._state.active_tool == Tool.TEXT or isinstance(selected, TextElement):
            controls.extend(self._build_text_options())

        if self._state.selected_id:
            controls.append(
                ft.TextButton(
                    "Delete",
                    icon=ft.Icons.DELETE_OUTLINE,
                    on_click=lambda e: self.delete_selected(),
                )
            )

        self._zoom_label = ft.Text(f"{round(self._state.zoom * 100)}%")
        controls.extend(
            [
                ft.Container(expand=True),
                ft.IconButton(icon=ft.Icons.REMOVE, on_click=lambda e: self.zoom_out()),
                self._zoom_label,
                ft.IconButton(icon=ft.Icons.ADD, on_click=lambda e: self.zoom_in()),
            ]
        )
        return controls

    def _build_text_options(self) -> List[ft.Control]:
        style = self._tools.text_style
        options: List[ft.Control] = [
            ft.Dropdown(
                value=style.font_family,
                options=[ft.dropdown.Option(f) for f in FONT_FAMILIES],
                width=140,
                dense=True,
                on_change=lambda e: self._tools.set_text_style(font_family=e.control.value),
            ),
            ft.TextField(
                value=str(int(style.font_size)),
                width=60,
                dense=True,
                keyboard_type=ft.KeyboardType.NUMBER,
                on_submit=self._on_font_size_submit,
            ),
        ]
        for color in COLORS:
            options.append(
                ft.Container(
                    width=20,
                    height=20,
                    bgcolor=color,
                    border_radius=10,
                    border=ft.border.all(2, "#ffffff") if style.color == color else None,
                    on_click=lambda e, c=color: self._tools.set_text_style(color=c),
                )
            )
        options.append(
            ft.IconButton(
                icon=ft.Icons.FORMAT_BOLD,
                selected=style.bold,
                on_click=lambda e: self._tools.set_text_style(bold=not self._tools.text_style.bold),
            )
        )
        return options

    def _build_thumbnails(self) -> List[ft.Control]:
        thumbnails = []
        for page in self._state.pages:
            current = page.index == self._state.current_page
            thumbnails.append(
                ft.Container(
                    content=ft.Image(
                        src_base64=self._backdrops[page.index],
                        width=90,
                        fit=ft.ImageFit.CONTAIN,
                    ),
                    border=ft.border.all(2, self._config.selection_color if current else "transparent"),
                    border_radius=4,
                    on_click=lambda e, i=page.index: setattr(self, "current_page", i),
                )
            )
        return thumbnails

    def _build_overlay(self, frame: Frame) -> List[ft.Control]:
        """Element layers and the in-place text editor, above the backdrop."""
        controls: List[ft.Control] = []
        for layer in frame.layers:
            if isinstance(layer, CanvasLayer):
                controls.append(cv.Canvas(shapes=layer.shapes, width=frame.width, height=frame.height))
            elif isinstance(layer, ImageOverlay):
                controls.append(self._image_control(layer))

        shown = {layer.element_id for layer in frame.layers if isinstance(layer, ImageOverlay)}
        for element_id in list(self._image_controls):
            if element_id not in shown:
                del self._image_controls[element_id]

        editing = self._state.editing
        if editing is not None and editing.page == self._state.current_page:
            controls.append(self._build_text_field(editing))
        else:
            self._text_field = None
        return controls

    def _image_control(self, layer: ImageOverlay) -> ft.Container:
        """Positioned image, reused across refreshes so its data is sent once."""
        container = self._image_controls.get(layer.element_id)
        if container is None or container.content.src_base64 != layer.src_base64:
            container = ft.Container(
                content=ft.Image(src_base64=layer.src_base64, fit=ft.ImageFit.FILL)
            )
            self._image_controls[layer.element_id] = container
        container.left = layer.x
        container.top = layer.y
        container.content.width = layer.width
        container.content.height = layer.height
        return container

    def _build_text_field(self, element: TextElement) -> ft.Container:
        """In-place editor for a text element."""
        transform = self._state.transform
        x, y, width, height = transform.rect_to_canvas(
            element.x, element.y, element.width, element.height
        )
        if self._text_field is None or self._text_field.data != element.id:
            self._text_field = ft.TextField(
                value=element.content,
                data=element.id,
                autofocus=True,
                multiline=True,
                border=ft.InputBorder.NONE,
                content_padding=0,
                on_change=lambda e: self._state.update_text(e.control.data, e.control.value),
                on_blur=lambda e: self._tools.end_text_edit(),
            )
        self._text_field.text_style = ft.TextStyle(
            size=transform.to_canvas(element.font_size),
            color=element.color,
            weight=ft.FontWeight.BOLD if element.bold else ft.FontWeight.NORMAL,
        )
        return ft.Container(
            content=self._text_field,
            left=x,
            top=y,
            width=width,
            height=height,
            border=ft.border.all(1, self._config.selection_color),
        )

    def _refresh(self):
        """Recompose the current page and update the controls that changed.

        Pointer moves only change the overlay. The backdrop, toolbar and
        thumbnails are rebuilt when their inputs change.
        """
        if self._page_stack is None:
            return

        state = self._state
        self._frame = self._compositor.compose(
            state, self._tools.transient, self._backdrops[state.current_page]
        )
        self._overlay.controls = self._build_overlay(self._frame)
        changed: List[ft.Control] = [self._overlay]

        view = (state.current_page, state.zoom)
        if view != self._view:
            self._view = view
            self._backdrop.src_base64 = self._frame.backdrop
            for control in (self._backdrop, self._overlay, self._page_stack):
                control.width = self._frame.width
                control.height = self._frame.height
            changed = [self._page_stack]

        selected = state.selected
        toolbar_key = (
            state.active_tool,
            state.selected_id,
            isinstance(selected, TextElement),
            self._tools.text_style,
            state.zoom,
        )
        if self._toolbar is not None and toolbar_key != self._toolbar_key:
            self._toolbar_key = toolbar_key
            self._toolbar.controls = self._build_toolbar()
            changed.append(self._toolbar)

        if self._thumbnails is not None and self._thumbnails_page != state.current_page:
            self._thumbnails.controls = self._build_thumbnails()
            self._thumbnails_page = state.current_page
            changed.append(self._thumbnails)

        for control in changed:
            if control.page:
                control.update()

    def _update_save_button(self):
        if self._save_button:
            self._save_button.disabled = self._saving
            self._save_button.text = "Saving..." if self._saving else "Apply changes"
            if self._save_button.page:
                self._save_button.update()

    def _report_error(self, message: str):
        logger.error(message)
        if self._on_error:
            self._on_error(message)
        elif self._wrapper and self._wrapper.page:
            self._wrapper.page.open(ft.SnackBar(ft.Text(message)))

    def _request_image(self):
        """Ask the user for an image file."""
        page = self._wrapper.page if self._wrapper else None
        if not page or not self._file_picker:
            return
        if self._file_picker not in page.overlay:
            page.overlay.append(self._file_picker)
            page.update()
        self._file_picker.pick_files(
            allow_multiple=False,
            file_type=ft.FilePickerFileType.CUSTOM,
            allowed_extensions=["png", "jpg", "jpeg"],
        )

    # Event handlers

    def _on_tap(self, e: ft.TapEvent):
        self._tools.tap(e.local_x, e.local_y)

    def _on_pan_start(self, e: ft.DragStartEvent):
        self._tools.pointer_down(e.local_x, e.local_y)

    def _on_pan_update(self, e: ft.DragUpdateEvent):
        self._tools.pointer_move(e.local_x, e.local_y)

    def _on_pan_end(self, e: ft.DragEndEvent):
        # Released wherever the pointer is, even off-canvas
        self._tools.pointer_up()

    def _on_font_size_submit(self, e):
        try:
            size = float(e.control.value)
        except (TypeError, ValueError):
            size = self._config.text_style.font_size
        self._tools.set_text_style(font_size=max(8.0, min(72.0, size)))

    def _on_file_picked(self, e: ft.FilePickerResultEvent):
        if not e.files or not e.files[0].path:
            self._tools.select_tool(Tool.SELECT)
            return
        try:
            data = Path(e.files[0].path).read_bytes()
        except OSError as err:
            self._tools.select_tool(Tool.SELECT)
            self._report_error(f"Cannot read image: {err}")
            return
        self.open_image(data)

    async def _on_save_click(self, e):
        if self._saving:
            return
        try:
            await self.save()
        except (ExportError, SaveInProgressError):
            # Already reported; the user retries by saving again
            pass
