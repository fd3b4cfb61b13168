"""
Flet PDF Editor

A pure Python PDF overlay editor built with Flet Canvas and PyMuPDF.

Usage:
    import flet as ft
    from flet_pdf_editor import PdfEditor

    def main(page: ft.Page):
        def upload(data: bytes):
            ...

        editor = PdfEditor("/path/to/file.pdf", on_save=upload)
        page.on_keyboard_event = editor.on_keyboard_event
        page.add(editor.control)

    ft.app(main)
"""

from __future__ import annotations

from .config import EditorConfig
from .editor import PdfEditor
from .errors import (
    EditorError,
    ElementEmbedError,
    ExportError,
    LoadError,
    SaveInProgressError,
)
from .export import Exporter
from .interactions.tools import ToolStateMachine
from .model import EditorState
from .rendering.compositor import Compositor, Frame
from .rendering.rasterizer import load_pages, rasterize_document
from .transform import CoordinateTransform, flip_y
from .types import (
    ElementKind,
    ImageElement,
    PageRaster,
    ShapeElement,
    ShapeStyle,
    TextElement,
    TextStyle,
    Tool,
)

__version__ = "0.1.0"

__all__ = [
    "PdfEditor",
    "EditorConfig",
    "EditorState",
    "ToolStateMachine",
    "Compositor",
    "Frame",
    "Exporter",
    "CoordinateTransform",
    "flip_y",
    "load_pages",
    "rasterize_document",
    "Tool",
    "ElementKind",
    "PageRaster",
    "TextElement",
    "ImageElement",
    "ShapeElement",
    "TextStyle",
    "ShapeStyle",
    "EditorError",
    "LoadError",
    "ExportError",
    "ElementEmbedError",
    "SaveInProgressError",
    "__version__",
]
