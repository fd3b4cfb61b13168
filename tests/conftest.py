"""
Shared fixtures: in-memory PDFs and images, and a recording backend.
"""

from typing import List, Optional, Tuple

import pymupdf
import pytest

from flet_pdf_editor.backends.base import DocumentBackend, PageBackend
from flet_pdf_editor.config import EditorConfig
from flet_pdf_editor.model import EditorState
from flet_pdf_editor.types import PageRaster

PAGE_SIZES = [(612.0, 792.0), (400.0, 600.0)]


@pytest.fixture
def two_page_pdf() -> bytes:
    """A letter page and a smaller second page."""
    doc = pymupdf.open()
    for width, height in PAGE_SIZES:
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), "Original content", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def png_bytes() -> bytes:
    pix = pymupdf.Pixmap(pymupdf.csRGB, pymupdf.IRect(0, 0, 40, 20), False)
    pix.clear_with(128)
    return pix.tobytes("png")


@pytest.fixture
def pages() -> List[PageRaster]:
    return [
        PageRaster(index=i, width=w, height=h, image=b"\x89PNG\r\n\x1a\n")
        for i, (w, h) in enumerate(PAGE_SIZES)
    ]


@pytest.fixture
def state(pages) -> EditorState:
    return EditorState(pages, EditorConfig(zoom=1.0))


class RecordingPage(PageBackend):
    """Page that records draw calls instead of drawing."""

    def __init__(self, doc: "RecordingDocument", index: int, width: float, height: float):
        self._doc = doc
        self._index = index
        self._width = width
        self._height = height

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def index(self) -> int:
        return self._index

    def rasterize(self, scale: float) -> bytes:
        if self._index in self._doc.fail_pages:
            raise RuntimeError("cannot render")
        self._doc.calls.append(("rasterize", self._index, scale))
        return b"\x89PNG\r\n\x1a\n"

    def draw_text(self, x, y, text, font, size, color=(0.0, 0.0, 0.0)) -> None:
        self._doc.calls.append(("text", self._index, x, y, text, font, size, color))

    def draw_rect(
        self, rect, fill_color=None, opacity=1.0, stroke_color=None, stroke_width=0.0
    ) -> None:
        if fill_color is not None:
            self._doc.calls.append(("fill", self._index, rect, fill_color, opacity))
        if stroke_color is not None and stroke_width > 0:
            self._doc.calls.append(("stroke", self._index, rect, stroke_color, stroke_width))

    def draw_image(self, rect, data) -> None:
        if self._doc.fail_images:
            raise RuntimeError("cannot decode image")
        self._doc.calls.append(("image", self._index, rect, len(data)))


class RecordingDocument(DocumentBackend):
    """Document backend double that records calls in ``calls``."""

    def __init__(self, sizes: Optional[List[Tuple[float, float]]] = None):
        self.calls: List[tuple] = []
        self.fail_images = False
        self.fail_save = False
        self.fail_pages: List[int] = []
        self.closed = False
        sizes = PAGE_SIZES if sizes is None else sizes
        self._pages = [RecordingPage(self, i, w, h) for i, (w, h) in enumerate(sizes)]

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def get_page(self, index: int) -> RecordingPage:
        return self._pages[index]

    def embed_font(self, family: str, bold: bool = False) -> str:
        self.calls.append(("font", family, bold))
        return f"{family}{'-bold' if bold else ''}"

    def to_bytes(self) -> bytes:
        if self.fail_save:
            raise RuntimeError("disk full")
        self.calls.append(("save",))
        return b"%PDF-recorded"

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_recording_doc():
    return RecordingDocument


@pytest.fixture
def recording_doc() -> RecordingDocument:
    return RecordingDocument()


@pytest.fixture
def opener(recording_doc):
    """Opener handing out ``recording_doc`` regardless of the source."""

    def open_document(source, password=None):
        return recording_doc

    return open_document


@pytest.fixture
def cropped_pdf() -> bytes:
    """A letter page cropped to its top 600 points."""
    doc = pymupdf.open()
    page = doc.new_page(width=612, height=792)
    page.set_cropbox(pymupdf.Rect(0, 0, 612, 600))
    data = doc.tobytes()
    doc.close()
    return data
