"""
PyMuPDF backend implementation.
"""

from __future__ import annotations

import io
import logging
import warnings
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

warnings.filterwarnings("ignore", message="builtin type Swig")

import pymupdf

from ..errors import LoadError  # noqa: E402
from ..types import Color, Rect  # noqa: E402
from .base import DocumentBackend, PageBackend  # noqa: E402

logger = logging.getLogger(__name__)

# Base-14 font names, one per family and weight
STANDARD_FONTS: Dict[Tuple[str, bool], str] = {
    ("helvetica", False): "helv",
    ("helvetica", True): "hebo",
    ("times", False): "tiro",
    ("times", True): "tibo",
    ("courier", False): "cour",
    ("courier", True): "cobo",
}


def image_size(data: bytes) -> Tuple[int, int]:
    """Natural (width, height) in pixels of PNG or JPEG bytes."""
    try:
        pix = pymupdf.Pixmap(data)
    except (RuntimeError, ValueError, TypeError) as e:
        raise ValueError(f"Unreadable image: {e}") from e
    return (pix.width, pix.height)


class PyMuPDFPage(PageBackend):
    """PyMuPDF page implementation."""

    def __init__(self, doc: "PyMuPDFBackend", page: pymupdf.Page, index: int):
        self._doc = doc
        self._page = page
        self._index = index

    @property
    def width(self) -> float:
        return self._page.rect.width

    @property
    def height(self) -> float:
        return self._page.rect.height

    @property
    def index(self) -> int:
        return self._index

    def _to_page_point(self, x: float, y: float) -> pymupdf.Point:
        """Bottom-left coordinates of the visible page to MuPDF page space.

        Measured against ``page.rect`` (the rotated CropBox), the same box the
        rasterizer renders, then derotated for the drawing methods.
        """
        return pymupdf.Point(x, self.height - y) * self._page.derotation_matrix

    def _to_page_rect(self, rect: Rect) -> pymupdf.Rect:
        x, y, width, height = rect
        top = self.height - y - height
        page_rect = pymupdf.Rect(x, top, x + width, top + height)
        return page_rect * self._page.derotation_matrix

    def rasterize(self, scale: float) -> bytes:
        pix = self._page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
        return pix.tobytes("png")

    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        font: str,
        size: float,
        color: Color = (0.0, 0.0, 0.0),
    ) -> None:
        self._page.insert_text(
            self._to_page_point(x, y),
            text,
            fontsize=size,
            fontname=font,
            color=color,
            rotate=self._page.rotation,
            overlay=True,
        )

    def draw_rect(
        self,
        rect: Rect,
        fill_color: Optional[Color] = None,
        opacity: float = 1.0,
        stroke_color: Optional[Color] = None,
        stroke_width: float = 0.0,
    ) -> None:
        page_rect = self._to_page_rect(rect)
        if fill_color is not None:
            self._page.draw_rect(
                page_rect,
                color=None,
                fill=fill_color,
                fill_opacity=opacity,
                width=0,
                overlay=True,
            )
        if stroke_color is not None and stroke_width > 0:
            self._page.draw_rect(
                page_rect,
                color=stroke_color,
                fill=None,
                width=stroke_width,
                overlay=True,
            )

    def draw_image(self, rect: Rect, data: bytes) -> None:
        self._page.insert_image(
            self._to_page_rect(rect),
            stream=data,
            keep_proportion=False,
            overlay=True,
        )


class PyMuPDFBackend(DocumentBackend):
    """PyMuPDF document backend.

    Encrypted documents open when ``password`` (or an empty user password)
    unlocks them.
    """

    def __init__(
        self,
        source: Union[str, Path, bytes, io.BytesIO],
        password: Optional[str] = None,
    ):
        try:
            if isinstance(source, (str, Path)):
                self._doc = pymupdf.open(str(source))
            elif isinstance(source, (bytes, bytearray)):
                self._doc = pymupdf.open(stream=bytes(source), filetype="pdf")
            elif isinstance(source, io.BytesIO):
                self._doc = pymupdf.open(stream=source.getvalue(), filetype="pdf")
            else:
                raise TypeError(f"Unsupported source type: {type(source)}")
        except (OSError, RuntimeError, ValueError) as e:
            raise LoadError(f"Cannot open document: {e}") from e

        # Handle encrypted documents
        if self._doc.needs_pass:
            if not self._doc.authenticate(password or ""):
                self._doc.close()
                raise LoadError("Document is encrypted and the password is missing or invalid")

        self._pages: Dict[int, PyMuPDFPage] = {}
        self._fonts: Dict[Tuple[str, bool], str] = {}
        logger.debug("Opened document with %d pages", len(self._doc))

    @property
    def page_count(self) -> int:
        return len(self._doc)

    @property
    def is_encrypted(self) -> bool:
        """Whether the document has encryption."""
        return self._doc.is_encrypted

    def get_page(self, index: int) -> PyMuPDFPage:
        if index in self._pages:
            return self._pages[index]

        if index < 0 or index >= len(self._doc):
            raise IndexError(f"Page index {index} out of range")

        page = self._doc[index]
        pdf_page = PyMuPDFPage(self, page, index)
        self._pages[index] = pdf_page
        return pdf_page

    def embed_font(self, family: str, bold: bool = False) -> str:
        key = (family, bold)
        if key not in STANDARD_FONTS:
            key = ("helvetica", bold)
        if key not in self._fonts:
            self._fonts[key] = STANDARD_FONTS[key]
        return self._fonts[key]

    def to_bytes(self) -> bytes:
        return self._doc.tobytes(garbage=1, deflate=True)

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()
        self._pages.clear()
