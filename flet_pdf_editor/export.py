"""
Export - bakes overlay elements into a copy of the original PDF.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Sequence, Tuple

from .backends.base import DocumentBackend, PageBackend
from .backends.pymupdf import PyMuPDFBackend
from .colors import hex_to_rgb
from .errors import EditorError, ElementEmbedError, ExportError
from .images import decode_image_data, detect_image_type
from .transform import flip_y
from .types import (
    FONT_FAMILIES,
    SHAPE_KINDS,
    AnyElement,
    ElementKind,
    ImageElement,
    ShapeElement,
    TextElement,
)

logger = logging.getLogger(__name__)

FontTable = Dict[Tuple[str, bool], str]


class Exporter:
    """Draws elements onto the original document and serializes it.

    The source bytes are reopened on every export and never modified.
    Elements are drawn in sequence order, so later elements land on top.
    A broken image is skipped; anything that stops the document from
    opening or saving raises ``ExportError``.
    """

    def __init__(
        self,
        opener: Callable[..., DocumentBackend] = PyMuPDFBackend,
        password: Optional[str] = None,
    ):
        self._opener = opener
        self._password = password

    def export(self, source: bytes, elements: Sequence[AnyElement]) -> bytes:
        """Return new PDF bytes with ``elements`` drawn on their pages."""
        with self._session(source) as draw:
            for element in elements:
                draw(element)
            return draw.finish()

    async def export_async(self, source: bytes, elements: Sequence[AnyElement]) -> bytes:
        """Same as ``export`` but yields to the event loop between elements."""
        with self._session(source) as draw:
            for element in elements:
                draw(element)
                await asyncio.sleep(0)
            return draw.finish()

    @contextmanager
    def _session(self, source: bytes) -> Iterator["_Session"]:
        """Open ``source`` with fonts embedded; always closes the document."""
        document = self._open(source)
        try:
            yield _Session(self, document, self._embed_fonts(document))
        finally:
            document.close()

    def _open(self, source: bytes) -> DocumentBackend:
        try:
            return self._opener(source, password=self._password)
        except (EditorError, OSError, RuntimeError, TypeError, ValueError) as e:
            logger.error("Export aborted, cannot reopen source: %s", e)
            raise ExportError(f"Cannot reopen the original document: {e}") from e

    def _embed_fonts(self, document: DocumentBackend) -> FontTable:
        """One font per family and weight, embedded up front."""
        try:
            return {
                (family, bold): document.embed_font(family, bold)
                for family in FONT_FAMILIES
                for bold in (False, True)
            }
        except (RuntimeError, ValueError) as e:
            raise ExportError(f"Cannot embed fonts: {e}") from e

    def _serialize(self, document: DocumentBackend, count: int) -> bytes:
        try:
            data = document.to_bytes()
        except (RuntimeError, ValueError) as e:
            logger.error("Export aborted, cannot serialize: %s", e)
            raise ExportError(f"Cannot save the document: {e}") from e
        logger.info("Exported %d elements (%d bytes)", count, len(data))
        return data

    def _draw_element(
        self, document: DocumentBackend, fonts: FontTable, element: AnyElement
    ) -> None:
        if not 0 <= element.page < document.page_count:
            logger.warning(
                "Skipping %s: page %d out of range", element.id, element.page
            )
            return

        page = document.get_page(element.page)
        # The only top-left to bottom-left conversion in the editor
        y = flip_y(page.height, element.y, element.height)

        if element.kind == ElementKind.TEXT:
            self._draw_text(page, fonts, element, y)
        elif element.kind in SHAPE_KINDS:
            self._draw_shape(page, element, y)
        elif element.kind == ElementKind.IMAGE:
            try:
                self._draw_image(page, element, y)
            except ElementEmbedError as e:
                logger.exception("%s", e)

    def _draw_text(
        self, page: PageBackend, fonts: FontTable, element: TextElement, y: float
    ) -> None:
        if not element.content:
            return
        font = fonts.get((element.font_family, element.bold)) or fonts[
            ("helvetica", element.bold)
        ]
        # Text sits at the top of its box
        baseline = y + element.height - element.font_size
        page.draw_text(
            element.x,
            baseline,
            element.content,
            font=font,
            size=element.font_size,
            color=hex_to_rgb(element.color),
        )

    def _draw_shape(self, page: PageBackend, element: ShapeElement, y: float) -> None:
        rect = (element.x, y, element.width, element.height)
        page.draw_rect(
            rect,
            fill_color=hex_to_rgb(element.fill_color),
            opacity=element.opacity,
        )
        if element.stroke_width > 0 and element.stroke_color:
            page.draw_rect(
                rect,
                stroke_color=hex_to_rgb(element.stroke_color),
                stroke_width=element.stroke_width,
            )

    def _draw_image(self, page: PageBackend, element: ImageElement, y: float) -> None:
        try:
            data = decode_image_data(element.image_data)
        except ValueError as e:
            raise ElementEmbedError(element.id, str(e)) from e

        if detect_image_type(data) is None:
            raise ElementEmbedError(element.id, "not a PNG or JPEG image")

        try:
            page.draw_image((element.x, y, element.width, element.height), data)
        except (RuntimeError, ValueError) as e:
            raise ElementEmbedError(element.id, str(e)) from e


class _Session:
    """One open export document; call it once per element, then ``finish``."""

    def __init__(self, exporter: Exporter, document: DocumentBackend, fonts: FontTable):
        self._exporter = exporter
        self._document = document
        self._fonts = fonts
        self._count = 0

    def __call__(self, element: AnyElement) -> None:
        self._exporter._draw_element(self._document, self._fonts, element)
        self._count += 1

    def finish(self) -> bytes:
        return self._exporter._serialize(self._document, self._count)
