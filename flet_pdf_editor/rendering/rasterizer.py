"""
Page rasterizer - renders source pages to backdrop images.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..backends.base import DocumentBackend
from ..backends.pymupdf import PyMuPDFBackend
from ..errors import LoadError
from ..types import PageRaster

logger = logging.getLogger(__name__)


def rasterize_document(document: DocumentBackend, scale: float = 2.0) -> List[PageRaster]:
    """Render every page at ``scale`` and record its native size.

    Any page that fails to render aborts the load: there is no partial
    editor.
    """
    if document.page_count == 0:
        raise LoadError("Document has no pages")

    pages = []
    for index in range(document.page_count):
        page = document.get_page(index)
        try:
            image = page.rasterize(scale)
        except (RuntimeError, ValueError) as e:
            raise LoadError(f"Cannot render page {index + 1}: {e}") from e
        pages.append(
            PageRaster(index=index, width=page.width, height=page.height, image=image)
        )

    logger.info("Rasterized %d pages at %.1fx", len(pages), scale)
    return pages


def load_pages(
    source,
    scale: float = 2.0,
    opener: Optional[Callable[..., DocumentBackend]] = None,
) -> List[PageRaster]:
    """Open ``source`` and rasterize it, closing the document afterwards."""
    opener = opener or PyMuPDFBackend
    with opener(source) as document:
        return rasterize_document(document, scale)
