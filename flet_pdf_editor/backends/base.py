"""
Abstract backend protocol for PDF documents.

Backends must implement these protocols to work with the editor. Drawing
primitives take PDF-native coordinates: bottom-left origin, points,
unscaled.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..types import Color, Rect


class PageBackend(ABC):
    """Abstract interface for a PDF page."""

    @property
    @abstractmethod
    def width(self) -> float:
        """Page width in points."""
        ...

    @property
    @abstractmethod
    def height(self) -> float:
        """Page height in points."""
        ...

    @property
    @abstractmethod
    def index(self) -> int:
        """Page index (0-based)."""
        ...

    @abstractmethod
    def rasterize(self, scale: float) -> bytes:
        """Render the page to PNG bytes at the given scale."""
        ...

    @abstractmethod
    def draw_text(
        self,
        x: float,
        y: float,
        text: str,
        font: str,
        size: float,
        color: Color = (0.0, 0.0, 0.0),
    ) -> None:
        """Draw a text run with its baseline starting at (x, y).

        Args:
            x: Baseline start x
            y: Baseline y (bottom-left origin)
            text: The string to draw
            font: Font handle from ``DocumentBackend.embed_font``
            size: Font size in points
            color: Text color RGB tuple (0-1 range)
        """
        ...

    @abstractmethod
    def draw_rect(
        self,
        rect: Rect,
        fill_color: Optional[Color] = None,
        opacity: float = 1.0,
        stroke_color: Optional[Color] = None,
        stroke_width: float = 0.0,
    ) -> None:
        """Draw a rectangle.

        Args:
            rect: (x, y, width, height) with a bottom-left origin
            fill_color: Fill color (None for no fill)
            opacity: Fill opacity (0-1)
            stroke_color: Border color (None for no border)
            stroke_width: Border width
        """
        ...

    @abstractmethod
    def draw_image(self, rect: Rect, data: bytes) -> None:
        """Draw PNG or JPEG bytes scaled to fill rect (x, y, width, height)."""
        ...


class DocumentBackend(ABC):
    """Abstract interface for a PDF document."""

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages in the document."""
        ...

    @abstractmethod
    def get_page(self, index: int) -> PageBackend:
        """Get a page by index."""
        ...

    @abstractmethod
    def embed_font(self, family: str, bold: bool = False) -> str:
        """Make a standard font available and return its handle."""
        ...

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Serialize the document."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close and release resources."""
        ...

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
