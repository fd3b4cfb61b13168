"""
Shared data types for the PDF editor.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class Tool(Enum):
    """Editor tools."""

    SELECT = "select"
    TEXT = "text"
    IMAGE = "image"
    RECTANGLE = "rectangle"
    HIGHLIGHT = "highlight"
    WHITEOUT = "whiteout"


class ElementKind(Enum):
    """Overlay element kinds."""

    TEXT = "text"
    IMAGE = "image"
    RECTANGLE = "rectangle"
    HIGHLIGHT = "highlight"
    WHITEOUT = "whiteout"


SHAPE_KINDS = (ElementKind.RECTANGLE, ElementKind.HIGHLIGHT, ElementKind.WHITEOUT)

# Tools that create shapes with a draw-gesture
SHAPE_TOOLS = {
    Tool.RECTANGLE: ElementKind.RECTANGLE,
    Tool.HIGHLIGHT: ElementKind.HIGHLIGHT,
    Tool.WHITEOUT: ElementKind.WHITEOUT,
}


class Handle(Enum):
    """Resize handles, one per corner."""

    NW = "nw"
    NE = "ne"
    SW = "sw"
    SE = "se"


FONT_FAMILIES = ("helvetica", "times", "courier")


@dataclass
class PageRaster:
    """A rasterized page used as the editing backdrop."""

    index: int
    width: float  # Native width in points
    height: float  # Native height in points
    image: bytes  # PNG bytes rendered at the raster scale


@dataclass
class TextStyle:
    """Style options for text elements."""

    font_size: float = 14.0
    font_family: str = "helvetica"
    color: str = "#000000"
    bold: bool = False


@dataclass
class ShapeStyle:
    """Style options for rectangle-family elements."""

    fill_color: str = "#FFFF00"
    stroke_color: Optional[str] = "#000000"
    stroke_width: float = 2.0
    opacity: float = 0.5


HIGHLIGHT_STYLE = ShapeStyle(
    fill_color="#FFFF00", stroke_color=None, stroke_width=0.0, opacity=0.4
)
WHITEOUT_STYLE = ShapeStyle(
    fill_color="#FFFFFF", stroke_color=None, stroke_width=0.0, opacity=1.0
)


@dataclass
class Element:
    """Geometry shared by every overlay element.

    Bounds are stored in document units with a top-left origin, the same
    convention as the canvas. The vertical flip happens only at export.
    """

    id: str
    page: int
    x: float
    y: float
    width: float
    height: float

    @property
    def rect(self) -> Tuple[float, float, float, float]:
        """Bounds as (x0, y0, x1, y1)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def contains(self, x: float, y: float) -> bool:
        """Whether a document-space point falls inside the element."""
        x0, y0, x1, y1 = self.rect
        return x0 <= x <= x1 and y0 <= y <= y1


@dataclass
class TextElement(Element):
    """A run of text."""

    content: str = ""
    font_size: float = 14.0
    font_family: str = "helvetica"
    color: str = "#000000"
    bold: bool = False
    kind: ElementKind = field(default=ElementKind.TEXT, init=False)


@dataclass
class ImageElement(Element):
    """An embedded raster image (PNG or JPEG bytes, or a data URL)."""

    image_data: Union[bytes, str] = b""
    kind: ElementKind = field(default=ElementKind.IMAGE, init=False)


@dataclass
class ShapeElement(Element):
    """A rectangle, highlight or whiteout box."""

    kind: ElementKind = ElementKind.RECTANGLE
    fill_color: str = "#FFFF00"
    stroke_color: Optional[str] = "#000000"
    stroke_width: float = 2.0
    opacity: float = 0.5


AnyElement = Union[TextElement, ImageElement, ShapeElement]

# Type aliases for clarity
Color = Tuple[float, float, float]
Rect = Tuple[float, float, float, float]
Point = Tuple[float, float]
