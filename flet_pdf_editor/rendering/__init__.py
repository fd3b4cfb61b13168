"""
Rendering - page backdrops and the element compositor.
"""

from .compositor import Compositor, Frame
from .rasterizer import load_pages, rasterize_document

__all__ = ["Compositor", "Frame", "load_pages", "rasterize_document"]
