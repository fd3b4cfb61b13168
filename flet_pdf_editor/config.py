"""
Editor configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from .types import ShapeStyle, TextStyle


@dataclass
class EditorConfig:
    """Tunable editor defaults.

    Sizes are in document units unless noted otherwise.
    """

    zoom: float = 0.8
    min_zoom: float = 0.3
    max_zoom: float = 2.0
    zoom_step: float = 0.1
    # Supersampling factor for page backdrops
    raster_scale: float = 2.0
    # Handle square size in canvas pixels
    handle_size: float = 10.0
    min_resize: float = 20.0
    min_draw_size: float = 5.0
    max_image_size: float = 300.0
    image_origin: Tuple[float, float] = (50.0, 50.0)
    text_box: Tuple[float, float] = (200.0, 30.0)
    default_text: str = "New text"
    text_style: TextStyle = field(default_factory=TextStyle)
    shape_style: ShapeStyle = field(default_factory=ShapeStyle)
    selection_color: str = "#08CF65"
    bgcolor: str = "#ffffff"

    def clamp_zoom(self, value: float) -> float:
        """Clamp a zoom factor to the configured range."""
        return round(max(self.min_zoom, min(self.max_zoom, value)), 4)
