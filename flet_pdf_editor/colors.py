"""
Color conversions between the editor's hex strings and PDF's 0-1 channels.
"""

from __future__ import annotations

import re
from typing import Optional

from .types import Color

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


def hex_to_rgb(value: Optional[str]) -> Color:
    """Convert "#rrggbb" to an (r, g, b) tuple in the 0-1 range.

    Malformed values fall back to black.
    """
    match = _HEX_RE.match(value or "")
    if not match:
        return (0.0, 0.0, 0.0)
    r, g, b = (int(part, 16) / 255 for part in match.groups())
    return (r, g, b)


def rgb_to_hex(color: Color) -> str:
    """Convert an (r, g, b) tuple in the 0-1 range to "#rrggbb"."""
    r, g, b = [int(round(c * 255)) for c in color]
    return f"#{r:02x}{g:02x}{b:02x}"
