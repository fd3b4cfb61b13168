"""
Image payload helpers.
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional, Union

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
JPEG_MAGIC = b"\xff\xd8\xff"


def decode_image_data(data: Union[bytes, str]) -> bytes:
    """Return raw image bytes from bytes, a ``data:`` URL or plain base64."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    payload = data.split(",", 1)[1] if data.startswith("data:") else data
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image payload: {e}") from e


def detect_image_type(data: bytes) -> Optional[str]:
    """Detect "png" or "jpeg" from magic bytes."""
    if data.startswith(PNG_MAGIC):
        return "png"
    if data.startswith(JPEG_MAGIC):
        return "jpeg"
    return None


def to_base64(data: Union[bytes, str]) -> str:
    """Base64 text for Flet ``src_base64``."""
    return base64.b64encode(decode_image_data(data)).decode("ascii")
