"""
==============================================================================
Debug Visualizer Module
==============================================================================

Renders luminance buffers as JPEG images for diagnostics.

Only used by debug requests; never part of the normal decode path.

==============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import cv2

from .luminance import LuminanceBuffer


DEFAULT_JPEG_QUALITY = 90


@dataclass(frozen=True)
class DebugPayload:
    """Decode outcome plus the image the decoder was given."""

    decoded_text: Optional[str]
    image: bytes


def render_debug_jpeg(buffer: LuminanceBuffer, quality: int = DEFAULT_JPEG_QUALITY) -> bytes:
    """
    Encode a buffer as a grayscale-as-RGB JPEG.

    Args:
        buffer: Image to render
        quality: JPEG quality (1-100)

    Returns:
        JPEG bytes

    Raises:
        RuntimeError: If OpenCV fails to encode the image
    """
    # Same luminance in every channel
    bgr = cv2.cvtColor(buffer.pixels, cv2.COLOR_GRAY2BGR)

    ok, encoded = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        raise RuntimeError(
            f"JPEG encoding failed for {buffer.width}x{buffer.height} buffer"
        )
    return encoded.tobytes()
