"""
==============================================================================
Frame Preparation Module
==============================================================================

Turns a raw sensor plane into the buffer handed to the decoder.

Pipeline:
---------
1. Build the full luminance buffer in sensor (landscape) layout
2. Rotate into portrait orientation
3. Crop to the centered scan window
4. Fall back to the full rotated buffer if the crop is not possible

The scan window is sized from the portrait WIDTH for both dimensions:

    crop_width  = int(portrait_width * width_ratio)
    crop_height = int(portrait_width * height_ratio)
    crop_left   = (portrait_width  - crop_width)  // 2
    crop_top    = (portrait_height - crop_height) // 2

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional

from frame_decoder.config import Settings, get_settings
from frame_decoder.core import AppException

from .luminance import CropRegion, LuminanceBuffer, RawFrame
from .transforms import crop, rotate_clockwise_90, rotate_plane_clockwise


# Module logger
logger = logging.getLogger(__name__)


def compute_scan_region(
    portrait_width: int,
    portrait_height: int,
    width_ratio: float = 0.85,
    height_ratio: float = 0.50
) -> CropRegion:
    """
    Centered scan window for a portrait buffer.

    Args:
        portrait_width: Width of the rotated buffer
        portrait_height: Height of the rotated buffer
        width_ratio: Window width as a fraction of portrait width
        height_ratio: Window height as a fraction of portrait width

    Returns:
        CropRegion, which may not fit tiny or unusual frames

    Example:
        >>> compute_scan_region(480, 640)
        CropRegion(left=36, top=200, width=408, height=240)
    """
    crop_width = int(portrait_width * width_ratio)
    crop_height = int(portrait_width * height_ratio)

    return CropRegion(
        left=(portrait_width - crop_width) // 2,
        top=(portrait_height - crop_height) // 2,
        width=crop_width,
        height=crop_height,
    )


class FramePreparer:
    """
    Prepares raw frames for orientation-search decoding.

    Attributes:
        quarter_turns: Clockwise quarter turns from sensor to portrait
        crop_enabled: Whether the scan window crop is applied
        width_ratio: Scan window width ratio
        height_ratio: Scan window height ratio

    Example:
        >>> preparer = FramePreparer.from_settings(get_settings())
        >>> buffer = preparer.prepare(frame)
    """

    def __init__(
        self,
        quarter_turns: int = 1,
        crop_enabled: bool = True,
        width_ratio: float = 0.85,
        height_ratio: float = 0.50
    ) -> None:
        self.quarter_turns = quarter_turns % 4
        self.crop_enabled = crop_enabled
        self.width_ratio = width_ratio
        self.height_ratio = height_ratio

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "FramePreparer":
        """Create a preparer from application settings."""
        settings = settings or get_settings()
        return cls(
            quarter_turns=settings.sensor_quarter_turns,
            crop_enabled=settings.scan_crop_enabled,
            width_ratio=settings.scan_width_ratio,
            height_ratio=settings.scan_height_ratio,
        )

    # =========================================================================
    # PIPELINE STAGES
    # =========================================================================

    def build(self, frame: RawFrame) -> LuminanceBuffer:
        """Full-frame buffer in sensor layout."""
        return LuminanceBuffer.from_raw_frame(frame)

    def to_portrait(self, frame: RawFrame, buffer: LuminanceBuffer) -> LuminanceBuffer:
        """
        Rotate the sensor buffer into portrait orientation.

        Uses the per-pixel plane rotation when the buffer cannot be
        rotated by the transform engine.
        """
        if self.quarter_turns == 0:
            return buffer

        if buffer.rotate_supported:
            rotated = buffer
            for _ in range(self.quarter_turns):
                rotated = rotate_clockwise_90(rotated)
            return rotated

        logger.info("Buffer rotation unsupported, rotating plane manually")
        rotated = rotate_plane_clockwise(frame)
        for _ in range(self.quarter_turns - 1):
            rotated = rotate_plane_clockwise(
                RawFrame(rotated.to_bytes(), rotated.width, rotated.height, rotated.width)
            )
        return rotated

    def to_scan_window(self, portrait: LuminanceBuffer) -> LuminanceBuffer:
        """
        Crop the portrait buffer to the scan window.

        Returns the full portrait buffer when cropping is disabled,
        unsupported, or the window does not fit.
        """
        if not self.crop_enabled:
            return portrait

        region = compute_scan_region(
            portrait.width,
            portrait.height,
            self.width_ratio,
            self.height_ratio,
        )

        if not portrait.crop_supported or not region.fits(portrait.width, portrait.height):
            logger.debug(
                f"Scan window {region} not applicable to "
                f"{portrait.width}x{portrait.height}, using full frame"
            )
            return portrait

        try:
            return crop(portrait, region)
        except AppException as e:
            logger.warning(f"Crop failed ({e.code}), using full frame")
            return portrait

    def prepare(self, frame: RawFrame) -> LuminanceBuffer:
        """
        Run the full preparation pipeline.

        Args:
            frame: Raw sensor plane

        Returns:
            Buffer ready for decoding

        Raises:
            AppException: INVALID_DIMENSIONS when the frame is malformed
        """
        sensor = self.build(frame)
        portrait = self.to_portrait(frame, sensor)
        prepared = self.to_scan_window(portrait)

        logger.debug(
            f"Prepared {frame.width}x{frame.height} frame -> "
            f"{prepared.width}x{prepared.height}"
        )
        return prepared

    def prepare_buffer(self, buffer: LuminanceBuffer) -> LuminanceBuffer:
        """Rotate and crop an already built sensor buffer."""
        frame = RawFrame(buffer.to_bytes(), buffer.width, buffer.height, buffer.width)
        return self.to_scan_window(self.to_portrait(frame, buffer))
