"""
==============================================================================
Scan Service Module
==============================================================================

Request boundary for frame decoding.

This module implements:
- ScanService: Turns scan requests into decoded payloads
- frame_from_request: Extracts the luminance plane from a request

Error Policy:
-------------
- Incomplete or malformed requests -> None (no result, no error)
- AppException (e.g. INVALID_DIMENSIONS) -> propagated unchanged
- Anything else -> AppException NATIVE_ERROR / NATIVE_ERROR_DEBUG carrying
  the message and stack trace

A new decode engine is created for every request, so concurrent requests
never share engine state.

==============================================================================
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Callable, Optional

from frame_decoder.config import Settings, get_settings
from frame_decoder.core import AppException, exceptions
from frame_decoder.scanner import (
    DebugPayload,
    DecodePrimitive,
    FramePreparer,
    OrientationSearchDecoder,
    PyzbarPrimitive,
    RawFrame,
    render_debug_jpeg,
)
from frame_decoder.schemas import ScanRequest


# Module logger
logger = logging.getLogger(__name__)


PrimitiveFactory = Callable[[], DecodePrimitive]


def frame_from_request(request: ScanRequest) -> Optional[RawFrame]:
    """
    Build a RawFrame from the first plane of a request.

    Args:
        request: Parsed scan request

    Returns:
        RawFrame, or None if a required field is missing or unreadable
    """
    if not request.planes or request.width is None or request.height is None:
        return None

    plane = request.planes[0]
    if plane.data is None or plane.bytes_per_row is None:
        return None

    try:
        # Line-wrapped (MIME style) encoders insert newlines
        data = base64.b64decode("".join(plane.data.split()), validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Luminance plane is not valid base64")
        return None

    return RawFrame(
        data=data,
        width=request.width,
        height=request.height,
        row_stride=plane.bytes_per_row,
    )


class ScanService:
    """
    Frame decode service.

    Attributes:
        _preparer: Rotate + crop pipeline
        _primitive_factory: Creates one decode engine per request
        _max_attempts: Orientation bound
        _jpeg_quality: Debug image quality

    Example:
        >>> service = ScanService.from_settings(get_settings())
        >>> service.scan_barcode(request)
        '5901234123457'
    """

    def __init__(
        self,
        preparer: FramePreparer,
        primitive_factory: PrimitiveFactory,
        max_attempts: int = 4,
        jpeg_quality: int = 90
    ) -> None:
        """
        Initialize scan service.

        Args:
            preparer: Frame preparation pipeline
            primitive_factory: Zero-argument callable returning a DecodePrimitive
            max_attempts: Orientations tried per frame
            jpeg_quality: Quality of debug JPEGs
        """
        self._preparer = preparer
        self._primitive_factory = primitive_factory
        self._max_attempts = max_attempts
        self._jpeg_quality = jpeg_quality

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        primitive_factory: Optional[PrimitiveFactory] = None
    ) -> "ScanService":
        """Create a service wired from application settings."""
        settings = settings or get_settings()

        if primitive_factory is None:
            def primitive_factory() -> DecodePrimitive:
                return PyzbarPrimitive.from_settings(settings)

        return cls(
            preparer=FramePreparer.from_settings(settings),
            primitive_factory=primitive_factory,
            max_attempts=settings.max_decode_attempts,
            jpeg_quality=settings.debug_jpeg_quality,
        )

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _decoder(self) -> OrientationSearchDecoder:
        return OrientationSearchDecoder(self._primitive_factory(), self._max_attempts)

    # =========================================================================
    # REQUEST HANDLERS
    # =========================================================================

    def scan_barcode(self, request: ScanRequest) -> Optional[str]:
        """
        Decode a barcode from a raw frame.

        Returns:
            Decoded text, or None when the request is incomplete or no
            orientation decodes

        Raises:
            AppException: INVALID_DIMENSIONS or NATIVE_ERROR
        """
        try:
            frame = frame_from_request(request)
            if frame is None:
                return None

            prepared = self._preparer.prepare(frame)
            text = self._decoder().decode(prepared)

            if text is not None:
                logger.info(f"✅ Decoded {len(text)} characters from {frame.width}x{frame.height} frame")
            return text

        except AppException:
            raise
        except Exception as e:
            logger.exception("❌ Scan failed")
            raise exceptions.native_error(e, "NATIVE_ERROR") from e

    def debug_scan(self, request: ScanRequest) -> Optional[DebugPayload]:
        """
        Decode a frame and render the buffer handed to the decoder.

        Returns:
            DebugPayload, or None when the request is incomplete

        Raises:
            AppException: INVALID_DIMENSIONS or NATIVE_ERROR_DEBUG
        """
        try:
            frame = frame_from_request(request)
            if frame is None:
                return None

            prepared = self._preparer.prepare(frame)
            text = self._decoder().decode(prepared)
            image = render_debug_jpeg(prepared, self._jpeg_quality)

            logger.info(
                f"🔍 Debug scan: {prepared.width}x{prepared.height} buffer, "
                f"result={'found' if text is not None else 'none'}"
            )
            return DebugPayload(decoded_text=text, image=image)

        except AppException:
            raise
        except Exception as e:
            logger.exception("❌ Debug scan failed")
            raise exceptions.native_error(e, "NATIVE_ERROR_DEBUG") from e
