"""
==============================================================================
ZBar Engine Tests
==============================================================================

Tests against the real pyzbar engine. Skipped when libzbar is missing.

==============================================================================
"""

import cv2
import numpy as np
import pytest

# pyzbar raises a plain ImportError when libzbar is missing
pytest.importorskip("pyzbar.pyzbar", exc_type=ImportError)

from frame_decoder.config.settings import DEFAULT_SYMBOLOGIES
from frame_decoder.scanner import (
    BarcodeNotFound,
    FramePreparer,
    LuminanceBuffer,
    OrientationSearchDecoder,
    PyzbarPrimitive,
    RawFrame,
)


SYMBOLOGIES = DEFAULT_SYMBOLOGIES.split(",")

requires_qr_encoder = pytest.mark.skipif(
    not hasattr(cv2, "QRCodeEncoder"), reason="OpenCV built without QR encoder"
)


def qr_image(text: str, module_px: int = 6) -> np.ndarray:
    """Grayscale QR code with a white quiet zone."""
    code = cv2.QRCodeEncoder.create().encode(text)
    if code.ndim == 3:
        code = cv2.cvtColor(code, cv2.COLOR_BGR2GRAY)
    code = cv2.resize(code, None, fx=module_px, fy=module_px, interpolation=cv2.INTER_NEAREST)
    border = 4 * module_px
    return cv2.copyMakeBorder(code, border, border, border, border, cv2.BORDER_CONSTANT, value=255)


class TestPyzbarPrimitive:
    """Tests for the ZBar adapter."""

    def test_blank_image_not_found(self):
        engine = PyzbarPrimitive(SYMBOLOGIES)
        with pytest.raises(BarcodeNotFound):
            engine.decode(LuminanceBuffer(np.full((120, 160), 255, dtype=np.uint8)))

    def test_unknown_symbology_rejected(self):
        with pytest.raises(ValueError, match="Unknown ZBar symbology"):
            PyzbarPrimitive(["NOT_A_CODE"])

    def test_reset_clears_attempt_state(self):
        engine = PyzbarPrimitive(SYMBOLOGIES)
        engine.last_symbols = ["stale"]
        engine.reset()
        assert engine.last_symbols == []

    @requires_qr_encoder
    def test_decodes_qr_code(self):
        engine = PyzbarPrimitive(SYMBOLOGIES)
        assert engine.decode(LuminanceBuffer(qr_image("hello-frame"))) == "hello-frame"

    @requires_qr_encoder
    def test_qr_disabled_by_symbology_set(self):
        engine = PyzbarPrimitive(["EAN13"], try_harder=False)
        with pytest.raises(BarcodeNotFound):
            engine.decode(LuminanceBuffer(qr_image("hello-frame")))


class TestEndToEnd:
    """Full preparation + orientation search with ZBar."""

    @requires_qr_encoder
    def test_qr_centered_in_sensor_frame(self):
        code = qr_image("SKU-000123", module_px=5)
        frame_pixels = np.full((480, 640), 255, dtype=np.uint8)
        h, w = code.shape
        top, left = (480 - h) // 2, (640 - w) // 2
        frame_pixels[top:top + h, left:left + w] = code

        frame = RawFrame(frame_pixels.tobytes(), width=640, height=480, row_stride=640)
        prepared = FramePreparer().prepare(frame)
        decoder = OrientationSearchDecoder(PyzbarPrimitive(SYMBOLOGIES))

        assert decoder.decode(prepared) == "SKU-000123"
