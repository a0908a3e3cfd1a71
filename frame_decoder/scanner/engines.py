"""
==============================================================================
Decode Engine Adapters
==============================================================================

DecodePrimitive implementations backed by real barcode libraries.

Engines:
--------
- PyzbarPrimitive: ZBar via pyzbar, restricted to a symbology set, with an
  optional Otsu-binarized second pass ("try harder")

pyzbar loads the native zbar library at import time, so it is imported
when an engine is constructed rather than when this module is loaded.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import cv2
import numpy as np

from frame_decoder.config import Settings, get_settings

from .decoder import BarcodeNotFound, DecodeFailure, DecodePrimitive
from .luminance import LuminanceBuffer


# Module logger
logger = logging.getLogger(__name__)


def binarize(pixels: np.ndarray) -> np.ndarray:
    """Otsu threshold of a grayscale image."""
    _, thresh = cv2.threshold(pixels, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    return thresh


class PyzbarPrimitive(DecodePrimitive):
    """
    ZBar decode engine.

    Attributes:
        symbols: ZBarSymbol members the scanner looks for
        try_harder: Run a binarized second pass on a miss
        last_symbols: Symbols seen by the current attempt (cleared by reset)

    Example:
        >>> engine = PyzbarPrimitive(["EAN13", "QRCODE"])
        >>> engine.decode(buffer)
        '5901234123457'
    """

    def __init__(self, symbologies: Sequence[str], try_harder: bool = True) -> None:
        from pyzbar import pyzbar

        self._pyzbar = pyzbar
        self.symbols = self._resolve_symbols(symbologies)
        self.try_harder = try_harder
        self.last_symbols: List[object] = []

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PyzbarPrimitive":
        """Create an engine from application settings."""
        settings = settings or get_settings()
        return cls(settings.symbology_list, try_harder=settings.decoder_try_harder)

    def _resolve_symbols(self, names: Sequence[str]) -> list:
        symbols = []
        for name in names:
            try:
                symbols.append(self._pyzbar.ZBarSymbol[name.upper()])
            except KeyError:
                raise ValueError(f"Unknown ZBar symbology: {name}") from None
        return symbols

    def _scan(self, pixels: np.ndarray) -> list:
        height, width = pixels.shape
        try:
            return self._pyzbar.decode(
                (np.ascontiguousarray(pixels).tobytes(), width, height),
                symbols=self.symbols,
            )
        except self._pyzbar.PyZbarError as e:
            raise DecodeFailure(f"zbar error: {e}") from e

    def decode(self, buffer: LuminanceBuffer) -> str:
        self.last_symbols = self._scan(buffer.pixels)

        if not self.last_symbols and self.try_harder:
            self.last_symbols = self._scan(binarize(buffer.pixels))

        if not self.last_symbols:
            raise BarcodeNotFound("no symbol in image")

        symbol = self.last_symbols[0]
        try:
            text = symbol.data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeFailure(f"{symbol.type} payload is not UTF-8") from e

        logger.debug(f"ZBar found {symbol.type}: {text}")
        return text

    def reset(self) -> None:
        self.last_symbols = []
