"""
==============================================================================
WebSocket Package
==============================================================================

Real-time WebSocket handlers for barcode decoding.

Handlers:
---------
- scanner: Method-channel decoding (scanBarcode / debugScanAndGetImage)

==============================================================================
"""

from .scanner import router as scanner_router

__all__ = ["scanner_router"]
