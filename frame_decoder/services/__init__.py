"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes sitting between the transports and the scanner package.

    ┌──────────────────────┐
    │ REST / WebSocket     │
    └──────────┬───────────┘
               │
    ┌──────────▼───────────┐
    │    ScanService       │  ← Request boundary, error policy
    └──────────┬───────────┘
               │
    ┌──────────▼───────────┐
    │  Scanner pipeline    │  ← Prepare, orientation search, debug render
    └──────────────────────┘

Usage:
------
    from frame_decoder.services import ScanService

    service = ScanService.from_settings()
    text = service.scan_barcode(request)

==============================================================================
"""

from .scan_service import ScanService, frame_from_request

__all__ = [
    "ScanService",
    "frame_from_request",
]
