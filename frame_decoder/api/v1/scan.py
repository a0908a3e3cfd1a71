"""
==============================================================================
Scan Endpoints
==============================================================================

Decode barcodes from raw camera frames.

Endpoints:
----------
- POST /scan        decoded payload or null
- POST /scan/debug  decoded payload plus a JPEG of the decoded buffer

Routes are synchronous; FastAPI runs them in its worker threadpool.

==============================================================================
"""

import base64
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends

from frame_decoder.core.dependencies import get_scan_service
from frame_decoder.schemas import DebugScanResponse, ScanRequest, ScanResponse
from frame_decoder.services import ScanService


router = APIRouter(prefix="/scan", tags=["Scan"])


class ScanController:
    """Controller for scan operations."""

    def __init__(self, service: ScanService):
        self._service = service

    def scan(self, request: Optional[ScanRequest]) -> ScanResponse:
        """Decode a single frame."""
        if request is None:
            return ScanResponse()
        return ScanResponse(result=self._service.scan_barcode(request))

    def debug_scan(self, request: Optional[ScanRequest]) -> DebugScanResponse:
        """Decode a single frame and attach the debug image."""
        if request is None:
            return DebugScanResponse()

        payload = self._service.debug_scan(request)
        if payload is None:
            return DebugScanResponse()

        return DebugScanResponse(
            result=payload.decoded_text,
            image=base64.b64encode(payload.image).decode("ascii"),
        )


@router.post("", response_model=ScanResponse)
def scan_barcode(
    payload: Any = Body(default=None),
    service: ScanService = Depends(get_scan_service)
):
    """
    Decode a barcode from the luminance plane of a camera frame.

    The body follows `ScanRequest`. Returns `result: null` when the body is
    incomplete or badly typed, or when no barcode is found in any
    orientation.
    """
    return ScanController(service).scan(ScanRequest.from_payload(payload))


@router.post("/debug", response_model=DebugScanResponse)
def debug_scan(
    payload: Any = Body(default=None),
    service: ScanService = Depends(get_scan_service)
):
    """
    Decode a frame and return the prepared buffer as a base64 JPEG.

    Incomplete or badly typed bodies return nulls for both fields.
    """
    return ScanController(service).debug_scan(ScanRequest.from_payload(payload))
