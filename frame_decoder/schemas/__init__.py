"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Scan: Frame decode request/response schemas

==============================================================================
"""

from .common import SuccessResponse
from .scan import PlaneSchema, ScanRequest, ScanResponse, DebugScanResponse

__all__ = [
    # Common
    "SuccessResponse",
    # Scan
    "PlaneSchema",
    "ScanRequest",
    "ScanResponse",
    "DebugScanResponse",
]
