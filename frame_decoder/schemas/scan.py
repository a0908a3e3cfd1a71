"""
==============================================================================
Scan Schemas Module
==============================================================================

Request and response schemas for frame decode operations.

Request Shape:
--------------
    {
        "planes": [{"bytes": "<base64 Y plane>", "bytesPerRow": 640}, ...],
        "width": 640,
        "height": 480
    }

Only the first plane (luminance) is read. Every field is optional, and
routes parse the raw body through ScanRequest.from_payload: incomplete or
badly typed requests produce a null result, not a 422.

==============================================================================
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .common import SuccessResponse


class PlaneSchema(BaseModel):
    """One image plane as sent by the camera client."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    data: Optional[str] = Field(
        default=None,
        alias="bytes",
        description="Base64 plane data"
    )
    bytes_per_row: Optional[int] = Field(
        default=None,
        alias="bytesPerRow",
        description="Row stride in bytes"
    )


class ScanRequest(BaseModel):
    """Raw camera frame to decode."""

    model_config = ConfigDict(extra="ignore")

    planes: Optional[List[PlaneSchema]] = None
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["ScanRequest"]:
        """
        Parse a raw JSON payload.

        Returns None for anything that is not an object or has badly typed
        fields, so malformed calls end in a null result instead of a 422.
        """
        if not isinstance(payload, dict):
            return None
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return None


class ScanResponse(SuccessResponse):
    """Decoded payload, null when nothing was found."""

    result: Optional[str] = None


class DebugScanResponse(SuccessResponse):
    """Decoded payload plus a JPEG of the buffer that was decoded."""

    result: Optional[str] = None
    image: Optional[str] = Field(default=None, description="Base64 JPEG")
