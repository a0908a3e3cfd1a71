"""
==============================================================================
Scanner Package - Frame Preparation and Decoding
==============================================================================

Luminance buffers, geometric transforms, scan-window preparation and the
orientation-search decode loop, with OpenCV, numpy and pyzbar.

Classes:
--------
- RawFrame, LuminanceBuffer, CropRegion: Image containers
- FramePreparer: Rotate + crop pipeline
- OrientationSearchDecoder: Four-orientation decode loop
- DecodePrimitive: Engine contract
- PyzbarPrimitive: ZBar engine

==============================================================================
"""

from .luminance import CropRegion, LuminanceBuffer, RawFrame
from .transforms import (
    crop,
    rotate_clockwise_90,
    rotate_counter_clockwise_90,
    rotate_plane_clockwise,
)
from .preparation import FramePreparer, compute_scan_region
from .decoder import (
    BarcodeNotFound,
    DecodeAttemptResult,
    DecodeFailure,
    DecodePrimitive,
    NotFound,
    OrientationSearchDecoder,
    SearchTrace,
    Success,
    TransientError,
)
from .engines import PyzbarPrimitive
from .debug import DebugPayload, render_debug_jpeg

__all__ = [
    "RawFrame",
    "LuminanceBuffer",
    "CropRegion",
    "crop",
    "rotate_clockwise_90",
    "rotate_counter_clockwise_90",
    "rotate_plane_clockwise",
    "FramePreparer",
    "compute_scan_region",
    "BarcodeNotFound",
    "DecodeAttemptResult",
    "DecodeFailure",
    "DecodePrimitive",
    "NotFound",
    "OrientationSearchDecoder",
    "SearchTrace",
    "Success",
    "TransientError",
    "PyzbarPrimitive",
    "DebugPayload",
    "render_debug_jpeg",
]
