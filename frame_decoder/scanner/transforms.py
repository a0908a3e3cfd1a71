"""
==============================================================================
Geometric Transform Module
==============================================================================

Pure functions producing new LuminanceBuffers.

Transforms:
-----------
- rotate_clockwise_90: (x, y) -> (h - 1 - y, x)
- rotate_counter_clockwise_90: inverse of the clockwise rotation
- crop: sub-rectangle copy with bounds validation
- rotate_plane_clockwise: per-pixel rotation of a raw strided plane,
  used when a buffer cannot be rotated by the array engine

Four clockwise rotations reproduce the source buffer exactly.

==============================================================================
"""

from __future__ import annotations

import numpy as np

from frame_decoder.core import exceptions

from .luminance import CropRegion, LuminanceBuffer, RawFrame


def rotate_clockwise_90(buffer: LuminanceBuffer) -> LuminanceBuffer:
    """
    Rotate a buffer a quarter turn clockwise.

    Args:
        buffer: Source buffer (``w x h``)

    Returns:
        New buffer (``h x w``) where ``dest[x][h - 1 - y] = src[y][x]``

    Raises:
        AppException: ROTATE_UNSUPPORTED
    """
    if not buffer.rotate_supported:
        raise exceptions.rotate_unsupported()
    return LuminanceBuffer(
        np.rot90(buffer.pixels, k=-1),
        rotate_supported=buffer.rotate_supported,
        crop_supported=buffer.crop_supported,
    )


def rotate_counter_clockwise_90(buffer: LuminanceBuffer) -> LuminanceBuffer:
    """
    Rotate a buffer a quarter turn counter-clockwise.

    Raises:
        AppException: ROTATE_UNSUPPORTED
    """
    if not buffer.rotate_supported:
        raise exceptions.rotate_unsupported()
    return LuminanceBuffer(
        np.rot90(buffer.pixels, k=1),
        rotate_supported=buffer.rotate_supported,
        crop_supported=buffer.crop_supported,
    )


def crop(buffer: LuminanceBuffer, region: CropRegion) -> LuminanceBuffer:
    """
    Copy a rectangle out of a buffer.

    Args:
        buffer: Source buffer
        region: Rectangle in source coordinates

    Returns:
        New ``region.width x region.height`` buffer

    Raises:
        AppException: CROP_UNSUPPORTED or CROP_OUT_OF_BOUNDS
    """
    if not buffer.crop_supported:
        raise exceptions.crop_unsupported()

    if not region.fits(buffer.width, buffer.height):
        raise exceptions.crop_out_of_bounds(
            region.left,
            region.top,
            region.width,
            region.height,
            buffer.width,
            buffer.height,
        )

    window = buffer.pixels[
        region.top:region.top + region.height,
        region.left:region.left + region.width,
    ]
    return LuminanceBuffer(
        window,
        rotate_supported=buffer.rotate_supported,
        crop_supported=buffer.crop_supported,
    )


def rotate_plane_clockwise(frame: RawFrame) -> LuminanceBuffer:
    """
    Rotate a raw strided plane clockwise without the array engine.

    Each source pixel ``(x, y)`` at ``data[y * row_stride + x]`` lands at
    ``(height - 1 - y, x)`` in a dense ``height x width`` destination.

    Raises:
        AppException: INVALID_DIMENSIONS
    """
    frame.validate()

    source = np.frombuffer(frame.data, dtype=np.uint8)
    rotated_width = frame.height
    rotated_height = frame.width
    rotated = np.zeros(rotated_width * rotated_height, dtype=np.uint8)

    ys, xs = np.indices((frame.height, frame.width))
    source_index = ys * frame.row_stride + xs
    rotated_index = xs * rotated_width + (frame.height - 1 - ys)
    rotated[rotated_index.ravel()] = source[source_index.ravel()]

    return LuminanceBuffer(rotated.reshape(rotated_height, rotated_width))
