"""
==============================================================================
Luminance Buffer Module
==============================================================================

Single-channel image containers used by the decode pipeline.

This module implements:
- RawFrame: A caller-owned Y plane with explicit row stride
- LuminanceBuffer: A dense, read-only grayscale image
- CropRegion: A rectangle inside a parent buffer

Memory Layout:
--------------
Camera Y planes may carry padding at the end of each row, so a raw plane
is addressed as ``data[y * row_stride + x]``. A LuminanceBuffer always
holds a dense ``height x width`` uint8 array (row stride == width).

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from frame_decoder.core import exceptions


# Module logger
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawFrame:
    """
    Raw luminance plane as delivered by the camera.

    Attributes:
        data: Plane bytes, row-major, possibly padded per row
        width: Visible pixels per row
        height: Number of rows
        row_stride: Bytes per row (>= width)
    """

    data: bytes
    width: int
    height: int
    row_stride: int

    def validate(self) -> None:
        """
        Check the declared geometry against the plane length.

        The last row is allowed to omit its trailing padding.

        Raises:
            AppException: INVALID_DIMENSIONS
        """
        if self.width <= 0 or self.height <= 0:
            raise exceptions.invalid_dimensions(
                self.width, self.height, "width and height must be positive"
            )

        if self.row_stride < self.width:
            raise exceptions.invalid_dimensions(
                self.width,
                self.height,
                f"row stride {self.row_stride} is smaller than width"
            )

        required = self.row_stride * (self.height - 1) + self.width
        if len(self.data) < required:
            raise exceptions.invalid_dimensions(
                self.width,
                self.height,
                f"plane has {len(self.data)} bytes, needs at least {required}"
            )

    def as_array(self) -> np.ndarray:
        """
        Strided 2-D view of the visible pixels.

        Returns:
            ``height x width`` uint8 view over the raw plane (no copy)
        """
        self.validate()
        flat = np.frombuffer(self.data, dtype=np.uint8)
        return np.lib.stride_tricks.as_strided(
            flat,
            shape=(self.height, self.width),
            strides=(self.row_stride, 1),
            writeable=False,
        )


@dataclass(frozen=True)
class CropRegion:
    """Rectangle expressed in parent buffer coordinates."""

    left: int
    top: int
    width: int
    height: int

    def fits(self, parent_width: int, parent_height: int) -> bool:
        """True when the region is non-empty and lies inside the parent."""
        return (
            self.left >= 0
            and self.top >= 0
            and self.width > 0
            and self.height > 0
            and self.left + self.width <= parent_width
            and self.top + self.height <= parent_height
        )


class LuminanceBuffer:
    """
    Dense, immutable grayscale image.

    The pixel array is copied on construction and marked read-only, so
    buffers behave as values: transforms always produce new buffers.

    Attributes:
        pixels: ``height x width`` uint8 array
        rotate_supported: Whether transforms may rotate this buffer
        crop_supported: Whether transforms may crop this buffer

    Example:
        >>> frame = RawFrame(bytes(range(6)), width=3, height=2, row_stride=3)
        >>> buf = LuminanceBuffer.from_raw_frame(frame)
        >>> buf.get(2, 1)
        5
    """

    __slots__ = ("_pixels", "rotate_supported", "crop_supported")

    def __init__(
        self,
        pixels: np.ndarray,
        rotate_supported: bool = True,
        crop_supported: bool = True
    ) -> None:
        array = np.array(pixels, dtype=np.uint8, copy=True, order="C")

        if array.ndim != 2:
            raise exceptions.invalid_dimensions(
                0, 0, f"expected a 2-D array, got {array.ndim} dimensions"
            )

        height, width = array.shape
        if width <= 0 or height <= 0:
            raise exceptions.invalid_dimensions(
                width, height, "width and height must be positive"
            )

        array.setflags(write=False)
        self._pixels = array
        self.rotate_supported = rotate_supported
        self.crop_supported = crop_supported

    @classmethod
    def from_raw_frame(cls, frame: RawFrame) -> "LuminanceBuffer":
        """
        Build a buffer covering the full frame.

        Args:
            frame: Raw plane with stride information

        Returns:
            Dense buffer of ``frame.width x frame.height`` samples

        Raises:
            AppException: INVALID_DIMENSIONS for bad geometry
        """
        buffer = cls(frame.as_array())
        logger.debug(
            f"Built {buffer.width}x{buffer.height} buffer "
            f"(stride {frame.row_stride})"
        )
        return buffer

    @classmethod
    def from_bytes(cls, data: bytes, width: int, height: int) -> "LuminanceBuffer":
        """Build a buffer from a tightly packed plane."""
        return cls.from_raw_frame(RawFrame(data, width, height, width))

    @property
    def pixels(self) -> np.ndarray:
        """Read-only pixel array."""
        return self._pixels

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    def get(self, x: int, y: int) -> int:
        """Luminance at column ``x``, row ``y``."""
        return int(self._pixels[y, x])

    def to_bytes(self) -> bytes:
        """Row-major samples, ``width * height`` bytes."""
        return self._pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LuminanceBuffer):
            return NotImplemented
        return np.array_equal(self._pixels, other._pixels)

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"LuminanceBuffer(width={self.width}, height={self.height}, "
            f"rotate_supported={self.rotate_supported}, "
            f"crop_supported={self.crop_supported})"
        )
