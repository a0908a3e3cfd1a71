"""
==============================================================================
Orientation-Search Decoder Module
==============================================================================

Bounded retry loop around an external barcode decode engine.

This module implements:
- DecodePrimitive: Contract every decode engine adapter fulfils
- Success / NotFound / TransientError: Per-attempt outcomes
- OrientationSearchDecoder: Tries up to four 90 degree orientations

Search Protocol:
----------------
    attempt 1: prepared buffer
    attempt 2: rotated 90 degrees counter-clockwise
    attempt 3: rotated 180 degrees
    attempt 4: rotated 270 degrees

The first success ends the search. The engine is reset after every
attempt, whatever the outcome.

==============================================================================
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from frame_decoder.core import AppException

from .luminance import LuminanceBuffer
from .transforms import rotate_counter_clockwise_90


# Module logger
logger = logging.getLogger(__name__)


MAX_ORIENTATIONS = 4


# =============================================================================
# ENGINE CONTRACT
# =============================================================================

class DecodeFailure(Exception):
    """Engine could not produce a result for this attempt."""


class BarcodeNotFound(DecodeFailure):
    """No symbol was located in the image."""


class DecodePrimitive(ABC):
    """
    Abstract barcode decode engine.

    Implementations decode a single luminance buffer per call and may keep
    scratch state between calls; ``reset`` must clear it.
    """

    @abstractmethod
    def decode(self, buffer: LuminanceBuffer) -> str:
        """
        Decode the first symbol found in ``buffer``.

        Raises:
            BarcodeNotFound: Nothing was found
            DecodeFailure: A symbol was found but could not be read
        """

    @abstractmethod
    def reset(self) -> None:
        """Clear any state left by the previous call."""


# =============================================================================
# ATTEMPT OUTCOMES
# =============================================================================

@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class TransientError:
    reason: str


DecodeAttemptResult = Union[Success, NotFound, TransientError]


@dataclass
class SearchTrace:
    """Diagnostic record of one orientation search."""

    attempts: List[Tuple[int, DecodeAttemptResult]] = field(default_factory=list)
    buffers: List[LuminanceBuffer] = field(default_factory=list)

    @property
    def text(self) -> Optional[str]:
        for _, outcome in self.attempts:
            if isinstance(outcome, Success):
                return outcome.text
        return None


# =============================================================================
# ORIENTATION SEARCH
# =============================================================================

@contextmanager
def decode_session(primitive: DecodePrimitive) -> Iterator[DecodePrimitive]:
    """Yield the primitive and reset it on every exit path."""
    try:
        yield primitive
    finally:
        primitive.reset()


def attempt_decode(primitive: DecodePrimitive, buffer: LuminanceBuffer) -> DecodeAttemptResult:
    """
    Run one decode attempt.

    Engine failures become NotFound / TransientError; any other exception
    propagates after the primitive has been reset.
    """
    with decode_session(primitive) as engine:
        try:
            return Success(engine.decode(buffer))
        except BarcodeNotFound:
            return NotFound()
        except DecodeFailure as e:
            return TransientError(str(e) or type(e).__name__)


class OrientationSearchDecoder:
    """
    Decodes a buffer by trying successive quarter-turn orientations.

    Attributes:
        primitive: Decode engine (reset after each attempt)
        max_attempts: Orientation bound, at most four

    Example:
        >>> decoder = OrientationSearchDecoder(PyzbarPrimitive())
        >>> decoder.decode(prepared_buffer)
        '5901234123457'
    """

    def __init__(self, primitive: DecodePrimitive, max_attempts: int = MAX_ORIENTATIONS) -> None:
        if not 1 <= max_attempts <= MAX_ORIENTATIONS:
            raise ValueError(
                f"max_attempts must be between 1 and {MAX_ORIENTATIONS}, got {max_attempts}"
            )
        self.primitive = primitive
        self.max_attempts = max_attempts

    def decode(self, buffer: LuminanceBuffer) -> Optional[str]:
        """
        Search orientations until a symbol decodes.

        Returns:
            Decoded text, or None when every orientation failed
        """
        return self.decode_with_trace(buffer).text

    def decode_with_trace(self, buffer: LuminanceBuffer) -> SearchTrace:
        """Search orientations and keep every attempt and buffer tried."""
        trace = SearchTrace()
        current = buffer

        for attempt in range(1, self.max_attempts + 1):
            trace.buffers.append(current)
            outcome = attempt_decode(self.primitive, current)
            trace.attempts.append((attempt, outcome))

            if isinstance(outcome, Success):
                logger.debug(f"Decoded on attempt {attempt}")
                return trace

            logger.debug(f"Attempt {attempt}/{self.max_attempts}: {outcome}")

            if attempt == self.max_attempts:
                break

            try:
                current = rotate_counter_clockwise_90(current)
            except AppException as e:
                logger.info(f"Stopping orientation search: {e.message}")
                break

        logger.debug(f"No symbol after {len(trace.attempts)} attempts")
        return trace
