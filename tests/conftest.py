"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides a scripted decode engine, frame builders and a test client wired
to the scripted engine.

==============================================================================
"""

import base64
from typing import Callable, Dict, Generator, List, Optional

import numpy as np
import pytest
from fastapi.testclient import TestClient

from frame_decoder.core.dependencies import get_primitive_factory
from frame_decoder.main import app
from frame_decoder.scanner import BarcodeNotFound, DecodePrimitive, LuminanceBuffer


# ============================================================================
# DECODE ENGINE FIXTURES
# ============================================================================

class ScriptedPrimitive(DecodePrimitive):
    """
    Decode engine double.

    Succeeds when ``succeed_on(buffer)`` is true, raises ``error`` on every
    call when given, otherwise reports nothing found.
    """

    def __init__(
        self,
        succeed_on: Optional[Callable[[LuminanceBuffer], bool]] = None,
        text: str = "4006381333931",
        error: Optional[Exception] = None
    ):
        self.succeed_on = succeed_on
        self.text = text
        self.error = error
        self.calls = 0
        self.resets = 0
        self.seen: List[LuminanceBuffer] = []
        self._dirty = False

    def decode(self, buffer: LuminanceBuffer) -> str:
        assert not self._dirty, "decode called without reset after previous attempt"
        self._dirty = True
        self.calls += 1
        self.seen.append(buffer)

        if self.error is not None:
            raise self.error
        if self.succeed_on is not None and self.succeed_on(buffer):
            return self.text
        raise BarcodeNotFound("scripted miss")

    def reset(self) -> None:
        self._dirty = False
        self.resets += 1


@pytest.fixture
def primitive() -> ScriptedPrimitive:
    """Engine that never finds anything; tests reconfigure it."""
    return ScriptedPrimitive()


# ============================================================================
# FRAME FIXTURES
# ============================================================================

def gradient(width: int, height: int) -> np.ndarray:
    """Image without rotational symmetry."""
    return (np.arange(width * height, dtype=np.uint32) % 251).astype(np.uint8).reshape(height, width)


def scan_payload(pixels: np.ndarray, padding: int = 0) -> Dict:
    """Encode a grayscale image as a scan request with optional row padding."""
    height, width = pixels.shape
    stride = width + padding
    padded = np.zeros((height, stride), dtype=np.uint8)
    padded[:, :width] = pixels
    return {
        "planes": [
            {"bytes": base64.b64encode(padded.tobytes()).decode("ascii"), "bytesPerRow": stride},
            {"bytes": "", "bytesPerRow": stride // 2},
        ],
        "width": width,
        "height": height,
    }


# ============================================================================
# CLIENT FIXTURES
# ============================================================================

@pytest.fixture(scope="function")
def client(primitive: ScriptedPrimitive) -> Generator[TestClient, None, None]:
    """Test client whose decode engine is the ``primitive`` fixture."""
    app.dependency_overrides[get_primitive_factory] = lambda: (lambda: primitive)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
