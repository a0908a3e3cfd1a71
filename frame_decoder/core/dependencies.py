"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Dependency injection functions for routes and WebSocket handlers.

Tests replace ``get_primitive_factory`` through ``app.dependency_overrides``
to run the full request path against a scripted decode engine.

==============================================================================
"""

from __future__ import annotations

from fastapi import Depends

from frame_decoder.config import Settings, get_settings
from frame_decoder.scanner import DecodePrimitive, PyzbarPrimitive
from frame_decoder.services.scan_service import PrimitiveFactory, ScanService


def get_primitive_factory(settings: Settings = Depends(get_settings)) -> PrimitiveFactory:
    """Factory creating one ZBar engine per request."""

    def factory() -> DecodePrimitive:
        return PyzbarPrimitive.from_settings(settings)

    return factory


def get_scan_service(
    settings: Settings = Depends(get_settings),
    primitive_factory: PrimitiveFactory = Depends(get_primitive_factory)
) -> ScanService:
    """Scan service for the current request."""
    return ScanService.from_settings(settings, primitive_factory)
