"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

import logging

from fastapi import APIRouter, Depends

from frame_decoder.config import Settings, get_settings
from frame_decoder.core.dependencies import get_primitive_factory
from frame_decoder.services.scan_service import PrimitiveFactory


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, settings: Settings, primitive_factory: PrimitiveFactory):
        self._settings = settings
        self._primitive_factory = primitive_factory

    def check_decoder(self) -> str:
        """Check the decode engine can be created."""
        try:
            self._primitive_factory()
            return "healthy"
        except Exception as e:
            logger.warning(f"Decode engine unavailable: {e}")
            return "unhealthy"

    def get_health(self) -> dict:
        """Get full health status."""
        decoder_status = self.check_decoder()

        overall = "healthy" if decoder_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "decoder": decoder_status
            },
            "details": {
                "symbologies": self._settings.symbology_list,
                "max_decode_attempts": self._settings.max_decode_attempts,
                "scan_crop_enabled": self._settings.scan_crop_enabled
            }
        }


@router.get("")
async def health_check(
    settings: Settings = Depends(get_settings),
    primitive_factory: PrimitiveFactory = Depends(get_primitive_factory)
):
    """
    Health check endpoint.

    Returns system status including API and decode engine.
    """
    controller = HealthController(settings, primitive_factory)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
