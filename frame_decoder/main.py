"""
==============================================================================
Frame Decoder Service - Application Entry Point
==============================================================================

FastAPI application serving:
- POST /api/v1/scan and /api/v1/scan/debug
- WS /ws/scan method channel
- Health probes under /api/v1/health

Run:
----
    uvicorn frame_decoder.main:app --reload
    uvicorn frame_decoder.main:app --host 0.0.0.0 --port 8000

==============================================================================
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from frame_decoder.api.router import api_router
from frame_decoder.config import Settings, get_settings
from frame_decoder.core.exceptions import register_exception_handlers
from frame_decoder.scanner import PyzbarPrimitive
from frame_decoder.websockets import scanner_router


settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"


class Application:
    """
    Builds the decoder service.

    Startup probes the ZBar engine once so a missing native library shows
    up in the logs before the first request does.
    """

    def __init__(self, app_settings: Optional[Settings] = None):
        self._settings = app_settings or get_settings()
        self._decoder_available = False
        self._app = self._build()

    def _build(self) -> FastAPI:
        app = FastAPI(
            title=self._settings.app_name,
            version=SERVICE_VERSION,
            description="Orientation-search barcode decoding for raw camera frames",
            lifespan=self._lifespan,
            docs_url=None if self._settings.is_production else "/docs",
            redoc_url=None if self._settings.is_production else "/redoc",
        )

        app.add_middleware(
            CORSMiddleware,
            allow_origins=self._settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        register_exception_handlers(app)

        app.include_router(api_router)
        app.include_router(scanner_router)
        app.add_api_route("/", self.service_info, methods=["GET"], tags=["Root"])

        return app

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self._decoder_available = self.probe_decoder()
        self._log_banner()
        yield
        logger.info("🛑 Frame decoder stopped")

    def probe_decoder(self) -> bool:
        """Try to build the configured ZBar engine once."""
        try:
            PyzbarPrimitive.from_settings(self._settings)
        except Exception as e:
            logger.warning(f"⚠️ ZBar engine unavailable: {e}")
            return False
        return True

    def _log_banner(self) -> None:
        s = self._settings
        logger.info("=" * 60)
        logger.info(f"🚀 {s.app_name} v{SERVICE_VERSION} ({s.app_env})")
        logger.info(f"🔎 Symbologies: {', '.join(s.symbology_list)}")
        logger.info(
            f"📐 Sensor rotation {s.sensor_rotation_degrees}°, "
            f"scan crop {'on' if s.scan_crop_enabled else 'off'}, "
            f"{s.max_decode_attempts} orientation(s)"
        )
        logger.info(f"🧩 Decoder engine: {'ready' if self._decoder_available else 'missing'}")
        if not s.is_production:
            logger.info(f"📖 Docs at http://{s.host}:{s.port}/docs")
        logger.info("=" * 60)

    async def service_info(self) -> dict:
        """Service name, version and entry points."""
        return {
            "name": self._settings.app_name,
            "version": SERVICE_VERSION,
            "docs": self._app.docs_url,
            "endpoints": ["/api/v1/scan", "/api/v1/scan/debug", "/ws/scan"]
        }

    @property
    def app(self) -> FastAPI:
        return self._app


application = Application(settings)
app = application.app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "frame_decoder.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
