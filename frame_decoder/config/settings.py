"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

This module implements the Singleton pattern to ensure a single global
configuration instance throughout the application lifecycle.

Features:
---------
- Environment variable loading with type validation
- .env file support for local development
- Computed properties for derived values
- Thread-safe singleton implementation

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Scan Geometry:
--------------
The scan window mirrors the on-screen overlay of the capturing client:
85% of the portrait width wide, 50% of the portrait width tall, centered
in the rotated frame.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


DEFAULT_SYMBOLOGIES = "EAN13,EAN8,UPCA,UPCE,CODE128,CODE39,QRCODE"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        cors_origins: Allowed CORS origins (JSON array string)
        sensor_rotation_degrees: Clockwise correction from sensor to portrait
        scan_crop_enabled: Crop to the scan window before decoding
        scan_width_ratio: Scan window width as a fraction of portrait width
        scan_height_ratio: Scan window height as a fraction of portrait width
        max_decode_attempts: Orientations tried before giving up
        debug_jpeg_quality: JPEG quality of debug images
        decoder_symbologies: Comma-separated ZBar symbol names
        decoder_try_harder: Retry on a binarized frame when nothing is found

    Example:
        >>> settings = Settings()
        >>> print(settings.max_decode_attempts)
        4
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        # Load from .env file if present
        env_file=".env",
        env_file_encoding="utf-8",
        # Environment variables are case-insensitive
        case_sensitive=False,
        # Ignore extra environment variables
        extra="ignore",
        # Validate default values
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Frame Decoder API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # FRAME PREPARATION SETTINGS
    # =========================================================================
    sensor_rotation_degrees: int = Field(
        default=90,
        description="Clockwise rotation from sensor layout to portrait"
    )

    scan_crop_enabled: bool = Field(
        default=True,
        description="Crop to the scan window before decoding"
    )

    scan_width_ratio: float = Field(
        default=0.85,
        gt=0.0,
        le=1.0,
        description="Scan window width relative to portrait width"
    )

    scan_height_ratio: float = Field(
        default=0.50,
        gt=0.0,
        le=1.0,
        description="Scan window height relative to portrait width"
    )

    # =========================================================================
    # DECODER SETTINGS
    # =========================================================================
    max_decode_attempts: int = Field(
        default=4,
        ge=1,
        le=4,
        description="Number of 90 degree orientations tried per frame"
    )

    debug_jpeg_quality: int = Field(
        default=90,
        ge=1,
        le=100,
        description="JPEG quality for debug visualizations"
    )

    decoder_symbologies: str = Field(
        default=DEFAULT_SYMBOLOGIES,
        description="Comma-separated ZBar symbol names to enable"
    )

    decoder_try_harder: bool = Field(
        default=True,
        description="Retry on an Otsu-binarized frame when nothing is found"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Args:
            value: Raw environment value

        Returns:
            Lowercase normalized environment name
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("sensor_rotation_degrees")
    @classmethod
    def validate_sensor_rotation(cls, value: int) -> int:
        """
        Validate sensor rotation is a quarter turn multiple.

        Raises:
            ValueError: If rotation is not a multiple of 90
        """
        if value % 90 != 0:
            raise ValueError(
                f"Sensor rotation must be a multiple of 90 degrees, got {value}"
            )
        return value % 360

    @field_validator("decoder_symbologies")
    @classmethod
    def validate_symbologies(cls, value: str) -> str:
        """Normalize symbology names to upper case without blanks."""
        names = [name.strip().upper() for name in value.split(",") if name.strip()]
        if not names:
            raise ValueError("At least one symbology must be enabled")
        return ",".join(names)

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def sensor_quarter_turns(self) -> int:
        """Number of clockwise quarter turns from sensor to portrait."""
        return self.sensor_rotation_degrees // 90

    @property
    def symbology_list(self) -> List[str]:
        """Enabled symbology names as a list."""
        return self.decoder_symbologies.split(",")

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug}, "
            f"max_decode_attempts={self.max_decode_attempts})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance (singleton pattern).

    Uses lru_cache to ensure only one Settings instance is created
    throughout the application lifecycle.

    Returns:
        Global Settings instance
    """
    settings = Settings()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
