"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- scan: Frame decode endpoints

==============================================================================
"""

from . import health, scan

__all__ = ["health", "scan"]
