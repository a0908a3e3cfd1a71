"""
==============================================================================
Core Package
==============================================================================

Core infrastructure for the application.

This package provides:
- Custom exception handling with consistent error responses
- Exception factory functions for common error scenarios

Modules:
--------
- exceptions: AppException class and error factory functions
- dependencies: FastAPI dependency injection functions

Usage:
------
    from frame_decoder.core import AppException

    # Or use exception factory functions via module
    from frame_decoder.core import exceptions
    raise exceptions.rotate_unsupported()

==============================================================================
"""

from .exceptions import (
    AppException,
    register_exception_handlers,
)

__all__ = [
    "AppException",
    "register_exception_handlers",
]
