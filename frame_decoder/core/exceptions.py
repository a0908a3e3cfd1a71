"""
Application Exception Handling

Single AppException class for all application errors with FastAPI integration.
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Unified application exception for all error scenarios.

    Provides consistent error response format across the entire API.

    Usage:
        raise AppException("Frame too small", "INVALID_DIMENSIONS", 422)
        raise AppException("Out of bounds", "CROP_OUT_OF_BOUNDS", 400, {"left": 10})

    Error Codes:
        Geometry:
            - INVALID_DIMENSIONS (422)
            - CROP_OUT_OF_BOUNDS (400)
            - CROP_UNSUPPORTED (400)
            - ROTATE_UNSUPPORTED (400)

        Request boundary:
            - NATIVE_ERROR (500)
            - NATIVE_ERROR_DEBUG (500)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize application exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "INVALID_DIMENSIONS")
            status_code: HTTP status code (default: 400)
            details: Additional error context (optional)
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        error_dict = {
            "success": False,
            "error": {
                "code": self.code,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    FastAPI exception handler for AppException.

    Converts AppException to consistent JSON error response.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# CONVENIENCE FACTORY FUNCTIONS
# ============================================

def invalid_dimensions(width: int, height: int, reason: str) -> AppException:
    """Create invalid frame geometry exception."""
    return AppException(
        f"Invalid frame dimensions {width}x{height}: {reason}",
        "INVALID_DIMENSIONS",
        422,
        {"width": width, "height": height, "reason": reason}
    )


def crop_out_of_bounds(
    left: int,
    top: int,
    width: int,
    height: int,
    parent_width: int,
    parent_height: int
) -> AppException:
    """Create crop region out of bounds exception."""
    return AppException(
        f"Crop region {width}x{height}+{left}+{top} does not fit "
        f"in {parent_width}x{parent_height}",
        "CROP_OUT_OF_BOUNDS",
        400,
        {
            "region": {"left": left, "top": top, "width": width, "height": height},
            "parent": {"width": parent_width, "height": parent_height},
        }
    )


def crop_unsupported() -> AppException:
    """Create crop unsupported exception."""
    return AppException("Buffer does not support cropping", "CROP_UNSUPPORTED", 400)


def rotate_unsupported() -> AppException:
    """Create rotate unsupported exception."""
    return AppException("Buffer does not support rotation", "ROTATE_UNSUPPORTED", 400)


def native_error(exc: BaseException, code: str = "NATIVE_ERROR") -> AppException:
    """
    Wrap an unexpected failure at the request boundary.

    The original exception message and its formatted stack trace are carried
    in the response so the caller can diagnose the failure.
    """
    stacktrace = "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__)
    )
    return AppException(
        str(exc) or type(exc).__name__,
        code,
        500,
        {"exception": type(exc).__name__, "stacktrace": stacktrace}
    )
