"""
==============================================================================
Scanner WebSocket Module
==============================================================================

Method-channel style barcode decoding over a WebSocket connection.

Protocol:
---------
1. Client connects to /ws/scan
2. Client sends method calls:
       {"method": "scanBarcode", "arguments": {planes, width, height}}
       {"method": "debugScanAndGetImage", "arguments": {...}}
3. Server answers each call with one of:
       {"type": "result", "method": ..., "value": ...}
       {"type": "error", "method": ..., "code": ..., "message": ..., "details": ...}
       {"type": "not_implemented", "method": ...}
4. Client sends {"method": "stop"} or disconnects

==============================================================================
"""

import base64
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from frame_decoder.core import AppException
from frame_decoder.core.dependencies import get_scan_service
from frame_decoder.schemas import ScanRequest
from frame_decoder.services import ScanService


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter()


class ScannerWebSocketHandler:
    """
    Handler for method-channel scanning sessions.

    Dispatches each incoming call to the scan service and reports
    results, structured errors, or unknown methods back to the client.
    """

    def __init__(self, websocket: WebSocket, service: ScanService):
        self._websocket = websocket
        self._service = service
        self._methods = {
            "scanBarcode": self.handle_scan,
            "debugScanAndGetImage": self.handle_debug_scan,
        }

    async def send_result(self, method: str, value) -> None:
        """Send a successful call result."""
        await self._websocket.send_json({
            "type": "result",
            "method": method,
            "value": value
        })

    async def send_error(self, method: str, exc: AppException) -> None:
        """Send a structured error for a failed call."""
        await self._websocket.send_json({
            "type": "error",
            "method": method,
            "code": exc.code,
            "message": exc.message,
            "details": exc.details
        })

    async def handle_scan(self, request: ScanRequest):
        """scanBarcode: decoded text or None."""
        return await run_in_threadpool(self._service.scan_barcode, request)

    async def handle_debug_scan(self, request: ScanRequest):
        """debugScanAndGetImage: result plus base64 JPEG, or None."""
        payload = await run_in_threadpool(self._service.debug_scan, request)
        if payload is None:
            return None
        return {
            "result": payload.decoded_text,
            "image": base64.b64encode(payload.image).decode("ascii")
        }

    async def dispatch(self, message: dict) -> None:
        """Route one method call."""
        if not isinstance(message, dict):
            message = {}

        method = str(message.get("method", ""))
        handler = self._methods.get(method)

        if handler is None:
            await self._websocket.send_json({"type": "not_implemented", "method": method})
            return

        request = ScanRequest.from_payload(message.get("arguments") or {})
        if request is None:
            await self.send_result(method, None)
            return

        try:
            value = await handler(request)
        except AppException as e:
            await self.send_error(method, e)
            return

        await self.send_result(method, value)

    async def run(self) -> None:
        """Main handler loop."""
        await self._websocket.accept()
        logger.info("📱 Scanner WebSocket connected")

        try:
            while True:
                message = await self._websocket.receive_json()

                if isinstance(message, dict) and message.get("method") == "stop":
                    logger.info("🛑 Client requested stop")
                    await self._websocket.close()
                    break

                await self.dispatch(message)

        except WebSocketDisconnect:
            logger.info("📱 Client disconnected")
        except Exception as e:
            logger.error(f"WebSocket error: {e}")
            await self._websocket.close(code=1011)
        finally:
            logger.info("✅ Scanner WebSocket closed")


@router.websocket("/ws/scan")
async def websocket_scan(
    websocket: WebSocket,
    service: ScanService = Depends(get_scan_service)
):
    """Barcode decoding via WebSocket method calls."""
    handler = ScannerWebSocketHandler(websocket, service)
    await handler.run()
