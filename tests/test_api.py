"""
==============================================================================
API Integration Tests
==============================================================================

Tests for REST and WebSocket endpoints with a scripted decode engine.

==============================================================================
"""

import base64
from typing import Any

import cv2
import numpy as np
import pytest
from fastapi.testclient import TestClient

from frame_decoder.config import Settings
from frame_decoder.main import Application
from frame_decoder.scanner import DecodeFailure
from tests.conftest import ScriptedPrimitive, gradient, scan_payload


INCOMPLETE_PAYLOADS = [
    {},
    {"width": 4, "height": 4},
    {"planes": [], "width": 4, "height": 4},
    {"planes": [{"bytes": "AAAA"}], "width": 4, "height": 4},
    {"planes": [{"bytesPerRow": 4}], "width": 4, "height": 4},
    {"planes": [{"bytes": "!!not base64!!", "bytesPerRow": 4}], "width": 4, "height": 4},
    {"planes": [{"bytes": "AAAA", "bytesPerRow": 4}], "height": 4},
    {"planes": [{"bytes": "AAAA", "bytesPerRow": 4}], "width": "abc", "height": 4},
    {"planes": "not-a-list", "width": 4, "height": 4},
    {"planes": [{"bytes": 1234, "bytesPerRow": 4}], "width": 4, "height": 4},
    {"planes": [{"bytes": "AAAA", "bytesPerRow": 4}], "width": 2.5, "height": 4},
    [1, 2, 3],
    "frame",
]


def always(buffer) -> bool:
    return True


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["decoder"] == "healthy"
        assert "QRCODE" in data["details"]["symbologies"]

    def test_readiness_probe(self, client: TestClient):
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    def test_liveness_probe(self, client: TestClient):
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True


class TestScanEndpoint:
    """Tests for POST /api/v1/scan."""

    def test_decoded_payload_returned(self, client: TestClient, primitive: ScriptedPrimitive):
        primitive.succeed_on = always
        response = client.post("/api/v1/scan", json=scan_payload(gradient(64, 48), padding=8))

        assert response.status_code == 200
        assert response.json() == {"success": True, "result": "4006381333931"}
        assert primitive.calls == 1
        assert primitive.resets == 1

    def test_engine_sees_rotated_scan_window(self, client: TestClient, primitive: ScriptedPrimitive):
        client.post("/api/v1/scan", json=scan_payload(gradient(640, 480)))

        first = primitive.seen[0]
        assert (first.width, first.height) == (408, 240)

    def test_no_barcode_returns_null(self, client: TestClient, primitive: ScriptedPrimitive):
        response = client.post("/api/v1/scan", json=scan_payload(gradient(64, 48)))

        assert response.status_code == 200
        assert response.json()["result"] is None
        assert primitive.calls == 4
        assert primitive.resets == 4

    @pytest.mark.parametrize("payload", INCOMPLETE_PAYLOADS)
    def test_incomplete_request_returns_null(
        self, client: TestClient, primitive: ScriptedPrimitive, payload: Any
    ):
        response = client.post("/api/v1/scan", json=payload)

        assert response.status_code == 200
        assert response.json()["result"] is None
        assert primitive.calls == 0

    def test_line_wrapped_base64_is_accepted(
        self, client: TestClient, primitive: ScriptedPrimitive
    ):
        primitive.succeed_on = always
        payload = scan_payload(gradient(64, 48))
        encoded = payload["planes"][0]["bytes"]
        payload["planes"][0]["bytes"] = "\r\n".join(
            encoded[i:i + 76] for i in range(0, len(encoded), 76)
        ) + "\n"

        response = client.post("/api/v1/scan", json=payload)

        assert response.status_code == 200
        assert response.json()["result"] == "4006381333931"
        assert primitive.calls == 1

    def test_short_plane_is_invalid_dimensions(self, client: TestClient):
        payload = {
            "planes": [{"bytes": base64.b64encode(bytes(10)).decode(), "bytesPerRow": 8}],
            "width": 8,
            "height": 8,
        }
        response = client.post("/api/v1/scan", json=payload)

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_DIMENSIONS"

    def test_transient_engine_errors_are_not_surfaced(
        self, client: TestClient, primitive: ScriptedPrimitive
    ):
        primitive.error = DecodeFailure("format error")
        response = client.post("/api/v1/scan", json=scan_payload(gradient(64, 48)))

        assert response.status_code == 200
        assert response.json()["result"] is None
        assert primitive.calls == 4

    def test_unexpected_failure_becomes_native_error(
        self, client: TestClient, primitive: ScriptedPrimitive
    ):
        primitive.error = RuntimeError("engine crashed")
        response = client.post("/api/v1/scan", json=scan_payload(gradient(64, 48)))

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "NATIVE_ERROR"
        assert error["message"] == "engine crashed"
        assert "RuntimeError" in error["details"]["stacktrace"]
        assert primitive.resets == 1

        # Service keeps answering after a failure
        assert client.get("/api/v1/health/live").status_code == 200


class TestDebugScanEndpoint:
    """Tests for POST /api/v1/scan/debug."""

    def test_returns_result_and_image(self, client: TestClient, primitive: ScriptedPrimitive):
        primitive.succeed_on = always
        response = client.post("/api/v1/scan/debug", json=scan_payload(gradient(640, 480)))

        assert response.status_code == 200
        data = response.json()
        assert data["result"] == "4006381333931"

        jpeg = base64.b64decode(data["image"])
        image = cv2.imdecode(np.frombuffer(jpeg, dtype=np.uint8), cv2.IMREAD_COLOR)
        assert image.shape == (240, 408, 3)

    def test_image_returned_without_result(self, client: TestClient):
        response = client.post("/api/v1/scan/debug", json=scan_payload(gradient(64, 48)))

        data = response.json()
        assert data["result"] is None
        assert data["image"]

    @pytest.mark.parametrize("payload", INCOMPLETE_PAYLOADS)
    def test_incomplete_request(
        self, client: TestClient, primitive: ScriptedPrimitive, payload: Any
    ):
        response = client.post("/api/v1/scan/debug", json=payload)

        assert response.status_code == 200
        assert response.json() == {"success": True, "result": None, "image": None}
        assert primitive.calls == 0

    def test_empty_body(self, client: TestClient):
        response = client.post("/api/v1/scan/debug")

        assert response.status_code == 200
        assert response.json()["image"] is None

    def test_unexpected_failure_code(self, client: TestClient, primitive: ScriptedPrimitive):
        primitive.error = KeyError("boom")
        response = client.post("/api/v1/scan/debug", json=scan_payload(gradient(64, 48)))

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "NATIVE_ERROR_DEBUG"


class TestScannerWebSocket:
    """Tests for the /ws/scan method channel."""

    def test_scan_barcode_call(self, client: TestClient, primitive: ScriptedPrimitive):
        primitive.succeed_on = always

        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"method": "scanBarcode", "arguments": scan_payload(gradient(64, 48))})
            reply = ws.receive_json()

        assert reply == {"type": "result", "method": "scanBarcode", "value": "4006381333931"}

    def test_debug_call(self, client: TestClient):
        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({
                "method": "debugScanAndGetImage",
                "arguments": scan_payload(gradient(64, 48)),
            })
            reply = ws.receive_json()

        assert reply["type"] == "result"
        assert reply["value"]["result"] is None
        assert base64.b64decode(reply["value"]["image"])[:2] == b"\xff\xd8"

    def test_missing_arguments_yield_null(self, client: TestClient):
        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"method": "scanBarcode"})
            reply = ws.receive_json()

        assert reply == {"type": "result", "method": "scanBarcode", "value": None}

    @pytest.mark.parametrize("arguments", INCOMPLETE_PAYLOADS)
    def test_malformed_arguments_yield_null(self, client: TestClient, arguments: Any):
        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"method": "scanBarcode", "arguments": arguments})
            reply = ws.receive_json()

        assert reply == {"type": "result", "method": "scanBarcode", "value": None}

    def test_unknown_method(self, client: TestClient):
        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"method": "flashlight"})
            reply = ws.receive_json()

        assert reply == {"type": "not_implemented", "method": "flashlight"}

    def test_error_reply_keeps_connection_open(
        self, client: TestClient, primitive: ScriptedPrimitive
    ):
        primitive.error = RuntimeError("engine crashed")

        with client.websocket_connect("/ws/scan") as ws:
            ws.send_json({"method": "scanBarcode", "arguments": scan_payload(gradient(64, 48))})
            error = ws.receive_json()

            ws.send_json({"method": "scanBarcode"})
            follow_up = ws.receive_json()

        assert error["type"] == "error"
        assert error["code"] == "NATIVE_ERROR"
        assert "stacktrace" in error["details"]
        assert follow_up["value"] is None


class TestRootEndpoint:
    """Tests for the service info route."""

    def test_service_info(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["version"] == "1.0.0"
        assert "/ws/scan" in data["endpoints"]

    def test_docs_disabled_in_production(self):
        production = Application(Settings(app_env="production"))

        with TestClient(production.app) as test_client:
            assert test_client.get("/docs").status_code == 404
            assert test_client.get("/").json()["docs"] is None
