"""
API Endpoint Tests

This module tests the REST API of the officer device backend.
Tests cover:
- Root and health endpoints
- Capture session control
- Scan submission and failures
- Warning / e-challan dispatch
- History, statistics and CSV export
- Officer sign-in
- Legal assistant chat

The application lifespan is not run: each test injects its own
AppState with in-memory history and mocked AI calls.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from trafficguard.analysis import GenAIClient
from trafficguard.challan import MockNotificationService, MockVehicleRegistry
from trafficguard.config import ConfigManager
from trafficguard.errors import GenAIError
from trafficguard.history import CSV_HEADERS
from trafficguard.main import app
from trafficguard.models import VIDEO_PLATE, ComplianceResult, GroundedAnswer, Violation
from trafficguard.state import AppState, set_app_state


IMAGE = "data:image/jpeg;base64,/9j/4AAQ"


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def state():
    state = AppState(
        ConfigManager(),
        storage=None,
        ai_client=GenAIClient(api_key="test-key"),
        registry=MockVehicleRegistry({'latency': 0}),
        notifier=MockNotificationService({'latency': 0}),
    )
    ai = state.ai_service
    ai.extract_license_plate = AsyncMock(return_value="MH12DE1433")
    ai.analyze_vehicle_compliance = AsyncMock(return_value=ComplianceResult(
        risk_score=60,
        summary="Insurance expired",
        violations=[Violation(rule="No Insurance (Sec 196)", fine_amount=2000, severity="High")],
        action_recommended="Issue Challan",
    ))
    ai.analyze_video_footage = AsyncMock(return_value=ComplianceResult(risk_score=5))
    ai.analyze_traffic_scene = AsyncMock(return_value="Two riders without helmets.")
    ai.ask_legal_assistant = AsyncMock(return_value="Section 194D: Rs 1000.")
    ai.find_nearby_services = AsyncMock(return_value=GroundedAnswer(text="Pune RTO, 2 km"))

    set_app_state(state)
    yield state
    set_app_state(None)


@pytest.fixture
def client(state):
    return TestClient(app)


def upload_photo(client):
    response = client.post("/api/capture/upload", json={"kind": "image", "image": IMAGE})
    assert response.status_code == 200
    return response


def run_scan(client):
    upload_photo(client)
    response = client.post("/api/scans")
    assert response.status_code == 200
    return response.json()


# ============================================
# Root & Health Endpoints
# ============================================

class TestRootEndpoints:
    """Test root and health endpoints"""

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Traffic Guard AI"
        assert data["status"] == "operational"

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["capture"]["mode"] == "IDLE"
        assert data["ai"]["is_configured"] is True

    def test_not_initialized(self):
        set_app_state(None)
        response = TestClient(app).get("/api/history")
        assert response.status_code == 503


# ============================================
# Capture Endpoints
# ============================================

class TestCaptureEndpoints:
    """Test capture session control"""

    def test_initial_state(self, client):
        data = client.get("/api/capture/state").json()
        assert data["mode"] == "IDLE"
        assert data["facing"] == "environment"

    def test_photo_flow(self, client):
        response = client.post("/api/capture/start", json={"kind": "image"})
        assert response.json()["mode"] == "ACQUIRING"

        response = client.post("/api/capture/frame", json={"frame": IMAGE})
        assert response.json() == {"accepted": True}

        response = client.post("/api/capture/photo")
        data = response.json()
        assert data["mode"] == "PREVIEW"
        assert data["deviceOpen"] is False

    def test_frame_dropped_when_closed(self, client):
        response = client.post("/api/capture/frame", json={"frame": IMAGE})
        assert response.json() == {"accepted": False}

    def test_photo_requires_camera(self, client):
        response = client.post("/api/capture/photo")
        assert response.status_code == 409

    def test_photo_without_frame(self, client):
        client.post("/api/capture/start", json={"kind": "image"})
        response = client.post("/api/capture/photo")
        assert response.status_code == 503

    def test_switch_camera(self, client):
        client.post("/api/capture/start", json={"kind": "image"})
        response = client.post("/api/capture/switch")
        assert response.json()["facing"] == "user"

    def test_permission_denied(self, client):
        client.post("/api/capture/error", json={"reason": "NotAllowedError"})
        response = client.post("/api/capture/start", json={"kind": "video"})
        assert response.status_code == 503
        assert response.json()["detail"] == "Could not access camera. Please check permissions."

    def test_upload_video_frames(self, client):
        response = client.post("/api/capture/upload",
                               json={"kind": "video", "frames": [IMAGE] * 3})
        data = response.json()
        assert data["mode"] == "PREVIEW"
        assert data["kind"] == "video"
        assert data["frameCount"] == 3

    def test_empty_upload_rejected(self, client):
        response = client.post("/api/capture/upload", json={"kind": "video", "frames": []})
        assert response.status_code == 409

    def test_discard(self, client):
        upload_photo(client)
        response = client.post("/api/capture/discard")
        assert response.json()["mode"] == "IDLE"

    def test_camera_error_rejected_while_processing(self, client, state):
        upload_photo(client)
        state.session.hand_off()

        response = client.post("/api/capture/error", json={"reason": "NotAllowedError"})

        assert response.status_code == 409
        assert state.session.mode.value == "PROCESSING"


# ============================================
# Scan Endpoints
# ============================================

class TestScanEndpoints:
    """Test scan submission"""

    def test_image_scan(self, client, state):
        data = run_scan(client)

        assert data["plateNumber"] == "MH12DE1433"
        assert data["status"] == "FLAGGED"
        assert data["totalFine"] == 2000
        assert data["vehicle"]["model"] == "Honda City"
        assert data["violations"][0]["fineAmount"] == 2000
        assert state.session.mode.value == "IDLE"

        current = client.get("/api/scans/current").json()
        assert current["id"] == data["id"]

    def test_video_scan(self, client):
        client.post("/api/capture/upload", json={"kind": "video", "frames": [IMAGE] * 4})
        data = client.post("/api/scans").json()

        assert data["kind"] == "video"
        assert data["plateNumber"] == VIDEO_PLATE
        assert data["status"] == "VERIFIED"

    def test_scan_without_preview(self, client):
        response = client.post("/api/scans")
        assert response.status_code == 409

    def test_scan_failure(self, client, state):
        state.ai_service.extract_license_plate.side_effect = GenAIError("HTTP 500")
        upload_photo(client)

        response = client.post("/api/scans")

        assert response.status_code == 502
        assert response.json()["detail"] == "Scan failed. Please try again."
        assert len(state.history) == 0
        assert client.get("/api/capture/state").json()["mode"] == "IDLE"

    def test_dismiss(self, client):
        run_scan(client)
        client.post("/api/scans/current/dismiss")
        assert client.get("/api/scans/current").status_code == 404

    def test_cancel_without_scan(self, client):
        assert client.delete("/api/scans/current").json() == {"cancelled": False}

    def test_scene_analysis(self, client):
        response = client.post("/api/scans/scene", json={"image": IMAGE})
        assert response.json() == {"analysis": "Two riders without helmets."}


# ============================================
# Enforcement Endpoints
# ============================================

class TestEnforcementEndpoints:
    """Test warning and e-challan dispatch"""

    def test_issue_challan(self, client, state):
        scan = run_scan(client)

        response = client.post(f"/api/scans/{scan['id']}/challan")

        assert response.status_code == 200
        data = response.json()
        assert data["sent"] is True
        assert data["challanId"] == "CH-00000001"
        assert data["message"] == "E-Challan sent to Rajesh Kumar"
        assert data["scan"]["status"] == "CHALLAN_SENT"
        assert state.notifier.sent[0].payload.amount == 2000

    def test_warning_twice(self, client, state):
        scan = run_scan(client)

        first = client.post(f"/api/scans/{scan['id']}/warning").json()
        second = client.post(f"/api/scans/{scan['id']}/warning").json()
        forced = client.post(f"/api/scans/{scan['id']}/warning?force=true").json()

        assert first["sent"] is True
        assert second["sent"] is False
        assert forced["sent"] is True
        assert len(state.notifier.sent) == 2

    def test_delivery_failure(self, client, state):
        scan = run_scan(client)
        state.notifier.fail_next = True

        response = client.post(f"/api/scans/{scan['id']}/challan")

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to send notification. Network Error."
        assert client.get(f"/api/history/{scan['id']}").json()["status"] == "FLAGGED"

    def test_unknown_scan(self, client):
        response = client.post("/api/scans/missing/challan")
        assert response.status_code == 404


# ============================================
# History Endpoints
# ============================================

class TestHistoryEndpoints:
    """Test history, statistics and export"""

    def test_history_newest_first(self, client):
        first = run_scan(client)
        second = run_scan(client)

        data = client.get("/api/history").json()
        assert [r["id"] for r in data] == [second["id"], first["id"]]

    def test_history_filters(self, client):
        run_scan(client)

        assert len(client.get("/api/history", params={"vehicleType": "Four Wheeler"}).json()) == 1
        assert len(client.get("/api/history", params={"vehicleType": "Two Wheeler"}).json()) == 0
        assert len(client.get("/api/history?status=VERIFIED").json()) == 0
        assert client.get("/api/history?thumbnails=false").json()[0]["thumbnail"] == ""

    def test_stats(self, client):
        scan = run_scan(client)
        client.post(f"/api/scans/{scan['id']}/challan")

        data = client.get("/api/history/stats").json()
        assert data["totalScans"] == 1
        assert data["flaggedCount"] == 0
        assert data["challansSent"] == 1
        assert data["totalFines"] == 2000
        assert data["complianceRate"] == 0.0

    def test_stats_empty(self, client):
        data = client.get("/api/history/stats").json()
        assert data["totalScans"] == 0
        assert data["complianceRate"] == 100.0

    def test_export_empty(self, client):
        response = client.get("/api/history/export")
        assert response.status_code == 404
        assert response.json()["detail"] == "No data to export."

    def test_export_csv(self, client):
        run_scan(client)

        response = client.get("/api/history/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "traffic_report_" in response.headers["content-disposition"]
        lines = response.text.strip().splitlines()
        assert lines[0] == ",".join(CSV_HEADERS)
        assert "MH12DE1433" in lines[1]

    def test_clear(self, client):
        run_scan(client)
        assert client.delete("/api/history").json()["cleared"] == 1
        assert client.get("/api/history").json() == []

    def test_unknown_record(self, client):
        assert client.get("/api/history/missing").status_code == 404


# ============================================
# Auth Endpoints
# ============================================

class TestAuthEndpoints:
    """Test officer sign-in"""

    def test_login_me_logout(self, client):
        response = client.post("/api/auth/login",
                               json={"email": "officer@trafficguard.in", "password": "traffic123"})
        assert response.status_code == 200
        assert response.json()["firstName"] == "Vikram"

        assert client.get("/api/auth/me").json()["badgeNumber"] == "MH-POL-8821"

        client.post("/api/auth/logout")
        assert client.get("/api/auth/me").status_code == 401

    def test_bad_credentials(self, client):
        response = client.post("/api/auth/login",
                               json={"email": "officer@trafficguard.in", "password": "wrongpass1"})
        assert response.status_code == 401
        assert "attempts remaining" in response.json()["detail"]

    def test_disposable_email(self, client):
        response = client.post("/api/auth/login",
                               json={"email": "x@mailinator.com", "password": "traffic123"})
        assert response.status_code == 400


# ============================================
# Assistant Endpoints
# ============================================

class TestAssistantEndpoints:
    """Test legal assistant chat"""

    def test_chat(self, client):
        response = client.post("/api/assistant/chat", json={"query": "Helmet fine?"})
        assert response.status_code == 200
        assert response.json()["text"] == "Section 194D: Rs 1000."

        messages = client.get("/api/assistant/messages").json()
        assert [m["role"] for m in messages] == ["model", "user", "model"]

    def test_maps_chat(self, client, state):
        response = client.post("/api/assistant/chat", json={
            "query": "Nearest RTO", "useMaps": True, "lat": 18.52, "lng": 73.85,
        })
        assert response.json()["text"] == "Pune RTO, 2 km"
        state.ai_service.find_nearby_services.assert_awaited_once()

    def test_empty_query(self, client):
        response = client.post("/api/assistant/chat", json={"query": "  "})
        assert response.status_code == 400

    def test_reset(self, client):
        client.post("/api/assistant/chat", json={"query": "Helmet fine?"})
        client.delete("/api/assistant/messages")
        assert len(client.get("/api/assistant/messages").json()) == 1
