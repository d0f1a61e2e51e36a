"""
Analysis Pipeline Tests

Tests cover:
- Image path: OCR → registry lookup → compliance
- Unreadable plates continue as the UNKNOWN sentinel
- Video path: frame down-sampling and placeholder vehicle
- Critical alert delivery (best-effort)
- Any stage failure aborts with PipelineError
"""

from unittest.mock import AsyncMock, Mock

import pytest

from trafficguard.analysis import AnalysisPipeline, CriticalAlert, select_video_frames
from trafficguard.challan import SEEDED_VEHICLES
from trafficguard.errors import GenAIError, PipelineError
from trafficguard.models import (
    ComplianceResult,
    MediaKind,
    UNKNOWN_PLATE,
    VIDEO_PLATE,
    Violation,
)


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def honda():
    return SEEDED_VEHICLES['MH12DE1433'].model_copy(deep=True)


@pytest.fixture
def insurance_result():
    return ComplianceResult(
        risk_score=60,
        summary="Insurance expired",
        violations=[Violation(rule="No Insurance (Sec 196)", fine_amount=2000, severity="High")],
        action_recommended="Issue Challan",
    )


@pytest.fixture
def mock_ai(insurance_result):
    ai = Mock()
    ai.extract_license_plate = AsyncMock(return_value="MH12DE1433")
    ai.analyze_vehicle_compliance = AsyncMock(return_value=insurance_result)
    ai.analyze_video_footage = AsyncMock(return_value=insurance_result)
    return ai


@pytest.fixture
def mock_registry(honda):
    registry = Mock()
    registry.lookup = AsyncMock(return_value=honda)
    return registry


@pytest.fixture
def alert_sink():
    return AsyncMock()


@pytest.fixture
def pipeline(mock_ai, mock_registry, alert_sink):
    return AnalysisPipeline(mock_ai, mock_registry, {'maxVideoFrames': 10}, alert_sink=alert_sink)


# ============================================
# Frame Selection Tests
# ============================================

class TestFrameSelection:
    """Test video frame down-sampling"""

    def test_37_frames(self):
        frames = list(range(37))
        selected = select_video_frames(frames, 10)

        assert len(selected) == 10
        assert selected == sorted(selected)
        assert selected[0] == 0
        assert selected[-1] <= 33
        assert all(b - a == 3 for a, b in zip(selected, selected[1:]))

    def test_short_clip_unchanged(self):
        frames = ["a", "b", "c"]
        assert select_video_frames(frames, 10) == frames

    def test_exactly_limit_unchanged(self):
        frames = list(range(10))
        assert select_video_frames(frames, 10) == frames

    def test_empty(self):
        assert select_video_frames([], 10) == []


# ============================================
# Image Path Tests
# ============================================

class TestImagePath:
    """Test single-photo analysis"""

    @pytest.mark.asyncio
    async def test_image_scan(self, pipeline, mock_ai, mock_registry, honda):
        result = await pipeline.analyze(MediaKind.IMAGE, "data:image/jpeg;base64,abc")

        assert result.kind == MediaKind.IMAGE
        assert result.plate_number == "MH12DE1433"
        assert result.vehicle.model == "Honda City"
        assert result.thumbnail == "data:image/jpeg;base64,abc"
        assert result.analysis.total_fine == 2000

        mock_registry.lookup.assert_awaited_once_with("MH12DE1433")
        mock_ai.analyze_vehicle_compliance.assert_awaited_once()
        assert mock_ai.analyze_vehicle_compliance.await_args.args[0] == honda

    @pytest.mark.asyncio
    async def test_unreadable_plate_uses_sentinel(self, pipeline, mock_ai, mock_registry):
        mock_ai.extract_license_plate.return_value = None

        result = await pipeline.analyze(MediaKind.IMAGE, "img")

        mock_registry.lookup.assert_awaited_once_with(UNKNOWN_PLATE)
        assert result.plate_number == UNKNOWN_PLATE

    @pytest.mark.asyncio
    async def test_ocr_failure_aborts(self, pipeline, mock_ai, mock_registry):
        mock_ai.extract_license_plate.side_effect = GenAIError("HTTP 500")

        with pytest.raises(PipelineError):
            await pipeline.analyze(MediaKind.IMAGE, "img")

        mock_registry.lookup.assert_not_awaited()
        assert pipeline.failures == 1

    @pytest.mark.asyncio
    async def test_lookup_none_aborts(self, pipeline, mock_ai, mock_registry):
        mock_registry.lookup.return_value = None

        with pytest.raises(PipelineError):
            await pipeline.analyze(MediaKind.IMAGE, "img")

        mock_ai.analyze_vehicle_compliance.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_compliance_failure_aborts(self, pipeline, mock_ai):
        mock_ai.analyze_vehicle_compliance.side_effect = GenAIError("timeout")

        with pytest.raises(PipelineError) as exc_info:
            await pipeline.analyze(MediaKind.IMAGE, "img")

        assert exc_info.value.user_message == "Scan failed. Please try again."

    @pytest.mark.asyncio
    async def test_empty_image_rejected(self, pipeline):
        with pytest.raises(PipelineError):
            await pipeline.analyze(MediaKind.IMAGE, "")


# ============================================
# Video Path Tests
# ============================================

class TestVideoPath:
    """Test clip analysis"""

    @pytest.mark.asyncio
    async def test_video_scan(self, pipeline, mock_ai, mock_registry):
        frames = [f"f{i}" for i in range(37)]

        result = await pipeline.analyze(MediaKind.VIDEO, frames)

        sent = mock_ai.analyze_video_footage.await_args.args[0]
        assert len(sent) == 10
        assert sent[0] == "f0"
        assert sent[1] == "f3"

        assert result.kind == MediaKind.VIDEO
        assert result.plate_number == VIDEO_PLATE
        assert result.vehicle.plate_number == "VIDEO_EVIDENCE"
        assert result.thumbnail == "f0"
        mock_registry.lookup.assert_not_awaited()
        mock_ai.extract_license_plate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_video_failure_aborts(self, pipeline, mock_ai):
        mock_ai.analyze_video_footage.side_effect = GenAIError("HTTP 503")

        with pytest.raises(PipelineError):
            await pipeline.analyze(MediaKind.VIDEO, ["f0", "f1"])

    @pytest.mark.asyncio
    async def test_no_frames_rejected(self, pipeline):
        with pytest.raises(PipelineError):
            await pipeline.analyze(MediaKind.VIDEO, [])


# ============================================
# Critical Alert Tests
# ============================================

class TestCriticalAlert:
    """Test high-priority alerts"""

    @pytest.mark.asyncio
    async def test_alert_for_critical_violation(self, pipeline, mock_ai, alert_sink):
        mock_ai.analyze_vehicle_compliance.return_value = ComplianceResult(
            risk_score=100,
            violations=[
                Violation(rule="No PUC", fine_amount=2000, severity="High"),
                Violation(rule="Stolen Vehicle", fine_amount=0, severity="Critical"),
            ],
        )

        await pipeline.analyze(MediaKind.IMAGE, "img")

        alert_sink.assert_awaited_once()
        alert = alert_sink.await_args.args[0]
        assert isinstance(alert, CriticalAlert)
        assert alert.rule == "Stolen Vehicle"
        assert alert.message == "CRITICAL ALERT: Stolen Vehicle"
        assert alert.to_dict()["plateNumber"] == "MH12DE1433"

    @pytest.mark.asyncio
    async def test_no_alert_without_critical(self, pipeline, alert_sink):
        await pipeline.analyze(MediaKind.IMAGE, "img")
        alert_sink.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_alert_failure_does_not_fail_scan(self, pipeline, mock_ai, alert_sink):
        mock_ai.analyze_vehicle_compliance.return_value = ComplianceResult(
            violations=[Violation(rule="Stolen Vehicle", severity="Critical")],
        )
        alert_sink.side_effect = RuntimeError("socket closed")

        result = await pipeline.analyze(MediaKind.IMAGE, "img")
        assert result.analysis.violations[0].rule == "Stolen Vehicle"
