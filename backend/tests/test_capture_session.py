"""
Capture Session Tests

Tests cover:
- IDLE → ACQUIRING → PREVIEW → PROCESSING → IDLE lifecycle
- Photo capture and upload paths
- Recording with manual stop and watchdog stop (no double transition)
- Live overlay loop and its exclusion with recording
- Camera switch and acquisition failures
- Device release on every exit path
"""

import asyncio
from typing import Optional
from unittest.mock import AsyncMock

import pytest

from trafficguard.capture import CaptureDevice, CaptureSession, RemoteCameraDevice
from trafficguard.errors import AcquisitionError, InvalidTransitionError
from trafficguard.models import CaptureMode, FacingMode, MediaKind


class FakeCamera(CaptureDevice):
    """Camera producing numbered frames"""

    def __init__(self, produce_frames: bool = True, fail_facing: Optional[FacingMode] = None):
        super().__init__()
        self.produce_frames = produce_frames
        self.fail_facing = fail_facing
        self.reads = 0

    async def _open(self, facing: FacingMode):
        if facing == self.fail_facing:
            raise AcquisitionError("Permission denied")

    async def _read(self, quality: float) -> Optional[str]:
        if not self.produce_frames:
            return None
        self.reads += 1
        return f"data:image/jpeg;base64,frame{self.reads}"

    async def _close(self):
        pass


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def fast_config():
    """Short intervals so tests run quickly"""
    return {
        'overlayInterval': 0.01,
        'frameInterval': 0.01,
        'maxDuration': 0.15,
        'maxFrames': 5,
        'overlayFrameQuality': 0.5,
    }


@pytest.fixture
def camera():
    return FakeCamera()


@pytest.fixture
def session(camera, fast_config):
    return CaptureSession(camera, fast_config)


# ============================================
# Lifecycle Tests
# ============================================

class TestLifecycle:
    """Test basic state transitions"""

    def test_initial_state(self, session):
        assert session.mode == CaptureMode.IDLE
        assert session.facing == FacingMode.ENVIRONMENT
        snapshot = session.snapshot()
        assert snapshot['mode'] == 'IDLE'
        assert snapshot['deviceOpen'] is False

    @pytest.mark.asyncio
    async def test_start_opens_camera(self, session, camera):
        await session.start(MediaKind.IMAGE)
        assert session.mode == CaptureMode.ACQUIRING
        assert camera.is_open
        await session.discard()

    @pytest.mark.asyncio
    async def test_start_twice_rejected(self, session):
        await session.start()
        with pytest.raises(InvalidTransitionError):
            await session.start()
        await session.discard()

    @pytest.mark.asyncio
    async def test_start_failure_stays_idle(self, fast_config):
        camera = FakeCamera(fail_facing=FacingMode.ENVIRONMENT)
        session = CaptureSession(camera, fast_config)

        with pytest.raises(AcquisitionError):
            await session.start()

        assert session.mode == CaptureMode.IDLE
        assert not camera.is_open

    @pytest.mark.asyncio
    async def test_photo_hand_off_complete(self, session, camera):
        await session.start()
        frame = await session.capture_photo()

        assert session.mode == CaptureMode.PREVIEW
        assert frame.startswith("data:image/jpeg")
        assert not camera.is_open

        kind, payload = session.hand_off()
        assert kind == MediaKind.IMAGE
        assert payload == frame
        assert session.mode == CaptureMode.PROCESSING

        session.complete()
        assert session.mode == CaptureMode.IDLE
        assert session.payload is None

    @pytest.mark.asyncio
    async def test_photo_without_frame_fails(self, fast_config):
        session = CaptureSession(FakeCamera(produce_frames=False), fast_config)
        await session.start()
        with pytest.raises(AcquisitionError):
            await session.capture_photo()
        await session.discard()

    def test_hand_off_requires_preview(self, session):
        with pytest.raises(InvalidTransitionError):
            session.hand_off()

    @pytest.mark.asyncio
    async def test_discard_releases_camera(self, session, camera):
        await session.start()
        await session.discard()
        assert session.mode == CaptureMode.IDLE
        assert not camera.is_open
        assert camera.close_count == 1

    @pytest.mark.asyncio
    async def test_fail_resets(self, session, camera):
        await session.start()
        assert await session.fail("Hardware error") is True
        assert session.mode == CaptureMode.IDLE
        assert not camera.is_open

    @pytest.mark.asyncio
    async def test_set_kind(self, session):
        await session.start(MediaKind.IMAGE)
        session.set_kind(MediaKind.VIDEO)
        assert session.kind == MediaKind.VIDEO
        await session.discard()

    @pytest.mark.asyncio
    async def test_listener_receives_snapshots(self, camera, fast_config):
        snapshots = []
        session = CaptureSession(camera, fast_config, listener=snapshots.append)

        await session.start()
        await session.capture_photo()

        modes = [s['mode'] for s in snapshots]
        assert 'ACQUIRING' in modes
        assert modes[-1] == 'PREVIEW'


# ============================================
# Upload Tests
# ============================================

class TestUpload:
    """Test the upload path straight to PREVIEW"""

    def test_upload_image(self, session):
        session.load_media(MediaKind.IMAGE, "data:image/jpeg;base64,abc")
        assert session.mode == CaptureMode.PREVIEW
        assert session.frame_count == 1

    def test_upload_video_capped(self, session):
        session.load_media(MediaKind.VIDEO, [f"f{i}" for i in range(12)])
        assert session.frame_count == 5
        kind, payload = session.hand_off()
        assert kind == MediaKind.VIDEO
        assert payload == ["f0", "f1", "f2", "f3", "f4"]

    def test_upload_empty_rejected(self, session):
        with pytest.raises(InvalidTransitionError):
            session.load_media(MediaKind.VIDEO, [])
        with pytest.raises(InvalidTransitionError):
            session.load_media(MediaKind.IMAGE, "")
        assert session.mode == CaptureMode.IDLE


# ============================================
# Recording Tests
# ============================================

class TestRecording:
    """Test clip recording, manual stop and watchdog"""

    @pytest.mark.asyncio
    async def test_manual_stop(self, camera):
        session = CaptureSession(camera, {'frameInterval': 0.01, 'maxDuration': 5.0, 'maxFrames': 10})
        await session.start(MediaKind.VIDEO)
        await session.start_recording()
        await asyncio.sleep(0.08)

        assert await session.stop_recording() is True
        assert session.mode == CaptureMode.PREVIEW
        assert 1 <= session.frame_count <= 10
        assert not camera.is_open
        assert not session.is_recording

    @pytest.mark.asyncio
    async def test_watchdog_stops_recording(self, session, camera):
        await session.start(MediaKind.VIDEO)
        await session.start_recording()
        await asyncio.sleep(0.4)

        assert session.mode == CaptureMode.PREVIEW
        assert 1 <= session.frame_count <= 5
        assert not camera.is_open

        # Manual stop after the watchdog is a no-op
        assert await session.stop_recording() is False
        assert session.mode == CaptureMode.PREVIEW

    @pytest.mark.asyncio
    async def test_frames_capped(self, camera):
        session = CaptureSession(camera, {'frameInterval': 0.005, 'maxDuration': 5.0, 'maxFrames': 3})
        await session.start(MediaKind.VIDEO)
        await session.start_recording()
        await asyncio.sleep(0.1)
        await session.stop_recording()

        assert session.frame_count == 3

    @pytest.mark.asyncio
    async def test_stop_without_frames_returns_to_idle(self, camera):
        session = CaptureSession(camera, {'frameInterval': 1.0, 'maxDuration': 5.0})
        await session.start(MediaKind.VIDEO)
        await session.start_recording()

        assert await session.stop_recording() is True
        assert session.mode == CaptureMode.IDLE

    @pytest.mark.asyncio
    async def test_no_photo_while_recording(self, session):
        await session.start(MediaKind.VIDEO)
        await session.start_recording()
        with pytest.raises(InvalidTransitionError):
            await session.capture_photo()
        await session.discard()
        assert session.mode == CaptureMode.IDLE


# ============================================
# Overlay Tests
# ============================================

class TestOverlay:
    """Test the live AI overlay loop"""

    @pytest.mark.asyncio
    async def test_overlay_updates_text(self, camera, fast_config):
        hint = AsyncMock(return_value="SUV detected, No Helmet")
        session = CaptureSession(camera, fast_config, hint_provider=hint)

        await session.start()
        await session.set_overlay(True)
        await asyncio.sleep(0.08)

        assert session.overlay_enabled
        assert session.overlay_text == "SUV detected, No Helmet"
        assert hint.await_count >= 1

        await session.set_overlay(False)
        assert not session.overlay_enabled
        assert session.overlay_text == ""
        await session.discard()

    @pytest.mark.asyncio
    async def test_recording_cancels_overlay(self, camera, fast_config):
        session = CaptureSession(camera, fast_config, hint_provider=AsyncMock(return_value="Car"))
        await session.start(MediaKind.VIDEO)
        await session.set_overlay(True)

        await session.start_recording()
        assert not session.overlay_enabled

        with pytest.raises(InvalidTransitionError):
            await session.set_overlay(True)
        await session.discard()

    @pytest.mark.asyncio
    async def test_overlay_requires_provider(self, session):
        await session.start()
        with pytest.raises(InvalidTransitionError):
            await session.set_overlay(True)
        await session.discard()

    @pytest.mark.asyncio
    async def test_hint_errors_do_not_stop_loop(self, camera, fast_config):
        calls = []

        async def flaky_hint(frame):
            calls.append(frame)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return "Truck"

        session = CaptureSession(camera, fast_config, hint_provider=flaky_hint)

        await session.start()
        await session.set_overlay(True)
        await asyncio.sleep(0.08)

        assert len(calls) >= 2
        assert session.overlay_text == "Truck"
        await session.discard()


# ============================================
# Camera Switch Tests
# ============================================

class TestSwitchFacing:
    """Test front/back camera switching"""

    @pytest.mark.asyncio
    async def test_switch_facing(self, session, camera):
        await session.start()
        await session.switch_facing()

        assert session.facing == FacingMode.USER
        assert camera.facing == FacingMode.USER
        assert camera.is_open
        await session.discard()

    @pytest.mark.asyncio
    async def test_switch_failure_resets(self, fast_config):
        camera = FakeCamera(fail_facing=FacingMode.USER)
        session = CaptureSession(camera, fast_config)
        await session.start()

        with pytest.raises(AcquisitionError):
            await session.switch_facing()

        assert session.mode == CaptureMode.IDLE
        assert not camera.is_open

    @pytest.mark.asyncio
    async def test_failed_switch_keeps_working_facing(self, fast_config):
        camera = FakeCamera(fail_facing=FacingMode.USER)
        session = CaptureSession(camera, fast_config)
        await session.start()

        with pytest.raises(AcquisitionError):
            await session.switch_facing()

        assert session.facing == FacingMode.ENVIRONMENT
        await session.start()
        assert camera.facing == FacingMode.ENVIRONMENT
        assert camera.is_open
        await session.discard()


# ============================================
# Remote Camera Tests
# ============================================

class TestRemoteCamera:
    """Test the client-fed frame buffer"""

    @pytest.mark.asyncio
    async def test_frames_dropped_while_closed(self):
        device = RemoteCameraDevice()
        assert device.push_frame("f1") is False

        await device.open(FacingMode.ENVIRONMENT)
        assert device.push_frame("f2") is True
        assert await device.read_frame() == "f2"
        assert device.frames_received == 1

    @pytest.mark.asyncio
    async def test_deny_fails_next_open(self):
        device = RemoteCameraDevice()
        device.deny("NotAllowedError")

        with pytest.raises(AcquisitionError):
            await device.open(FacingMode.ENVIRONMENT)

        # Denial is consumed by one open
        await device.open(FacingMode.ENVIRONMENT)
        assert device.is_open

    @pytest.mark.asyncio
    async def test_read_closed_raises(self):
        device = RemoteCameraDevice()
        with pytest.raises(AcquisitionError):
            await device.read_frame()
