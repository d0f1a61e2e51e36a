"""
Capture Routes - Camera session control for the officer device

Endpoints:
- GET /api/capture/state - Current session snapshot
- POST /api/capture/start - Open the camera (image or video)
- POST /api/capture/kind - Switch photo/video mode
- POST /api/capture/switch - Flip front/back camera
- POST /api/capture/overlay - Enable/disable live AI hints
- POST /api/capture/frame - Push the newest camera frame
- POST /api/capture/photo - Take a photo (→ PREVIEW)
- POST /api/capture/record/start - Start recording a clip
- POST /api/capture/record/stop - Stop recording (→ PREVIEW)
- POST /api/capture/upload - Upload a photo or clip frames (→ PREVIEW)
- POST /api/capture/discard - Drop the capture and release the camera
- POST /api/capture/error - Report a camera failure from the device
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from trafficguard.errors import TrafficGuardError
from trafficguard.models import CaptureMode, MediaKind
from trafficguard.state import AppState

from .common import http_error, require_state

router = APIRouter(tags=["capture"])


# ============================================
# Request / Response Models
# ============================================

class CaptureStateResponse(BaseModel):
    """Capture session snapshot"""
    mode: str
    kind: str
    facing: str
    recording: bool
    overlayEnabled: bool
    overlayText: str
    frameCount: int
    deviceOpen: bool


class StartCaptureRequest(BaseModel):
    kind: Literal['image', 'video'] = 'image'


class OverlayRequest(BaseModel):
    enabled: bool


class FrameRequest(BaseModel):
    frame: str = Field(..., min_length=1, description="Base64 JPEG or data URL")


class FrameResponse(BaseModel):
    accepted: bool


class UploadRequest(BaseModel):
    """Photo (image) or pre-extracted clip frames (video)"""
    kind: Literal['image', 'video'] = 'image'
    image: Optional[str] = None
    frames: List[str] = []


class CaptureErrorRequest(BaseModel):
    reason: str = "Camera unavailable"


def _state_response(state: AppState) -> CaptureStateResponse:
    return CaptureStateResponse(**state.session.snapshot())


# ============================================
# Endpoints
# ============================================

@router.get("/api/capture/state", response_model=CaptureStateResponse)
async def get_capture_state(state: AppState = Depends(require_state)):
    """Get the current capture session state"""
    return _state_response(state)


@router.post("/api/capture/start", response_model=CaptureStateResponse)
async def start_capture(request: StartCaptureRequest, state: AppState = Depends(require_state)):
    """
    Open the camera

    The device must be streaming frames (``capture:frame`` or
    POST /api/capture/frame) for photos, overlay hints and recording.
    """
    try:
        await state.session.start(MediaKind(request.kind))
    except TrafficGuardError as e:
        raise http_error(e)
    return _state_response(state)


@router.post("/api/capture/kind", response_model=CaptureStateResponse)
async def set_capture_kind(request: StartCaptureRequest, state: AppState = Depends(require_state)):
    """Switch between photo and video mode before capturing"""
    try:
        state.session.set_kind(MediaKind(request.kind))
    except TrafficGuardError as e:
        raise http_error(e)
    return _state_response(state)


@router.post("/api/capture/switch", response_model=CaptureStateResponse)
async def switch_camera(state: AppState = Depends(require_state)):
    """Flip between rear (environment) and front (user) camera"""
    try:
        await state.session.switch_facing()
    except TrafficGuardError as e:
        raise http_error(e)
    return _state_response(state)


@router.post("/api/capture/overlay", response_model=CaptureStateResponse)
async def set_overlay(request: OverlayRequest, state: AppState = Depends(require_state)):
    """Enable or disable live AI overlay hints"""
    try:
        await state.session.set_overlay(request.enabled)
    except TrafficGuardError as e:
        raise http_error(e)
    return _state_response(state)


@router.post("/api/capture/frame", response_model=FrameResponse)
async def push_frame(request: FrameRequest, state: AppState = Depends(require_state)):
    """Push the newest camera frame (dropped unless the camera is open)"""
    return FrameResponse(accepted=state.device.push_frame(request.frame))


@router.post("/api/capture/photo", response_model=CaptureStateResponse)
async def capture_photo(state: AppState = Depends(require_state)):
    try:
        await state.session.capture_photo()
    except TrafficGuardError as e:
        raise http_error(e)
    return _state_response(state)


@router.post("/api/capture/record/start", response_model=CaptureStateResponse)
async def start_recording(state: AppState = Depends(require_state)):
    try:
        await state.session.start_recording()
    except TrafficGuardError as e:
        raise http_error(e)
    return _state_response(state)


@router.post("/api/capture/record/stop", response_model=CaptureStateResponse)
async def stop_recording(state: AppState = Depends(require_state)):
    """Stop recording; a no-op if the watchdog already ended the clip"""
    await state.session.stop_recording()
    return _state_response(state)


@router.post("/api/capture/upload", response_model=CaptureStateResponse)
async def upload_media(request: UploadRequest, state: AppState = Depends(require_state)):
    """
    Upload a photo or a clip

    Video files are decoded on the device; the clip is sent as its
    extracted frames.
    """
    kind = MediaKind(request.kind)
    payload = request.image if kind == MediaKind.IMAGE else request.frames
    try:
        state.session.load_media(kind, payload)
    except TrafficGuardError as e:
        raise http_error(e)
    return _state_response(state)


@router.post("/api/capture/discard", response_model=CaptureStateResponse)
async def discard_capture(state: AppState = Depends(require_state)):
    """Drop the captured media and release the camera"""
    if state.session.mode == CaptureMode.PROCESSING:
        raise HTTPException(status_code=409, detail="A scan is in progress; cancel it instead")
    await state.session.discard()
    return _state_response(state)


@router.post("/api/capture/error", response_model=CaptureStateResponse)
async def report_camera_error(request: CaptureErrorRequest, state: AppState = Depends(require_state)):
    """Camera permission or hardware failure reported by the device"""
    if state.session.mode == CaptureMode.PROCESSING:
        raise HTTPException(status_code=409, detail="A scan is in progress; cancel it instead")
    if state.session.mode == CaptureMode.IDLE:
        state.device.deny(request.reason)
    else:
        await state.session.fail(request.reason)
    return _state_response(state)
