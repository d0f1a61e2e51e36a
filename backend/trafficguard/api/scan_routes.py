"""
Scan Routes - Analysis and enforcement actions

Endpoints:
- POST /api/scans - Analyze the confirmed preview
- GET /api/scans/current - Result of the latest scan
- DELETE /api/scans/current - Cancel the scan in progress
- POST /api/scans/current/dismiss - Close the result view
- POST /api/scans/{id}/warning - Send a warning to the owner
- POST /api/scans/{id}/challan - Issue an e-challan to the owner
- POST /api/scans/scene - Free-text scene description for a photo
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from trafficguard.errors import TrafficGuardError
from trafficguard.models import NotificationKind
from trafficguard.state import AppState

from .common import ScanResponse, http_error, require_state, to_scan_response

router = APIRouter(tags=["scans"])


# ============================================
# Request / Response Models
# ============================================

class CancelResponse(BaseModel):
    cancelled: bool


class DispatchResponse(BaseModel):
    """Outcome of a warning / e-challan request"""
    sent: bool
    kind: str
    message: str
    challanId: Optional[str] = None
    scan: ScanResponse


class SceneRequest(BaseModel):
    image: str = Field(..., min_length=1, description="Base64 JPEG or data URL")


class SceneResponse(BaseModel):
    analysis: str


# ============================================
# Scan Lifecycle
# ============================================

@router.post("/api/scans", response_model=ScanResponse)
async def submit_scan(state: AppState = Depends(require_state)):
    """
    Analyze the current preview

    Runs plate reading, registry lookup and compliance analysis (image)
    or a single video analysis (clip). The record is added to history
    and returned. Returns 409 if the officer cancelled the scan.
    """
    try:
        record = await state.workflow.submit()
    except TrafficGuardError as e:
        raise http_error(e)

    if record is None:
        raise HTTPException(status_code=409, detail="Scan cancelled")
    return to_scan_response(record)


@router.get("/api/scans/current", response_model=ScanResponse)
async def get_current_scan(state: AppState = Depends(require_state)):
    record = state.workflow.current_record
    if record is None:
        raise HTTPException(status_code=404, detail="No scan result to show")
    # Status may have changed since the scan completed
    latest = state.history.get(record.id) or record
    return to_scan_response(latest)


@router.delete("/api/scans/current", response_model=CancelResponse)
async def cancel_scan(state: AppState = Depends(require_state)):
    """Cancel the scan in progress; its late result is never recorded"""
    return CancelResponse(cancelled=await state.workflow.cancel())


@router.post("/api/scans/current/dismiss")
async def dismiss_scan(state: AppState = Depends(require_state)):
    state.workflow.dismiss()
    return {"status": "success"}


# ============================================
# Enforcement Actions
# ============================================

async def _dispatch(state: AppState, record_id: str, kind: NotificationKind,
                    force: bool) -> DispatchResponse:
    try:
        outcome = await state.dispatcher.dispatch(record_id, kind, force=force)
    except TrafficGuardError as e:
        raise http_error(e)

    return DispatchResponse(
        sent=outcome.sent,
        kind=kind.value,
        message=outcome.message,
        challanId=outcome.challan_id,
        scan=to_scan_response(outcome.record, include_thumbnail=False),
    )


@router.post("/api/scans/{record_id}/warning", response_model=DispatchResponse)
async def send_warning(
    record_id: str,
    force: bool = Query(False, description="Re-send even if already issued"),
    state: AppState = Depends(require_state),
):
    """Send a violation warning; the scan becomes VERIFIED"""
    return await _dispatch(state, record_id, NotificationKind.WARNING, force)


@router.post("/api/scans/{record_id}/challan", response_model=DispatchResponse)
async def issue_challan(
    record_id: str,
    force: bool = Query(False, description="Re-send even if already issued"),
    state: AppState = Depends(require_state),
):
    """Issue an e-challan for the total fine; the scan becomes CHALLAN_SENT"""
    return await _dispatch(state, record_id, NotificationKind.CHALLAN, force)


# ============================================
# Scene Understanding
# ============================================

@router.post("/api/scans/scene", response_model=SceneResponse)
async def analyze_scene(request: SceneRequest, state: AppState = Depends(require_state)):
    """Describe hazards, traffic and violations in a photo (not recorded)"""
    text = await state.ai_service.analyze_traffic_scene(request.image)
    return SceneResponse(analysis=text)
