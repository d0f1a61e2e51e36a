"""
History Routes - Scan history, dashboard statistics and CSV export

Endpoints:
- GET /api/history - List scans (newest first)
- GET /api/history/stats - Dashboard statistics
- GET /api/history/export - Download history as CSV
- DELETE /api/history - Clear all scans
- GET /api/history/{id} - Get a specific scan
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from trafficguard.history import export_filename, export_history_csv
from trafficguard.models import ScanStatus
from trafficguard.state import AppState

from .common import ScanResponse, message_response, require_state, to_scan_response

router = APIRouter(tags=["history"])


class HistoryStatsResponse(BaseModel):
    """Dashboard statistics"""
    totalScans: int
    flaggedCount: int
    violationCount: int
    challansSent: int
    totalFines: float
    complianceRate: float


@router.get("/api/history", response_model=List[ScanResponse])
async def get_history(
    vehicleType: Optional[str] = Query(None, description="Two Wheeler, Four Wheeler, Heavy Vehicle or All"),
    status: Optional[ScanStatus] = Query(None, description="Filter by scan status"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    thumbnails: bool = Query(True, description="Include thumbnail images"),
    state: AppState = Depends(require_state),
):
    """
    Get scan history

    Returns scans newest first, optionally filtered by vehicle type and
    status.
    """
    records = state.history.filter_by_vehicle_type(vehicleType)
    if status is not None:
        records = [r for r in records if r.status == status]

    page = records[offset:offset + limit]
    return [to_scan_response(r, include_thumbnail=thumbnails) for r in page]


@router.get("/api/history/stats", response_model=HistoryStatsResponse)
async def get_history_stats(state: AppState = Depends(require_state)):
    stats = state.history.statistics()
    return HistoryStatsResponse(
        totalScans=stats.total_scans,
        flaggedCount=stats.flagged_count,
        violationCount=stats.violation_count,
        challansSent=stats.challans_sent,
        totalFines=stats.total_fines,
        complianceRate=round(stats.compliance_rate, 1),
    )


@router.get("/api/history/export")
async def export_history(
    vehicleType: Optional[str] = Query(None),
    state: AppState = Depends(require_state),
):
    """Download the (filtered) history as ``traffic_report_<date>.csv``"""
    records = state.history.filter_by_vehicle_type(vehicleType)
    if not records:
        raise HTTPException(status_code=404, detail="No data to export.")

    filename = export_filename()
    print(f"[HISTORY] Exported {len(records)} record(s) to {filename}")
    return Response(
        content=export_history_csv(records),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("/api/history")
async def clear_history(state: AppState = Depends(require_state)):
    """Delete every scan record"""
    count = len(state.history)
    state.history.clear()
    return message_response(f"Cleared {count} scan(s)", cleared=count)


@router.get("/api/history/{record_id}", response_model=ScanResponse)
async def get_history_record(record_id: str, state: AppState = Depends(require_state)):
    record = state.history.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Scan {record_id} not found")
    return to_scan_response(record)
