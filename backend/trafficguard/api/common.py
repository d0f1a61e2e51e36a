"""
Shared route helpers: app-state access, error translation and the
camelCase scan record response.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from pydantic import BaseModel

from trafficguard.errors import (
    AcquisitionError,
    AuthenticationError,
    DispatchError,
    InvalidTransitionError,
    PipelineError,
    RecordNotFoundError,
    TrafficGuardError,
)
from trafficguard.models import ScanRecord, VehicleRecord
from trafficguard.state import AppState, get_app_state


ERROR_STATUS = {
    InvalidTransitionError: 409,
    RecordNotFoundError: 404,
    AuthenticationError: 401,
    AcquisitionError: 503,
    PipelineError: 502,
    DispatchError: 502,
}


def require_state() -> AppState:
    """FastAPI dependency: the initialized application state"""
    state = get_app_state()
    if state is None:
        raise HTTPException(status_code=503, detail="Server not initialized")
    return state


def http_error(error: TrafficGuardError) -> HTTPException:
    """Translate an application error to an HTTP error"""
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(error, error_type):
            # Auth and transition messages are meant for the officer as-is
            if error_type in (AuthenticationError, InvalidTransitionError, RecordNotFoundError):
                return HTTPException(status_code=status_code, detail=error.message)
            return HTTPException(status_code=status_code, detail=error.user_message)
    return HTTPException(status_code=500, detail=error.user_message)


# ============================================
# Response Models
# ============================================

class ViolationResponse(BaseModel):
    rule: str
    fineAmount: float
    severity: str
    description: str


class VehicleResponse(BaseModel):
    plateNumber: str
    model: str
    type: str
    isStolen: bool
    owner: Dict[str, str]
    documents: Dict[str, str]


class ScanResponse(BaseModel):
    """Scan record as shown on the result and history screens"""
    id: str
    kind: str
    timestamp: str
    thumbnail: str
    plateNumber: Optional[str]
    status: str
    challanId: Optional[str] = None
    notificationsSent: int = 0
    riskScore: int = 0
    summary: str = ""
    actionRecommended: str = ""
    totalFine: float = 0.0
    violations: List[ViolationResponse] = []
    vehicle: Optional[VehicleResponse] = None


def to_vehicle_response(vehicle: VehicleRecord) -> VehicleResponse:
    prompt = vehicle.to_prompt_dict()
    return VehicleResponse(
        plateNumber=vehicle.plate_number,
        model=vehicle.model,
        type=vehicle.type,
        isStolen=vehicle.is_stolen,
        owner=vehicle.owner.model_dump(),
        documents=prompt["documents"],
    )


def to_scan_response(record: ScanRecord, include_thumbnail: bool = True) -> ScanResponse:
    analysis = record.analysis
    return ScanResponse(
        id=record.id,
        kind=record.kind.value,
        timestamp=record.timestamp.isoformat(),
        thumbnail=record.thumbnail if include_thumbnail else "",
        plateNumber=record.plate_number,
        status=record.status.value,
        challanId=record.challan_id,
        notificationsSent=record.notifications_sent,
        riskScore=analysis.risk_score if analysis else 0,
        summary=analysis.summary if analysis else "",
        actionRecommended=analysis.action_recommended if analysis else "",
        totalFine=record.total_fine,
        violations=[
            ViolationResponse(
                rule=v.rule,
                fineAmount=v.fine_amount,
                severity=v.severity,
                description=v.description,
            )
            for v in (analysis.violations if analysis else [])
        ],
        vehicle=to_vehicle_response(record.vehicle) if record.vehicle else None,
    )


def message_response(message: str, **extra: Any) -> Dict[str, Any]:
    return {"status": "success", "message": message, **extra}
