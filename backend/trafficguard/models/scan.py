"""
Scan Data Models

Capture session enums and the durable scan record kept in history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from .compliance import ComplianceResult
from .vehicle import VehicleRecord


UNKNOWN_PLATE = "UNKNOWN"
VIDEO_PLATE = "DETECTED_IN_VIDEO"


class MediaKind(str, Enum):
    """What the officer captured"""
    IMAGE = "image"
    VIDEO = "video"


class CaptureMode(str, Enum):
    """Capture session lifecycle state"""
    IDLE = "IDLE"
    ACQUIRING = "ACQUIRING"
    PREVIEW = "PREVIEW"
    PROCESSING = "PROCESSING"


class FacingMode(str, Enum):
    """Camera facing"""
    ENVIRONMENT = "environment"
    USER = "user"

    def flipped(self) -> "FacingMode":
        return FacingMode.USER if self == FacingMode.ENVIRONMENT else FacingMode.ENVIRONMENT


class ScanStatus(str, Enum):
    """Outcome classification of a completed scan"""
    FLAGGED = "FLAGGED"
    VERIFIED = "VERIFIED"
    CHALLAN_SENT = "CHALLAN_SENT"


class NotificationKind(str, Enum):
    """Officer action on a scan"""
    WARNING = "WARNING"
    CHALLAN = "CHALLAN"

    @property
    def target_status(self) -> ScanStatus:
        return ScanStatus.CHALLAN_SENT if self == NotificationKind.CHALLAN else ScanStatus.VERIFIED


class ScanRecord(BaseModel):
    """
    Durable unit of scan history

    Created once when the analysis pipeline completes. Only the
    notification dispatcher changes ``status`` afterwards.
    """
    id: str = Field(default_factory=lambda: uuid4().hex)
    kind: MediaKind
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    thumbnail: str = ""
    plate_number: Optional[str] = None
    vehicle: Optional[VehicleRecord] = None
    analysis: Optional[ComplianceResult] = None
    status: ScanStatus = ScanStatus.VERIFIED
    challan_id: Optional[str] = None
    notifications_sent: int = 0

    @classmethod
    def create(
        cls,
        kind: MediaKind,
        thumbnail: str,
        plate_number: Optional[str],
        vehicle: VehicleRecord,
        analysis: ComplianceResult,
    ) -> "ScanRecord":
        """Build a record, classifying it as FLAGGED iff there are violations"""
        return cls(
            kind=kind,
            thumbnail=thumbnail,
            plate_number=plate_number,
            vehicle=vehicle.model_copy(deep=True),
            analysis=analysis.model_copy(deep=True),
            status=ScanStatus.FLAGGED if analysis.has_violations else ScanStatus.VERIFIED,
        )

    @property
    def total_fine(self) -> float:
        return self.analysis.total_fine if self.analysis else 0.0

    @property
    def is_flagged(self) -> bool:
        return self.status == ScanStatus.FLAGGED

    @property
    def has_violations(self) -> bool:
        return bool(self.analysis and self.analysis.has_violations)

    @property
    def vehicle_type(self) -> Optional[str]:
        return self.vehicle.type if self.vehicle else None
