"""
Data Models Package

Pydantic models shared by the capture, analysis, history and
notification components.
"""

from .vehicle import (
    DocumentStatus,
    VehicleType,
    VehicleOwner,
    VehicleDocuments,
    VehicleRecord,
    video_evidence_vehicle,
)
from .compliance import (
    Severity,
    SEVERITY_ORDER,
    Violation,
    ComplianceResult,
)
from .scan import (
    UNKNOWN_PLATE,
    VIDEO_PLATE,
    MediaKind,
    CaptureMode,
    FacingMode,
    ScanStatus,
    NotificationKind,
    ScanRecord,
)
from .officer import Officer
from .chat import ChatMessage, GroundedAnswer

__all__ = [
    # Vehicle
    "DocumentStatus",
    "VehicleType",
    "VehicleOwner",
    "VehicleDocuments",
    "VehicleRecord",
    "video_evidence_vehicle",

    # Compliance
    "Severity",
    "SEVERITY_ORDER",
    "Violation",
    "ComplianceResult",

    # Scan
    "UNKNOWN_PLATE",
    "VIDEO_PLATE",
    "MediaKind",
    "CaptureMode",
    "FacingMode",
    "ScanStatus",
    "NotificationKind",
    "ScanRecord",

    # Officer & assistant
    "Officer",
    "ChatMessage",
    "GroundedAnswer",
]
