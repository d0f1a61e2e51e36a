"""
WebSocket Event Type Definitions

Events are categorized as:
- Server → Client: Updates pushed to the officer device
- Client → Server: Camera frames and subscriptions
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


# ============================================
# Event Name Constants
# ============================================

class ServerEvent(str, Enum):
    """Events emitted from server to client"""

    # Connection
    CONNECTION_SUCCESS = "connection:success"

    # Scan lifecycle
    SCAN_COMPLETED = "scan:completed"
    SCAN_FAILED = "scan:failed"
    ALERT_CRITICAL = "alert:critical"

    # Notifications
    NOTIFICATION_SENT = "notification:sent"

    # Capture
    CAPTURE_STATE = "capture:state"
    OVERLAY_HINT = "overlay:hint"

    # Storage
    PERSISTENCE_ERROR = "persistence:error"


class ClientEvent(str, Enum):
    """Events received from client"""

    CONNECT = "connect"
    DISCONNECT = "disconnect"

    # Camera stream
    CAPTURE_FRAME = "capture:frame"
    CAPTURE_ERROR = "capture:error"


# ============================================
# Server → Client Event Data Models
# ============================================

class ConnectionSuccessData(BaseModel):
    """Data for connection:success event"""
    message: str = "Connected to Traffic Guard AI"
    timestamp: float
    serverVersion: str


class ScanCompletedData(BaseModel):
    """Data for scan:completed event"""
    recordId: str
    kind: str
    plateNumber: str
    status: str
    riskScore: int
    totalFine: float
    violationCount: int
    timestamp: float


class ScanFailedData(BaseModel):
    """Data for scan:failed event"""
    message: str
    detail: Optional[str] = None
    timestamp: float


class CriticalAlertData(BaseModel):
    """Data for alert:critical event"""
    plateNumber: str
    rule: str
    message: str
    timestamp: float


class NotificationSentData(BaseModel):
    """Data for notification:sent event (desktop-style alert)"""
    title: str
    body: str
    timestamp: float


class OverlayHintData(BaseModel):
    """Data for overlay:hint event"""
    text: str
    timestamp: float


class PersistenceErrorData(BaseModel):
    """Data for persistence:error event"""
    message: str
    timestamp: float


# ============================================
# Client → Server Event Data Models
# ============================================

class CaptureFrameRequest(BaseModel):
    """Data for capture:frame event"""
    frame: str


class CaptureErrorRequest(BaseModel):
    """Data for capture:error event"""
    reason: str = "Camera unavailable"

