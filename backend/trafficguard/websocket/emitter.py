"""
WebSocket Event Emitter

Server→client events for the officer device. The async emit_* methods
are handed to the pipeline, workflow and dispatcher as callbacks; the
sync notify_* methods are for components that report state from plain
code (capture session listener, history persistence failures) and only
schedule the emit on the running loop.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Set

from trafficguard import __version__
from trafficguard.errors import PersistenceError, PipelineError
from trafficguard.models import ScanRecord

from .events import (
    ConnectionSuccessData,
    CriticalAlertData,
    NotificationSentData,
    OverlayHintData,
    PersistenceErrorData,
    ScanCompletedData,
    ScanFailedData,
    ServerEvent,
)


class WebSocketEmitter:
    """
    Centralized WebSocket event emitter

    Usage:
        emitter = WebSocketEmitter(sio)
        pipeline = AnalysisPipeline(..., alert_sink=emitter.emit_critical_alert)
        session = CaptureSession(..., listener=emitter.notify_capture_state)
    """

    def __init__(self, sio):
        """
        Initialize the WebSocket emitter

        Args:
            sio: Socket.IO AsyncServer instance
        """
        self.sio = sio

        self._last_overlay_text = ""
        self._pending: Set[asyncio.Task] = set()

        # Statistics
        self._emit_count = 0
        self._error_count = 0
        self._last_emit_time = 0

    # ============================================
    # Connection Events
    # ============================================

    async def emit_connection_success(self, sid: str):
        """Emit connection success to specific client"""
        data = ConnectionSuccessData(timestamp=time.time(), serverVersion=__version__)
        await self._emit(ServerEvent.CONNECTION_SUCCESS.value, data.model_dump(), room=sid)

    # ============================================
    # Scan Events
    # ============================================

    async def emit_scan_completed(self, record: ScanRecord):
        """Regular completion signal for a recorded scan"""
        data = ScanCompletedData(
            recordId=record.id,
            kind=record.kind.value,
            plateNumber=record.plate_number,
            status=record.status.value,
            riskScore=record.analysis.risk_score,
            totalFine=record.total_fine,
            violationCount=len(record.analysis.violations),
            timestamp=time.time(),
        )
        await self._emit(ServerEvent.SCAN_COMPLETED.value, data.model_dump())

    async def emit_scan_failed(self, error: PipelineError):
        data = ScanFailedData(message=error.user_message, detail=error.message, timestamp=time.time())
        await self._emit(ServerEvent.SCAN_FAILED.value, data.model_dump())

    async def emit_critical_alert(self, alert):
        """
        High-priority alert for a Critical violation

        Args:
            alert: CriticalAlert from the analysis pipeline
        """
        data = CriticalAlertData(
            plateNumber=alert.plate_number,
            rule=alert.rule,
            message=alert.message,
            timestamp=time.time(),
        )
        print(f"[WS] {alert.message} ({alert.plate_number})")
        await self._emit(ServerEvent.ALERT_CRITICAL.value, data.model_dump())

    async def emit_desktop_notification(self, title: str, body: str):
        """Desktop-style alert after a warning / e-challan goes out"""
        data = NotificationSentData(title=title, body=body, timestamp=time.time())
        await self._emit(ServerEvent.NOTIFICATION_SENT.value, data.model_dump())

    # ============================================
    # Capture Events
    # ============================================

    async def emit_capture_state(self, snapshot: Dict[str, Any]):
        await self._emit(ServerEvent.CAPTURE_STATE.value, {**snapshot, "timestamp": time.time()})

    async def emit_overlay_hint(self, text: str):
        data = OverlayHintData(text=text, timestamp=time.time())
        await self._emit(ServerEvent.OVERLAY_HINT.value, data.model_dump())

    def notify_capture_state(self, snapshot: Dict[str, Any]):
        """Session listener; also pushes overlay:hint when the hint text changes"""
        self._schedule(self.emit_capture_state(snapshot))

        text = snapshot.get("overlayText") or ""
        if text and text != self._last_overlay_text:
            self._schedule(self.emit_overlay_hint(text))
        self._last_overlay_text = text

    # ============================================
    # Storage Events
    # ============================================

    async def emit_persistence_error(self, message: str):
        data = PersistenceErrorData(message=message, timestamp=time.time())
        await self._emit(ServerEvent.PERSISTENCE_ERROR.value, data.model_dump())

    def notify_persistence_error(self, error: PersistenceError):
        """History store callback; the in-memory change has already happened"""
        self._schedule(self.emit_persistence_error(error.message))

    # ============================================
    # Internal Methods
    # ============================================

    def _schedule(self, coro):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller outside the server); nothing to deliver to
            coro.close()
            return

        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _emit(self, event: str, data: Any, room: Optional[str] = None):
        """
        Internal emit with error handling and statistics

        Args:
            event: Event name
            data: Event data
            room: Optional room to emit to
        """
        try:
            if room:
                await self.sio.emit(event, data, room=room)
            else:
                await self.sio.emit(event, data)

            self._emit_count += 1
            self._last_emit_time = time.time()

        except Exception as e:
            self._error_count += 1
            print(f"[WS ERROR] Failed to emit {event}: {e}")

    def get_stats(self) -> Dict[str, Any]:
        """Get emitter statistics"""
        return {
            "totalEmits": self._emit_count,
            "errorCount": self._error_count,
            "lastEmitTime": self._last_emit_time,
            "pendingEmits": len(self._pending),
        }


# Global emitter instance (initialized in main.py)
emitter: Optional[WebSocketEmitter] = None


def get_emitter() -> Optional[WebSocketEmitter]:
    """Get the global WebSocket emitter instance"""
    return emitter


def set_emitter(e: WebSocketEmitter):
    """Set the global WebSocket emitter instance"""
    global emitter
    emitter = e
