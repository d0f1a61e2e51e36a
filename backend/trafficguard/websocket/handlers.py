"""
WebSocket Client Event Handlers

Client→server events: the officer device streams camera frames while the
camera view is active and reports camera failures.

All handlers are registered with the Socket.IO server in main.py.
"""

import time
from typing import Any, Dict, Optional

from pydantic import ValidationError

from trafficguard.models import CaptureMode

from .emitter import WebSocketEmitter
from .events import CaptureErrorRequest, CaptureFrameRequest, ClientEvent


class WebSocketHandlers:
    """
    Centralized WebSocket event handlers

    Handles all client→server events and delegates to the capture session.
    """

    def __init__(self, sio, emitter: WebSocketEmitter, state_provider):
        """
        Initialize handlers

        Args:
            sio: Socket.IO AsyncServer instance
            emitter: WebSocket emitter instance
            state_provider: Callable returning the current AppState
        """
        self.sio = sio
        self.emitter = emitter
        self.state_provider = state_provider

        # Track connected clients
        self._clients: Dict[str, Dict[str, Any]] = {}

        self._register_handlers()

    def _register_handlers(self):
        """Register all Socket.IO event handlers"""
        self.sio.on(ClientEvent.CONNECT.value, self.handle_connect)
        self.sio.on(ClientEvent.DISCONNECT.value, self.handle_disconnect)

        self.sio.on(ClientEvent.CAPTURE_FRAME.value, self.handle_capture_frame)
        self.sio.on(ClientEvent.CAPTURE_ERROR.value, self.handle_capture_error)

    # ============================================
    # Connection Handlers
    # ============================================

    async def handle_connect(self, sid: str, environ: Dict, auth: Optional[Dict] = None):
        """
        Handle client connection

        Args:
            sid: Session ID
            environ: Connection environment
        """
        client_info = {
            "sid": sid,
            "connected_at": time.time(),
            "remote_addr": environ.get("REMOTE_ADDR", "unknown"),
            "frames": 0,
        }
        self._clients[sid] = client_info

        print(f"[WS] Client connected: {sid} from {client_info['remote_addr']}")

        await self.emitter.emit_connection_success(sid)

        # Current capture state so a reconnecting device can resync
        state = self.state_provider()
        if state is not None and state.session is not None:
            await self.sio.emit("capture:state", state.session.snapshot(), room=sid)

    async def handle_disconnect(self, sid: str):
        if sid in self._clients:
            client = self._clients.pop(sid)
            duration = time.time() - client["connected_at"]
            print(f"[WS] Client disconnected: {sid} (duration: {duration:.1f}s)")

    # ============================================
    # Capture Handlers
    # ============================================

    async def handle_capture_frame(self, sid: str, data: Dict):
        """
        Newest camera frame from the device

        Args:
            sid: Session ID
            data: {frame: base64 JPEG or data URL}

        Returns:
            Ack payload {accepted: bool}
        """
        try:
            request = CaptureFrameRequest.model_validate(data or {})
        except ValidationError:
            return {"accepted": False, "error": "Missing frame"}

        state = self.state_provider()
        if state is None or state.device is None:
            return {"accepted": False, "error": "Server not ready"}

        accepted = state.device.push_frame(request.frame)
        if accepted and sid in self._clients:
            self._clients[sid]["frames"] += 1
        return {"accepted": accepted}

    async def handle_capture_error(self, sid: str, data: Dict):
        """
        Camera permission / hardware failure reported by the device

        Before the camera opens the failure makes the next start fail;
        during acquisition the session is torn down.
        """
        try:
            request = CaptureErrorRequest.model_validate(data or {})
        except ValidationError:
            request = CaptureErrorRequest()

        state = self.state_provider()
        if state is None or state.session is None:
            return {"status": "ignored"}

        if state.session.mode == CaptureMode.IDLE:
            state.device.deny(request.reason)
        elif not await state.session.fail(request.reason):
            return {"status": "ignored"}

        print(f"[WS] Camera failure from {sid}: {request.reason}")
        return {"status": "ok"}

    # ============================================
    # Utility Methods
    # ============================================

    def get_client_count(self) -> int:
        return len(self._clients)

    def is_client_connected(self, sid: str) -> bool:
        return sid in self._clients


# Global handlers instance (initialized in main.py)
handlers: Optional[WebSocketHandlers] = None


def get_handlers() -> Optional[WebSocketHandlers]:
    """Get the global WebSocket handlers instance"""
    return handlers


def set_handlers(h: WebSocketHandlers):
    """Set the global WebSocket handlers instance"""
    global handlers
    handlers = h
