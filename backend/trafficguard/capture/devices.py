"""
Capture Devices

A capture device yields encoded JPEG frames (data URLs or raw base64).
The officer's browser owns the physical camera, so the server-side
device is a frame buffer the client pushes into while the stream is open.
"""

import time
from typing import Optional

from trafficguard.errors import AcquisitionError
from trafficguard.models import FacingMode


class CaptureDevice:
    """
    Interface for a camera stream

    Subclasses implement ``_open``, ``_read`` and ``_close``; this base
    class tracks the open/closed state and facing.
    """

    def __init__(self):
        self.is_open = False
        self.facing: Optional[FacingMode] = None
        self.open_count = 0
        self.close_count = 0

    async def open(self, facing: FacingMode):
        """Acquire the stream for the given facing; raises AcquisitionError"""
        if self.is_open:
            await self.close()
        await self._open(facing)
        self.is_open = True
        self.facing = facing
        self.open_count += 1

    async def read_frame(self, quality: float = 1.0) -> Optional[str]:
        """Latest frame, or None if the stream has not produced one yet"""
        if not self.is_open:
            raise AcquisitionError("Camera stream is not open")
        return await self._read(quality)

    async def close(self):
        """Release the stream; safe to call when already closed"""
        if not self.is_open:
            return
        try:
            await self._close()
        finally:
            self.is_open = False
            self.close_count += 1

    async def _open(self, facing: FacingMode):
        raise NotImplementedError

    async def _read(self, quality: float) -> Optional[str]:
        raise NotImplementedError

    async def _close(self):
        raise NotImplementedError


class RemoteCameraDevice(CaptureDevice):
    """
    Camera stream fed by the client

    The client calls ``push_frame`` (HTTP or Socket.IO ``capture:frame``)
    while the camera view is active. A permission denial reported before
    opening makes the next ``open`` fail.
    """

    def __init__(self):
        super().__init__()
        self._latest_frame: Optional[str] = None
        self._latest_at: float = 0.0
        self._denied_reason: Optional[str] = None
        self.frames_received = 0

    def push_frame(self, frame: str) -> bool:
        """Store the newest frame; frames arriving while closed are dropped"""
        if not self.is_open or not frame:
            return False
        self._latest_frame = frame
        self._latest_at = time.time()
        self.frames_received += 1
        return True

    def deny(self, reason: str):
        """Record a client-side permission or hardware failure"""
        self._denied_reason = reason

    async def _open(self, facing: FacingMode):
        if self._denied_reason:
            reason = self._denied_reason
            self._denied_reason = None
            raise AcquisitionError(f"Could not access camera: {reason}")
        self._latest_frame = None
        self._latest_at = 0.0

    async def _read(self, quality: float) -> Optional[str]:
        # Quality is applied client-side when frames are encoded
        return self._latest_frame

    async def _close(self):
        self._latest_frame = None
