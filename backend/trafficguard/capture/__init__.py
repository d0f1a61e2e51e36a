"""
Capture Package

Camera devices and the capture session state machine.
"""

from .devices import CaptureDevice, RemoteCameraDevice
from .session import CaptureSession

__all__ = [
    "CaptureDevice",
    "RemoteCameraDevice",
    "CaptureSession",
]
