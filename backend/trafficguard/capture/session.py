"""
Capture Session State Machine

One officer-initiated acquisition: a single photo or a short clip of
sampled frames.

    IDLE ──start──▶ ACQUIRING ──photo / record stop / watchdog──▶ PREVIEW
      ▲                 │                                          │
      │              discard                                    hand_off
      │                 ▼                                          ▼
      └──────────── (release) ◀──────────complete────────── PROCESSING

The live overlay loop, the frame sampler and the recording watchdog are
asyncio tasks owned by the session. Every path out of ACQUIRING/PREVIEW
cancels them and closes the device.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Union

from trafficguard.errors import AcquisitionError, InvalidTransitionError
from trafficguard.models import CaptureMode, FacingMode, MediaKind

from .devices import CaptureDevice


Payload = Union[str, List[str]]
HintProvider = Callable[[str], Awaitable[str]]
StateListener = Callable[[dict], None]


class CaptureSession:
    """
    Capture lifecycle for one officer device

    Usage:
        session = CaptureSession(device, config, hint_provider=ai.live_traffic_hint)
        await session.start(MediaKind.VIDEO)
        await session.start_recording()
        ...
        await session.stop_recording()
        kind, payload = session.hand_off()
        ...
        session.complete()
    """

    def __init__(
        self,
        device: CaptureDevice,
        config: dict = None,
        hint_provider: Optional[HintProvider] = None,
        listener: Optional[StateListener] = None,
    ):
        """
        Initialize the capture session

        Args:
            device: Camera stream to acquire from
            config: Capture configuration (intervals, limits)
            hint_provider: Async callable returning a short scene hint for a frame
            listener: Called with a state snapshot after every transition
        """
        self.device = device
        self.config = config or {}
        self.hint_provider = hint_provider
        self.listener = listener

        self.overlay_interval = float(self.config.get('overlayInterval', 2.0))
        self.frame_interval = float(self.config.get('frameInterval', 0.5))
        self.max_duration = float(self.config.get('maxDuration', 5.0))
        self.max_frames = int(self.config.get('maxFrames', 10))
        self.overlay_quality = float(self.config.get('overlayFrameQuality', 0.5))

        self.mode = CaptureMode.IDLE
        self.kind = MediaKind.IMAGE
        self.facing = FacingMode(self.config.get('defaultFacing', FacingMode.ENVIRONMENT.value))
        self.payload: Optional[Payload] = None

        self.overlay_text = ""
        self._frames: List[str] = []
        self._recording = False

        self._overlay_task: Optional[asyncio.Task] = None
        self._sampler_task: Optional[asyncio.Task] = None
        self._watchdog_task: Optional[asyncio.Task] = None

    # ============================================
    # Properties
    # ============================================

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def overlay_enabled(self) -> bool:
        return self._overlay_task is not None and not self._overlay_task.done()

    @property
    def frame_count(self) -> int:
        if self._recording:
            return len(self._frames)
        if isinstance(self.payload, list):
            return len(self.payload)
        return 1 if self.payload else 0

    def snapshot(self) -> dict:
        """Serializable view of the session for the API and WebSocket"""
        return {
            'mode': self.mode.value,
            'kind': self.kind.value,
            'facing': self.facing.value,
            'recording': self._recording,
            'overlayEnabled': self.overlay_enabled,
            'overlayText': self.overlay_text,
            'frameCount': self.frame_count,
            'deviceOpen': self.device.is_open,
        }

    # ============================================
    # Acquisition
    # ============================================

    async def start(self, kind: MediaKind = MediaKind.IMAGE):
        """Open the camera and enter ACQUIRING"""
        self._require(CaptureMode.IDLE)
        self.kind = kind

        try:
            await self.device.open(self.facing)
        except Exception as e:
            await self._teardown()
            print(f"[CAPTURE] Camera acquisition failed: {e}")
            if isinstance(e, AcquisitionError):
                raise
            raise AcquisitionError() from e

        self._set_mode(CaptureMode.ACQUIRING)
        print(f"[CAPTURE] Camera started ({self.facing.value}, {kind.value})")

    def set_kind(self, kind: MediaKind):
        """Switch between photo and video before capturing"""
        if self._recording:
            raise InvalidTransitionError("Cannot change capture type while recording")
        if self.mode not in (CaptureMode.IDLE, CaptureMode.ACQUIRING):
            raise InvalidTransitionError(f"Cannot change capture type in {self.mode.value}")
        self.kind = kind
        self._notify()

    async def switch_facing(self):
        """
        Flip front/back camera

        The device is torn down and re-acquired. On failure the session
        falls back to IDLE with nothing left open.
        """
        self._require(CaptureMode.ACQUIRING)
        if self._recording:
            raise InvalidTransitionError("Cannot switch camera while recording")

        await self._cancel_task(self._overlay_task)
        self._overlay_task = None
        self.overlay_text = ""

        facing = self.facing.flipped()
        try:
            await self.device.close()
            await self.device.open(facing)
        except Exception as e:
            await self._teardown()
            self._reset()
            print(f"[CAPTURE] Camera switch failed: {e}")
            if isinstance(e, AcquisitionError):
                raise
            raise AcquisitionError() from e

        self.facing = facing
        print(f"[CAPTURE] Switched camera to {self.facing.value}")
        self._notify()

    async def set_overlay(self, enabled: bool):
        """Start or stop the live AI overlay hints"""
        if enabled:
            self._require(CaptureMode.ACQUIRING)
            if self._recording:
                raise InvalidTransitionError("Live overlay is disabled while recording")
            if self.hint_provider is None:
                raise InvalidTransitionError("No live hint provider configured")
            if not self.overlay_enabled:
                self._overlay_task = asyncio.create_task(self._overlay_loop())
        else:
            await self._cancel_task(self._overlay_task)
            self._overlay_task = None
            self.overlay_text = ""
        self._notify()

    async def capture_photo(self) -> str:
        """Grab the current frame and move to PREVIEW"""
        self._require(CaptureMode.ACQUIRING)
        if self._recording:
            raise InvalidTransitionError("Stop recording before taking a photo")

        frame = await self.device.read_frame()
        if not frame:
            raise AcquisitionError("No frame received from camera")

        self.kind = MediaKind.IMAGE
        self.payload = frame
        await self._teardown()
        self._set_mode(CaptureMode.PREVIEW)
        print("[CAPTURE] Photo captured")
        return frame

    async def start_recording(self):
        """Begin sampling frames; the watchdog ends the clip after max duration"""
        self._require(CaptureMode.ACQUIRING)
        if self._recording:
            return

        # Overlay and recording never run together
        await self._cancel_task(self._overlay_task)
        self._overlay_task = None
        self.overlay_text = ""

        self.kind = MediaKind.VIDEO
        self._frames = []
        self._recording = True
        self._sampler_task = asyncio.create_task(self._sample_frames())
        self._watchdog_task = asyncio.create_task(self._watchdog())

        print(f"[CAPTURE] Recording started (max {self.max_duration:.1f}s, {self.max_frames} frames)")
        self._notify()

    async def stop_recording(self) -> bool:
        """
        Manual stop

        Returns:
            True if this call ended the recording, False if the watchdog
            already did (no-op).
        """
        return await self._finish_recording("manual")

    def load_media(self, kind: MediaKind, payload: Payload):
        """Upload path: take media supplied by the client straight to PREVIEW"""
        self._require(CaptureMode.IDLE)

        if kind == MediaKind.IMAGE:
            if not isinstance(payload, str) or not payload:
                raise InvalidTransitionError("Image upload must be a single encoded frame")
            self.payload = payload
        else:
            frames = [f for f in (payload or []) if f] if isinstance(payload, list) else []
            if not frames:
                raise InvalidTransitionError("Video upload must contain at least one frame")
            self.payload = frames[:self.max_frames]

        self.kind = kind
        self._set_mode(CaptureMode.PREVIEW)
        print(f"[CAPTURE] Media loaded ({kind.value}, {self.frame_count} frame(s))")

    # ============================================
    # Hand-off & exit paths
    # ============================================

    def hand_off(self) -> tuple[MediaKind, Payload]:
        """Confirm the preview and pass the payload to the analysis pipeline"""
        self._require(CaptureMode.PREVIEW)
        payload = list(self.payload) if isinstance(self.payload, list) else self.payload
        self._set_mode(CaptureMode.PROCESSING)
        return self.kind, payload

    def complete(self):
        """Pipeline finished (or was cancelled); back to IDLE"""
        self._require(CaptureMode.PROCESSING)
        self._reset()

    async def discard(self):
        """Drop whatever was captured and release the camera, from any state"""
        await self._teardown()
        self._reset()
        print("[CAPTURE] Session discarded")

    async def fail(self, reason: str) -> bool:
        """
        Client reported a camera failure (e.g. permission denied)

        Ignored while PROCESSING: the camera is already released and the
        scan belongs to the workflow, which only ends through complete().

        Returns:
            True if the session was torn down
        """
        if self.mode == CaptureMode.PROCESSING:
            print(f"[CAPTURE] Camera failure ignored during processing: {reason}")
            return False

        print(f"[CAPTURE] Acquisition failure reported: {reason}")
        await self._teardown()
        self._reset()
        return True

    # ============================================
    # Background tasks
    # ============================================

    async def _overlay_loop(self):
        """Periodic low-latency scene hint while the camera is live"""
        try:
            while self.mode == CaptureMode.ACQUIRING and not self._recording:
                await asyncio.sleep(self.overlay_interval)
                frame = await self.device.read_frame(self.overlay_quality)
                if not frame:
                    continue
                try:
                    self.overlay_text = await self.hint_provider(frame)
                except Exception as e:
                    print(f"[CAPTURE] Overlay hint error: {e}")
                    continue
                self._notify()
        except asyncio.CancelledError:
            pass
        except AcquisitionError as e:
            print(f"[CAPTURE] Overlay stopped: {e}")

    async def _sample_frames(self):
        """Append one frame per interval until the cap is reached"""
        try:
            while self._recording and len(self._frames) < self.max_frames:
                await asyncio.sleep(self.frame_interval)
                frame = await self.device.read_frame(self.overlay_quality)
                if frame and self._recording:
                    self._frames.append(frame)
        except asyncio.CancelledError:
            pass
        except AcquisitionError as e:
            # Partial clip is still valid input
            print(f"[CAPTURE] Frame sampling stopped early: {e}")

    async def _watchdog(self):
        try:
            await asyncio.sleep(self.max_duration)
        except asyncio.CancelledError:
            return
        await self._finish_recording("watchdog")

    async def _finish_recording(self, source: str) -> bool:
        # Flag flips before the first await so a racing caller sees it
        if not self._recording:
            return False
        self._recording = False

        frames = list(self._frames)
        self._frames = []
        await self._teardown()

        if not frames:
            self._reset()
            print(f"[CAPTURE] Recording stopped ({source}) with no frames")
            return True

        self.payload = frames
        self._set_mode(CaptureMode.PREVIEW)
        print(f"[CAPTURE] Recording stopped ({source}): {len(frames)} frames")
        return True

    # ============================================
    # Helpers
    # ============================================

    def _require(self, *modes: CaptureMode):
        if self.mode not in modes:
            allowed = ", ".join(m.value for m in modes)
            raise InvalidTransitionError(
                f"Capture session is {self.mode.value}, expected {allowed}"
            )

    def _set_mode(self, mode: CaptureMode):
        self.mode = mode
        self._notify()

    def _reset(self):
        self.payload = None
        self._frames = []
        self._recording = False
        self.overlay_text = ""
        self._set_mode(CaptureMode.IDLE)

    def _notify(self):
        if self.listener:
            try:
                self.listener(self.snapshot())
            except Exception as e:
                print(f"[CAPTURE] State listener error: {e}")

    async def _teardown(self):
        """Cancel every background task and close the device"""
        self._recording = False
        for task in (self._overlay_task, self._sampler_task, self._watchdog_task):
            await self._cancel_task(task)
        self._overlay_task = None
        self._sampler_task = None
        self._watchdog_task = None
        self.overlay_text = ""
        await self.device.close()

    @staticmethod
    async def _cancel_task(task: Optional[asyncio.Task]):
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
