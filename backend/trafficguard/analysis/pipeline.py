"""
Analysis Pipeline

Turns captured media into a plate, a vehicle record and a compliance
result.

Image path:  OCR → registry lookup → compliance scoring
Video path:  down-sample frames → one combined video analysis

Stages are awaited strictly in sequence. Any stage failure aborts the
run with a single PipelineError; nothing partial is returned.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Union

from trafficguard.errors import PipelineError
from trafficguard.models import (
    ComplianceResult,
    MediaKind,
    UNKNOWN_PLATE,
    VIDEO_PLATE,
    VehicleRecord,
    video_evidence_vehicle,
)

from .rules import select_video_frames


@dataclass
class PipelineResult:
    """Output of one successful pipeline run"""
    kind: MediaKind
    thumbnail: str
    plate_number: str
    vehicle: VehicleRecord
    analysis: ComplianceResult


@dataclass
class CriticalAlert:
    """High-priority alert for a Critical-severity violation"""
    plate_number: str
    rule: str

    @property
    def message(self) -> str:
        return f"CRITICAL ALERT: {self.rule}"

    def to_dict(self) -> dict:
        return {
            'plateNumber': self.plate_number,
            'rule': self.rule,
            'message': self.message,
        }


AlertSink = Callable[[CriticalAlert], Awaitable[None]]


class AnalysisPipeline:
    """
    Sequential analysis of one capture

    Usage:
        pipeline = AnalysisPipeline(ai_service, registry, alert_sink=emitter.emit_critical_alert)
        result = await pipeline.analyze(MediaKind.IMAGE, frame)
    """

    def __init__(self, ai_service, vehicle_registry, config: dict = None,
                 alert_sink: Optional[AlertSink] = None):
        """
        Initialize the pipeline

        Args:
            ai_service: TrafficAIService (or compatible) collaborator
            vehicle_registry: Registry with ``async lookup(plate)``
            config: Analysis configuration (maxVideoFrames)
            alert_sink: Async callable receiving CriticalAlert
        """
        self.ai_service = ai_service
        self.vehicle_registry = vehicle_registry
        self.config = config or {}
        self.alert_sink = alert_sink
        self.max_video_frames = int(self.config.get('maxVideoFrames', 10))

        self.runs = 0
        self.failures = 0

    async def analyze(self, kind: MediaKind, payload: Union[str, List[str]]) -> PipelineResult:
        """
        Run the pipeline for a captured image or clip

        Raises:
            PipelineError: any stage failed
        """
        self.runs += 1
        try:
            if kind == MediaKind.IMAGE:
                result = await self._analyze_image(payload)
            else:
                result = await self._analyze_video(payload)
        except asyncio.CancelledError:
            print("[PIPELINE] Run cancelled")
            raise
        except PipelineError as e:
            self.failures += 1
            print(f"[PIPELINE] Scan failed: {e}")
            raise
        except Exception as e:
            self.failures += 1
            print(f"[PIPELINE] Scan failed: {type(e).__name__}: {e}")
            raise PipelineError() from e

        await self._raise_critical_alert(result)

        print(f"[PIPELINE] {kind.value} scan complete: {result.plate_number} "
              f"({len(result.analysis.violations)} violations, ₹{result.analysis.total_fine:.0f})")
        return result

    async def _analyze_image(self, image: str) -> PipelineResult:
        if not isinstance(image, str) or not image:
            raise PipelineError("No image to analyze")

        # 1. Plate OCR; unreadable plates continue as the sentinel
        plate = await self.ai_service.extract_license_plate(image) or UNKNOWN_PLATE

        # 2. Registry lookup
        vehicle = await self.vehicle_registry.lookup(plate)
        if vehicle is None:
            raise PipelineError(f"No vehicle record for {plate}")

        # 3. Compliance scoring against the resolved record
        analysis = await self.ai_service.analyze_vehicle_compliance(vehicle)

        return PipelineResult(
            kind=MediaKind.IMAGE,
            thumbnail=image,
            plate_number=plate,
            vehicle=vehicle,
            analysis=analysis,
        )

    async def _analyze_video(self, frames: List[str]) -> PipelineResult:
        if not isinstance(frames, list) or not frames:
            raise PipelineError("No video frames to analyze")

        selected = select_video_frames(frames, self.max_video_frames)
        analysis = await self.ai_service.analyze_video_footage(selected)

        return PipelineResult(
            kind=MediaKind.VIDEO,
            thumbnail=frames[0],
            plate_number=VIDEO_PLATE,
            vehicle=video_evidence_vehicle(),
            analysis=analysis,
        )

    async def _raise_critical_alert(self, result: PipelineResult):
        critical = result.analysis.critical_violations()
        if not critical:
            return

        alert = CriticalAlert(plate_number=result.vehicle.plate_number, rule=critical[0].rule)
        print(f"[PIPELINE] {alert.message} ({alert.plate_number})")

        if self.alert_sink is None:
            return
        try:
            await self.alert_sink(alert)
        except Exception as e:
            print(f"[PIPELINE] Failed to deliver critical alert: {e}")
