"""
Scan Workflow

Glue between the capture session, the analysis pipeline and history.
Each confirmed capture runs as one asyncio task bound to the session:
cancelling it (or the session going away) drops the run, and a result
that arrives after cancellation is never recorded.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Set

from trafficguard.errors import InvalidTransitionError, PipelineError
from trafficguard.models import CaptureMode, ScanRecord


CompletedCallback = Callable[[ScanRecord], Awaitable[None]]
FailedCallback = Callable[[PipelineError], Awaitable[None]]


class ScanWorkflow:
    """
    Run the pipeline for the capture session's confirmed preview

    Usage:
        workflow = ScanWorkflow(session, pipeline, history)
        record = await workflow.submit()     # None if cancelled
        ...
        await workflow.cancel()              # from another request
    """

    def __init__(self, session, pipeline, history,
                 on_completed: Optional[CompletedCallback] = None,
                 on_failed: Optional[FailedCallback] = None):
        """
        Args:
            session: CaptureSession supplying the payload
            pipeline: AnalysisPipeline
            history: ScanHistoryStore receiving completed records
            on_completed: Async callback for the regular completion signal
            on_failed: Async callback when a run fails
        """
        self.session = session
        self.pipeline = pipeline
        self.history = history
        self.on_completed = on_completed
        self.on_failed = on_failed

        self.current_record: Optional[ScanRecord] = None
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self._cancelled: Set[int] = set()

    @property
    def in_progress(self) -> bool:
        return self._task is not None and not self._task.done()

    async def submit(self) -> Optional[ScanRecord]:
        """
        Hand off the session preview and analyze it

        Returns:
            The new ScanRecord, or None if the run was cancelled

        Raises:
            InvalidTransitionError: nothing to submit, or a run is in progress
            PipelineError: the pipeline failed (history untouched)
        """
        if self.in_progress:
            raise InvalidTransitionError("A scan is already in progress")

        kind, payload = self.session.hand_off()
        self.current_record = None

        self._generation += 1
        generation = self._generation
        task = asyncio.create_task(self.pipeline.analyze(kind, payload))
        self._task = task

        try:
            result = await task
        except asyncio.CancelledError:
            if generation in self._cancelled:
                print("[PIPELINE] Scan cancelled by officer")
                return None
            raise
        except PipelineError as e:
            if self.on_failed and generation not in self._cancelled:
                await self._safe_callback(self.on_failed, e)
            raise
        finally:
            cancelled = generation in self._cancelled
            self._finish(generation)

        if cancelled:
            # Late result for a cancelled run
            print("[PIPELINE] Dropping result of cancelled scan")
            return None

        record = ScanRecord.create(
            kind=result.kind,
            thumbnail=result.thumbnail,
            plate_number=result.plate_number,
            vehicle=result.vehicle,
            analysis=result.analysis,
        )
        self.history.append(record)
        self.current_record = record

        if self.on_completed:
            await self._safe_callback(self.on_completed, record)
        return record

    async def cancel(self) -> bool:
        """Cancel the in-flight run; returns False if nothing was running"""
        if not self.in_progress:
            return False

        task = self._task
        self._cancelled.add(self._generation)
        task.cancel()
        try:
            await task
        except (asyncio.CancelledError, PipelineError):
            pass
        return True

    def dismiss(self):
        """Officer closed the result view"""
        self.current_record = None

    def _finish(self, generation: int):
        self._cancelled.discard(generation)
        if generation != self._generation:
            return
        self._task = None
        if self.session.mode == CaptureMode.PROCESSING:
            self.session.complete()

    @staticmethod
    async def _safe_callback(callback, arg):
        try:
            await callback(arg)
        except Exception as e:
            print(f"[PIPELINE] Callback error: {e}")
