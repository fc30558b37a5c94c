# capture_inventory/orchestrators/analysis_orchestrator.py
"""
Pipeline Orchestrator: one capture, one run.

Order within a run is fixed: load capture -> mark processing -> vision ->
enrichment -> fan-out -> mark completed/failed -> broadcast -> notify.

Failure mapping
---------------
- NotFoundError              : raised before any status write
- InvalidTransitionError     : capture not pending (or claimed by a concurrent
                               run); raised before vision, capture untouched
- ServiceError / ParseError  : capture -> failed, `error` event, re-raised
- PersistenceError (step 1)  : capture -> failed, `error` event, re-raised
- Anything else after claim  : wrapped in PipelineError, then as above
- Spreadsheet/project errors : logged by the fan-out; run still completes
- Broadcast/notifier errors  : logged; never change the stored outcome
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from capture_inventory.core.broadcast import StatusBroadcaster
from capture_inventory.core.enrichment import enrich_items
from capture_inventory.core.errors import PipelineError
from capture_inventory.core.fanout import PersistenceFanout
from capture_inventory.core.notice import build_completion_notice
from capture_inventory.core.retry import call_with_retry
from capture_inventory.core.status import transition
from capture_inventory.core.stores import (
    CaptureStore,
    InMemoryCaptureStore,
    InMemoryInventoryStore,
    InMemoryProjectStore,
    InMemorySpreadsheetStore,
    OwnerT,
)
from capture_inventory.schemas.models import (
    AnalysisOutcome,
    AnalysisRecord,
    AnalysisStatus,
    Capture,
    CompletionNotice,
    InFlightSnapshot,
    StatusEvent,
)
from capture_inventory.settings import PipelineSettings, load_settings
from capture_inventory.tools.vision.provider_base import VisionProvider

logger = logging.getLogger(__name__)

Notifier = Callable[[CompletionNotice], Awaitable[None] | None]


class AnalysisOrchestrator:
    def __init__(
        self,
        *,
        captures: CaptureStore,
        vision: VisionProvider,
        fanout: PersistenceFanout,
        broadcaster: StatusBroadcaster,
        settings: PipelineSettings | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.captures = captures
        self.vision = vision
        self.fanout = fanout
        self.broadcaster = broadcaster
        self.settings = settings or load_settings()
        self._notifier = notifier
        self._tasks: set[asyncio.Task[AnalysisOutcome]] = set()

    @classmethod
    def in_memory(
        cls,
        vision: VisionProvider,
        *,
        settings: PipelineSettings | None = None,
        notifier: Notifier | None = None,
    ) -> AnalysisOrchestrator:
        """Wire the orchestrator to fresh in-memory stores (CLI demo and tests)."""
        settings = settings or load_settings()
        fanout = PersistenceFanout(
            InMemoryInventoryStore(),
            InMemorySpreadsheetStore(),
            InMemoryProjectStore(),
            policy=settings.io_policy,
        )
        return cls(
            captures=InMemoryCaptureStore(),
            vision=vision,
            fanout=fanout,
            broadcaster=StatusBroadcaster(queue_size=settings.listener_queue_size),
            settings=settings,
            notifier=notifier,
        )

    # ---------- exposed surface ----------
    async def run_analysis(self, capture_id: str, project_id: str, owner: OwnerT) -> AnalysisOutcome:
        started = time.perf_counter()
        capture = await call_with_retry(
            lambda: self.captures.get(capture_id, project_id, owner),
            self.settings.io_policy,
            stage="capture",
        )

        processing = transition(capture.analysis, "processing")
        await self._write_status(capture_id, processing, expected=capture.analysis.status)
        logger.info("capture %s: processing (project %s)", capture_id, project_id)
        self._safely(self.broadcaster.track, capture, "processing")

        try:
            result = await call_with_retry(
                lambda: self.vision.analyze(capture.data, capture.mime_type),
                self.settings.vision_policy,
                stage="vision",
            )
            enriched = enrich_items(result.items)
            fan = await self.fanout.persist(capture, enriched)
        except PipelineError as exc:
            await self._fail(capture, processing, exc)
            raise
        except Exception as exc:  # noqa: BLE001
            err = PipelineError(f"{type(exc).__name__}: {exc}")
            await self._fail(capture, processing, err)
            raise err from exc

        completed = transition(
            processing,
            "completed",
            summary=result.summary,
            item_count=len(enriched),
            total_box_count=fan.total_boxes,
        )
        try:
            await self._write_status(capture_id, completed, expected="processing")
        except PipelineError as exc:
            logger.error("capture %s: items written but completion status not recorded: %s", capture_id, exc)
            self._safely(self.broadcaster.untrack, project_id, capture_id)
            self._safely(self.broadcaster.emit_error, project_id, f"Could not record analysis result: {exc}", capture_id=capture_id)
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "capture %s: completed in %.0fms (%d items, %d boxes)",
            capture_id,
            elapsed_ms,
            completed.item_count,
            completed.total_box_count,
        )
        self._safely(self.broadcaster.untrack, project_id, capture_id)
        self._safely(
            self.broadcaster.emit_completed,
            project_id,
            capture_id,
            summary=completed.summary,
            items_processed=completed.item_count,
            total_boxes=completed.total_box_count,
        )

        outcome = AnalysisOutcome(
            capture_id=capture_id,
            project_id=project_id,
            items_processed=completed.item_count,
            total_boxes=completed.total_box_count,
            spreadsheet_updated=fan.spreadsheet_updated,
            summary=completed.summary,
            processing_time_ms=elapsed_ms,
            warnings=fan.warnings,
        )
        await self._notify(outcome)
        return outcome

    def submit(self, capture_id: str, project_id: str, owner: OwnerT) -> asyncio.Task[AnalysisOutcome]:
        """Schedule a run in the background; the task is held until it finishes."""
        task = asyncio.create_task(self.run_analysis(capture_id, project_id, owner), name=f"analysis:{capture_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def drain(self) -> list[Any]:
        """Wait for every submitted run; results or exceptions, in no particular order."""
        return await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def subscribe(self, project_id: str) -> AsyncIterator[StatusEvent]:
        return self.broadcaster.subscribe(project_id)

    def get_in_flight_status(self, project_id: str) -> InFlightSnapshot:
        return self.broadcaster.get_in_flight_status(project_id)

    # ---------- internals ----------
    async def _write_status(
        self, capture_id: str, record: AnalysisRecord, *, expected: AnalysisStatus
    ) -> Capture:
        return await call_with_retry(
            lambda: self.captures.set_status(capture_id, record, expected=expected),
            self.settings.io_policy,
            stage="capture",
        )

    async def _fail(self, capture: Capture, processing: AnalysisRecord, exc: PipelineError) -> None:
        logger.error("capture %s: analysis failed: %s", capture.capture_id, exc)
        failed = transition(processing, "failed", error_message=str(exc))
        try:
            await self._write_status(capture.capture_id, failed, expected="processing")
        except PipelineError as write_err:
            logger.error("capture %s: could not record failure: %s", capture.capture_id, write_err)
        self._safely(self.broadcaster.untrack, capture.project_id, capture.capture_id)
        self._safely(
            self.broadcaster.emit_error,
            capture.project_id,
            f"Analysis failed: {exc}",
            capture_id=capture.capture_id,
        )

    async def _notify(self, outcome: AnalysisOutcome) -> None:
        if self._notifier is None:
            return
        try:
            res = self._notifier(build_completion_notice(outcome))
            if inspect.isawaitable(res):
                await res
        except Exception as e:  # noqa: BLE001
            logger.warning("completion notice for project %s not sent: %s", outcome.project_id, e)

    @staticmethod
    def _safely(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        try:
            fn(*args, **kwargs)
        except Exception as e:  # noqa: BLE001
            logger.warning("status broadcast failed (%s): %s", getattr(fn, "__name__", fn), e)

    def _on_task_done(self, task: asyncio.Task[AnalysisOutcome]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.debug("%s ended with %s: %s", task.get_name(), type(exc).__name__, exc)


__all__ = ["AnalysisOrchestrator", "Notifier"]
