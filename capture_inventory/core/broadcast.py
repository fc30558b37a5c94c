# capture_inventory/core/broadcast.py
"""
Status Notification Broadcaster

Purpose
-------
Per-project push channel of StatusEvents plus a pollable in-flight snapshot
carrying the same data, for clients that cannot hold a stream open.

Design
------
- Each subscriber gets a bounded asyncio.Queue; `publish` never awaits. A full
  queue drops the event for that listener only (at-most-once, best-effort).
- Subscribing yields `connected` with the current snapshot first; there is no
  backlog replay. A client that reconnects reconciles from the snapshot.
- `error` events never close the channel.

Public API
----------
StatusBroadcaster.subscribe(project_id) -> AsyncIterator[StatusEvent]
StatusBroadcaster.get_in_flight_status(project_id) -> InFlightSnapshot
StatusBroadcaster.track / untrack / emit_completed / emit_error
InFlightTracker.observe(snapshot) -> "drained" | "grew" | None
format_sse(event) -> str
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Literal

from capture_inventory.schemas.models import (
    AnalysisStatus,
    Capture,
    InFlightCapture,
    InFlightSnapshot,
    StatusEvent,
)

logger = logging.getLogger(__name__)

# Recommended interval for clients using the pollable snapshot.
POLL_INTERVAL_S = 2.5


class StatusBroadcaster:
    def __init__(self, *, queue_size: int = 64) -> None:
        self._queue_size = queue_size
        self._listeners: dict[str, set[asyncio.Queue[StatusEvent]]] = defaultdict(set)
        self._in_flight: dict[str, dict[str, InFlightCapture]] = defaultdict(dict)

    # ---------- snapshot ----------
    def get_in_flight_status(self, project_id: str) -> InFlightSnapshot:
        entries = sorted(self._in_flight.get(project_id, {}).values(), key=lambda c: c.started_at)
        return InFlightSnapshot(project_id=project_id, captures=entries)

    def listener_count(self, project_id: str) -> int:
        return len(self._listeners.get(project_id, ()))

    # ---------- subscription ----------
    async def subscribe(self, project_id: str) -> AsyncIterator[StatusEvent]:
        queue: asyncio.Queue[StatusEvent] = asyncio.Queue(maxsize=self._queue_size)
        self._listeners[project_id].add(queue)
        logger.debug("listener joined project %s (%d total)", project_id, self.listener_count(project_id))
        try:
            snapshot = self.get_in_flight_status(project_id)
            yield StatusEvent(type="connected", project_id=project_id, captures=snapshot.captures)
            while True:
                yield await queue.get()
        finally:
            listeners = self._listeners.get(project_id)
            if listeners is not None:
                listeners.discard(queue)
                if not listeners:
                    del self._listeners[project_id]
            logger.debug("listener left project %s", project_id)

    def publish(self, event: StatusEvent) -> int:
        """Deliver to every current listener of the event's project; returns the delivered count."""
        delivered = 0
        for queue in list(self._listeners.get(event.project_id, ())):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("dropping %s event for a slow listener on project %s", event.type, event.project_id)
        return delivered

    # ---------- pipeline hooks ----------
    def track(self, capture: Capture, status: AnalysisStatus = "processing") -> None:
        entries = self._in_flight[capture.project_id]
        previous = entries.get(capture.capture_id)
        entries[capture.capture_id] = InFlightCapture(
            capture_id=capture.capture_id,
            name=capture.original_name,
            media_kind=capture.media_kind,
            source=capture.source,
            status=status,
            **({"started_at": previous.started_at} if previous else {}),
        )
        self._publish_status(capture.project_id, capture.capture_id)

    def untrack(self, project_id: str, capture_id: str) -> None:
        entries = self._in_flight.get(project_id)
        if entries is None or entries.pop(capture_id, None) is None:
            return
        if not entries:
            del self._in_flight[project_id]
        self._publish_status(project_id, capture_id)

    def emit_completed(
        self, project_id: str, capture_id: str, *, summary: str, items_processed: int, total_boxes: int
    ) -> int:
        return self.publish(
            StatusEvent(
                type="completed",
                project_id=project_id,
                capture_id=capture_id,
                captures=self.get_in_flight_status(project_id).captures,
                summary=summary,
                items_processed=items_processed,
                total_boxes=total_boxes,
            )
        )

    def emit_error(self, project_id: str, message: str, *, capture_id: str | None = None) -> int:
        return self.publish(
            StatusEvent(
                type="error",
                project_id=project_id,
                capture_id=capture_id,
                captures=self.get_in_flight_status(project_id).captures,
                message=message,
            )
        )

    def _publish_status(self, project_id: str, capture_id: str) -> None:
        self.publish(
            StatusEvent(
                type="status-update",
                project_id=project_id,
                capture_id=capture_id,
                captures=self.get_in_flight_status(project_id).captures,
            )
        )


# =========================
# Client-side helpers
# =========================

Transition = Literal["drained", "grew"]


class InFlightTracker:
    """
    Turns a sequence of polled snapshots into transitions worth acting on:
    "drained" when the in-flight count falls to zero, "grew" when it rises
    above the previous value. Steady ticks return None.
    """

    def __init__(self) -> None:
        self._previous: int | None = None

    def observe(self, snapshot: InFlightSnapshot) -> Transition | None:
        prev, cur = self._previous, snapshot.count
        self._previous = cur
        if prev is None:
            return None
        if prev > 0 and cur == 0:
            return "drained"
        if cur > prev:
            return "grew"
        return None


def format_sse(event: StatusEvent) -> str:
    """Frame one event for a text/event-stream response."""
    return f"data: {event.model_dump_json()}\n\n"


__all__ = ["POLL_INTERVAL_S", "StatusBroadcaster", "InFlightTracker", "format_sse"]
