# capture_inventory/core/status.py
from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from capture_inventory.core.errors import InvalidTransitionError
from capture_inventory.schemas.models import AnalysisRecord, AnalysisStatus

# =========================
# State machine
# =========================

ALLOWED_TRANSITIONS: Mapping[AnalysisStatus, frozenset[AnalysisStatus]] = {
    "pending": frozenset({"processing"}),
    "processing": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
}

TERMINAL_STATUSES: frozenset[AnalysisStatus] = frozenset({"completed", "failed"})


def can_transition(current: AnalysisStatus, target: AnalysisStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(
    record: AnalysisRecord,
    target: AnalysisStatus,
    *,
    summary: str | None = None,
    item_count: int | None = None,
    total_box_count: int | None = None,
    error_message: str | None = None,
) -> AnalysisRecord:
    """Return a new record in `target` state, or raise InvalidTransitionError."""
    if not can_transition(record.status, target):
        raise InvalidTransitionError(f"analysis status cannot move from {record.status!r} to {target!r}")

    update: dict[str, object] = {"status": target, "updated_at": datetime.now(timezone.utc)}
    if target == "processing":
        update.update(summary="AI analysis in progress...", item_count=0, total_box_count=0, error_message=None)
    elif target == "completed":
        count = item_count or 0
        update.update(
            summary=summary or f"Analysis completed - {count} items found",
            item_count=count,
            total_box_count=total_box_count or 0,
            error_message=None,
        )
    else:
        update.update(
            summary="Analysis failed",
            item_count=0,
            total_box_count=0,
            error_message=error_message or "Unknown error",
        )
    return record.model_copy(update=update)


# =========================
# Human-readable messages
# =========================


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" + ("" if n == 1 else "s")


def status_message(record: AnalysisRecord, *, processor: str = "AI") -> str:
    if record.status == "pending":
        return "Ready for analysis"
    if record.status == "processing":
        return f"Analyzing with {processor}"
    if record.status == "completed":
        return f"Complete - {_plural(record.item_count, 'item')} found"
    return "Analysis failed"


ProjectOverall = Literal["idle", "processing", "completed", "failed"]


class ProjectStatus(BaseModel):
    """Aggregate analysis state over all captures of one project."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    overall: ProjectOverall = "idle"
    total: int = Field(0, ge=0)
    pending: int = Field(0, ge=0)
    processing: int = Field(0, ge=0)
    completed: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    total_items: int = Field(0, ge=0)
    total_boxes: int = Field(0, ge=0)


def project_status(records: Iterable[AnalysisRecord]) -> ProjectStatus:
    counts: dict[str, int] = {"pending": 0, "processing": 0, "completed": 0, "failed": 0}
    items = boxes = 0
    for r in records:
        counts[r.status] += 1
        if r.status == "completed":
            items += r.item_count
            boxes += r.total_box_count

    total = sum(counts.values())
    overall: ProjectOverall
    if counts["processing"]:
        overall = "processing"
    elif counts["failed"]:
        overall = "failed"
    elif counts["completed"]:
        overall = "completed"
    else:
        overall = "idle"

    return ProjectStatus(overall=overall, total=total, total_items=items, total_boxes=boxes, **counts)


def project_status_message(status: ProjectStatus) -> str:
    if status.overall == "idle":
        if status.total == 0:
            return "Upload photos to start building your inventory"
        return "All images ready for analysis"
    if status.overall == "processing":
        return f"Analyzing {_plural(status.processing, 'image')}... You can safely leave this page."
    if status.overall == "completed":
        if status.total_items == 0:
            return f"{_plural(status.completed, 'image')} analyzed - No items found"
        return f"Analysis complete! Found {_plural(status.total_items, 'inventory item')}"
    return "Some images failed to analyze"


__all__ = [
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "can_transition",
    "transition",
    "status_message",
    "ProjectStatus",
    "project_status",
    "project_status_message",
]
