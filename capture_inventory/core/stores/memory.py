# capture_inventory/core/stores/memory.py
"""
In-memory store implementations.

Used by the CLI and the test suite, and as the reference behaviour for real
backends. Each store guards its state with an asyncio.Lock; the spreadsheet
store appends rows inside that lock, so concurrent runs for the same project
never lose rows. `set_status` with `expected` is a compare-and-set on the
stored status, so only one run can claim a pending capture.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime, timezone

from capture_inventory.core.errors import InvalidTransitionError, NotFoundError
from capture_inventory.schemas.models import (
    AnalysisRecord,
    AnalysisStatus,
    Capture,
    InventoryItem,
    SpreadsheetColumn,
    SpreadsheetProjection,
    SpreadsheetRow,
)

from .base import OwnerT


class InMemoryCaptureStore:
    def __init__(self) -> None:
        self._captures: dict[str, Capture] = {}
        self._lock = asyncio.Lock()

    def add(self, capture: Capture) -> Capture:
        self._captures[capture.capture_id] = capture
        return capture

    async def get(self, capture_id: str, project_id: str, owner: OwnerT) -> Capture:
        cap = self._captures.get(capture_id)
        if cap is None or cap.project_id != project_id or cap.owner != owner:
            raise NotFoundError(f"Capture {capture_id} not found in project {project_id}")
        return cap

    async def set_status(
        self, capture_id: str, record: AnalysisRecord, *, expected: AnalysisStatus | None = None
    ) -> Capture:
        async with self._lock:
            cap = self._captures.get(capture_id)
            if cap is None:
                raise KeyError(capture_id)
            if expected is not None and cap.analysis.status != expected:
                raise InvalidTransitionError(
                    f"capture {capture_id} is {cap.analysis.status!r}, expected {expected!r}"
                )
            updated = cap.model_copy(update={"analysis": record})
            self._captures[capture_id] = updated
            return updated

    async def list_for_project(self, project_id: str, owner: OwnerT) -> list[Capture]:
        return [c for c in self._captures.values() if c.project_id == project_id and c.owner == owner]


class InMemoryInventoryStore:
    def __init__(self) -> None:
        self._items: list[InventoryItem] = []
        self._lock = asyncio.Lock()

    async def insert_many(self, items: Sequence[InventoryItem]) -> int:
        async with self._lock:
            self._items.extend(items)
        return len(items)

    async def list_for_project(self, project_id: str, owner: OwnerT) -> list[InventoryItem]:
        return [i for i in self._items if i.project_id == project_id and i.owner == owner]

    async def list_for_capture(self, capture_id: str) -> list[InventoryItem]:
        return [i for i in self._items if i.source_capture_id == capture_id]


class InMemorySpreadsheetStore:
    def __init__(self) -> None:
        self._sheets: dict[tuple[str, OwnerT], SpreadsheetProjection] = {}
        self._lock = asyncio.Lock()

    async def append_rows(
        self,
        project_id: str,
        owner: OwnerT,
        rows: Sequence[SpreadsheetRow],
        *,
        default_columns: Sequence[SpreadsheetColumn],
    ) -> SpreadsheetProjection:
        key = (project_id, owner)
        async with self._lock:
            sheet = self._sheets.get(key)
            if sheet is None:
                sheet = SpreadsheetProjection(project_id=project_id, owner=owner, columns=list(default_columns))
            sheet = sheet.model_copy(
                update={"rows": [*sheet.rows, *rows], "updated_at": datetime.now(timezone.utc)}
            )
            self._sheets[key] = sheet
            return sheet

    async def get(self, project_id: str, owner: OwnerT) -> SpreadsheetProjection | None:
        return self._sheets.get((project_id, owner))


class InMemoryProjectStore:
    def __init__(self) -> None:
        self._updated: dict[str, datetime] = {}

    async def touch(self, project_id: str) -> datetime:
        now = datetime.now(timezone.utc)
        self._updated[project_id] = now
        return now

    def updated_at(self, project_id: str) -> datetime | None:
        return self._updated.get(project_id)


__all__ = [
    "InMemoryCaptureStore",
    "InMemoryInventoryStore",
    "InMemorySpreadsheetStore",
    "InMemoryProjectStore",
]
