# capture_inventory/core/stores/base.py
"""
Store contracts consumed by the pipeline.

Every query takes the full `Owner` value and matches it exactly: a personal
owner never sees organization-scoped records and vice versa.

Store implementations may raise anything on failure; callers wrap calls in
`call_with_retry(..., stage=...)`, which normalizes errors to PersistenceError.
Only `CaptureStore.get` (NotFoundError) and a conditional `CaptureStore.set_status`
(InvalidTransitionError) raise pipeline errors of their own.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from capture_inventory.schemas.models import (
    AnalysisRecord,
    AnalysisStatus,
    Capture,
    InventoryItem,
    OrganizationOwner,
    PersonalOwner,
    SpreadsheetColumn,
    SpreadsheetProjection,
    SpreadsheetRow,
)

OwnerT = PersonalOwner | OrganizationOwner


class CaptureStore(Protocol):
    async def get(self, capture_id: str, project_id: str, owner: OwnerT) -> Capture: ...

    async def set_status(
        self, capture_id: str, record: AnalysisRecord, *, expected: AnalysisStatus | None = None
    ) -> Capture:
        """Write `record`; with `expected`, raise InvalidTransitionError unless the stored status matches."""
        ...


class InventoryStore(Protocol):
    async def insert_many(self, items: Sequence[InventoryItem]) -> int: ...

    async def list_for_project(self, project_id: str, owner: OwnerT) -> list[InventoryItem]: ...


class SpreadsheetStore(Protocol):
    async def append_rows(
        self,
        project_id: str,
        owner: OwnerT,
        rows: Sequence[SpreadsheetRow],
        *,
        default_columns: Sequence[SpreadsheetColumn],
    ) -> SpreadsheetProjection: ...

    async def get(self, project_id: str, owner: OwnerT) -> SpreadsheetProjection | None: ...


class ProjectStore(Protocol):
    async def touch(self, project_id: str) -> datetime: ...


__all__ = ["OwnerT", "CaptureStore", "InventoryStore", "SpreadsheetStore", "ProjectStore"]
