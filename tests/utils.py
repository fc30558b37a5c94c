# tests/utils.py
"""
Single source of truth for test data, factories, and canonical payloads.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

import io
from typing import Any

from PIL import Image

from capture_inventory.core.retry import RetryPolicy
from capture_inventory.core.stores import (
    InMemoryCaptureStore,
    InMemoryInventoryStore,
    InMemoryProjectStore,
    InMemorySpreadsheetStore,
)
from capture_inventory.core.broadcast import StatusBroadcaster
from capture_inventory.core.fanout import PersistenceFanout
from capture_inventory.orchestrators.analysis_orchestrator import AnalysisOrchestrator, Notifier
from capture_inventory.schemas.models import (
    Capture,
    DetectedItem,
    OrganizationOwner,
    PersonalOwner,
)
from capture_inventory.settings import PipelineSettings
from capture_inventory.tools.vision import ScriptedVisionProvider, reply_text

# -----------------------------
# Global defaults (edit once)
# -----------------------------

DEFAULT_PROJECT_ID = "proj-0000feedbeef"
PERSONAL = PersonalOwner(user_id="user-1")
ORG = OrganizationOwner(organization_id="org-1")

# No backoff, short bounds: retries stay observable but tests stay fast.
FAST_SETTINGS = PipelineSettings(
    vision_timeout_s=1.0,
    vision_max_retries=1,
    io_timeout_s=1.0,
    io_max_retries=1,
    io_backoff_s=0.0,
)
FAST_POLICY = RetryPolicy(timeout_s=1.0, max_retries=1, backoff_s=0.0)

SOFA = {"name": "Sofa", "category": "furniture", "quantity": 1}
PLATE_SET = {"name": "Plate Set", "category": "kitchenware", "quantity": 1}
TABLE_LAMP = {"name": "Table lamp", "category": "electronics", "quantity": 2, "cuft": 2}

DEFAULT_REPLY = reply_text([SOFA, PLATE_SET], summary="Living room with a sofa and a plate set.")


# -----------------------------
# Images
# -----------------------------


def png_bytes(w: int = 32, h: int = 24, color: tuple[int, int, int] = (200, 120, 40)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (w, h), color).save(buf, format="PNG", compress_level=0)
    return buf.getvalue()


# -----------------------------
# Domain factories
# -----------------------------


def make_capture(**overrides: Any) -> Capture:
    data: dict[str, Any] = {
        "project_id": DEFAULT_PROJECT_ID,
        "owner": PERSONAL,
        "data": b"\xff\xd8fake-jpeg",
        "mime_type": "image/jpeg",
        "original_name": "living_room.jpg",
    }
    data.update(overrides)
    return Capture(**data)


def make_detected(**overrides: Any) -> DetectedItem:
    data: dict[str, Any] = {"name": "Thing", "category": None, "quantity": 1}
    data.update(overrides)
    return DetectedItem.model_validate(data)


def numbered_items(n: int, *, prefix: str = "Item", category: str = "decor") -> list[dict[str, Any]]:
    return [{"name": f"{prefix} {i + 1}", "category": category, "quantity": 1} for i in range(n)]


# -----------------------------
# Failing stores
# -----------------------------


class FlakyInventoryStore(InMemoryInventoryStore):
    """Raises OSError for the first `failures` inserts, then behaves normally."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.attempts = 0

    async def insert_many(self, items):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise OSError("inventory backend unavailable")
        return await super().insert_many(items)


class BrokenSpreadsheetStore(InMemorySpreadsheetStore):
    async def append_rows(self, project_id, owner, rows, *, default_columns):
        raise OSError("spreadsheet backend unavailable")


class BrokenProjectStore(InMemoryProjectStore):
    async def touch(self, project_id):
        raise OSError("project backend unavailable")


# -----------------------------
# Wiring
# -----------------------------


def build_orchestrator(
    reply: Any = DEFAULT_REPLY,
    *,
    inventory: InMemoryInventoryStore | None = None,
    spreadsheets: InMemorySpreadsheetStore | None = None,
    projects: InMemoryProjectStore | None = None,
    settings: PipelineSettings = FAST_SETTINGS,
    notifier: Notifier | None = None,
    delay_s: float = 0.0,
) -> AnalysisOrchestrator:
    vision = reply if isinstance(reply, ScriptedVisionProvider) else ScriptedVisionProvider(reply, delay_s=delay_s)
    fanout = PersistenceFanout(
        inventory or InMemoryInventoryStore(),
        spreadsheets or InMemorySpreadsheetStore(),
        projects or InMemoryProjectStore(),
        policy=settings.io_policy,
    )
    return AnalysisOrchestrator(
        captures=InMemoryCaptureStore(),
        vision=vision,
        fanout=fanout,
        broadcaster=StatusBroadcaster(queue_size=settings.listener_queue_size),
        settings=settings,
        notifier=notifier,
    )
