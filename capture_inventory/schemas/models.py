# capture_inventory/schemas/models.py

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# =========================
# Ownership scope
# =========================


class PersonalOwner(BaseModel):
    """A personal account. Records owned this way never carry an organization."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["personal"] = "personal"
    user_id: str = Field(..., min_length=1, description="Owning user ID.")


class OrganizationOwner(BaseModel):
    """An organization account. Every member reads and writes under the same scope."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kind: Literal["organization"] = "organization"
    organization_id: str = Field(..., min_length=1, description="Owning organization ID.")


# Tagged union; stores match on the whole value, so the two scopes never merge.
Owner = Annotated[PersonalOwner | OrganizationOwner, Field(discriminator="kind")]


def describe_owner(owner: PersonalOwner | OrganizationOwner) -> str:
    if isinstance(owner, OrganizationOwner):
        return f"org:{owner.organization_id}"
    return f"user:{owner.user_id}"


# =========================
# Capture + analysis status
# =========================

AnalysisStatus = Literal["pending", "processing", "completed", "failed"]
MediaKind = Literal["image", "video_frame"]
CaptureSource = Literal["upload", "video_call", "customer_upload", "admin_upload"]


class AnalysisRecord(BaseModel):
    """Analysis state stored on a capture. Only the orchestrator advances `status`."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: AnalysisStatus = Field("pending", description="Lifecycle state of the analysis.")
    summary: str = Field("", description="Free-text summary returned by the vision service.")
    item_count: int = Field(0, ge=0, description="Number of enriched items written for this capture.")
    total_box_count: int = Field(0, ge=0, description="Sum of recommended box quantities.")
    error_message: str | None = Field(None, description="Set when the analysis failed.")
    updated_at: datetime = Field(default_factory=_utcnow, description="Last status write (UTC).")


class Capture(BaseModel):
    """
    One uploaded image or captured video frame.

    The raw payload belongs to the capture store; the pipeline only reads it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    capture_id: str = Field(default_factory=lambda: _new_id("cap"))
    project_id: str = Field(..., min_length=1)
    owner: Owner
    data: bytes = Field(..., repr=False, description="Raw image bytes.")
    mime_type: str = Field("image/jpeg", description="MIME type of `data`.")
    media_kind: MediaKind = "image"
    source: CaptureSource = "upload"
    original_name: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    analysis: AnalysisRecord = Field(default_factory=AnalysisRecord)


# =========================
# Vision output
# =========================


def _positive_or_none(v: Any) -> float | None:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) and f > 0 else None


def _clean_text(v: Any) -> str | None:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


class DetectedItem(BaseModel):
    """
    One item as reported by the vision service, before enrichment.

    Parsing is tolerant: numeric strings coerce, non-positive or non-finite volume/weight
    count as missing, and quantity below 1 falls back to 1.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1)
    description: str | None = None
    category: str | None = None
    quantity: int = Field(1, ge=1)
    location: str | None = None
    cuft: float | None = Field(None, description="Volume in cubic feet.")
    weight: float | None = Field(None, description="Weight in pounds.")
    fragile: bool | None = None
    special_handling: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_text(cls, v: Any) -> Any:
        return str(v).strip() if v is not None else v

    @field_validator("description", "category", "location", "special_handling", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> str | None:
        return _clean_text(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, v: Any) -> int:
        if v is None or isinstance(v, bool):
            return 1
        try:
            q = int(float(v))
        except (TypeError, ValueError, OverflowError):
            return 1
        return q if q >= 1 else 1

    @field_validator("cuft", "weight", mode="before")
    @classmethod
    def _measure(cls, v: Any) -> float | None:
        return _positive_or_none(v)

    @field_validator("fragile", mode="before")
    @classmethod
    def _fragile(cls, v: Any) -> bool | None:
        if v is None:
            return None
        if isinstance(v, str):
            return v.strip().lower() in {"true", "yes", "1"}
        return bool(v)


class VisionResult(BaseModel):
    """Structured reply of the vision service: a summary and the detected items."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    summary: str = ""
    items: list[DetectedItem] = Field(default_factory=list)


# =========================
# Enrichment output
# =========================


class BoxRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    box_type: str = Field(..., description='Packing box name, e.g. "Dish Pack".')
    box_quantity: int = Field(..., ge=1, description="Number of boxes for this item line.")
    box_dimensions: str = Field(..., description='Nominal dimensions, e.g. 18" x 18" x 28".')


class EnrichedItem(BaseModel):
    """A detected item with every attribute resolved. Furniture-class items carry no box."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    description: str | None = None
    category: str | None = None
    quantity: int = Field(1, ge=1)
    location: str
    cuft: float = Field(..., gt=0)
    weight: float = Field(..., gt=0)
    fragile: bool = False
    special_handling: str = ""
    box_recommendation: BoxRecommendation | None = None


class InventoryItem(EnrichedItem):
    """Persisted inventory line. Created once per enriched item per successful run."""

    item_id: str = Field(default_factory=lambda: _new_id("inv"))
    project_id: str
    owner: Owner
    source_capture_id: str
    created_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_enriched(cls, item: EnrichedItem, capture: Capture) -> InventoryItem:
        return cls(
            **item.model_dump(),
            project_id=capture.project_id,
            owner=capture.owner,
            source_capture_id=capture.capture_id,
        )


# =========================
# Spreadsheet projection
# =========================


class SpreadsheetColumn(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str
    type: str = "text"


class SpreadsheetRow(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(default_factory=lambda: _new_id("row"))
    cells: dict[str, str] = Field(default_factory=dict)


DEFAULT_SPREADSHEET_COLUMNS: tuple[SpreadsheetColumn, ...] = (
    SpreadsheetColumn(id="col1", name="Location", type="text"),
    SpreadsheetColumn(id="col2", name="Item", type="company"),
    SpreadsheetColumn(id="col3", name="Cuft", type="url"),
    SpreadsheetColumn(id="col4", name="Weight", type="url"),
)


class SpreadsheetProjection(BaseModel):
    """Tabular view of a project's inventory for one ownership scope. Rows are append-only."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    project_id: str
    owner: Owner
    columns: list[SpreadsheetColumn] = Field(default_factory=lambda: list(DEFAULT_SPREADSHEET_COLUMNS))
    rows: list[SpreadsheetRow] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=_utcnow)


# =========================
# Status propagation
# =========================

StatusEventType = Literal["connected", "status-update", "completed", "error"]


class InFlightCapture(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    capture_id: str
    name: str | None = None
    media_kind: MediaKind = "image"
    source: CaptureSource = "upload"
    status: AnalysisStatus = "processing"
    started_at: datetime = Field(default_factory=_utcnow)


class InFlightSnapshot(BaseModel):
    """Pollable view of the captures a project still has in flight."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    project_id: str
    captures: list[InFlightCapture] = Field(default_factory=list)
    taken_at: datetime = Field(default_factory=_utcnow)

    @property
    def count(self) -> int:
        return len(self.captures)


class StatusEvent(BaseModel):
    """In-memory message pushed to live listeners of one project. Never persisted."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: StatusEventType
    project_id: str
    capture_id: str | None = None
    captures: list[InFlightCapture] = Field(default_factory=list)
    summary: str | None = None
    items_processed: int = 0
    total_boxes: int = 0
    message: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


# =========================
# Run outcomes
# =========================


class FanoutOutcome(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    items_written: int = Field(0, ge=0)
    total_boxes: int = Field(0, ge=0)
    spreadsheet_updated: bool = True
    project_touched: bool = True
    warnings: list[str] = Field(default_factory=list)


class AnalysisOutcome(BaseModel):
    """Return value of one successful pipeline run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    capture_id: str
    project_id: str
    items_processed: int = Field(0, ge=0)
    total_boxes: int = Field(0, ge=0)
    spreadsheet_updated: bool = True
    summary: str = ""
    processing_time_ms: float = Field(0.0, ge=0)
    warnings: list[str] = Field(default_factory=list)


class CompletionNotice(BaseModel):
    """Data a text-message notifier needs after a completed run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    project_id: str
    project_ref: str
    items: int = Field(0, ge=0)
    boxes: int = Field(0, ge=0)
    body: str
