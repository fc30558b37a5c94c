# capture_inventory/core/notice.py
from __future__ import annotations

from capture_inventory.schemas.models import AnalysisOutcome, CompletionNotice


def build_completion_notice(outcome: AnalysisOutcome, *, app_url: str | None = None) -> CompletionNotice:
    """Text-message payload for a completed run; delivery is the caller's concern."""
    ref = outcome.project_id[-8:]
    lines = [
        "Inventory Update Complete!",
        "",
        "Analysis finished",
        f"{outcome.items_processed} items identified",
        f"{outcome.total_boxes} boxes recommended",
        "",
        f"Project: {ref}",
    ]
    if app_url:
        lines.append(f"View: {app_url.rstrip('/')}/projects/{outcome.project_id}")
    return CompletionNotice(
        project_id=outcome.project_id,
        project_ref=ref,
        items=outcome.items_processed,
        boxes=outcome.total_boxes,
        body="\n".join(lines),
    )
