# capture_inventory/core/fanout.py
"""
Persistence fan-out for one capture's enriched items.

Steps
-----
1) Insert inventory items under the capture's owner       (primary; failure raises)
2) Append one spreadsheet row per item                    (best-effort; logged)
3) Touch the project's last-updated timestamp             (best-effort; logged)
4) total_boxes = sum of box quantities                     (pure)

Steps 2 and 3 never roll back step 1. When step 1 fails, step 2 is skipped
(rows would mirror items that were never written) but step 3 still runs.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from capture_inventory.core.enrichment import total_box_count
from capture_inventory.core.errors import PersistenceError
from capture_inventory.core.retry import RetryPolicy, call_with_retry
from capture_inventory.core.stores.base import InventoryStore, ProjectStore, SpreadsheetStore
from capture_inventory.schemas.models import (
    DEFAULT_SPREADSHEET_COLUMNS,
    Capture,
    EnrichedItem,
    FanoutOutcome,
    InventoryItem,
    SpreadsheetRow,
)

logger = logging.getLogger(__name__)


def _fmt_number(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else str(v)


def to_spreadsheet_rows(items: Sequence[EnrichedItem]) -> list[SpreadsheetRow]:
    return [
        SpreadsheetRow(
            cells={
                "col1": it.location,
                "col2": it.name,
                "col3": _fmt_number(it.cuft),
                "col4": _fmt_number(it.weight),
            }
        )
        for it in items
    ]


class PersistenceFanout:
    def __init__(
        self,
        inventory: InventoryStore,
        spreadsheets: SpreadsheetStore,
        projects: ProjectStore,
        *,
        policy: RetryPolicy | None = None,
    ) -> None:
        self.inventory = inventory
        self.spreadsheets = spreadsheets
        self.projects = projects
        self._policy = policy or RetryPolicy()

    async def persist(self, capture: Capture, items: Sequence[EnrichedItem]) -> FanoutOutcome:
        """
        Write one capture's items: inventory insert, spreadsheet append, project touch.

        The inventory insert is the primary write; spreadsheet and project failures
        become warnings. Unlike a plain "attempt every step" fan-out, a failed
        inventory insert skips the spreadsheet append, so the spreadsheet never shows
        rows with no inventory items behind them. The project touch still runs, then
        the PersistenceError propagates.
        """
        warnings: list[str] = []
        records = [InventoryItem.from_enriched(it, capture) for it in items]

        written = 0
        primary_error: PersistenceError | None = None
        if records:
            try:
                written = await call_with_retry(
                    lambda: self.inventory.insert_many(records), self._policy, stage="inventory"
                )
                logger.info("capture %s: wrote %d inventory items", capture.capture_id, written)
            except PersistenceError as e:
                primary_error = e
                logger.error("capture %s: inventory insert failed: %s", capture.capture_id, e)

        spreadsheet_ok = True
        if records and primary_error is None:
            rows = to_spreadsheet_rows(items)
            try:
                await call_with_retry(
                    lambda: self.spreadsheets.append_rows(
                        capture.project_id,
                        capture.owner,
                        rows,
                        default_columns=DEFAULT_SPREADSHEET_COLUMNS,
                    ),
                    self._policy,
                    stage="spreadsheet",
                )
            except PersistenceError as e:
                spreadsheet_ok = False
                warnings.append(f"spreadsheet: {e}")
                logger.warning("capture %s: spreadsheet append failed: %s", capture.capture_id, e)

        project_ok = True
        try:
            await call_with_retry(lambda: self.projects.touch(capture.project_id), self._policy, stage="project")
        except PersistenceError as e:
            project_ok = False
            warnings.append(f"project: {e}")
            logger.warning("project %s: timestamp touch failed: %s", capture.project_id, e)

        if primary_error is not None:
            raise primary_error

        return FanoutOutcome(
            items_written=written,
            total_boxes=total_box_count(items),
            spreadsheet_updated=spreadsheet_ok,
            project_touched=project_ok,
            warnings=warnings,
        )


__all__ = ["PersistenceFanout", "to_spreadsheet_rows"]
