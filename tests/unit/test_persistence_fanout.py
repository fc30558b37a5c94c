# tests/unit/test_persistence_fanout.py
"""
Persistence fan-out

Purpose
-------
Inventory insert is primary; spreadsheet append and project touch are
best-effort and never roll the insert back.
"""

import asyncio

import pytest

from capture_inventory.core.enrichment import enrich_items
from capture_inventory.core.errors import PersistenceError
from capture_inventory.core.fanout import PersistenceFanout, to_spreadsheet_rows
from capture_inventory.core.stores import InMemoryInventoryStore, InMemoryProjectStore, InMemorySpreadsheetStore
from tests.utils import (
    FAST_POLICY,
    PERSONAL,
    BrokenProjectStore,
    BrokenSpreadsheetStore,
    FlakyInventoryStore,
    make_capture,
    make_detected,
)


def _items():
    return enrich_items(
        [
            make_detected(name="Sofa", category="furniture"),
            make_detected(name="Plate Set", category="kitchenware"),
            make_detected(name="Vase", category="decor", cuft=0.5),
        ]
    )


def _fanout(inventory=None, spreadsheets=None, projects=None):
    return PersistenceFanout(
        inventory or InMemoryInventoryStore(),
        spreadsheets or InMemorySpreadsheetStore(),
        projects or InMemoryProjectStore(),
        policy=FAST_POLICY,
    )


def test_rows_mirror_items():
    rows = to_spreadsheet_rows(_items())
    assert [r.cells for r in rows] == [
        {"col1": "Living Room", "col2": "Sofa", "col3": "15", "col4": "120"},
        {"col1": "Kitchen", "col2": "Plate Set", "col3": "2", "col4": "18"},
        {"col1": "Other", "col2": "Vase", "col3": "0.5", "col4": "3.5"},
    ]
    assert len({r.id for r in rows}) == 3


def test_all_steps_succeed():
    fan = _fanout()
    cap = make_capture()
    out = asyncio.run(fan.persist(cap, _items()))
    assert out.items_written == 3
    assert out.total_boxes == 2
    assert out.spreadsheet_updated and out.project_touched and out.warnings == []

    stored = asyncio.run(fan.inventory.list_for_capture(cap.capture_id))
    assert {i.owner for i in stored} == {PERSONAL}
    assert all(i.project_id == cap.project_id for i in stored)
    sheet = asyncio.run(fan.spreadsheets.get(cap.project_id, PERSONAL))
    assert len(sheet.rows) == 3
    assert fan.projects.updated_at(cap.project_id) is not None


def test_spreadsheet_failure_is_tolerated():
    fan = _fanout(spreadsheets=BrokenSpreadsheetStore())
    cap = make_capture()
    out = asyncio.run(fan.persist(cap, _items()))
    assert out.items_written == 3
    assert out.spreadsheet_updated is False
    assert out.warnings and out.warnings[0].startswith("spreadsheet:")
    assert len(asyncio.run(fan.inventory.list_for_capture(cap.capture_id))) == 3


def test_project_touch_failure_is_tolerated():
    out = asyncio.run(_fanout(projects=BrokenProjectStore()).persist(make_capture(), _items()))
    assert out.project_touched is False
    assert out.spreadsheet_updated is True


def test_transient_insert_failure_is_retried():
    inv = FlakyInventoryStore(failures=1)
    out = asyncio.run(_fanout(inventory=inv).persist(make_capture(), _items()))
    assert inv.attempts == 2
    assert out.items_written == 3


def test_insert_failure_skips_rows_but_touches_project():
    fan = _fanout(inventory=FlakyInventoryStore(failures=10))
    cap = make_capture()
    with pytest.raises(PersistenceError):
        asyncio.run(fan.persist(cap, _items()))
    assert asyncio.run(fan.spreadsheets.get(cap.project_id, PERSONAL)) is None
    assert fan.projects.updated_at(cap.project_id) is not None


def test_zero_items_skips_writes():
    fan = _fanout()
    cap = make_capture()
    out = asyncio.run(fan.persist(cap, []))
    assert (out.items_written, out.total_boxes, out.spreadsheet_updated) == (0, 0, True)
    assert asyncio.run(fan.spreadsheets.get(cap.project_id, PERSONAL)) is None
