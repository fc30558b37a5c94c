# tests/unit/test_completion_notice.py
from capture_inventory.core.notice import build_completion_notice
from capture_inventory.schemas.models import AnalysisOutcome


def _outcome(**kw):
    data = {"capture_id": "cap-1", "project_id": "proj-1234567890ab", "items_processed": 7, "total_boxes": 4}
    data.update(kw)
    return AnalysisOutcome(**data)


def test_notice_body():
    n = build_completion_notice(_outcome())
    assert n.project_ref == "567890ab"
    assert (n.items, n.boxes) == (7, 4)
    assert n.body.splitlines() == [
        "Inventory Update Complete!",
        "",
        "Analysis finished",
        "7 items identified",
        "4 boxes recommended",
        "",
        "Project: 567890ab",
    ]


def test_notice_link_when_app_url_known():
    n = build_completion_notice(_outcome(), app_url="https://movers.example/")
    assert n.body.endswith("View: https://movers.example/projects/proj-1234567890ab")
