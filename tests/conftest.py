# tests/conftest.py
from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from tests.utils import (
    DEFAULT_REPLY,
    build_orchestrator,
    make_capture,
    png_bytes as _make_png,
)


# -------- Environment isolation --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep CAPINV_* settings from the developer shell out of the suite."""
    for key in list(os.environ):
        if key.startswith("CAPINV_"):
            monkeypatch.delenv(key, raising=False)
    yield


# -------- Domain fixtures --------
@pytest.fixture
def capture_factory():
    """
    Factory for Capture models with overridable fields.
    Usage:
        cap = capture_factory(owner=ORG, project_id="proj-x")
    """

    def _factory(**overrides):
        return make_capture(**overrides)

    return _factory


@pytest.fixture
def orchestrator_factory():
    """
    Factory for an orchestrator wired to in-memory stores and a scripted provider.
    Usage:
        orch = orchestrator_factory(reply_text([...]))
        orch = orchestrator_factory(TimeoutError("slow"), spreadsheets=BrokenSpreadsheetStore())
    """

    def _factory(reply=DEFAULT_REPLY, **kwargs):
        return build_orchestrator(reply, **kwargs)

    return _factory


@pytest.fixture
def png_bytes():
    """
    Fixture that returns a callable to generate PNG bytes.
    Usage:
        data = png_bytes(64, 48)
    """
    return _make_png


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    p = tmp_path / "bedroom.png"
    p.write_bytes(_make_png(40, 30))
    return p


@pytest.fixture
def caplog_pipeline(caplog):
    caplog.set_level(logging.DEBUG, logger="capture_inventory")
    return caplog


# -------- Pytest markers --------
def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks integration tests")
