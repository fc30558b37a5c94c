# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import make_capture, build_orchestrator
"""

from .utils import build_orchestrator, make_capture, make_detected

__all__ = ["make_capture", "make_detected", "build_orchestrator"]
