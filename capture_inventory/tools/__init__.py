# capture_inventory/tools/__init__.py
"""
Capture inventory tools package

Exports only modules that live under `capture_inventory/tools`:
  - probe_image / load_image   (from .media)
  - vision (subpackage)        (from .vision)

Pipeline stages (enrichment, fan-out, broadcasting) live under
`capture_inventory.core` and should be imported from there.
"""

from __future__ import annotations

from .media import ImagePayload, load_image, probe_image

__all__ = ["ImagePayload", "load_image", "probe_image"]
