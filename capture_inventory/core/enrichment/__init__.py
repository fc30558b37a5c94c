"""
capture_inventory.core.enrichment
=================================

Deterministic item enrichment (no I/O).

Exports:
- enrich_item(), enrich_items(), total_box_count()
- Tables + decision helpers: is_furniture(), recommend_box(), select_box_type()
"""

from __future__ import annotations

from .engine import enrich_item, enrich_items, total_box_count
from .rules import (
    FURNITURE_KEYWORDS,
    box_quantity,
    default_cuft,
    default_location,
    is_furniture,
    recommend_box,
    select_box_type,
    weight_factor,
)

__all__ = [
    "enrich_item",
    "enrich_items",
    "total_box_count",
    "FURNITURE_KEYWORDS",
    "box_quantity",
    "default_cuft",
    "default_location",
    "is_furniture",
    "recommend_box",
    "select_box_type",
    "weight_factor",
]
