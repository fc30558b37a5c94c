# capture_inventory/core/enrichment/engine.py
from __future__ import annotations

from collections.abc import Iterable

from capture_inventory.core.enrichment.rules import (
    default_cuft,
    default_location,
    is_furniture,
    recommend_box,
    weight_factor,
)
from capture_inventory.schemas.models import DetectedItem, EnrichedItem


def enrich_item(item: DetectedItem) -> EnrichedItem:
    """
    Fill missing location/volume/weight from the category tables and attach a
    box recommendation to every non-furniture item. Pure; never awaits.
    """
    cuft = item.cuft if item.cuft is not None else default_cuft(item.category)
    weight = item.weight if item.weight is not None else cuft * weight_factor(item.category)

    box = None
    if not is_furniture(item.category):
        box = recommend_box(item.category, item.name, cuft, weight, item.quantity)

    return EnrichedItem(
        name=item.name,
        description=item.description,
        category=item.category,
        quantity=item.quantity,
        location=item.location or default_location(item.category),
        cuft=cuft,
        weight=weight,
        fragile=bool(item.fragile),
        special_handling=item.special_handling or "",
        box_recommendation=box,
    )


def enrich_items(items: Iterable[DetectedItem]) -> list[EnrichedItem]:
    return [enrich_item(i) for i in items]


def total_box_count(items: Iterable[EnrichedItem]) -> int:
    return sum(i.box_recommendation.box_quantity for i in items if i.box_recommendation is not None)
