# capture_inventory/core/enrichment/rules.py
"""
Deterministic lookup tables and the packing-box decision table.

Default tables (location, volume, weight factor) match the normalized category
exactly. The furniture check and the box rules match keywords as substrings of
the lowercased category / item name.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from capture_inventory.schemas.boxes import BOX_CATALOG, OVERSIZE_BOX, VOLUME_BANDS, BoxType
from capture_inventory.schemas.models import BoxRecommendation

# =========================
# Default tables
# =========================

DEFAULT_LOCATION = "Other"
LOCATION_BY_CATEGORY: dict[str, str] = {
    "furniture": "Living Room",
    "kitchenware": "Kitchen",
    "electronics": "Living Room",
    "bedding": "Bedroom",
}

DEFAULT_CUFT = 3.0
CUFT_BY_CATEGORY: dict[str, float] = {
    "furniture": 15.0,
    "electronics": 3.0,
    "kitchenware": 2.0,
    "decor": 1.0,
}

# pounds per cubic foot
DEFAULT_WEIGHT_FACTOR = 7.0
WEIGHT_FACTOR_BY_CATEGORY: dict[str, float] = {
    "furniture": 8.0,
    "electronics": 10.0,
    "books": 20.0,
    "media": 20.0,
    "clothing": 4.0,
    "bedding": 4.0,
    "kitchenware": 9.0,
    "appliances": 12.0,
}

FURNITURE_KEYWORDS: tuple[str, ...] = (
    "sofa",
    "couch",
    "table",
    "chair",
    "bed",
    "mattress",
    "dresser",
    "cabinet",
    "desk",
    "wardrobe",
    "bookcase",
    "shelf",
    "shelving",
    "furniture",
    "ottoman",
    "recliner",
    "bench",
    "armchair",
)

HEAVY_ITEM_LB = 40.0
BOOK_BOX_MAX_CUFT = 1.0

_DISH_NAMES = ("dish", "glass", "cup", "plate")
_ELECTRONIC_NAMES = ("tv", "television", "computer")
_FRAMED_NAMES = ("mirror", "picture", "painting", "art")
_GARMENT_NAMES = ("dress", "coat", "suit")


def normalize_category(category: str | None) -> str:
    return (category or "").strip().lower()


def default_location(category: str | None) -> str:
    return LOCATION_BY_CATEGORY.get(normalize_category(category), DEFAULT_LOCATION)


def default_cuft(category: str | None) -> float:
    return CUFT_BY_CATEGORY.get(normalize_category(category), DEFAULT_CUFT)


def weight_factor(category: str | None) -> float:
    return WEIGHT_FACTOR_BY_CATEGORY.get(normalize_category(category), DEFAULT_WEIGHT_FACTOR)


def is_furniture(category: str | None) -> bool:
    cat = normalize_category(category)
    if not cat:
        return False
    return any(k in cat for k in FURNITURE_KEYWORDS)


# =========================
# Box recommendation
# =========================


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(n in text for n in needles)


def select_box_type(category: str | None, name: str, cuft: float, weight: float) -> BoxType:
    """First matching rule wins; volume bands are the final fallback."""
    cat = normalize_category(category)
    nm = (name or "").lower()

    if "book" in cat or "book" in nm or weight > HEAVY_ITEM_LB:
        return BoxType.book if cuft <= BOOK_BOX_MAX_CUFT else BoxType.small
    if "kitchenware" in cat or _contains_any(nm, _DISH_NAMES):
        return BoxType.dish_pack
    if "electronic" in cat or _contains_any(nm, _ELECTRONIC_NAMES):
        return BoxType.medium
    if _contains_any(nm, _FRAMED_NAMES):
        return BoxType.mirror_picture
    if "cloth" in cat or _contains_any(nm, _GARMENT_NAMES):
        return BoxType.wardrobe

    for upper, box in VOLUME_BANDS:
        if cuft <= upper:
            return box
    return OVERSIZE_BOX


def box_quantity(box: BoxType, quantity: int, cuft: float) -> int:
    divisor = BOX_CATALOG[box].volume_divisor
    if divisor is None:
        return max(1, quantity)
    # drop float noise (1.0000000000000002) before ceil
    return max(1, math.ceil(round(quantity * cuft / divisor, 9)))


def recommend_box(category: str | None, name: str, cuft: float, weight: float, quantity: int) -> BoxRecommendation:
    box = select_box_type(category, name, cuft, weight)
    return BoxRecommendation(
        box_type=box.value,
        box_quantity=box_quantity(box, quantity, cuft),
        box_dimensions=BOX_CATALOG[box].dimensions,
    )


__all__ = [
    "DEFAULT_LOCATION",
    "DEFAULT_CUFT",
    "DEFAULT_WEIGHT_FACTOR",
    "LOCATION_BY_CATEGORY",
    "CUFT_BY_CATEGORY",
    "WEIGHT_FACTOR_BY_CATEGORY",
    "FURNITURE_KEYWORDS",
    "normalize_category",
    "default_location",
    "default_cuft",
    "weight_factor",
    "is_furniture",
    "select_box_type",
    "box_quantity",
    "recommend_box",
]
