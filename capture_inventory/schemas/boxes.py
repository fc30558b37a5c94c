# capture_inventory/schemas/boxes.py
from __future__ import annotations

from enum import Enum
from typing import NamedTuple

# =========================
# Packing box catalog
# =========================


class BoxType(str, Enum):
    book = "Book Box"
    small = "Small"
    medium = "Medium"
    large = "Large"
    extra_large = "Extra-Large"
    dish_pack = "Dish Pack"
    mirror_picture = "Mirror/Picture"
    wardrobe = "Wardrobe"


class BoxSpec(NamedTuple):
    dimensions: str
    # cubic feet of item volume one box absorbs; None means one box per unit
    volume_divisor: float | None


BOX_CATALOG: dict[BoxType, BoxSpec] = {
    BoxType.book: BoxSpec('12" x 12" x 12"', 1.0),
    BoxType.small: BoxSpec('16-3/8" x 12-5/8" x 12-5/8"', 1.5),
    BoxType.medium: BoxSpec('18-1/8" x 18" x 16"', 3.0),
    BoxType.large: BoxSpec('18" x 18" x 24"', 4.5),
    BoxType.extra_large: BoxSpec('24" x 18" x 24"', 6.0),
    BoxType.dish_pack: BoxSpec('18" x 18" x 28"', 5.0),
    BoxType.mirror_picture: BoxSpec('37" x 4" x 27"', None),
    BoxType.wardrobe: BoxSpec('24" x 21" x 46"', 10.0),
}

# Volume bands for items that match no keyword rule, checked in order (upper bound inclusive).
VOLUME_BANDS: tuple[tuple[float, BoxType], ...] = (
    (1.5, BoxType.small),
    (3.0, BoxType.medium),
    (4.5, BoxType.large),
)
OVERSIZE_BOX = BoxType.extra_large

__all__ = ["BoxType", "BoxSpec", "BOX_CATALOG", "VOLUME_BANDS", "OVERSIZE_BOX"]
