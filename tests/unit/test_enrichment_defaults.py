# tests/unit/test_enrichment_defaults.py
"""
Enrichment defaults

Purpose
-------
Missing location / volume / weight are filled from the category tables, and
values reported by the vision service are never overwritten.
"""

import pytest

from capture_inventory.core.enrichment import enrich_item, enrich_items, total_box_count
from capture_inventory.core.enrichment.rules import default_cuft, default_location, weight_factor
from tests import make_detected


def test_sofa_gets_furniture_defaults_and_no_box():
    out = enrich_item(make_detected(name="Sofa", category="furniture", quantity=1))
    assert out.cuft == 15.0
    assert out.weight == 120.0
    assert out.location == "Living Room"
    assert out.box_recommendation is None


def test_plate_set_gets_dish_pack():
    out = enrich_item(make_detected(name="Plate Set", category="kitchenware", quantity=1))
    assert out.cuft == 2.0
    assert out.weight == 18.0
    assert out.location == "Kitchen"
    box = out.box_recommendation
    assert box is not None
    assert box.box_type == "Dish Pack"
    assert box.box_dimensions == '18" x 18" x 28"'
    assert box.box_quantity == 1


@pytest.mark.parametrize(
    "category, location, cuft, factor",
    [
        ("furniture", "Living Room", 15.0, 8.0),
        ("kitchenware", "Kitchen", 2.0, 9.0),
        ("electronics", "Living Room", 3.0, 10.0),
        ("bedding", "Bedroom", 3.0, 4.0),
        ("decor", "Other", 1.0, 7.0),
        ("books", "Other", 3.0, 20.0),
        ("appliances", "Other", 3.0, 12.0),
        (None, "Other", 3.0, 7.0),
        ("  Kitchenware ", "Kitchen", 2.0, 9.0),
    ],
)
def test_category_tables(category, location, cuft, factor):
    assert default_location(category) == location
    assert default_cuft(category) == cuft
    assert weight_factor(category) == factor


def test_table_lookup_is_exact_not_substring():
    # "kitchenware items" is not a table key; every default falls back.
    assert default_location("kitchenware items") == "Other"
    assert default_cuft("kitchenware items") == 3.0


def test_reported_values_are_kept():
    out = enrich_item(
        make_detected(name="Bookshelf", category="furniture", location="Study", cuft=22, weight=95, fragile=True)
    )
    assert (out.location, out.cuft, out.weight, out.fragile) == ("Study", 22.0, 95.0, True)


def test_weight_derives_from_reported_volume():
    out = enrich_item(make_detected(name="Records", category="media", cuft=0.5))
    assert out.weight == 10.0


def test_non_positive_measures_count_as_missing():
    out = enrich_item(make_detected(name="Vase", category="decor", cuft=0, weight=-3))
    assert out.cuft == 1.0
    assert out.weight == 7.0


def test_flags_default():
    out = enrich_item(make_detected(name="Blanket", category="bedding"))
    assert out.fragile is False
    assert out.special_handling == ""
    assert out.quantity == 1


def test_total_box_count_skips_furniture():
    items = enrich_items(
        [
            make_detected(name="Sofa", category="furniture"),
            make_detected(name="Plate Set", category="kitchenware"),
            make_detected(name="Hardcovers", category="books", quantity=10, cuft=0.2),
        ]
    )
    # dish pack 1 + book box ceil(10*0.2/1)=2
    assert total_box_count(items) == 3
    assert total_box_count([]) == 0
