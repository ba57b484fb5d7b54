"""
Schema and palette tests — validation rules that live on the models.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from estimator.colors import DEFAULT_COLORS, color_name
from estimator.schemas import (
    AccessoriesConfig,
    BuildingConfig,
    BuildingConfigUpdate,
    ConcreteConfigUpdate,
    CustomerInfoUpdate,
    DoorConfig,
    DoorUpdate,
    EstimateState,
    PricingBreakdown,
    merge,
)


def test_building_defaults():
    b = BuildingConfig()
    assert (b.width, b.length, b.height) == (24, 30, 10)
    assert b.square_feet == 720
    assert b.perimeter_ft == 108


@pytest.mark.parametrize("field,value", [
    ("width", 11),
    ("width", 25),
    ("length", 22),
    ("height", 17),
])
def test_building_dimensions_outside_option_sets(field, value):
    with pytest.raises(ValidationError):
        BuildingConfig(**{field: value})


def test_records_are_frozen():
    b = BuildingConfig()
    with pytest.raises(ValidationError):
        b.width = 30


def test_merge_only_applies_set_fields():
    b = BuildingConfig(width=30, height=12)
    merged = merge(b, BuildingConfigUpdate(length=40))
    assert (merged.width, merged.length, merged.height) == (30, 40, 12)
    assert b.length == 30


@pytest.mark.parametrize("update_cls,field", [
    (BuildingConfigUpdate, "width"),
    (CustomerInfoUpdate, "name"),
    (ConcreteConfigUpdate, "thickness"),
    (DoorUpdate, "quantity"),
])
def test_explicit_null_rejected_on_updates(update_cls, field):
    with pytest.raises(ValidationError):
        update_cls(**{field: None})


def test_door_update_may_clear_optional_fields():
    door = DoorConfig(id="d1", type="walk", size="3x7", width=3, height=7, position=2.0)
    update = DoorUpdate(width=None, height=None, position=None)
    merged = merge(door, update)
    assert (merged.width, merged.height, merged.position) == (None, None, None)
    assert merged.size == "3x7"


def test_door_map_key_must_match_id():
    door = DoorConfig(id="d1", type="walk", size="3x7")
    with pytest.raises(ValidationError):
        AccessoriesConfig(doors={"other": door})


def test_door_views_by_type():
    acc = AccessoriesConfig(doors={
        "a": DoorConfig(id="a", type="walk", size="3x7"),
        "b": DoorConfig(id="b", type="roll_up", size="10x10"),
        "c": DoorConfig(id="c", type="walk", size="4x7"),
    })
    assert [d.id for d in acc.walk_doors] == ["a", "c"]
    assert [d.id for d in acc.roll_up_doors] == ["b"]


def test_state_rejects_inconsistent_grand_total():
    bad = PricingBreakdown(base_price=Decimal("10.00"), grand_total=Decimal("11.00"))
    with pytest.raises(ValidationError):
        EstimateState(step=1, contract_section=1,
                      delivery_distance_miles=Decimal("0"), pricing=bad)


def test_color_names():
    assert color_name("roof", DEFAULT_COLORS["roof"]) == "Burnished Slate"
    assert color_name("walls", "#e8dcc8") == "Sandstone"
    assert color_name("trim", "#000000") == "Black"
    assert color_name("roof", "#000000") == "Custom"
    assert color_name("doors", "#FFFFFF") == "Custom"
