"""Tests for the material converter, aggregator and concrete tab."""

import json
import math
import random

import pytest

from metrical.geometry import RectangularComponent, component_volume
from metrical.materials import (
    ConcreteMaterials,
    aggregate,
    cement_bags,
    estimate_concrete,
    materials_for,
    mortar_materials_for,
    totals_by_dosage,
)


def test_dosage_350_on_ten_cubic_metres(norms) -> None:
    materials = materials_for(10, norms.concrete_dosage("350"))
    assert materials.cement_bags == 70
    assert materials.cement_kg == pytest.approx(3500)
    assert materials.sand_m3 == pytest.approx(4.0)
    assert materials.gravel_m3 == pytest.approx(6.0)
    assert materials.water_l == pytest.approx(1750)


def test_cement_bags_round_up() -> None:
    assert cement_bags(0) == 0
    assert cement_bags(1) == 1
    assert cement_bags(50) == 1
    assert cement_bags(50.5) == 2


def test_cement_bags_monotonic_integer(norms) -> None:
    dosage = norms.concrete_dosage("300")
    previous = 0
    for step in range(0, 200):
        bags = materials_for(step * 0.05, dosage).cement_bags
        assert isinstance(bags, int)
        assert bags >= previous >= 0
        previous = bags


def test_no_dosage_gives_none() -> None:
    assert materials_for(10, None) is None
    assert mortar_materials_for(1, None) is None


def test_zero_volume_gives_zero_materials(norms) -> None:
    materials = materials_for(0, norms.concrete_dosage("250"))
    assert materials.to_dict() == ConcreteMaterials().to_dict()


def test_negative_volume_clamped(norms) -> None:
    materials = materials_for(-3, norms.concrete_dosage("250"))
    assert materials.cement_bags == 0
    assert materials.sand_m3 == 0


def test_mortar_materials(norms) -> None:
    mortar = mortar_materials_for(0.5, norms.plaster_dosage("300"))
    assert mortar.cement_kg == pytest.approx(150)
    assert mortar.cement_bags == 3
    assert mortar.sand_m3 == pytest.approx(0.5)


def test_aggregate_empty() -> None:
    result = aggregate([], component_volume)
    assert result.total == 0
    assert result.subtotals == []


def test_aggregate_keeps_order_and_is_order_independent() -> None:
    components = [
        RectangularComponent(f"C{i}", length=0.1 * i + 0.3, width=0.7, height=1.1, quantity=i + 1)
        for i in range(12)
    ]
    forward = aggregate(components, component_volume)
    assert forward.subtotals == [component_volume(c) for c in components]

    shuffled = list(components)
    random.Random(7).shuffle(shuffled)
    assert aggregate(shuffled, component_volume).total == pytest.approx(forward.total)


def test_totals_by_dosage_merges_equal_keys(norms) -> None:
    m1 = materials_for(1, norms.concrete_dosage("350"))
    m2 = materials_for(2, norms.concrete_dosage("350"))
    m3 = materials_for(1, norms.concrete_dosage("250"))
    grouped = totals_by_dosage([("350", 1, m1), None, ("250", 1, m3), ("350", 2, m2)])

    assert list(grouped) == ["350", "250"]
    assert grouped["350"].volume_m3 == pytest.approx(3)
    assert grouped["350"].work_items == 2
    assert grouped["350"].materials.cement_bags == m1.cement_bags + m2.cement_bags
    assert grouped["250"].materials.sand_m3 == pytest.approx(0.5)


def test_estimate_concrete_multiple_work_items(norms) -> None:
    form = {
        "ouvrages": [
            {"dosage": 350, "components": [
                {"name": "Poteaux", "shape": "rectangular", "length": 0.2, "width": 0.2, "height": 3, "quantity": 10},
                {"name": "Poutres", "shape": "rectangular", "length": 5, "width": 0.2, "height": 0.4, "quantity": 2},
            ]},
            {"dosage": "250", "components": [
                {"name": "Semelles", "length": 1, "width": 1, "height": 0.4, "quantity": 5},
            ]},
            {"dosage": "350", "components": [
                {"name": "Chaînage", "length": 10, "width": 0.2, "height": 0.2, "quantity": 1},
            ]},
        ]
    }
    result = estimate_concrete(form, norms)

    assert [w.volume_m3 for w in result.work_items] == pytest.approx([2.0, 2.0, 0.4])
    assert result.work_items[0].subtotals == pytest.approx([1.2, 0.8])
    assert result.total_volume_m3 == pytest.approx(4.4)
    assert result.work_items[0].materials.cement_bags == 14
    assert result.by_dosage["350"].volume_m3 == pytest.approx(2.4)
    assert result.by_dosage["350"].materials.cement_bags == 14 + 3
    assert result.total_materials.cement_bags == 14 + 10 + 3
    assert result.warnings == []


def test_unknown_dosage_is_not_computable(norms) -> None:
    form = {"ouvrages": [
        {"dosage": "999", "components": [{"name": "X", "length": 1, "width": 1, "height": 1}]},
        {"dosage": None, "components": [{"name": "Y", "length": 1, "width": 1, "height": 1}]},
        {"dosage": "300", "components": [{"name": "Z", "length": 1, "width": 1, "height": 1}]},
    ]}
    result = estimate_concrete(form, norms)

    assert result.work_items[0] is None
    assert result.work_items[1] is None
    assert result.total_volume_m3 == pytest.approx(1)
    assert len(result.warnings) == 2
    assert list(result.by_dosage) == ["300"]


def test_empty_concrete_form(norms) -> None:
    for form in ({}, {"ouvrages": []}, {"ouvrages": [{"dosage": "350", "components": []}]}):
        result = estimate_concrete(form, norms)
        assert result.total_volume_m3 == 0
        assert result.total_materials.cement_bags == 0
        assert not result.has_result


def test_concrete_result_is_plain_data(norms) -> None:
    import json

    form = {"ouvrages": [{"dosage": "350", "components": [{"name": "A", "length": 1, "width": 1, "height": 1}]}]}
    data = estimate_concrete(form, norms).to_dict()
    assert json.loads(json.dumps(data)) == data


def test_overflowing_volume_is_zeroed_consistently(norms) -> None:
    form = {"ouvrages": [{"dosage": "350", "components": [
        {"length": 1e200, "width": 1e200, "height": 1e200},
    ]}]}
    result = estimate_concrete(form, norms)

    item = result.work_items[0]
    assert item.volume_m3 == 0
    assert item.materials.cement_bags == 0
    assert math.isfinite(result.total_volume_m3)
    assert "Infinity" not in json.dumps(result.to_dict())


def test_aggregate_total_overflow_is_zeroed() -> None:
    big = [RectangularComponent("a", 1e154, 1e154, 1), RectangularComponent("b", 1e154, 1e154, 1)]
    result = aggregate(big, component_volume)
    assert all(math.isfinite(v) for v in result.subtotals)
    assert result.total == 0


def test_malformed_rows_are_ignored(norms) -> None:
    form = {"ouvrages": [
        "350",
        {"dosage": "350", "components": ["cube", None, {"length": 2, "width": 1, "height": 1}]},
    ]}
    result = estimate_concrete(form, norms)

    assert result.work_items[0] is None
    assert result.work_items[1].subtotals == [2]
    assert result.total_volume_m3 == pytest.approx(2)
    assert len(result.warnings) == 1


def test_work_item_list_that_is_not_a_list(norms) -> None:
    result = estimate_concrete({"ouvrages": 42}, norms)
    assert result.work_items == []
    assert result.total_volume_m3 == 0
