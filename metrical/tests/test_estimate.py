"""Tests for the full estimate pipeline and form state."""

import json

import pytest

from metrical.estimate import run_estimate
from metrical.state import EstimatorState
from metrical.validation import ResultStatus


def test_default_state_estimate(default_state, norms) -> None:
    report = run_estimate(default_state, norms)

    assert report.concrete.total_volume_m3 == pytest.approx(1)
    assert report.concrete.total_materials.cement_bags == 7

    assert report.masonry.total_surface_m2 == 0
    assert not report.wall_surface.defined
    assert report.plaster.status is ResultStatus.NO_SURFACE
    assert report.waterproofing.status is ResultStatus.NO_SURFACE

    assert list(report.steel.by_diameter) == ["6", "8", "10", "12"]
    assert report.steel.members[1].tie_count == 20


def test_masonry_surface_feeds_finishes(default_state, wall_form, norms) -> None:
    state = default_state.replace("masonry", wall_form)
    report = run_estimate(state, norms)

    assert report.wall_surface.value == pytest.approx(25)
    assert report.plaster.total_surface_m2 == pytest.approx(25)
    assert report.waterproofing.total_surface_m2 == pytest.approx(25)
    assert report.waterproofing.total_product_kg == pytest.approx(75)


def test_run_estimate_accepts_plain_mapping(default_state, norms) -> None:
    from_state = run_estimate(default_state, norms).to_dict()
    from_dict = run_estimate(default_state.to_dict(), norms).to_dict()
    assert from_state == from_dict


def test_report_is_json_serializable(default_state, wall_form, norms) -> None:
    report = run_estimate(default_state.replace("masonry", wall_form), norms)
    data = report.to_dict()
    assert json.loads(json.dumps(data)) == data
    assert "estimate" in data["disclaimer"]


def test_empty_everything_never_raises(norms) -> None:
    state = EstimatorState.from_dict({
        "concrete": {"ouvrages": []},
        "masonry": {"components": []},
        "plaster": {},
        "waterproofing": {},
        "steel": {"ouvrages": []},
    })
    report = run_estimate(state, norms)

    assert report.concrete.total_volume_m3 == 0
    assert report.masonry is None
    assert report.plaster is None
    assert report.waterproofing is None
    assert report.steel.total_weight_kg == 0


def test_from_dict_keeps_defaults_for_bad_sections() -> None:
    state = EstimatorState.from_dict({"concrete": "garbage", "plaster": {"thickness": 0.02, "dosage": "250"}})
    assert state.concrete == EstimatorState.default().concrete
    assert state.plaster == {"thickness": 0.02, "dosage": "250"}
    assert EstimatorState.from_dict(None).to_dict() == EstimatorState.default().to_dict()


def test_state_is_passed_by_value(default_state, norms) -> None:
    data = default_state.to_dict()
    data["concrete"]["ouvrages"][0]["dosage"] = "150"
    assert default_state.concrete["ouvrages"][0]["dosage"] == "350"


def test_replace_unknown_tab(default_state) -> None:
    with pytest.raises(KeyError):
        default_state.replace("roofing", {})


def test_malformed_stored_rows_never_raise(norms) -> None:
    report = run_estimate({
        "concrete": {"ouvrages": ["350", {"dosage": "350", "components": [7]}]},
        "masonry": {"blockLength": 0.4, "blockHeight": 0.2, "components": "walls"},
        "plaster": {"thickness": "thick", "dosage": "300"},
        "waterproofing": {"consumption": 1.5, "layers": 2, "source": "components", "components": [None]},
        "steel": {"ouvrages": [{"type": "beam", "longitudinalBars": 12}, 3]},
    }, norms)

    assert report.concrete.total_volume_m3 == 0
    assert report.masonry.total_surface_m2 == 0
    assert not report.wall_surface.defined
    assert report.plaster is None
    assert report.waterproofing.status is ResultStatus.NO_SURFACE
    assert report.steel.members == [None, None]
    assert json.loads(json.dumps(report.to_dict()))["steel"]["total_weight_kg"] == 0
