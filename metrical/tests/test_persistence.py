"""Tests for the form store and the debounced saver."""

import dataclasses
import json

import pytest

from metrical.estimate import run_estimate
from metrical.persistence import DebouncedSaver, FormStore
from metrical.state import FORM_IDS, EstimatorState


def test_load_missing_returns_none(store) -> None:
    assert store.load("concrete-form") is None


def test_save_and_load(store) -> None:
    snapshot = {"ouvrages": [{"dosage": "300", "components": []}]}
    assert store.save("concrete-form", snapshot)
    assert store.load("concrete-form") == snapshot
    assert store.load("block-form") is None


def test_forms_are_independent(store) -> None:
    store.save("a", {"x": 1})
    store.save("b", {"y": 2})
    store.save("a", {"x": 3})
    assert store.load("a") == {"x": 3}
    assert store.load("b") == {"y": 2}


def test_corrupted_store_is_ignored(tmp_path) -> None:
    path = tmp_path / "forms.json"
    path.write_text("{not json", encoding="utf-8")
    store = FormStore(path)
    assert store.load("concrete-form") is None
    # A new save replaces the corrupted blob
    assert store.save("concrete-form", {"ouvrages": []})
    assert store.load("concrete-form") == {"ouvrages": []}


def test_non_object_payloads_are_ignored(tmp_path) -> None:
    path = tmp_path / "forms.json"
    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert FormStore(path).load("x") is None

    path.write_text(json.dumps({"x": "not a form"}), encoding="utf-8")
    assert FormStore(path).load("x") is None


def test_unserializable_snapshot_is_not_fatal(store) -> None:
    assert store.save("x", {"bad": object()}) is False
    assert store.load("x") is None


def test_remove(store) -> None:
    store.save("x", {"a": 1})
    assert store.remove("x")
    assert store.load("x") is None
    assert not store.remove("x")


def test_debounce_coalesces_bursts(store, clock) -> None:
    saver = DebouncedSaver(store, "concrete-form", delay=0.5, clock=clock)
    saver.mark_loaded()

    for i in range(10):
        saver.notify({"edit": i})
        clock.advance(0.1)
        assert saver.poll() is False

    assert store.load("concrete-form") is None
    clock.advance(0.5)
    assert saver.poll() is True
    assert saver.writes == 1
    assert store.load("concrete-form") == {"edit": 9}
    assert saver.poll() is False


def test_initial_load_is_not_written_back(store, clock) -> None:
    saver = DebouncedSaver(store, "block-form", clock=clock)
    saver.notify({"during": "load"})
    clock.advance(1)
    assert saver.poll() is False
    assert not saver.pending


def test_load_then_edit(store, clock) -> None:
    store.save("plaster-form", {"thickness": 0.02, "dosage": "350"})
    saver = DebouncedSaver(store, "plaster-form", clock=clock)

    assert saver.load() == {"thickness": 0.02, "dosage": "350"}
    saver.notify({"thickness": 0.03, "dosage": "350"})
    assert saver.flush() is True
    assert store.load("plaster-form")["thickness"] == 0.03


def test_state_round_trip_reproduces_totals(store, norms) -> None:
    state = EstimatorState.default()
    state.masonry["components"] = [{"name": "Mur", "length": 8, "height": 2.7}]

    for tab, form_id in FORM_IDS.items():
        store.save(form_id, getattr(state, tab))

    restored = EstimatorState.from_dict({
        tab: store.load(form_id) for tab, form_id in FORM_IDS.items()
    })

    assert run_estimate(restored, norms).to_dict() == run_estimate(state, norms).to_dict()


def test_debounce_window_comes_from_norms(store, clock, norms) -> None:
    assert DebouncedSaver(store, "steel-form", clock=clock).delay == pytest.approx(0.5)

    slow = dataclasses.replace(norms, persistence_debounce_s=2.0)
    saver = DebouncedSaver(store, "steel-form", clock=clock, norms=slow)
    saver.mark_loaded()
    saver.notify({"ouvrages": []})
    clock.advance(1.0)
    assert saver.poll() is False
    clock.advance(1.0)
    assert saver.poll() is True
