"""Tests for dosage tables and norms loading."""

import pytest

from metrical.norms import dosage_key, load_norms


def test_packaged_concrete_dosages(norms) -> None:
    assert sorted(norms.concrete_dosages, key=int) == ["150", "200", "250", "300", "350", "400"]
    d350 = norms.concrete_dosage("350")
    assert (d350.cement, d350.sand, d350.gravel, d350.water) == (350, 0.4, 0.6, 175)


def test_plaster_and_mortar_tables(norms) -> None:
    assert norms.plaster_dosage("500").sand == pytest.approx(0.85)
    assert norms.mortar_dosage(300).cement == 300
    assert norms.mortar_dosage("500") is None


def test_bar_weights(norms) -> None:
    assert norms.bar_weight("6") == pytest.approx(0.222)
    assert norms.bar_weight(16) == pytest.approx(1.58)
    assert norms.bar_weight("7") is None


def test_constants(norms) -> None:
    assert norms.cement_bag_kg == 50
    assert norms.commercial_bar_length_m == 12
    assert norms.persistence_debounce_s == pytest.approx(0.5)


@pytest.mark.parametrize("raw, expected", [
    (350, "350"),
    (350.0, "350"),
    ("350", "350"),
    (" 350 ", "350"),
    ("350.0", "350"),
    ("", None),
    (None, None),
    (float("nan"), None),
])
def test_dosage_key(raw, expected) -> None:
    assert dosage_key(raw) == expected


def test_missing_file_uses_defaults(tmp_path) -> None:
    norms = load_norms(tmp_path / "absent.yaml")
    assert norms.concrete_dosage("350").cement == 350
    assert norms.bar_weight("12") == pytest.approx(0.888)


def test_partial_override_merges_over_defaults(tmp_path) -> None:
    path = tmp_path / "norms.yaml"
    path.write_text(
        "concrete_dosages:\n"
        "  \"450\": {name: Extra, cement: 450, sand: 0.3, gravel: 0.5, water: 210}\n"
        "constants:\n"
        "  cement_bag_kg: 35\n",
        encoding="utf-8",
    )
    norms = load_norms(path)
    assert norms.concrete_dosage("450").cement == 450
    assert norms.concrete_dosage("350").cement == 350
    assert norms.cement_bag_kg == 35
    assert norms.commercial_bar_length_m == 12


def test_malformed_file_falls_back(tmp_path) -> None:
    path = tmp_path / "norms.yaml"
    path.write_text("concrete_dosages: [unclosed", encoding="utf-8")
    norms = load_norms(path)
    assert norms.concrete_dosage("300").cement == 300


def test_empty_section_keeps_defaults(tmp_path) -> None:
    path = tmp_path / "norms.yaml"
    path.write_text("concrete_dosages:\nconstants: 12\n", encoding="utf-8")
    norms = load_norms(path)
    assert norms.concrete_dosage("350").cement == 350
    assert norms.cement_bag_kg == 50


def test_scalar_entries_are_skipped(tmp_path) -> None:
    path = tmp_path / "norms.yaml"
    path.write_text(
        "concrete_dosages:\n"
        "  \"350\": 350\n"
        "plaster_dosages:\n"
        "  \"300\": [300, 1.0]\n",
        encoding="utf-8",
    )
    norms = load_norms(path)
    assert norms.concrete_dosage("350") is None
    assert norms.concrete_dosage("300").cement == 300
    assert norms.plaster_dosage("300") is None
    assert norms.plaster_dosage("350").cement == 350
