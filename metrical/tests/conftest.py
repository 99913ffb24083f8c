"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure project root is on path when running tests
_project_root = Path(__file__).resolve().parents[2]
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from metrical.norms import load_norms
from metrical.persistence import FormStore
from metrical.state import EstimatorState


@pytest.fixture
def norms():
    """Norms loaded from the packaged rules file."""
    return load_norms()


@pytest.fixture
def default_state():
    return EstimatorState.default()


@pytest.fixture
def wall_form():
    """Masonry form with 25 m² of wall."""
    return {
        "blockLength": 0.4,
        "blockHeight": 0.2,
        "blockThickness": 0.2,
        "jointThickness": 0.015,
        "mortarDosage": "300",
        "components": [
            {"name": "Mur nord", "length": 5, "height": 3},
            {"name": "Mur est", "length": 4, "height": 2.5},
        ],
    }


@pytest.fixture
def store(tmp_path):
    """FormStore backed by a temporary file."""
    return FormStore(tmp_path / "forms.json")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
