"""
Estimator form state.

One explicit, serializable snapshot holding every tab's form data as
plain JSON-compatible mappings. The UI layer owns mutation and
persistence; calculators receive the snapshot by value.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

# Tab name -> storage key of the saved form
FORM_IDS = {
    "concrete": "concrete-form",
    "masonry": "block-form",
    "plaster": "plaster-form",
    "waterproofing": "waterproofing-form",
    "steel": "steel-form",
}


def _default_concrete() -> Dict[str, Any]:
    return {
        "ouvrages": [
            {
                "dosage": "350",
                "components": [
                    {"name": "Nouveau composant", "shape": "rectangular",
                     "length": 1, "width": 1, "height": 1, "quantity": 1},
                ],
            },
        ],
    }


def _default_masonry() -> Dict[str, Any]:
    return {
        "blockLength": 0.4,
        "blockHeight": 0.2,
        "blockThickness": 0.2,
        "jointThickness": 0.015,
        "mortarDosage": "300",
        "components": [],
    }


def _default_plaster() -> Dict[str, Any]:
    return {"thickness": 0.015, "dosage": "300"}


def _default_waterproofing() -> Dict[str, Any]:
    return {
        "consumption": 1.5,   # kg/m²/layer
        "layers": 2,
        "source": "masonry",
        "components": [
            {"name": "Fondations", "area": 50},
            {"name": "Murs enterrés", "area": 30},
        ],
    }


def _default_steel() -> Dict[str, Any]:
    return {
        "ouvrages": [
            {"name": "Poutre Principale", "type": "beam", "shape": "rectangular",
             "length": 6, "width": 0.25, "height": 0.4, "quantity": 1,
             "longitudinalBars": {"diameter": "12", "count": 6},
             "transversalBars": {"tieType": "stirrup", "diameter": "8", "spacing": 0.20},
             "coating": 0.025},
            {"name": "Poteaux P1", "type": "column", "shape": "rectangular",
             "length": 3, "width": 0.3, "height": 0.3, "quantity": 4,
             "longitudinalBars": {"diameter": "10", "count": 4},
             "transversalBars": {"tieType": "stirrup", "diameter": "6", "spacing": 0.15},
             "coating": 0.025},
        ],
    }


@dataclass
class EstimatorState:
    """Form data of every tab."""
    concrete: Dict[str, Any] = field(default_factory=_default_concrete)
    masonry: Dict[str, Any] = field(default_factory=_default_masonry)
    plaster: Dict[str, Any] = field(default_factory=_default_plaster)
    waterproofing: Dict[str, Any] = field(default_factory=_default_waterproofing)
    steel: Dict[str, Any] = field(default_factory=_default_steel)

    @classmethod
    def default(cls) -> "EstimatorState":
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EstimatorState":
        """
        Build a state from a snapshot.

        Tabs missing from the snapshot, or not stored as mappings, keep
        their defaults.
        """
        state = cls()
        for tab in FORM_IDS:
            section = data.get(tab) if isinstance(data, Mapping) else None
            if isinstance(section, Mapping):
                setattr(state, tab, copy.deepcopy(dict(section)))
        return state

    def to_dict(self) -> Dict[str, Any]:
        return {tab: copy.deepcopy(getattr(self, tab)) for tab in FORM_IDS}

    def replace(self, tab: str, form: Mapping[str, Any]) -> "EstimatorState":
        """Copy of the state with one tab's form replaced."""
        if tab not in FORM_IDS:
            raise KeyError(f"Unknown tab: {tab}")
        data = self.to_dict()
        data[tab] = copy.deepcopy(dict(form))
        return EstimatorState.from_dict(data)
