"""
Material Norms - Dosage tables and reference constants.

Loads concrete, plaster and mortar dosages, HA bar linear weights and
packaging constants from rules/norms.yaml. Missing or unreadable files
fall back to the built-in defaults below.
"""

import copy
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import RULES_DIR
from .validation import safe_number

logger = logging.getLogger(__name__)

DEFAULT_NORMS_PATH = RULES_DIR / "norms.yaml"

CEMENT_BAG_KG = 50.0
COMMERCIAL_BAR_LENGTH_M = 12.0
PERSISTENCE_DEBOUNCE_S = 0.5


@dataclass(frozen=True)
class DosageEntry:
    """Concrete mix ratios per m³ of concrete."""
    key: str
    name: str
    cement: float   # kg/m³
    sand: float     # m³/m³
    gravel: float   # m³/m³
    water: float    # L/m³

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "cement": self.cement,
            "sand": self.sand,
            "gravel": self.gravel,
            "water": self.water,
        }


@dataclass(frozen=True)
class MortarDosage:
    """Mortar or plaster ratios per m³ of mix."""
    key: str
    name: str
    cement: float   # kg/m³
    sand: float     # m³/m³

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "cement": self.cement,
            "sand": self.sand,
        }


@dataclass(frozen=True)
class Norms:
    """Immutable reference data shared by every calculator."""
    concrete_dosages: Dict[str, DosageEntry] = field(default_factory=dict)
    plaster_dosages: Dict[str, MortarDosage] = field(default_factory=dict)
    mortar_dosages: Dict[str, MortarDosage] = field(default_factory=dict)
    bar_weights: Dict[str, float] = field(default_factory=dict)
    cement_bag_kg: float = CEMENT_BAG_KG
    commercial_bar_length_m: float = COMMERCIAL_BAR_LENGTH_M
    persistence_debounce_s: float = PERSISTENCE_DEBOUNCE_S

    def concrete_dosage(self, key: Any) -> Optional[DosageEntry]:
        return self.concrete_dosages.get(dosage_key(key) or "")

    def plaster_dosage(self, key: Any) -> Optional[MortarDosage]:
        return self.plaster_dosages.get(dosage_key(key) or "")

    def mortar_dosage(self, key: Any) -> Optional[MortarDosage]:
        return self.mortar_dosages.get(dosage_key(key) or "")

    def bar_weight(self, diameter: Any) -> Optional[float]:
        """Linear weight (kg/m) for an HA diameter, or None if unknown."""
        return self.bar_weights.get(dosage_key(diameter) or "")


def dosage_key(value: Any) -> Optional[str]:
    """
    Normalise a table key coming from a form.

    Forms may hand over 350, 350.0 or "350"; all map to "350".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if value != value:  # NaN
            return None
        if float(value).is_integer():
            return str(int(value))
        return str(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return text
    if number.is_integer():
        return str(int(number))
    return text


_DEFAULT_NORMS: Dict[str, Any] = {
    "concrete_dosages": {
        "150": {"name": "Béton de propreté (150 kg/m³)", "cement": 150, "sand": 0.4, "gravel": 0.8, "water": 75},
        "200": {"name": "Béton pour fondations légères (200 kg/m³)", "cement": 200, "sand": 0.45, "gravel": 0.85, "water": 100},
        "250": {"name": "Fondations / Semelles (250 kg/m³)", "cement": 250, "sand": 0.5, "gravel": 0.9, "water": 125},
        "300": {"name": "Dallage / Chaussées (300 kg/m³)", "cement": 300, "sand": 0.4, "gravel": 0.7, "water": 150},
        "350": {"name": "Poteaux / Poutres / Chaînages (350 kg/m³)", "cement": 350, "sand": 0.4, "gravel": 0.6, "water": 175},
        "400": {"name": "Béton de haute résistance (400 kg/m³)", "cement": 400, "sand": 0.35, "gravel": 0.55, "water": 200},
    },
    "plaster_dosages": {
        "250": {"name": "Enduit courant (250 kg/m³)", "cement": 250, "sand": 1.05},
        "300": {"name": "Enduit standard (300 kg/m³)", "cement": 300, "sand": 1.0},
        "350": {"name": "Enduit riche (350 kg/m³)", "cement": 350, "sand": 0.95},
        "400": {"name": "Gobetis (400 kg/m³)", "cement": 400, "sand": 0.9},
        "500": {"name": "Enduit de finition (500 kg/m³)", "cement": 500, "sand": 0.85},
    },
    "mortar_dosages": {
        "250": {"name": "Mortier bâtard (250 kg/m³)", "cement": 250, "sand": 1.05},
        "300": {"name": "Mortier de pose (300 kg/m³)", "cement": 300, "sand": 1.0},
        "350": {"name": "Mortier courant (350 kg/m³)", "cement": 350, "sand": 0.95},
        "400": {"name": "Mortier riche (400 kg/m³)", "cement": 400, "sand": 0.9},
    },
    "steel_bar_weights": {
        "6": 0.222,
        "8": 0.395,
        "10": 0.617,
        "12": 0.888,
        "14": 1.21,
        "16": 1.58,
        "20": 2.466,
        "25": 3.853,
        "32": 6.313,
    },
    "constants": {
        "cement_bag_kg": CEMENT_BAG_KG,
        "commercial_bar_length_m": COMMERCIAL_BAR_LENGTH_M,
        "persistence_debounce_s": PERSISTENCE_DEBOUNCE_S,
    },
}


def _read_yaml(path: Path) -> Dict:
    """Read a norms file, returning an empty dict on any failure."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load norms from {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring norms file {path}: expected a mapping")
        return {}
    return data


def _merge(defaults: Dict, overrides: Dict) -> Dict:
    """Merge override sections over the defaults, section by section."""
    merged = copy.deepcopy(defaults)
    for section, values in overrides.items():
        if section not in merged:
            merged[section] = values
        elif not isinstance(values, dict):
            logger.warning(f"Ignoring norms section {section!r}: expected a mapping")
        else:
            merged[section].update(values)
    return merged


def _build(raw: Dict) -> Norms:
    concrete = {}
    for key, entry in raw.get("concrete_dosages", {}).items():
        if not isinstance(entry, dict):
            logger.warning(f"Ignoring concrete dosage {key!r}: expected a mapping")
            continue
        key = dosage_key(key)
        concrete[key] = DosageEntry(
            key=key,
            name=str(entry.get("name", key)),
            cement=safe_number(entry.get("cement")),
            sand=safe_number(entry.get("sand")),
            gravel=safe_number(entry.get("gravel")),
            water=safe_number(entry.get("water")),
        )

    def mortar_table(section: str) -> Dict[str, MortarDosage]:
        table = {}
        for key, entry in raw.get(section, {}).items():
            if not isinstance(entry, dict):
                logger.warning(f"Ignoring {section} entry {key!r}: expected a mapping")
                continue
            key = dosage_key(key)
            table[key] = MortarDosage(
                key=key,
                name=str(entry.get("name", key)),
                cement=safe_number(entry.get("cement")),
                sand=safe_number(entry.get("sand")),
            )
        return table

    bar_weights = {
        dosage_key(dia): safe_number(weight)
        for dia, weight in raw.get("steel_bar_weights", {}).items()
    }

    constants = raw.get("constants", {})

    return Norms(
        concrete_dosages=concrete,
        plaster_dosages=mortar_table("plaster_dosages"),
        mortar_dosages=mortar_table("mortar_dosages"),
        bar_weights=bar_weights,
        cement_bag_kg=safe_number(constants.get("cement_bag_kg"), CEMENT_BAG_KG) or CEMENT_BAG_KG,
        commercial_bar_length_m=(
            safe_number(constants.get("commercial_bar_length_m"), COMMERCIAL_BAR_LENGTH_M)
            or COMMERCIAL_BAR_LENGTH_M
        ),
        persistence_debounce_s=safe_number(
            constants.get("persistence_debounce_s"), PERSISTENCE_DEBOUNCE_S
        ),
    )


def load_norms(path: Optional[Path] = None) -> Norms:
    """
    Load material norms.

    Args:
        path: Optional YAML file; sections present in it override the
            built-in defaults.

    Returns:
        Norms instance
    """
    path = Path(path) if path else DEFAULT_NORMS_PATH
    raw = _DEFAULT_NORMS
    if path.exists():
        raw = _merge(_DEFAULT_NORMS, _read_yaml(path))
    else:
        logger.warning(f"Norms file not found: {path}, using built-in defaults")
    return _build(raw)


@lru_cache(maxsize=1)
def default_norms() -> Norms:
    """Process-wide norms loaded from the packaged rules file."""
    return load_norms()
