"""
Material Calculator - Convert volumes into material quantities.

Concrete: cement (50 kg bags, rounded up), sand, gravel, water.
Mortar / plaster: cement bags and sand.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from ..norms import CEMENT_BAG_KG, DosageEntry, MortarDosage
from ..validation import finite_or_zero


def cement_bags(cement_kg: float, bag_kg: float = CEMENT_BAG_KG) -> int:
    """Whole bags needed for a cement mass, rounded up."""
    if bag_kg <= 0:
        return 0
    cement_kg = finite_or_zero(cement_kg)
    # Round off float noise first so 3500/50 stays 70 bags
    return int(math.ceil(round(cement_kg / bag_kg, 9)))


@dataclass
class ConcreteMaterials:
    """Materials for a volume of concrete."""
    cement_kg: float = 0.0
    cement_bags: int = 0
    sand_m3: float = 0.0
    gravel_m3: float = 0.0
    water_l: float = 0.0

    def to_dict(self) -> dict:
        return {
            "cement_kg": self.cement_kg,
            "cement_bags": self.cement_bags,
            "sand_m3": self.sand_m3,
            "gravel_m3": self.gravel_m3,
            "water_l": self.water_l,
        }

    @classmethod
    def combine(cls, parts: Iterable["ConcreteMaterials"]) -> "ConcreteMaterials":
        """Sum materials of several pours; bags are summed, not re-rounded."""
        total = cls()
        for part in parts:
            total.cement_kg = finite_or_zero(total.cement_kg + part.cement_kg)
            total.cement_bags += part.cement_bags
            total.sand_m3 = finite_or_zero(total.sand_m3 + part.sand_m3)
            total.gravel_m3 = finite_or_zero(total.gravel_m3 + part.gravel_m3)
            total.water_l = finite_or_zero(total.water_l + part.water_l)
        return total


@dataclass
class MortarMaterials:
    """Materials for a volume of mortar or plaster."""
    volume_m3: float = 0.0
    cement_kg: float = 0.0
    cement_bags: int = 0
    sand_m3: float = 0.0

    def to_dict(self) -> dict:
        return {
            "volume_m3": self.volume_m3,
            "cement_kg": self.cement_kg,
            "cement_bags": self.cement_bags,
            "sand_m3": self.sand_m3,
        }


def materials_for(
    volume_m3: float,
    dosage: Optional[DosageEntry],
    bag_kg: float = CEMENT_BAG_KG,
) -> Optional[ConcreteMaterials]:
    """
    Apply a concrete dosage to a volume.

    Args:
        volume_m3: Concrete volume
        dosage: Dosage entry, or None when no dosage is selected
        bag_kg: Cement bag size

    Returns:
        ConcreteMaterials, or None if no dosage is set
    """
    if dosage is None:
        return None

    volume_m3 = finite_or_zero(volume_m3)
    cement_kg = finite_or_zero(volume_m3 * dosage.cement)

    return ConcreteMaterials(
        cement_kg=cement_kg,
        cement_bags=cement_bags(cement_kg, bag_kg),
        sand_m3=finite_or_zero(volume_m3 * dosage.sand),
        gravel_m3=finite_or_zero(volume_m3 * dosage.gravel),
        water_l=finite_or_zero(volume_m3 * dosage.water),
    )


def mortar_materials_for(
    volume_m3: float,
    dosage: Optional[MortarDosage],
    bag_kg: float = CEMENT_BAG_KG,
) -> Optional[MortarMaterials]:
    """Apply a mortar or plaster dosage to a volume of mix."""
    if dosage is None:
        return None

    volume_m3 = finite_or_zero(volume_m3)
    cement_kg = finite_or_zero(volume_m3 * dosage.cement)

    return MortarMaterials(
        volume_m3=volume_m3,
        cement_kg=cement_kg,
        cement_bags=cement_bags(cement_kg, bag_kg),
        sand_m3=finite_or_zero(volume_m3 * dosage.sand),
    )
