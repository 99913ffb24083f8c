"""
Finish Calculator Module
Plaster (render) and waterproofing quantities for a wall surface.

Calculations:
- Plaster volume = surface × thickness, then cement bags and sand
  from the plaster dosage
- Waterproofing product = surface × consumption per layer × layers

The surface normally comes from the masonry tab through the bridge.
When no wall surface is defined the result says so explicitly
(ResultStatus.NO_SURFACE) instead of computing on zero.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from ..bridge import SurfaceInput
from ..geometry import component_area, parse_surface
from ..materials.aggregator import aggregate
from ..materials.calculator import MortarMaterials, mortar_materials_for
from ..norms import Norms, default_norms, dosage_key
from ..validation import (
    ResultStatus,
    finite_or_zero,
    mapping_records,
    safe_count,
    safe_number,
)

logger = logging.getLogger(__name__)

SOURCE_MASONRY = "masonry"
SOURCE_COMPONENTS = "components"


@dataclass
class PlasterResult:
    """Plaster tab result."""
    status: ResultStatus
    dosage: str
    thickness_m: float
    total_surface_m2: float = 0.0
    materials: MortarMaterials = field(default_factory=MortarMaterials)

    @property
    def total_volume_m3(self) -> float:
        return self.materials.volume_m3

    @property
    def has_result(self) -> bool:
        return self.status is ResultStatus.COMPUTED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "dosage": self.dosage,
            "thickness_m": self.thickness_m,
            "total_surface_m2": self.total_surface_m2,
            "total_volume_m3": self.total_volume_m3,
            "materials": self.materials.to_dict(),
        }


@dataclass
class WaterproofingResult:
    """Waterproofing tab result."""
    status: ResultStatus
    source: str
    consumption_kg_m2: float
    layers: int
    total_surface_m2: float = 0.0
    total_product_kg: float = 0.0
    subtotals: List[float] = field(default_factory=list)

    @property
    def has_result(self) -> bool:
        return self.status is ResultStatus.COMPUTED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "source": self.source,
            "consumption_kg_m2": self.consumption_kg_m2,
            "layers": self.layers,
            "total_surface_m2": self.total_surface_m2,
            "total_product_kg": self.total_product_kg,
            "subtotals": list(self.subtotals),
        }


def estimate_plaster(
    surface: SurfaceInput,
    form: Mapping[str, Any],
    norms: Optional[Norms] = None,
) -> Optional[PlasterResult]:
    """
    Estimate plaster for a wall surface.

    Args:
        surface: Wall surface from the bridge
        form: {"thickness": m, "dosage": "300"}
        norms: Reference tables

    Returns:
        PlasterResult, or None if the dosage or thickness is not usable
    """
    norms = norms or default_norms()

    key = dosage_key(form.get("dosage"))
    dosage = norms.plaster_dosage(key)
    thickness = safe_number(form.get("thickness"))

    if dosage is None or thickness <= 0:
        logger.warning(f"Plaster not computable: dosage={key!r}, thickness={thickness}")
        return None

    if not surface.defined:
        return PlasterResult(
            status=ResultStatus.NO_SURFACE,
            dosage=dosage.key,
            thickness_m=thickness,
        )

    materials = mortar_materials_for(
        finite_or_zero(surface.value * thickness), dosage, norms.cement_bag_kg
    )

    return PlasterResult(
        status=ResultStatus.COMPUTED,
        dosage=dosage.key,
        thickness_m=thickness,
        total_surface_m2=surface.value,
        materials=materials,
    )


def estimate_waterproofing(
    surface: SurfaceInput,
    form: Mapping[str, Any],
) -> Optional[WaterproofingResult]:
    """
    Estimate waterproofing product.

    Args:
        surface: Wall surface from the bridge, used when the form's
            source is "masonry" (the default)
        form: {"consumption": kg/m²/layer, "layers": n,
               "source": "masonry" | "components", "components": [...]}

    Returns:
        WaterproofingResult, or None if consumption or layers are not usable
    """
    consumption = safe_number(form.get("consumption"))
    layers = safe_count(form.get("layers"), default=0)

    if consumption <= 0 or layers < 1:
        logger.warning(
            f"Waterproofing not computable: consumption={consumption}, layers={layers}"
        )
        return None

    source = str(form.get("source") or SOURCE_MASONRY).strip().lower()
    subtotals: List[float] = []

    if source == SOURCE_COMPONENTS:
        items = aggregate(
            [parse_surface(c) for c in mapping_records(form.get("components"))], component_area
        )
        surface = SurfaceInput.of(items.total, source=SOURCE_COMPONENTS)
        subtotals = items.subtotals
    else:
        source = SOURCE_MASONRY

    if not surface.defined:
        return WaterproofingResult(
            status=ResultStatus.NO_SURFACE,
            source=source,
            consumption_kg_m2=consumption,
            layers=layers,
            subtotals=subtotals,
        )

    return WaterproofingResult(
        status=ResultStatus.COMPUTED,
        source=source,
        consumption_kg_m2=consumption,
        layers=layers,
        total_surface_m2=surface.value,
        total_product_kg=finite_or_zero(surface.value * consumption * layers),
        subtotals=subtotals,
    )
