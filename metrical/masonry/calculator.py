"""
Masonry Calculator - Block counts and laying mortar for walls.

Blocks per m² = 1 / ((block length + joint) × (block height + joint))
Blocks needed = ceil(wall surface × blocks per m²)
Mortar volume = wall surface × joint thickness

Wall panels are length × height; the masonry tab has no quantity
multiplier, repeated walls are entered as separate panels.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from ..geometry import WallComponent, component_area, dimension, parse_wall
from ..materials.aggregator import Aggregate, aggregate
from ..materials.calculator import MortarMaterials, mortar_materials_for
from ..norms import Norms, default_norms, dosage_key
from ..validation import ValidationError, finite_or_zero, mapping_records, safe_number

logger = logging.getLogger(__name__)

DEFAULT_MORTAR_DOSAGE = "300"


@dataclass(frozen=True)
class BlockSpec:
    """Block and joint dimensions (m)."""
    block_length: float
    block_height: float
    block_thickness: float = 0.0
    joint_thickness: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], strict: bool = False) -> "BlockSpec":
        """
        Read block dimensions from the masonry form.

        With strict=True, non-positive block length/height raise
        ValidationError instead of producing a spec the calculator
        will refuse.
        """
        spec = cls(
            block_length=safe_number(data.get("blockLength")),
            block_height=safe_number(data.get("blockHeight")),
            block_thickness=dimension(data.get("blockThickness")),
            joint_thickness=dimension(data.get("jointThickness")),
        )
        if strict:
            if spec.block_length <= 0:
                raise ValidationError("Block length must be positive", field="blockLength")
            if spec.block_height <= 0:
                raise ValidationError("Block height must be positive", field="blockHeight")
        return spec

    def to_dict(self) -> dict:
        return {
            "blockLength": self.block_length,
            "blockHeight": self.block_height,
            "blockThickness": self.block_thickness,
            "jointThickness": self.joint_thickness,
        }


@dataclass
class MasonryResult:
    """Masonry tab result."""
    total_surface_m2: float
    blocks_per_m2: float
    blocks_needed: int
    subtotals: List[float] = field(default_factory=list)
    mortar_dosage: Optional[str] = None
    mortar: Optional[MortarMaterials] = None

    @property
    def has_result(self) -> bool:
        return self.total_surface_m2 > 0

    def to_dict(self) -> dict:
        return {
            "total_surface_m2": self.total_surface_m2,
            "blocks_per_m2": self.blocks_per_m2,
            "blocks_needed": self.blocks_needed,
            "subtotals": list(self.subtotals),
            "mortar_dosage": self.mortar_dosage,
            "mortar": self.mortar.to_dict() if self.mortar else None,
        }


def blocks_per_m2(spec: BlockSpec) -> Optional[float]:
    """Blocks per m² of wall, or None for a degenerate block."""
    if spec.block_length <= 0 or spec.block_height <= 0:
        return None
    cell = (spec.block_length + spec.joint_thickness) * (spec.block_height + spec.joint_thickness)
    if cell <= 0:
        return None
    per_m2 = 1 / cell
    if math.isnan(per_m2) or math.isinf(per_m2):
        return None
    return per_m2


def blocks_needed(surface_m2: float, per_m2: float) -> int:
    """Whole blocks for a surface, rounded up."""
    return int(math.ceil(round(finite_or_zero(surface_m2 * per_m2), 9)))


def mortar_volume(surface_m2: float, joint_thickness: float) -> float:
    """Laying mortar volume (m³) for a wall surface."""
    return finite_or_zero(surface_m2 * joint_thickness)


def parse_walls(form: Mapping[str, Any]) -> List[WallComponent]:
    return [parse_wall(c) for c in mapping_records(form.get("components"))]


def wall_aggregate(form: Mapping[str, Any]) -> Aggregate:
    """Per-panel areas and total wall surface of the masonry form."""
    return aggregate(parse_walls(form), component_area)


def estimate_masonry(
    form: Mapping[str, Any],
    norms: Optional[Norms] = None,
) -> Optional[MasonryResult]:
    """
    Estimate the masonry tab.

    Args:
        form: {"blockLength", "blockHeight", "blockThickness",
               "jointThickness", "mortarDosage", "components": [...]}
        norms: Reference tables (packaged defaults if omitted)

    Returns:
        MasonryResult, or None when the block dimensions are not usable
    """
    norms = norms or default_norms()
    spec = BlockSpec.from_dict(form)

    per_m2 = blocks_per_m2(spec)
    if per_m2 is None:
        logger.warning(
            f"Block dimensions not usable: {spec.block_length} x {spec.block_height} m"
        )
        return None

    walls = wall_aggregate(form)

    key = dosage_key(form.get("mortarDosage")) or DEFAULT_MORTAR_DOSAGE
    mortar = mortar_materials_for(
        mortar_volume(walls.total, spec.joint_thickness),
        norms.mortar_dosage(key),
        norms.cement_bag_kg,
    )
    if mortar is None:
        logger.warning(f"Unknown mortar dosage {key!r}")

    result = MasonryResult(
        total_surface_m2=walls.total,
        blocks_per_m2=per_m2,
        blocks_needed=blocks_needed(walls.total, per_m2),
        subtotals=walls.subtotals,
        mortar_dosage=key if mortar else None,
        mortar=mortar,
    )

    logger.debug(
        f"Masonry: {result.total_surface_m2:.2f} m², {result.blocks_needed} blocks"
    )

    return result
