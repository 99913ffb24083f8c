"""
Concrete Estimator - Volumes and materials for concrete work-items.

A work-item ("ouvrage") groups components poured with one dosage. Its
volume is the sum of its component volumes; materials follow from the
dosage table. Work-items without a known dosage are reported as not
computable and left out of the totals.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..geometry import ConcreteComponent, component_volume, parse_component
from ..norms import Norms, default_norms, dosage_key
from ..validation import mapping_records, records
from .aggregator import DosageTotal, aggregate, totals_by_dosage
from .calculator import ConcreteMaterials, materials_for

logger = logging.getLogger(__name__)


@dataclass
class WorkItem:
    """Group of components sharing one concrete dosage."""
    dosage: Optional[str]
    components: List[ConcreteComponent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkItem":
        if not isinstance(data, Mapping):
            return cls(dosage=None)
        return cls(
            dosage=dosage_key(data.get("dosage")),
            components=[parse_component(c) for c in mapping_records(data.get("components"))],
        )

    def to_dict(self) -> dict:
        return {
            "dosage": self.dosage,
            "components": [c.to_dict() for c in self.components],
        }


@dataclass
class WorkItemResult:
    """Computed quantities for one work-item."""
    index: int
    dosage: str
    dosage_name: str
    volume_m3: float
    subtotals: List[float]
    materials: ConcreteMaterials

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "dosage": self.dosage,
            "dosage_name": self.dosage_name,
            "volume_m3": self.volume_m3,
            "subtotals": list(self.subtotals),
            "materials": self.materials.to_dict(),
        }


@dataclass
class ConcreteResult:
    """Concrete tab result."""
    # One entry per work-item, None where not computable
    work_items: List[Optional[WorkItemResult]] = field(default_factory=list)
    total_volume_m3: float = 0.0
    total_materials: ConcreteMaterials = field(default_factory=ConcreteMaterials)
    by_dosage: Dict[str, DosageTotal] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_result(self) -> bool:
        return self.total_volume_m3 > 0

    def to_dict(self) -> dict:
        return {
            "work_items": [w.to_dict() if w else None for w in self.work_items],
            "total_volume_m3": self.total_volume_m3,
            "total_materials": self.total_materials.to_dict(),
            "by_dosage": {k: v.to_dict() for k, v in self.by_dosage.items()},
            "warnings": list(self.warnings),
        }


def work_item_volume(work_item: WorkItem):
    """Aggregate component volumes of a work-item."""
    return aggregate(work_item.components, component_volume)


def estimate_work_item(
    index: int,
    work_item: WorkItem,
    norms: Norms,
) -> Optional[WorkItemResult]:
    """Compute one work-item, or None if its dosage is unknown."""
    dosage = norms.concrete_dosage(work_item.dosage)
    if dosage is None:
        return None

    volume = work_item_volume(work_item)
    materials = materials_for(volume.total, dosage, norms.cement_bag_kg)

    return WorkItemResult(
        index=index,
        dosage=dosage.key,
        dosage_name=dosage.name,
        volume_m3=volume.total,
        subtotals=volume.subtotals,
        materials=materials,
    )


def estimate_concrete(
    form: Mapping[str, Any],
    norms: Optional[Norms] = None,
) -> ConcreteResult:
    """
    Estimate the concrete tab.

    Args:
        form: {"ouvrages": [{"dosage": "350", "components": [...]}, ...]}
        norms: Reference tables (packaged defaults if omitted)

    Returns:
        ConcreteResult
    """
    norms = norms or default_norms()
    result = ConcreteResult()

    work_items = [WorkItem.from_dict(w) for w in records(form.get("ouvrages"))]

    for index, work_item in enumerate(work_items):
        item_result = estimate_work_item(index, work_item, norms)
        if item_result is None:
            result.warnings.append(
                f"Work-item #{index + 1}: dosage {work_item.dosage!r} is not defined"
            )
            logger.warning(f"Unknown concrete dosage {work_item.dosage!r} for work-item #{index + 1}")
        result.work_items.append(item_result)

    computed = [w for w in result.work_items if w is not None]

    result.total_volume_m3 = aggregate(computed, lambda w: w.volume_m3).total
    result.total_materials = ConcreteMaterials.combine(w.materials for w in computed)
    result.by_dosage = totals_by_dosage(
        (w.dosage, w.volume_m3, w.materials) for w in computed
    )

    logger.debug(
        f"Concrete: {len(computed)}/{len(work_items)} work-items, "
        f"{result.total_volume_m3:.3f} m³"
    )

    return result
