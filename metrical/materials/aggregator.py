"""
Aggregator - Sum component measures within and across work-items.

Provides:
- Per-component subtotals in input order
- Work-item totals
- Totals grouped by dosage key
"""

from collections import OrderedDict
from math import fsum
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from ..validation import finite_or_zero
from .calculator import ConcreteMaterials

T = TypeVar("T")


@dataclass
class Aggregate:
    """Sum of a measure over an ordered list of components."""
    total: float = 0.0
    subtotals: List[float] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"total": self.total, "subtotals": list(self.subtotals)}


def aggregate(items: Iterable[T], measure: Callable[[T], float]) -> Aggregate:
    """
    Sum `measure(item)` over items.

    Subtotals mirror the input order; an empty list gives a zero total.
    """
    subtotals = [measure(item) for item in items]
    # fsum keeps the total independent of list order
    try:
        total = finite_or_zero(fsum(subtotals))
    except OverflowError:
        total = 0.0
    return Aggregate(total=total, subtotals=subtotals)


@dataclass
class DosageTotal:
    """Volume and materials of every work-item sharing one dosage."""
    dosage: str
    volume_m3: float = 0.0
    work_items: int = 0
    materials: ConcreteMaterials = field(default_factory=ConcreteMaterials)

    def to_dict(self) -> dict:
        return {
            "dosage": self.dosage,
            "volume_m3": self.volume_m3,
            "work_items": self.work_items,
            "materials": self.materials.to_dict(),
        }


def totals_by_dosage(
    entries: Iterable[Optional[tuple]],
) -> Dict[str, DosageTotal]:
    """
    Group (dosage_key, volume_m3, materials) triples by dosage key.

    None entries (work-items without a usable dosage) are skipped.
    Keys keep first-seen order.
    """
    grouped: Dict[str, DosageTotal] = OrderedDict()

    for entry in entries:
        if entry is None:
            continue
        key, volume, materials = entry
        group = grouped.setdefault(key, DosageTotal(dosage=key))
        group.volume_m3 = finite_or_zero(group.volume_m3 + volume)
        group.work_items += 1
        group.materials = ConcreteMaterials.combine([group.materials, materials])

    return grouped
