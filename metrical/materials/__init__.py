"""
Concrete Materials Engine - Volumes and material quantities.

This module provides:
- Component aggregation within and across work-items
- Cement / sand / gravel / water from concrete dosages
- Cement / sand from mortar and plaster dosages
- Totals grouped by dosage
"""

from .aggregator import Aggregate, DosageTotal, aggregate, totals_by_dosage
from .calculator import (
    ConcreteMaterials,
    MortarMaterials,
    cement_bags,
    materials_for,
    mortar_materials_for,
)
from .concrete import ConcreteResult, WorkItem, WorkItemResult, estimate_concrete

__all__ = [
    "Aggregate",
    "DosageTotal",
    "aggregate",
    "totals_by_dosage",
    "ConcreteMaterials",
    "MortarMaterials",
    "cement_bags",
    "materials_for",
    "mortar_materials_for",
    "ConcreteResult",
    "WorkItem",
    "WorkItemResult",
    "estimate_concrete",
]
