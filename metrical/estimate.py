"""
Estimate pipeline - compute every tab from one state snapshot.

Data flow:
    state -> concrete
          -> masonry -> wall surface -> plaster, waterproofing
          -> steel
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from .bridge import SurfaceInput, surface_from_masonry
from .finishes.calculator import (
    PlasterResult,
    WaterproofingResult,
    estimate_plaster,
    estimate_waterproofing,
)
from .masonry.calculator import MasonryResult, estimate_masonry
from .materials.concrete import ConcreteResult, estimate_concrete
from .norms import Norms, default_norms
from .state import EstimatorState
from .structural.steel_estimator import SteelResult, estimate_steel

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "Quantities are estimates for planning purposes only and are not a "
    "structural design or engineering guarantee."
)


@dataclass
class EstimateReport:
    """Results of every tab for one state snapshot."""
    concrete: ConcreteResult
    masonry: Optional[MasonryResult]
    wall_surface: SurfaceInput
    plaster: Optional[PlasterResult]
    waterproofing: Optional[WaterproofingResult]
    steel: SteelResult

    disclaimer: str = DISCLAIMER

    def to_dict(self) -> dict:
        return {
            "concrete": self.concrete.to_dict(),
            "masonry": self.masonry.to_dict() if self.masonry else None,
            "wall_surface": self.wall_surface.to_dict(),
            "plaster": self.plaster.to_dict() if self.plaster else None,
            "waterproofing": self.waterproofing.to_dict() if self.waterproofing else None,
            "steel": self.steel.to_dict(),
            "disclaimer": self.disclaimer,
        }


def run_estimate(
    state: Union[EstimatorState, Mapping[str, Any]],
    norms: Optional[Norms] = None,
) -> EstimateReport:
    """
    Run every calculator on a state snapshot.

    Args:
        state: EstimatorState, or its to_dict() form
        norms: Reference tables (packaged defaults if omitted)

    Returns:
        EstimateReport
    """
    if not isinstance(state, EstimatorState):
        state = EstimatorState.from_dict(state)
    norms = norms or default_norms()

    logger.info("Computing concrete quantities...")
    concrete = estimate_concrete(state.concrete, norms)

    logger.info("Computing masonry quantities...")
    masonry = estimate_masonry(state.masonry, norms)
    surface = surface_from_masonry(state.masonry)
    if not surface.defined:
        logger.info("No wall surface defined, finishes will report no surface")

    logger.info("Computing finishes...")
    plaster = estimate_plaster(surface, state.plaster, norms)
    waterproofing = estimate_waterproofing(surface, state.waterproofing)

    logger.info("Computing reinforcement steel...")
    steel = estimate_steel(state.steel, norms)

    return EstimateReport(
        concrete=concrete,
        masonry=masonry,
        wall_surface=surface,
        plaster=plaster,
        waterproofing=waterproofing,
        steel=steel,
    )
