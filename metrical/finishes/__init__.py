"""
Finishes Module
Plaster and waterproofing quantities for the masonry wall surface.
"""

from .calculator import (
    PlasterResult,
    WaterproofingResult,
    estimate_plaster,
    estimate_waterproofing,
)

__all__ = [
    "PlasterResult",
    "WaterproofingResult",
    "estimate_plaster",
    "estimate_waterproofing",
]
