"""
Reinforcement Steel Estimator
Longitudinal bars and transversal ties for beams, columns and footings,
weights by HA diameter and commercial 12 m bars.
"""

from .steel_estimator import (
    MemberType,
    TieType,
    RectangularSection,
    CircularSection,
    LongitudinalBars,
    TransversalBars,
    SteelMember,
    MemberSteel,
    DiameterTotal,
    SteelResult,
    SteelEstimator,
    parse_member,
    tie_length,
    tie_count,
    steel_for,
    estimate_steel,
)

__all__ = [
    "MemberType",
    "TieType",
    "RectangularSection",
    "CircularSection",
    "LongitudinalBars",
    "TransversalBars",
    "SteelMember",
    "MemberSteel",
    "DiameterTotal",
    "SteelResult",
    "SteelEstimator",
    "parse_member",
    "tie_length",
    "tie_count",
    "steel_for",
    "estimate_steel",
]
