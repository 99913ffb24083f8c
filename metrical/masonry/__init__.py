"""
Masonry Module
Block counts and laying mortar for wall surfaces.
"""

from .calculator import BlockSpec, MasonryResult, blocks_per_m2, estimate_masonry

__all__ = [
    "BlockSpec",
    "MasonryResult",
    "blocks_per_m2",
    "estimate_masonry",
]
