"""
Cross-tab bridge: masonry wall surface as finishes input.

Plaster and waterproofing take the wall surface as an explicit
SurfaceInput instead of reading the masonry form themselves.
"""

from dataclasses import dataclass
from typing import Any, Mapping

from .masonry.calculator import wall_aggregate


@dataclass(frozen=True)
class SurfaceInput:
    """A surface value, or the absence of one."""
    value: float = 0.0
    defined: bool = False
    source: str = "masonry"

    @classmethod
    def undefined(cls, source: str = "masonry") -> "SurfaceInput":
        return cls(value=0.0, defined=False, source=source)

    @classmethod
    def of(cls, value: float, source: str = "masonry") -> "SurfaceInput":
        """Surface that counts as defined only when strictly positive."""
        return cls(value=value, defined=value > 0, source=source)

    def to_dict(self) -> dict:
        return {"value": self.value, "defined": self.defined, "source": self.source}


def wall_surface(block_form: Mapping[str, Any]) -> float:
    """Σ length × height over the masonry tab's wall panels."""
    return wall_aggregate(block_form).total


def surface_from_masonry(block_form: Mapping[str, Any]) -> SurfaceInput:
    """
    Wall surface handed to plaster and waterproofing.

    An empty wall list (or one whose panels all have zero area) is
    "no surface defined", not a zero surface.
    """
    if not block_form.get("components"):
        return SurfaceInput.undefined()
    return SurfaceInput.of(wall_surface(block_form))
