"""
Geometry Evaluator - Volumes and surfaces of individual components.

Component shapes:
- Rectangular prism: length × width × height × quantity
- Cylinder: π × (diameter/2)² × height × quantity
- Wall surface: length × height (no quantity multiplier)
- Named surface: area as entered

All dimensions are metres. Missing or non-numeric fields count as 0 and
negative values are clamped to 0, so the evaluator never raises and never
returns NaN.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union

from .validation import finite_or_zero, safe_count, safe_number


class Shape(Enum):
    """Concrete component cross-section."""
    RECTANGULAR = "rectangular"
    CYLINDRICAL = "cylindrical"


def dimension(value: Any) -> float:
    """Form value as a non-negative length in metres."""
    return max(0.0, safe_number(value))


@dataclass(frozen=True)
class RectangularComponent:
    """Rectangular prism (footing, beam, slab...)."""
    name: str
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0
    quantity: int = 1

    shape = Shape.RECTANGULAR

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "shape": self.shape.value,
            "length": self.length,
            "width": self.width,
            "height": self.height,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class CylindricalComponent:
    """Cylinder (round column, pile...)."""
    name: str
    diameter: float = 0.0
    height: float = 0.0
    quantity: int = 1

    shape = Shape.CYLINDRICAL

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "shape": self.shape.value,
            "diameter": self.diameter,
            "height": self.height,
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class WallComponent:
    """Wall panel of the masonry tab."""
    name: str
    length: float = 0.0
    height: float = 0.0

    def to_dict(self) -> dict:
        return {"name": self.name, "length": self.length, "height": self.height}


@dataclass(frozen=True)
class SurfaceComponent:
    """Surface entered directly as an area (waterproofing items)."""
    name: str
    area: float = 0.0

    def to_dict(self) -> dict:
        return {"name": self.name, "area": self.area}


ConcreteComponent = Union[RectangularComponent, CylindricalComponent]
AreaComponent = Union[WallComponent, SurfaceComponent]


def component_volume(component: ConcreteComponent) -> float:
    """Volume (m³) of a concrete component including its quantity."""
    if isinstance(component, CylindricalComponent):
        radius = component.diameter / 2
        volume = math.pi * radius * radius * component.height * component.quantity
    else:
        volume = component.length * component.width * component.height * component.quantity
    return finite_or_zero(volume)


def component_area(component: AreaComponent) -> float:
    """Surface (m²) of a wall panel or named surface."""
    if isinstance(component, SurfaceComponent):
        return finite_or_zero(component.area)
    return finite_or_zero(component.length * component.height)


def parse_component(data: Dict[str, Any]) -> ConcreteComponent:
    """
    Build a concrete component from a form record.

    An absent or unrecognised shape is treated as rectangular. Fields that
    belong to the other shape are ignored.
    """
    shape = str(data.get("shape") or Shape.RECTANGULAR.value).strip().lower()
    name = str(data.get("name") or "")
    quantity = safe_count(data.get("quantity"), default=1)

    if shape == Shape.CYLINDRICAL.value:
        return CylindricalComponent(
            name=name,
            diameter=dimension(data.get("diameter")),
            height=dimension(data.get("height")),
            quantity=quantity,
        )

    return RectangularComponent(
        name=name,
        length=dimension(data.get("length")),
        width=dimension(data.get("width")),
        height=dimension(data.get("height")),
        quantity=quantity,
    )


def parse_wall(data: Dict[str, Any]) -> WallComponent:
    """Build a wall panel from a masonry form record."""
    return WallComponent(
        name=str(data.get("name") or ""),
        length=dimension(data.get("length")),
        height=dimension(data.get("height")),
    )


def parse_surface(data: Dict[str, Any]) -> SurfaceComponent:
    """Build a named surface from a waterproofing form record."""
    return SurfaceComponent(
        name=str(data.get("name") or ""),
        area=dimension(data.get("area")),
    )
