"""
Steel Estimation Module
Estimates reinforcement steel for beams, columns and footings from the
bars entered on the form:

1. Longitudinal bars: member length × bar count × member quantity
2. Transversal ties: tie length × number of ties × member quantity
3. Weights from HA linear weights, totals by diameter
4. Commercial 12 m bars needed per diameter

Tie length depends on the section:
- Rectangular stirrup (closed): 2 × ((b - 2c) + (h - 2c))
- Rectangular hairpin (open):   (b - 2c) + 2 × (h - 2c)
- Circular hoop:                π × (D - 2c)

Circular sections exist for columns only and always take closed hoops.
"""

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..geometry import dimension
from ..norms import Norms, default_norms, dosage_key
from ..validation import ValidationError, records, safe_count, safe_number

logger = logging.getLogger(__name__)

DEFAULT_COATING_M = 0.025


class MemberType(Enum):
    """Reinforced element type."""
    BEAM = "beam"
    COLUMN = "column"
    FOOTING = "footing"


class TieType(Enum):
    """Transversal tie shape for rectangular sections."""
    STIRRUP = "stirrup"   # Étrier / cadre, closed
    HAIRPIN = "hairpin"   # Épingle, open U


# Form labels seen in saved states
MEMBER_TYPE_ALIASES = {
    "beam": MemberType.BEAM,
    "poutre": MemberType.BEAM,
    "column": MemberType.COLUMN,
    "poteau": MemberType.COLUMN,
    "footing": MemberType.FOOTING,
    "semelle": MemberType.FOOTING,
}

TIE_TYPE_ALIASES = {
    "stirrup": TieType.STIRRUP,
    "etrier": TieType.STIRRUP,
    "étrier": TieType.STIRRUP,
    "cadre": TieType.STIRRUP,
    "hairpin": TieType.HAIRPIN,
    "epingle": TieType.HAIRPIN,
    "épingle": TieType.HAIRPIN,
}


@dataclass(frozen=True)
class RectangularSection:
    """Rectangular cross-section with its tie shape."""
    width: float
    height: float
    tie_type: TieType = TieType.STIRRUP

    shape = "rectangular"

    def to_dict(self) -> dict:
        return {
            "shape": self.shape,
            "width": self.width,
            "height": self.height,
            "tie_type": self.tie_type.value,
        }


@dataclass(frozen=True)
class CircularSection:
    """Circular column cross-section, tied with closed hoops."""
    diameter: float

    shape = "circular"

    def to_dict(self) -> dict:
        return {"shape": self.shape, "diameter": self.diameter}


Section = Union[RectangularSection, CircularSection]


@dataclass(frozen=True)
class LongitudinalBars:
    diameter: str
    count: int


@dataclass(frozen=True)
class TransversalBars:
    diameter: str
    spacing: float   # m


@dataclass(frozen=True)
class SteelMember:
    """A reinforced member repeated `quantity` times."""
    name: str
    member_type: MemberType
    section: Section
    length: float
    quantity: int
    longitudinal: LongitudinalBars
    transversal: TransversalBars
    coating: float = DEFAULT_COATING_M

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.member_type.value,
            "section": self.section.to_dict(),
            "length": self.length,
            "quantity": self.quantity,
            "longitudinal_bars": {
                "diameter": self.longitudinal.diameter,
                "count": self.longitudinal.count,
            },
            "transversal_bars": {
                "diameter": self.transversal.diameter,
                "spacing": self.transversal.spacing,
            },
            "coating": self.coating,
        }


@dataclass
class MemberSteel:
    """Steel quantities for one member line."""
    name: str
    longitudinal_diameter: str
    longitudinal_length_m: float
    longitudinal_weight_kg: float
    transversal_diameter: str
    tie_length_m: float
    tie_count: int
    transversal_length_m: float
    transversal_weight_kg: float
    total_weight_kg: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "longitudinal_diameter": self.longitudinal_diameter,
            "longitudinal_length_m": self.longitudinal_length_m,
            "longitudinal_weight_kg": self.longitudinal_weight_kg,
            "transversal_diameter": self.transversal_diameter,
            "tie_length_m": self.tie_length_m,
            "tie_count": self.tie_count,
            "transversal_length_m": self.transversal_length_m,
            "transversal_weight_kg": self.transversal_weight_kg,
            "total_weight_kg": self.total_weight_kg,
        }


@dataclass
class DiameterTotal:
    """Steel summed over all members for one HA diameter."""
    diameter: str
    length_m: float = 0.0
    weight_kg: float = 0.0
    commercial_bars: int = 0

    def to_dict(self) -> dict:
        return {
            "diameter": self.diameter,
            "length_m": self.length_m,
            "weight_kg": self.weight_kg,
            "commercial_bars": self.commercial_bars,
        }


@dataclass
class SteelResult:
    """Steel tab result."""
    # One entry per member, None where not computable
    members: List[Optional[MemberSteel]] = field(default_factory=list)
    total_weight_kg: float = 0.0
    longitudinal_weight_kg: float = 0.0
    transversal_weight_kg: float = 0.0
    by_diameter: Dict[str, DiameterTotal] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_result(self) -> bool:
        return self.total_weight_kg > 0

    def to_dict(self) -> dict:
        return {
            "members": [m.to_dict() if m else None for m in self.members],
            "total_weight_kg": self.total_weight_kg,
            "longitudinal_weight_kg": self.longitudinal_weight_kg,
            "transversal_weight_kg": self.transversal_weight_kg,
            "by_diameter": {k: v.to_dict() for k, v in self.by_diameter.items()},
            "warnings": list(self.warnings),
        }


def _lookup(aliases: Dict[str, Enum], value: Any, field_name: str):
    key = str(value or "").strip().lower()
    if key not in aliases:
        raise ValidationError(f"Unknown {field_name}: {value!r}", field=field_name)
    return aliases[key]


def _bar_block(data: Mapping[str, Any], key: str, alt_key: str) -> Mapping[str, Any]:
    block = data.get(key) or data.get(alt_key) or {}
    if not isinstance(block, Mapping):
        raise ValidationError(f"{key} must be a mapping, got {block!r}", field=key)
    return block


def parse_section(data: Mapping[str, Any], member_type: MemberType) -> Section:
    """
    Build the section variant of a member record.

    Raises:
        ValidationError: circular section on a non-column, or a hairpin
            tie on a circular section
    """
    shape = str(data.get("shape") or "rectangular").strip().lower()
    transversal = _bar_block(data, "transversalBars", "transversal_bars")
    raw_tie = transversal.get("tieType") or transversal.get("tie_type") or data.get("tieType")
    tie_type = _lookup(TIE_TYPE_ALIASES, raw_tie, "tie type") if raw_tie else TieType.STIRRUP

    if shape in ("circular", "circulaire", "cylindrical"):
        if member_type is not MemberType.COLUMN:
            raise ValidationError(
                f"Circular section is only valid for columns, not {member_type.value}",
                field="shape",
            )
        if tie_type is TieType.HAIRPIN:
            raise ValidationError(
                "Hairpin ties cannot be used on a circular section",
                field="tieType",
            )
        return CircularSection(diameter=dimension(data.get("diameter")))

    if shape != "rectangular":
        raise ValidationError(f"Unknown section shape: {shape!r}", field="shape")

    return RectangularSection(
        width=dimension(data.get("width")),
        height=dimension(data.get("height")),
        tie_type=tie_type,
    )


def parse_member(data: Mapping[str, Any]) -> SteelMember:
    """
    Build a SteelMember from a form record.

    Accepts camelCase form keys (longitudinalBars, transversalBars) and
    snake_case keys.

    Raises:
        ValidationError: invalid type/shape/tie combination, negative cover,
            or a record or bar block that is not a mapping
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Member record must be a mapping")
    member_type = _lookup(MEMBER_TYPE_ALIASES, data.get("type"), "member type")
    section = parse_section(data, member_type)

    longitudinal = _bar_block(data, "longitudinalBars", "longitudinal_bars")
    transversal = _bar_block(data, "transversalBars", "transversal_bars")

    coating = safe_number(data.get("coating"), DEFAULT_COATING_M)
    if coating < 0:
        raise ValidationError("Concrete cover cannot be negative", field="coating")

    return SteelMember(
        name=str(data.get("name") or ""),
        member_type=member_type,
        section=section,
        length=dimension(data.get("length")),
        quantity=safe_count(data.get("quantity"), default=1),
        longitudinal=LongitudinalBars(
            diameter=dosage_key(longitudinal.get("diameter")) or "",
            count=safe_count(longitudinal.get("count"), default=0),
        ),
        transversal=TransversalBars(
            diameter=dosage_key(transversal.get("diameter")) or "",
            spacing=dimension(transversal.get("spacing")),
        ),
        coating=coating,
    )


def tie_length(section: Section, coating: float) -> Optional[float]:
    """
    Length of one transversal tie.

    Returns None when the cover leaves a negative core dimension.
    """
    if isinstance(section, CircularSection):
        core = section.diameter - 2 * coating
        if core < 0:
            return None
        return math.pi * core

    core_width = section.width - 2 * coating
    core_height = section.height - 2 * coating
    if core_width < 0 or core_height < 0:
        return None

    if section.tie_type is TieType.HAIRPIN:
        return core_width + 2 * core_height
    return 2 * (core_width + core_height)


def tie_count(length: float, spacing: float) -> Optional[int]:
    """Number of ties along a member, or None for a non-positive spacing
    or a count too large to represent."""
    if spacing <= 0:
        return None
    ratio = length / spacing
    if not math.isfinite(ratio):
        return None
    # 3 / 0.15 is 20.000000000000004 in floating point
    return int(math.ceil(round(ratio, 9)))


def commercial_bars(length_m: float, bar_length_m: float) -> int:
    """Commercial bars needed to cover a total length."""
    if bar_length_m <= 0 or length_m <= 0:
        return 0
    return int(math.ceil(round(length_m / bar_length_m, 9)))


class SteelEstimator:
    """
    Estimates reinforcement steel for RCC members.

    The estimator is stateless apart from its reference tables; every
    method is a pure function of its arguments.
    """

    def __init__(self, norms: Optional[Norms] = None):
        """Initialize estimator."""
        self.norms = norms or default_norms()

    def member_steel(self, member: SteelMember) -> Optional[MemberSteel]:
        """
        Steel for one member line.

        Returns None if a diameter is unknown, the spacing is not
        positive, the cover leaves no room for the ties (a tie of zero
        length included), or the weights overflow.
        """
        long_weight = self.norms.bar_weight(member.longitudinal.diameter)
        trans_weight = self.norms.bar_weight(member.transversal.diameter)
        if long_weight is None or trans_weight is None:
            return None

        single_tie = tie_length(member.section, member.coating)
        count = tie_count(member.length, member.transversal.spacing)
        if not single_tie or count is None:
            return None

        longitudinal_length = member.length * member.longitudinal.count * member.quantity
        transversal_length = single_tie * count * member.quantity

        longitudinal_weight = longitudinal_length * long_weight
        transversal_weight = transversal_length * trans_weight
        if not math.isfinite(longitudinal_weight + transversal_weight):
            return None

        return MemberSteel(
            name=member.name,
            longitudinal_diameter=member.longitudinal.diameter,
            longitudinal_length_m=longitudinal_length,
            longitudinal_weight_kg=longitudinal_weight,
            transversal_diameter=member.transversal.diameter,
            tie_length_m=single_tie,
            tie_count=count,
            transversal_length_m=transversal_length,
            transversal_weight_kg=transversal_weight,
            total_weight_kg=longitudinal_weight + transversal_weight,
        )

    def by_diameter(self, results: Iterable[Optional[MemberSteel]]) -> Dict[str, DiameterTotal]:
        """Sum lengths and weights per diameter, smallest diameter first."""
        totals: Dict[str, DiameterTotal] = {}

        for steel in results:
            if steel is None:
                continue
            for dia, length, weight in (
                (steel.longitudinal_diameter, steel.longitudinal_length_m, steel.longitudinal_weight_kg),
                (steel.transversal_diameter, steel.transversal_length_m, steel.transversal_weight_kg),
            ):
                entry = totals.setdefault(dia, DiameterTotal(diameter=dia))
                entry.length_m += length
                entry.weight_kg += weight

        for entry in totals.values():
            entry.commercial_bars = commercial_bars(
                entry.length_m, self.norms.commercial_bar_length_m
            )

        return OrderedDict(
            sorted(totals.items(), key=lambda item: safe_number(item[0]))
        )

    def estimate(self, form: Mapping[str, Any]) -> SteelResult:
        """
        Estimate the steel tab.

        Args:
            form: {"ouvrages": [member record, ...]}

        Returns:
            SteelResult
        """
        result = SteelResult()

        for index, record in enumerate(records(form.get("ouvrages"))):
            label = (record.get("name") if isinstance(record, Mapping) else None) or f"#{index + 1}"
            try:
                member = parse_member(record)
            except ValidationError as e:
                logger.warning(f"Rejected steel member {label}: {e}")
                result.warnings.append(f"{label}: {e}")
                result.members.append(None)
                continue

            steel = self.member_steel(member)
            if steel is None:
                logger.warning(f"Steel for member {label} is not computable")
                result.warnings.append(
                    f"{label}: unknown diameter, invalid spacing or cover too large for the section"
                )
            result.members.append(steel)

        computed = [m for m in result.members if m is not None]
        result.longitudinal_weight_kg = math.fsum(m.longitudinal_weight_kg for m in computed)
        result.transversal_weight_kg = math.fsum(m.transversal_weight_kg for m in computed)
        result.total_weight_kg = math.fsum(m.total_weight_kg for m in computed)
        result.by_diameter = self.by_diameter(computed)

        logger.debug(
            f"Steel: {len(computed)}/{len(result.members)} members, "
            f"{result.total_weight_kg:.2f} kg"
        )

        return result


def steel_for(member: SteelMember, norms: Optional[Norms] = None) -> Optional[MemberSteel]:
    """Convenience function for a single member."""
    return SteelEstimator(norms).member_steel(member)


def estimate_steel(form: Mapping[str, Any], norms: Optional[Norms] = None) -> SteelResult:
    """Convenience function for the steel tab."""
    return SteelEstimator(norms).estimate(form)
