"""
Input validation helpers and result status markers.

Parsing helpers raise ValidationError at the input boundary. The
calculators themselves never raise on user data; they return None or a
result tagged with a ResultStatus instead.
"""

import math
from enum import Enum
from typing import Any, List, Mapping


class ValidationError(ValueError):
    """Raised when form data describes an impossible element."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class ResultStatus(Enum):
    """Computation status of a tab result."""
    COMPUTED = "computed"        # Quantities derived from inputs
    NO_SURFACE = "no_surface"    # Upstream wall surface not defined


def safe_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce a form value to a finite float.

    None, empty strings, non-numeric text, NaN and infinities all map to
    `default`, so nothing non-finite reaches a displayed result.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def safe_count(value: Any, default: int = 1) -> int:
    """Coerce a quantity/count field to a non-negative integer."""
    number = safe_number(value, float(default))
    if number < 0:
        return 0
    return int(number)


def finite_or_zero(value: float) -> float:
    """Clamp a computed value to a finite, non-negative float."""
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0.0
    return value


def records(value: Any) -> List[Any]:
    """Rows of a list field; anything other than a list gives no rows."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def mapping_records(value: Any) -> List[Mapping[str, Any]]:
    """Rows of a list field that are mappings; other rows are dropped."""
    return [row for row in records(value) if isinstance(row, Mapping)]
