"""Input checks shared by the write paths."""

import math
from typing import Any

from hourbook.core.errors import ValidationError


def finite_number(value: Any, label: str) -> float:
    """
    Coerce ``value`` to a float, rejecting NaN, infinities and non-numbers.

    Raises:
        ValidationError: the value is not a finite number
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValidationError(f"{label} must be a finite number, got {value!r}")
    return number
