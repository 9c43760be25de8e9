from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, Decimal]


def round_minor(value: Number) -> int:
    """Round to whole minor units, halves away from zero."""
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent_factor(percent: Number) -> Decimal:
    """1 - percent/100, e.g. 15 -> 0.85."""
    return Decimal(1) - Decimal(percent) / Decimal(100)
