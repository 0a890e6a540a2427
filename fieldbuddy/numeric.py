"""
Small numeric helpers shared by the calculators.

Rounding follows the field tool's established outputs: fixed-decimal results
round half away from zero on the exact binary value, whole-number rounding
rounds halves up.
"""
from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP
from numbers import Real
from typing import Any, Union

Number = Union[int, float]


def is_finite(x: Any) -> bool:
    """True for a real, finite number (bools and None are not numbers here)."""
    if x is None or isinstance(x, bool) or not isinstance(x, Real):
        return False
    return math.isfinite(x)


def all_finite(*xs: Any) -> bool:
    return all(is_finite(x) for x in xs)


def round_half_up(x: float) -> int:
    """Nearest integer, halves toward +inf: 2.5 → 3, -2.5 → -2."""
    return int(math.floor(x + 0.5))


def to_fixed(x: float, digits: int) -> float:
    """
    Round to a fixed number of decimals.
        2.0005 (stored as 2.000499...) → 2.0 at 3 digits
    Args:
        x: value
        digits: number of decimals (>= 0)
    Returns:
        float: rounded value
    """
    q = Decimal(1).scaleb(-digits)
    return float(Decimal(x).quantize(q, rounding=ROUND_HALF_UP))


def clamp(x: Number, lo: Number, hi: Number) -> Number:
    return max(lo, min(hi, x))


def fmt_num(x: Any) -> str:
    """Render a number the way the exported text expects: 4.0 → '4', 2.5 → '2.5'."""
    if isinstance(x, bool):
        return str(x).lower()
    if isinstance(x, float):
        if math.isfinite(x) and x.is_integer():
            return str(int(x))
        return repr(x)
    return str(x)
