from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties going up (0.5 -> 1, 2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def format_number(value: float) -> str:
    """Shortest text for a number: integral floats drop the ``.0`` suffix."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)
