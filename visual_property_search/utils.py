"""Small numeric helpers shared across modules."""

import math


def round_half_up(value: float, places: int) -> float:
    """Round to `places` decimals with halves rounding up (round() rounds halves to even)."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor
