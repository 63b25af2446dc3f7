"""Numeric helpers shared by the calculators."""

import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with halves going up.

    Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``),
    which would make percentages and XP bonuses disagree with stored values
    produced by other clients.
    """
    return math.floor(value + 0.5)


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
