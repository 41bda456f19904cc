"""Rounding that matches the mobile client."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)
