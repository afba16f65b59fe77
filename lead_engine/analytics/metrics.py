"""
Integer-rounded rate helpers shared by the report builders.

Reports show whole percentages with halves rounded up (2.5 -> 3), not
Python's round-half-to-even.
"""

import math


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percent(part: float, whole: float) -> int:
    """part / whole as a rounded percentage; 0 when whole is 0."""
    if not whole:
        return 0
    return round_half_up(part / whole * 100)


def mean(total: float, count: int) -> int:
    if not count:
        return 0
    return round_half_up(total / count)
