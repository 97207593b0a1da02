"""
Small helpers shared by the progression services.
"""

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value) -> int:
    """Round to the nearest integer with halves away from zero (66.5 -> 67)."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent(part, whole) -> float:
    """Percentage of ``part`` over ``whole``; 0.0 when ``whole`` is 0."""
    if not whole:
        return 0.0
    return part / whole * 100
