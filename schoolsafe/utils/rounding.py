import math

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))

def percent(part: float, whole: float) -> float:
    return 100 * part / whole if whole > 0 else 0.0

def rounded_percent(part: int, whole: int) -> int:
    """``round_half_up(100 * part / whole)`` in exact integer arithmetic."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)
