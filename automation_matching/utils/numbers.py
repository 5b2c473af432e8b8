"""Small numeric helpers shared by the scorer, report and matcher."""


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (2.5 -> 3, not 2)."""
    return int(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
