"""
Small numeric helpers shared by scoring and telemetry code.
"""
import math
from typing import Optional


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, as score displays expect."""
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def coerce_score(value, default: Optional[int] = None) -> Optional[int]:
    """Turn an LLM or imported score into an int in [0, 100]; None if not a finite number."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return int(clamp(value, 0, 100))
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return int(clamp(round_half_up(number), 0, 100))
