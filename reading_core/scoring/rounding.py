"""Half-up rounding and score clamping."""
from __future__ import annotations

import math

# absorbs float noise such as 98.49999999999999 for 98.5
_ROUNDING_EPSILON = 1e-9


def round_half_up(value: float) -> int:
    """Round .5 up (2.5 -> 3), unlike the built-in banker's ``round``."""
    return int(math.floor(value + 0.5 + _ROUNDING_EPSILON))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, round_half_up(value)))
