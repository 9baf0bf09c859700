"""Half-up rounding for scores and typing metrics.

The built-in ``round`` sends halves to the nearest even digit, so 62.5%
accuracy would show as 62. Scores here always round halves up.
"""

from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_to_int(value: float) -> int:
    return int(math.floor(value + 0.5))
