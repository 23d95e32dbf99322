"""Straight-line drive time estimates."""

from __future__ import annotations

import math

DEFAULT_AVERAGE_SPEED_MPH = 30.0
DEFAULT_MINIMUM_MINUTES = 5


def estimate_minutes(
    distance_miles: float,
    average_speed_mph: float = DEFAULT_AVERAGE_SPEED_MPH,
    minimum_minutes: int = DEFAULT_MINIMUM_MINUTES,
) -> int:
    """Estimate whole minutes to drive ``distance_miles``.

    Halves round up. The floor covers parking and walking in, so even a
    zero-length leg costs ``minimum_minutes``.
    """
    raw_minutes = distance_miles / average_speed_mph * 60
    return max(minimum_minutes, int(math.floor(raw_minutes + 0.5)))
