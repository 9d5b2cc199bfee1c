"""Interval rounding and short human-readable labels."""
import math
from typing import Optional

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, unlike round())."""
    return math.floor(value + 0.5)


def format_interval(ms: Optional[int]) -> str:
    """Render a millisecond interval as a short label like "3d", "1h" or "<1m".

    Rounding is applied one unit at a time (seconds, minutes, hours, days),
    so 89 minutes becomes "1h" and 90 minutes becomes "2h".
    """
    if ms is None or ms <= 0:
        return "<1m"

    total_seconds = round_half_up(ms / 1000)
    total_minutes = round_half_up(total_seconds / 60)
    total_hours = round_half_up(total_minutes / 60)
    total_days = round_half_up(total_hours / 24)

    if total_days >= 1:
        return f"{total_days}d"
    if total_hours >= 1:
        return f"{total_hours}h"
    if total_minutes >= 1:
        return f"{total_minutes}m"
    return "<1m"
