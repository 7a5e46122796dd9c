"""
Conversions between the three time encodings used by booking forms.

- "HH:MM" text as stored in booking rows (``start_time`` / ``end_time``)
- integer minutes since local midnight (a TimePoint, 0..1439)
- "H:MM AM/PM" display labels

Parsing is total: malformed or missing input reads as midnight instead of
raising, so a bad row never takes a booking form down.

Usage:
    minutes = parse_time_to_minutes("09:30")   # 570
    minutes_to_time_value(570)                  # "09:30"
    minutes_to_label(570)                       # "9:30 AM"
"""

import math
from typing import Any

MINUTES_PER_HOUR = 60
MAX_HOUR = 23
MAX_MINUTE = 59
LAST_MINUTE_OF_DAY = MAX_HOUR * MINUTES_PER_HOUR + MAX_MINUTE


def _clamp(value: float, low: int, high: int) -> float:
    return min(high, max(low, value))


def _to_number(part: str) -> float:
    """Read one side of an "H:M" string; blank reads as 0, junk as NaN."""
    part = part.strip()
    if not part:
        return 0.0
    if "_" in part:
        return math.nan
    try:
        if part[:2].lower() in ("0x", "0o", "0b"):
            return float(int(part, 0))
        return float(part)
    except ValueError:
        return math.nan


def parse_time_to_minutes(value: Any) -> int:
    """
    Parse "H:M" / "HH:MM" text into minutes since midnight.

    Hour and minute are clamped independently (no carry), so "23:75" is
    23:59 and not the next day. Anything unparseable is 0. A trailing
    seconds part ("10:00:00") is ignored.
    """
    text = str(value) if value else "0:0"
    parts = text.split(":")
    if len(parts) < 2:
        return 0

    hour = _to_number(parts[0])
    minute = _to_number(parts[1])
    if not math.isfinite(hour) or not math.isfinite(minute):
        return 0

    total = _clamp(hour, 0, MAX_HOUR) * MINUTES_PER_HOUR + _clamp(minute, 0, MAX_MINUTE)
    return int(total)


def minutes_to_time_value(total_minutes: int) -> str:
    """Format minutes as a zero-padded 24-hour "HH:MM" value."""
    hour, minute = divmod(int(total_minutes), MINUTES_PER_HOUR)
    return f"{hour:02d}:{minute:02d}"


def minutes_to_label(total_minutes: int) -> str:
    """Format minutes as a 12-hour label, e.g. 0 -> "12:00 AM", 510 -> "8:30 AM"."""
    hour24, minute = divmod(int(total_minutes), MINUTES_PER_HOUR)
    suffix = "PM" if hour24 >= 12 else "AM"
    hour12 = ((hour24 + 11) % 12) + 1
    return f"{hour12}:{minute:02d} {suffix}"


def format_time_label(value: Any) -> str:
    """Display label for a stored time string; "N/A" when the row has none."""
    if not value:
        return "N/A"
    return minutes_to_label(parse_time_to_minutes(value))
