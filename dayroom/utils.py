"""Pricing and display helpers shared by the booking tools and demo."""

import math
from typing import Optional


def billable_hours(start: int, end: int) -> float:
    """Hours between two TimePoints, rounded to 2 decimals; never negative.

    Examples:
        >>> billable_hours(540, 630)
        1.5
        >>> billable_hours(600, 540)
        0.0
    """
    return round(max(0, end - start) / 60, 2)


def calculate_total_price(hours: float, price_per_hour: Optional[float]) -> float:
    """Total for a booking, rounded to cents; 0 when either input is unusable."""
    if hours is None or price_per_hour is None:
        return 0.0
    if not math.isfinite(hours) or not math.isfinite(price_per_hour):
        return 0.0
    return round(hours * price_per_hour, 2)


def format_price(amount: Optional[float]) -> str:
    """Format an amount as USD, e.g. 1234.5 -> '$1,234.50'."""
    if amount is None or not math.isfinite(amount):
        return "$0.00"
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_duration(start: int, end: int) -> str:
    """Human duration for the booking summary: '2 hours', '1.5 hours', '1 hour'."""
    hours = max(0, end - start) / 60
    if hours <= 0:
        return ""
    text = str(int(hours)) if hours % 1 == 0 else f"{hours:.1f}"
    return f"{text} hour" if hours == 1 else f"{text} hours"
