"""
Numeric helpers shared by every report.

Rounding is half-up, never banker's rounding.
"""
import math
from decimal import Decimal
from typing import Any, Optional, Union

Number = Union[int, float]


def round_half_up(value: float, places: int = 0) -> Number:
    factor = 10 ** places
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if places == 0 else rounded


def as_number(value: Any) -> Number:
    """Normalize a driver aggregate (None, Decimal, int, float) to a JSON number."""
    if value is None:
        return 0
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def percentage(count: Number, total: Number) -> Number:
    """Share of total in percent, 2 decimals; 0 when total is 0."""
    if not total:
        return 0
    return round_half_up(count * 10000 / total) / 100


def minutes_to_hours(minutes: Optional[Number]) -> Number:
    if not minutes:
        return 0
    return round_half_up(minutes / 60, 2)


def average_per_record(total: Optional[Number], records: int) -> Number:
    if not records:
        return 0
    return round_half_up((total or 0) / records, 2)


def percent_change(current: Number, previous: Number) -> Number:
    """(current - previous) / previous in percent, 2 decimals; 0 when previous is 0."""
    if not previous:
        return 0
    return round_half_up((current - previous) / previous * 100, 2)
