"""
Report Windows

Two ways to build a reporting window, kept separate on purpose:

- month_window: calendar-aligned [first of month, first of next month)
- lookback_window / day_windows: rolling windows ending at "now"

Every window is half-open: start <= created_at < end.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from ...database import utc_now
from ...errors import ValidationError

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@dataclass(frozen=True)
class Window:
    """Half-open creation-time interval."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Window start {self.start} is after end {self.end}")

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    @property
    def day_label(self) -> str:
        """Short weekday name of the window start, e.g. "Sun"."""
        return WEEKDAY_LABELS[self.start.weekday()]

    @property
    def date_label(self) -> str:
        return self.start.strftime("%Y-%m-%d")

    def as_dict(self) -> dict:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def parse_year_month(year: Optional[str], month: Optional[str]) -> tuple:
    """
    Validate raw ?year=&month= query values.

    Raises ValidationError when either is missing, non-numeric or out of range.
    """
    if not year or not month:
        raise ValidationError("Please provide both year and month (e.g. ?year=2025&month=10)")
    try:
        y = int(year)
        m = int(month)
    except (TypeError, ValueError):
        raise ValidationError("year and month must be integers (e.g. ?year=2025&month=10)")
    if not 1 <= m <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1 <= y <= 9998:
        raise ValidationError("year is out of range")
    return y, m


def month_window(year: int, month: int) -> Window:
    """Calendar month [YYYY-MM-01, first day of the next month)."""
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return Window(start, end)


def month_label(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def lookback_window(days: int, now: Optional[datetime] = None) -> Window:
    """Rolling [now - days, now)."""
    now = now or utc_now()
    return Window(now - timedelta(days=days), now)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def day_windows(now: Optional[datetime] = None, days: int = 7, offset_days: int = 0) -> List[Window]:
    """
    One window per calendar day, oldest first.

    With offset_days=0 the last window is today; offset_days=7 yields the
    seven days before that.
    """
    today = start_of_day(now or utc_now())
    windows = []
    for i in range(days):
        day_start = today - timedelta(days=offset_days + days - 1 - i)
        windows.append(Window(day_start, day_start + timedelta(days=1)))
    return windows
