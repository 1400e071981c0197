"""Aggregation engine and monthly report builders."""
from .engine import (
    AggregationEngine, CrossTabCell, GroupCount, GroupTotal, NumericStats, first_successful,
)
from .reports import build_crisis_call_report, build_mobile_crisis_report, build_stabilization_report
from .windows import Window, day_windows, lookback_window, month_window, parse_year_month

__all__ = [
    "AggregationEngine", "CrossTabCell", "GroupCount", "GroupTotal", "NumericStats",
    "first_successful",
    "build_crisis_call_report", "build_mobile_crisis_report", "build_stabilization_report",
    "Window", "day_windows", "lookback_window", "month_window", "parse_year_month",
]
