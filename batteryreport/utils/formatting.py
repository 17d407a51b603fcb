"""
Display formatting helpers for battery analysis results.

Used to build the human-readable part of API responses: durations,
drain rates, energy figures and report dates.
"""

import math
from datetime import datetime
from typing import Union

from batteryreport.utils.time_utils import parse_report_timestamp

DateLike = Union[datetime, str]


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    parsed = parse_report_timestamp(value)
    if parsed is None:
        raise ValueError(f"Cannot format invalid timestamp: {value}")
    return parsed


def format_duration(minutes: float) -> str:
    """
    Format a number of minutes as hours and minutes.

    Example:
        >>> format_duration(125)
        '2h 5m'
        >>> format_duration(45)
        '45m'
    """
    hours = int(minutes // 60)
    mins = math.floor(minutes % 60 + 0.5)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"


def format_rate(rate: float, unit: str = "%/hr") -> str:
    """
    Example:
        >>> format_rate(12.345)
        '12.35%/hr'
    """
    return f"{rate:.2f}{unit}"


def format_energy(mwh: float) -> str:
    """
    Example:
        >>> format_energy(50000)
        '50,000 mWh'
    """
    return f"{mwh:,} mWh"


def format_date_with_month_name(value: DateLike) -> str:
    """
    Format a date with the month spelled out.

    Example:
        >>> format_date_with_month_name("2025-08-26 14:35:00")
        'August 26, 2025'
    """
    dt = _as_datetime(value)
    return f"{dt:%B} {dt.day}, {dt.year}"


def format_time_12_hour(value: DateLike) -> str:
    """
    Format a time on a 12-hour clock.

    Example:
        >>> format_time_12_hour("2025-08-26 14:35:00")
        '2:35 PM'
    """
    dt = _as_datetime(value)
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_datetime(value: DateLike) -> str:
    """
    Example:
        >>> format_datetime("2025-08-26 14:35:00")
        'August 26, 2025 at 2:35 PM'
    """
    dt = _as_datetime(value)
    return f"{format_date_with_month_name(dt)} at {format_time_12_hour(dt)}"


def format_date_range(start: DateLike, end: DateLike) -> str:
    """
    Format a date range, sharing the month and year when both ends agree.

    A range within one day is shown as that single date.

    Example:
        >>> format_date_range("2025-08-25 08:00:00", "2025-08-26 09:00:00")
        'August 25 to 26, 2025'
        >>> format_date_range("2025-08-31 08:00:00", "2025-09-01 09:00:00")
        'August 31 to September 1, 2025'
    """
    start_dt = _as_datetime(start)
    end_dt = _as_datetime(end)

    if start_dt.date() == end_dt.date():
        return format_date_with_month_name(start_dt)

    start_formatted = f"{start_dt:%B} {start_dt.day}"

    if start_dt.year == end_dt.year and start_dt.month == end_dt.month:
        return f"{start_formatted} to {end_dt.day}, {end_dt.year}"

    return f"{start_formatted} to {format_date_with_month_name(end_dt)}"
