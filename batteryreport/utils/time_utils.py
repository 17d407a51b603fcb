"""
Time parsing utilities for battery report timestamps.

Battery reports carry no timezone, so every instant here is a naive local
datetime. Provides:
- Timestamp resolution for "YYYY-MM-DD H:MM:SS" strings
- Calendar-date helpers used for date inference on time-only rows
- Minute differences between report timestamps
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)


REPORT_DATE_FORMAT = "%Y-%m-%d"
REPORT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def parse_report_timestamp(value: str) -> Optional[datetime]:
    """
    Resolve a report timestamp string into a naive datetime.

    Args:
        value: Combined date and time, e.g. "2025-08-25 8:00:00"

    Returns:
        datetime, or None if the value does not name a real instant

    Example:
        >>> parse_report_timestamp("2025-08-25 08:00:00")
        datetime.datetime(2025, 8, 25, 8, 0)

        >>> parse_report_timestamp("2025-13-40 08:00:00") is None
        True
    """
    if not value:
        return None

    value = value.strip()

    try:
        return datetime.strptime(value, REPORT_TIMESTAMP_FORMAT)
    except ValueError:
        pass

    # Rows built by the parser always match the format above. Values handed
    # in by callers (the formatting helpers accept strings) may be ISO 8601
    # with a "T" separator or an offset; dateutil reads those.
    try:
        dt = date_parser.parse(value)
    except (ValueError, OverflowError, TypeError):
        logger.debug(f"Could not parse report timestamp: {value}")
        return None

    if dt.tzinfo is not None:
        dt = dt.replace(tzinfo=None)
    return dt


def previous_day(date_string: str) -> Optional[str]:
    """
    Return the calendar day before a YYYY-MM-DD date, in the same format.

    Time-only rows that appear before the first dated row are assumed to
    belong to this day.

    Example:
        >>> previous_day("2025-03-01")
        '2025-02-28'
    """
    try:
        parsed = datetime.strptime(date_string, REPORT_DATE_FORMAT)
    except (ValueError, TypeError):
        logger.warning(f"Cannot compute previous day for invalid date: {date_string}")
        return None

    return (parsed - timedelta(days=1)).strftime(REPORT_DATE_FORMAT)


def format_report_date(day: date) -> str:
    """Format a date the way report rows spell it (YYYY-MM-DD)."""
    return day.strftime(REPORT_DATE_FORMAT)


def local_today() -> date:
    """Current local calendar date, used when a report never names a date."""
    return date.today()


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed minutes from start to end."""
    return (end - start).total_seconds() / 60
