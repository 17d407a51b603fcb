"""Utility modules for the battery report analyzer."""

from .time_utils import (
    parse_report_timestamp,
    previous_day,
    local_today,
    minutes_between,
)
from .formatting import (
    format_duration,
    format_rate,
    format_energy,
    format_date_with_month_name,
    format_time_12_hour,
    format_datetime,
    format_date_range,
)

__all__ = [
    'parse_report_timestamp',
    'previous_day',
    'local_today',
    'minutes_between',
    'format_duration',
    'format_rate',
    'format_energy',
    'format_date_with_month_name',
    'format_time_12_hour',
    'format_datetime',
    'format_date_range',
]
