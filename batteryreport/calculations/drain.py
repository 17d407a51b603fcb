"""
Drain Calculations

Handles battery drain arithmetic for session metrics:
- Half-up rounding for minute offsets and averages
- Percent and energy drain between consecutive samples
- Per-hour drain rates
- Mean of per-session rates
"""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from .constants import MINUTES_PER_HOUR, RATE_DECIMALS


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with .5 always rounding up.

    Python's round() uses banker's rounding; minute offsets and averaged
    screen-on times need half-up.

    Examples:
        >>> round_half_up(0.5)
        1
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-0.5)
        0
    """
    return math.floor(value + 0.5)


def calculate_drain(start_value: Optional[float], end_value: Optional[float]) -> Optional[float]:
    """
    Calculate how much a reading fell between two samples.

    Increases (charging) count as zero drain.

    Args:
        start_value: Earlier reading (% or mWh)
        end_value: Later reading (% or mWh)

    Returns:
        Non-negative drain, or None if either reading is missing

    Examples:
        >>> calculate_drain(90, 85)
        5
        >>> calculate_drain(85, 90)
        0
        >>> calculate_drain(None, 90) is None
        True
    """
    if start_value is None or end_value is None:
        return None
    return max(0, start_value - end_value)


def drain_rate_per_hour(drain: float, minutes: float) -> float:
    """
    Convert drain over a number of minutes into drain per hour.

    Returns 0 when no time elapsed.

    Examples:
        >>> drain_rate_per_hour(10, 60)
        10.0
        >>> drain_rate_per_hour(5, 30)
        10.0
        >>> drain_rate_per_hour(5, 0)
        0
    """
    if minutes <= 0:
        return 0
    return drain / (minutes / MINUTES_PER_HOUR)


def optional_drain_rate_per_hour(drain: float, minutes: float) -> Optional[float]:
    """
    Per-hour rate that is None, rather than 0, when there is nothing to report.

    Used for energy rates: no elapsed time or no energy drain both yield None.

    Examples:
        >>> optional_drain_rate_per_hour(5000, 60)
        5000.0
        >>> optional_drain_rate_per_hour(0, 60) is None
        True
    """
    if minutes <= 0 or drain <= 0:
        return None
    return drain / (minutes / MINUTES_PER_HOUR)


def mean_of_rates(rates: List[float], decimals: int = RATE_DECIMALS) -> float:
    """
    Average a list of per-session rates.

    Mean of the rates, not a pooled rate
    (total drain / total time); short sessions weigh as much as long ones.
    Ties round half up, so 0.125 becomes 0.13.

    Examples:
        >>> mean_of_rates([10.0, 20.0])
        15.0
        >>> mean_of_rates([1.0, 2.0, 2.0])
        1.67
        >>> mean_of_rates([0.125])
        0.13
        >>> mean_of_rates([])
        0.0
    """
    if not rates:
        return 0.0
    quantum = Decimal(1).scaleb(-decimals)
    mean = Decimal(sum(rates) / len(rates))
    return float(mean.quantize(quantum, rounding=ROUND_HALF_UP))
