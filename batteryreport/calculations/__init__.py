"""
Battery Report Calculation Module

Drain-rate arithmetic and chart series used by session detection.

Usage:
    from batteryreport.calculations import drain_rate_per_hour, mean_of_rates
    from batteryreport.calculations.constants import DEFAULT_FULL_CHARGE_THRESHOLD
"""

# Drain calculations
from .drain import (
    calculate_drain,
    drain_rate_per_hour,
    mean_of_rates,
    optional_drain_rate_per_hour,
    round_half_up,
)

# Timeline series
from .timeline import (
    build_session_timeline,
    state_segments,
)

# Constants (re-export for convenience)
from .constants import (
    CHARGING_THRESHOLD_TOLERANCE,
    DEFAULT_FULL_CHARGE_THRESHOLD,
    FULL_CHARGE_DEDUP_WINDOW,
    MIN_MEANINGFUL_EVENTS,
    MIN_SESSION_EVENTS,
)

__all__ = [
    # Drain
    "calculate_drain",
    "drain_rate_per_hour",
    "optional_drain_rate_per_hour",
    "mean_of_rates",
    "round_half_up",
    # Timeline
    "build_session_timeline",
    "state_segments",
    # Constants
    "DEFAULT_FULL_CHARGE_THRESHOLD",
    "CHARGING_THRESHOLD_TOLERANCE",
    "FULL_CHARGE_DEDUP_WINDOW",
    "MIN_MEANINGFUL_EVENTS",
    "MIN_SESSION_EVENTS",
]
