"""
Calculation Constants for the battery report analyzer

Centralized location for thresholds and limits used by parsing validation
and session detection. Values configurable at runtime come from Config.
"""

from batteryreport.config import Config

# Full-charge detection
DEFAULT_FULL_CHARGE_THRESHOLD = Config.FULL_CHARGE_THRESHOLD  # % at or above which a reading counts as full
CHARGING_THRESHOLD_TOLERANCE = 2  # Charging rows count as full this many % below the threshold
FULL_CHARGE_DEDUP_WINDOW = 5  # Boundaries must be more than this many events apart
MIN_THRESHOLD = 0  # Exclusive lower bound for a usable threshold
MAX_THRESHOLD = 100  # Inclusive upper bound for a usable threshold

# Session carving
MIN_SESSION_EVENTS = 2  # Sessions with fewer events are dropped

# Validation
MIN_BATTERY_PERCENT = 0
MAX_BATTERY_PERCENT = 100
MIN_MEANINGFUL_EVENTS = 5  # Fewer events than this produce a validation warning

# Rounding
RATE_DECIMALS = 2  # Decimal places for averaged drain rates
MINUTES_PER_HOUR = 60
