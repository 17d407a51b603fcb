"""
Flask extensions for the battery report analyzer.

This module initializes Flask extensions that need to be shared
across the application to avoid circular imports.
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Storage and enablement come from app.config (RATELIMIT_*) at init_app time
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["1000 per hour", "200 per minute"],
    strategy="fixed-window",
    headers_enabled=True,
)


class RateLimits:
    """Common rate limit configurations for different endpoint types."""

    # Cheap read endpoints (status)
    READ_HEAVY = "500 per hour"

    # Report parsing: reads a whole upload per request
    REPORT_PARSE = "100 per hour"

    # Parse + segmentation
    REPORT_ANALYZE = "60 per hour"
