"""
Services module for battery report business logic.

This module contains the session detection logic, kept separate from the
Flask route handlers.
"""

from batteryreport.services.session_service import (
    analyze_session,
    calculate_summary,
    carve_sessions,
    detect_sessions,
    find_full_charge_events,
    is_full_charge,
)

__all__ = [
    'detect_sessions',
    'find_full_charge_events',
    'is_full_charge',
    'carve_sessions',
    'analyze_session',
    'calculate_summary',
]
