"""
Session Timeline Calculations

Builds chart-ready series from a detected session:
- One point per event with the drain rate of the segment that follows it
- Runs of consecutive points sharing a power state
"""

from typing import Any, Dict, List, Optional

from .drain import calculate_drain, drain_rate_per_hour


def build_session_timeline(session) -> List[Dict[str, Any]]:
    """
    Build per-event chart points for a session.

    The segment drain rate uses minutes_offset differences between an event
    and the next one; the last point has no rate.

    Args:
        session: BatterySession

    Returns:
        List of point dicts (timestamp, percent, mWh, state, minutesOffset, drainRate)
    """
    points = []
    events = session.events

    for i, event in enumerate(events):
        drain_rate: Optional[float] = None
        if i + 1 < len(events):
            following = events[i + 1]
            delta_minutes = following.minutes_offset - event.minutes_offset
            drain_rate = drain_rate_per_hour(calculate_drain(event.percent, following.percent), delta_minutes)

        points.append({
            'timestamp': event.timestamp,
            'percent': event.percent,
            'mWh': event.mwh,
            'state': event.state.value,
            'minutesOffset': event.minutes_offset,
            'drainRate': drain_rate,
        })

    return points


def state_segments(points: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Group consecutive points with the same state.

    Returns:
        List of {"start", "end", "state"} dicts with inclusive point indices

    Examples:
        >>> state_segments([{'state': 'Active'}, {'state': 'Active'}, {'state': 'Idle'}])
        [{'start': 0, 'end': 1, 'state': 'Active'}, {'start': 2, 'end': 2, 'state': 'Idle'}]
    """
    if not points:
        return []

    segments = []
    segment_start = 0
    current_state = points[0]['state']

    for i in range(1, len(points)):
        if points[i]['state'] != current_state:
            segments.append({'start': segment_start, 'end': i - 1, 'state': current_state})
            segment_start = i
            current_state = points[i]['state']

    segments.append({'start': segment_start, 'end': len(points) - 1, 'state': current_state})
    return segments
