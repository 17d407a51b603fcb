"""
Session detection service for the battery report analyzer.

Splits a parsed battery timeline into discharge sessions bounded by
full-charge events and computes drain metrics for each session.
"""

import copy
import logging
from typing import List, Optional, Sequence

from batteryreport.calculations.constants import (
    CHARGING_THRESHOLD_TOLERANCE,
    DEFAULT_FULL_CHARGE_THRESHOLD,
    FULL_CHARGE_DEDUP_WINDOW,
    MIN_SESSION_EVENTS,
)
from batteryreport.calculations.drain import (
    calculate_drain,
    drain_rate_per_hour,
    mean_of_rates,
    optional_drain_rate_per_hour,
    round_half_up,
)
from batteryreport.exceptions import SessionDetectionError
from batteryreport.models import (
    BatteryEvent,
    BatterySession,
    BatteryState,
    ParsedBatteryData,
    SessionAnalysis,
    SessionSummary,
)
from batteryreport.utils.time_utils import minutes_between

logger = logging.getLogger(__name__)


def detect_sessions(
    data: ParsedBatteryData,
    full_charge_threshold: Optional[float] = None
) -> SessionAnalysis:
    """
    Segment parsed battery data into drain sessions.

    Pure function of its inputs: `data` is never modified, and running it
    again with another threshold produces a fresh, independent analysis.
    Any threshold is accepted; above 100 only charging rows near it can be
    boundaries, and at 0 or below every row qualifies.

    Args:
        data: Result of BatteryReportParser.parse()
        full_charge_threshold: Battery % treated as a full charge (default 98)

    Returns:
        SessionAnalysis
    """
    if full_charge_threshold is None:
        full_charge_threshold = DEFAULT_FULL_CHARGE_THRESHOLD

    events = data.events
    if not events:
        return SessionAnalysis(
            sessions=(),
            full_charge_events=(),
            full_charge_threshold=full_charge_threshold,
            summary=SessionSummary(),
        )

    boundaries = find_full_charge_events(events, full_charge_threshold)
    slices = carve_sessions(events, boundaries)
    sessions = [analyze_session(s, session_id) for session_id, s in enumerate(slices, start=1)]

    logger.info(
        f"Detected {len(sessions)} sessions from {len(events)} events "
        f"({len(boundaries)} full-charge events at {full_charge_threshold}%)"
    )

    return SessionAnalysis(
        sessions=tuple(sessions),
        full_charge_events=tuple(boundaries),
        full_charge_threshold=full_charge_threshold,
        summary=calculate_summary(sessions),
    )


def is_full_charge(
    event: BatteryEvent,
    previous: Optional[BatteryEvent],
    threshold: float
) -> bool:
    """
    Check whether an event marks the battery as (nearly) full.

    True when the percentage is at or above the threshold, when a charging
    event is within CHARGING_THRESHOLD_TOLERANCE of it, or when the
    percentage crosses the threshold upwards from the previous event.
    """
    if event.percent >= threshold:
        return True
    if event.state == BatteryState.CHARGING and event.percent >= threshold - CHARGING_THRESHOLD_TOLERANCE:
        return True
    return previous is not None and previous.percent < threshold and event.percent >= threshold


def find_full_charge_events(events: Sequence[BatteryEvent], threshold: float) -> List[int]:
    """
    Find indices of full-charge boundaries.

    A candidate within FULL_CHARGE_DEDUP_WINDOW positions of the previously
    recorded boundary is suppressed, so a run of near-full readings yields
    one boundary.
    """
    boundaries: List[int] = []

    for i, event in enumerate(events):
        previous = events[i - 1] if i > 0 else None
        if not is_full_charge(event, previous, threshold):
            continue

        if not boundaries or i - boundaries[-1] > FULL_CHARGE_DEDUP_WINDOW:
            boundaries.append(i)

    return boundaries


def carve_sessions(
    events: Sequence[BatteryEvent],
    boundaries: Sequence[int]
) -> List[List[BatteryEvent]]:
    """
    Cut the timeline into per-session event lists.

    Each session runs from one boundary up to (not including) the next, or
    to the end of the log for the last boundary. Leading Charging events
    are skipped so the session starts where discharge begins. Sessions left
    with fewer than MIN_SESSION_EVENTS events are dropped. Returned events
    are copies; the input sequence is not touched.
    """
    if not boundaries:
        return [[copy.copy(e) for e in events]]

    sessions = []
    for position, start in enumerate(boundaries):
        end = boundaries[position + 1] if position + 1 < len(boundaries) else len(events)

        discharge_start = start
        for j in range(start, end):
            if events[j].state != BatteryState.CHARGING:
                discharge_start = j
                break

        session_events = [copy.copy(e) for e in events[discharge_start:end]]
        if len(session_events) >= MIN_SESSION_EVENTS:
            sessions.append(session_events)
        else:
            logger.debug(f"Dropping session candidate at index {start}: too few events")

    return sessions


def analyze_session(events: Sequence[BatteryEvent], session_id: int) -> BatterySession:
    """
    Compute drain metrics for one session.

    Time and drain between two consecutive events are attributed to the
    state of the earlier event. Charging intervals only add to
    charging_minutes; no drain is recorded for them.

    Args:
        events: Session events in time order (at least one)
        session_id: 1-based session number

    Returns:
        BatterySession
    """
    if not events:
        raise SessionDetectionError("Cannot analyze a session without events", session_id=session_id)

    first, last = events[0], events[-1]

    active_minutes = idle_minutes = charging_minutes = 0.0
    active_drain_pct = idle_drain_pct = 0
    active_drain_mwh = idle_drain_mwh = 0

    for current, following in zip(events, events[1:]):
        delta_minutes = max(0.0, minutes_between(current.occurred_at, following.occurred_at))
        drain_pct = calculate_drain(current.percent, following.percent)
        drain_mwh = calculate_drain(current.mwh, following.mwh) or 0

        if current.state == BatteryState.ACTIVE:
            active_minutes += delta_minutes
            active_drain_pct += drain_pct
            active_drain_mwh += drain_mwh
        elif current.state == BatteryState.IDLE:
            idle_minutes += delta_minutes
            idle_drain_pct += drain_pct
            idle_drain_mwh += drain_mwh
        elif current.state == BatteryState.CHARGING:
            charging_minutes += delta_minutes

    logger.debug(
        f"Session {session_id}: {len(events)} events, active {active_minutes:.2f}min, "
        f"idle {idle_minutes:.2f}min, charging {charging_minutes:.2f}min"
    )

    return BatterySession(
        session_id=session_id,
        start_time=first.timestamp,
        end_time=last.timestamp,
        start_pct=first.percent,
        end_pct=last.percent,
        used_pct=calculate_drain(first.percent, last.percent),
        start_mwh=first.mwh,
        end_mwh=last.mwh,
        used_mwh=calculate_drain(first.mwh, last.mwh),
        duration_min=max(0.0, minutes_between(first.occurred_at, last.occurred_at)),
        active_minutes=active_minutes,
        idle_minutes=idle_minutes,
        charging_minutes=charging_minutes,
        active_drain_pct=active_drain_pct,
        idle_drain_pct=idle_drain_pct,
        active_rate_pct_per_hr=drain_rate_per_hour(active_drain_pct, active_minutes),
        idle_rate_pct_per_hr=drain_rate_per_hour(idle_drain_pct, idle_minutes),
        active_rate_mwh_per_hr=optional_drain_rate_per_hour(active_drain_mwh, active_minutes),
        idle_rate_mwh_per_hr=optional_drain_rate_per_hour(idle_drain_mwh, idle_minutes),
        events=tuple(events),
        is_complete=last.percent < first.percent,
    )


def calculate_summary(sessions: Sequence[BatterySession]) -> SessionSummary:
    """
    Average screen-on time and drain rates over complete sessions.

    Incomplete sessions (no net drain) are ignored. Drain averages are the
    mean of per-session hourly rates.
    """
    complete = [s for s in sessions if s.is_complete]
    if not complete:
        return SessionSummary()

    return SessionSummary(
        total_sessions=len(complete),
        avg_screen_on_time=round_half_up(sum(s.active_minutes for s in complete) / len(complete)),
        avg_active_drain=mean_of_rates([s.active_rate_pct_per_hr for s in complete]),
        avg_idle_drain=mean_of_rates([s.idle_rate_pct_per_hr for s in complete]),
    )
