"""
Data models for parsed battery reports and detected drain sessions.

Nothing here is persisted. Each model exposes to_dict() with the field names
consumed by charting and export collaborators (minutesOffset, rawState, mWh,
activeRate_pct_per_hr, ...).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import cached_property
from typing import Any, Dict, List, Optional, Tuple

from batteryreport.exceptions import InvalidTimestampError
from batteryreport.utils.time_utils import parse_report_timestamp


class BatteryState(str, Enum):
    """Normalized power state of a report row."""

    ACTIVE = "Active"
    IDLE = "Idle"
    CHARGING = "Charging"
    UNKNOWN = "Unknown"


@dataclass
class BatteryEvent:
    """One sample of the battery timeline."""

    timestamp: str
    minutes_offset: int
    state: BatteryState
    percent: int
    mwh: Optional[int] = None
    raw_state: str = "Unknown"

    @cached_property
    def occurred_at(self) -> datetime:
        """Absolute (naive, local) instant of this event."""
        resolved = parse_report_timestamp(self.timestamp)
        if resolved is None:
            raise InvalidTimestampError(self.timestamp)
        return resolved

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'minutesOffset': self.minutes_offset,
            'state': self.state.value,
            'percent': self.percent,
            'mWh': self.mwh,
            'rawState': self.raw_state,
        }


@dataclass
class TimeRange:
    start: str = ""
    end: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {'start': self.start, 'end': self.end}


@dataclass
class ParseMetadata:
    total_events: int = 0
    has_energy_data: bool = False
    time_range: TimeRange = field(default_factory=TimeRange)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalEvents': self.total_events,
            'hasEnergyData': self.has_energy_data,
            'timeRange': self.time_range.to_dict(),
        }


@dataclass
class ParsedBatteryData:
    """
    Result of parsing one battery report.

    Attributes:
        events: Time-ordered battery events (may be empty)
        start_date: Instant of the first event that parsed successfully,
            in parse order
        errors: Non-fatal per-line/per-row diagnostics
        metadata: Summary derived from events
    """

    events: List[BatteryEvent] = field(default_factory=list)
    start_date: Optional[datetime] = None
    errors: List[str] = field(default_factory=list)
    metadata: ParseMetadata = field(default_factory=ParseMetadata)

    @classmethod
    def build(
        cls,
        events: List[BatteryEvent],
        errors: List[str],
        start_date: Optional[datetime] = None
    ) -> "ParsedBatteryData":
        """Create a result whose metadata is derived from the given events."""
        metadata = ParseMetadata(
            total_events=len(events),
            has_energy_data=any(e.mwh is not None for e in events),
            time_range=TimeRange(
                start=events[0].timestamp if events else "",
                end=events[-1].timestamp if events else "",
            ),
        )
        return cls(events=events, start_date=start_date, errors=errors, metadata=metadata)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'events': [e.to_dict() for e in self.events],
            'startDate': self.start_date.isoformat() if self.start_date else None,
            'errors': list(self.errors),
            'metadata': self.metadata.to_dict(),
        }


@dataclass
class ValidationResult:
    is_valid: bool
    issues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'isValid': self.is_valid, 'issues': list(self.issues)}


@dataclass(frozen=True)
class BatterySession:
    """
    Drain metrics for the events between two full-charge boundaries.

    Energy fields are None unless both endpoints carry mWh readings; the
    mWh-per-hour rates are None when no energy drain was attributed.
    """

    session_id: int
    start_time: str
    end_time: str
    start_pct: int
    end_pct: int
    used_pct: int
    duration_min: float
    active_minutes: float
    idle_minutes: float
    charging_minutes: float
    active_drain_pct: int
    idle_drain_pct: int
    active_rate_pct_per_hr: float
    idle_rate_pct_per_hr: float
    events: Tuple[BatteryEvent, ...]
    is_complete: bool
    start_mwh: Optional[int] = None
    end_mwh: Optional[int] = None
    used_mwh: Optional[int] = None
    active_rate_mwh_per_hr: Optional[float] = None
    idle_rate_mwh_per_hr: Optional[float] = None

    def to_dict(self, include_events: bool = True) -> Dict[str, Any]:
        result = {
            'sessionId': self.session_id,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'startPct': self.start_pct,
            'endPct': self.end_pct,
            'usedPct': self.used_pct,
            'startmWh': self.start_mwh,
            'endmWh': self.end_mwh,
            'usedmWh': self.used_mwh,
            'durationMin': self.duration_min,
            'activeMinutes': self.active_minutes,
            'idleMinutes': self.idle_minutes,
            'chargingMinutes': self.charging_minutes,
            'activeDrainPct': self.active_drain_pct,
            'idleDrainPct': self.idle_drain_pct,
            'activeRate_pct_per_hr': self.active_rate_pct_per_hr,
            'idleRate_pct_per_hr': self.idle_rate_pct_per_hr,
            'activeRate_mWh_per_hr': self.active_rate_mwh_per_hr,
            'idleRate_mWh_per_hr': self.idle_rate_mwh_per_hr,
            'isComplete': self.is_complete,
        }
        if include_events:
            result['events'] = [e.to_dict() for e in self.events]
        return result


@dataclass(frozen=True)
class SessionSummary:
    """Averages over complete sessions only."""

    total_sessions: int = 0
    avg_screen_on_time: int = 0
    avg_active_drain: float = 0.0
    avg_idle_drain: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalSessions': self.total_sessions,
            'avgScreenOnTime': self.avg_screen_on_time,
            'avgActiveDrain': self.avg_active_drain,
            'avgIdleDrain': self.avg_idle_drain,
        }


@dataclass(frozen=True)
class SessionAnalysis:
    """
    Top-level segmentation result.

    full_charge_events holds indices into the exact events list that was
    segmented; they mean nothing against any other sequence.
    """

    sessions: Tuple[BatterySession, ...]
    full_charge_events: Tuple[int, ...]
    full_charge_threshold: float
    summary: SessionSummary

    def get_session(self, session_id: int) -> Optional[BatterySession]:
        for session in self.sessions:
            if session.session_id == session_id:
                return session
        return None

    def to_dict(self, include_events: bool = True) -> Dict[str, Any]:
        return {
            'sessions': [s.to_dict(include_events=include_events) for s in self.sessions],
            'fullChargeEvents': list(self.full_charge_events),
            'settings': {'fullChargeThreshold': self.full_charge_threshold},
            'summary': self.summary.to_dict(),
        }
