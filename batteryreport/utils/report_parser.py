"""Parse Windows battery usage reports into a time-ordered event timeline."""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Union

from batteryreport.calculations.constants import (
    MAX_BATTERY_PERCENT,
    MIN_BATTERY_PERCENT,
    MIN_MEANINGFUL_EVENTS,
)
from batteryreport.calculations.drain import round_half_up
from batteryreport.exceptions import InvalidTimestampError
from batteryreport.models import (
    BatteryEvent,
    BatteryState,
    ParsedBatteryData,
    ValidationResult,
)
from batteryreport.utils.html_table import TableRow, extract_table_rows, strip_markup
from batteryreport.utils.time_utils import (
    format_report_date,
    local_today,
    minutes_between,
    previous_day,
)

logger = logging.getLogger(__name__)


@dataclass
class DateInference:
    """
    Date carried across rows while parsing one report.

    Rows without a date take the most recent explicit date; rows before any
    dated row take the day before the report's first date; reports that
    never name a date fall back to today.
    """

    today: date
    previous_day: Optional[str] = None
    last_seen_date: Optional[str] = None

    def resolve(self, date_str: Optional[str], time_str: str) -> str:
        """Build the full timestamp for a row and update the carried date."""
        if date_str:
            self.last_seen_date = date_str
            return f"{date_str} {time_str}"

        if self.last_seen_date:
            return f"{self.last_seen_date} {time_str}"

        if self.previous_day:
            return f"{self.previous_day} {time_str}"

        default_date = format_report_date(self.today)
        self.last_seen_date = default_date
        logger.debug(f"No date in report, using {default_date}")
        return f"{default_date} {time_str}"


class BatteryReportParser:
    """
    Parses the "Recent usage" section of a Windows battery report.

    Reports arrive either as plain text (tab or multi-space separated
    columns) or as the HTML page produced by `powercfg /batteryreport`.
    Typical row:

        2025-08-25 08:00:00    Active    Battery    100 %    50,000 mWh

    Later rows often omit the date ("08:30:00 ..."); the date is inferred
    from earlier rows. Malformed rows never abort a parse: noise is skipped
    silently and rows with bad timestamps are reported in `errors`.
    """

    PERCENT_REGEX = re.compile(r'(\d{1,3})\s*%')
    MWH_REGEX = re.compile(r'([\d,]+)\s*mWh')
    TIMESTAMP_REGEX = re.compile(r'^(?:(\d{4}-\d{2}-\d{2})\s*)?(\d{1,2}:\d{2}:\d{2})')
    FIELD_SEPARATOR_REGEX = re.compile(r'\t+|\s{2,}')

    HTML_MARKERS = ('<html', '<!doctype')
    MIN_LINE_LENGTH = 10
    MIN_FIELDS = 3

    # Checked in order, first match wins
    STATE_KEYWORDS = (
        (BatteryState.ACTIVE, ('active',)),
        (BatteryState.IDLE, ('standby', 'suspended', 'sleep')),
        (BatteryState.CHARGING, ('charging', 'plugged', 'ac')),
    )

    @classmethod
    def parse(cls, content: Union[str, bytes], today: Optional[date] = None) -> ParsedBatteryData:
        """
        Parse a battery report in either supported format.

        Args:
            content: Raw report text or file bytes
            today: Date used for reports that never name one (default: local today)

        Returns:
            ParsedBatteryData with sorted events and per-line diagnostics
        """
        text = cls.decode_content(content)

        lowered = text.lower()
        if any(marker in lowered for marker in cls.HTML_MARKERS):
            return cls.parse_html(text, today=today)
        return cls.parse_text(text, today=today)

    @staticmethod
    def decode_content(content: Union[str, bytes]) -> str:
        """Decode uploaded bytes, honouring UTF-8 and UTF-16 byte order marks."""
        if isinstance(content, str):
            return content
        if content.startswith((b'\xff\xfe', b'\xfe\xff')):
            return content.decode('utf-16', errors='replace')
        return content.decode('utf-8-sig', errors='replace')

    @classmethod
    def parse_text(cls, text: str, today: Optional[date] = None) -> ParsedBatteryData:
        """
        Parse a line-oriented plain-text battery report.

        Args:
            text: Report text
            today: Fallback date for reports without any dated row

        Returns:
            ParsedBatteryData
        """
        lines = [line.strip() for line in text.split('\n')]
        lines = [line for line in lines if line]

        first_date = cls._find_first_date(lines)
        dates = DateInference(
            today=today or local_today(),
            previous_day=previous_day(first_date) if first_date else None,
        )

        events: List[BatteryEvent] = []
        errors: List[str] = []
        start_date: Optional[datetime] = None

        for line_number, line in enumerate(lines, start=1):
            try:
                event = cls._parse_line(line, dates)
                if event is None:
                    continue

                occurred_at = event.occurred_at
                if start_date is None:
                    start_date = occurred_at
                events.append(event)
            except InvalidTimestampError as e:
                logger.debug(f"Line {line_number}: {e.message}")
                errors.append(f"Line {line_number}: {e.message}")
            except Exception as e:
                logger.debug(f"Error parsing line {line_number}: {e}")
                errors.append(f"Line {line_number}: {e}")

        return cls._finalize(events, errors, start_date)

    @classmethod
    def parse_html(cls, html: str, today: Optional[date] = None) -> ParsedBatteryData:
        """
        Parse the HTML form of a battery report.

        Falls back to plain-text parsing of the de-tagged document when no
        usable table rows are found.
        """
        rows = extract_table_rows(html, cls.TIMESTAMP_REGEX, cls.PERCENT_REGEX, cls.MWH_REGEX)

        if not rows:
            logger.info("No usable table rows in HTML report, falling back to text parsing")
            return cls.parse_text(strip_markup(html), today=today)

        first_date = cls._find_first_date(row.timestamp for row in rows)
        dates = DateInference(
            today=today or local_today(),
            previous_day=previous_day(first_date) if first_date else None,
        )

        events: List[BatteryEvent] = []
        errors: List[str] = []
        start_date: Optional[datetime] = None

        for row_number, row in enumerate(rows, start=1):
            try:
                event = cls._parse_table_row(row, dates)
                if event is None:
                    continue

                occurred_at = event.occurred_at
                if start_date is None:
                    start_date = occurred_at
                events.append(event)
            except InvalidTimestampError as e:
                logger.debug(f"Row {row_number}: {e.message}")
                errors.append(f"Row {row_number}: {e.message}")
            except Exception as e:
                logger.debug(f"Error parsing table row {row_number}: {e}")
                errors.append(f"Row {row_number}: {e}")

        return cls._finalize(events, errors, start_date)

    @classmethod
    def _find_first_date(cls, timestamps) -> Optional[str]:
        """Return the first explicit YYYY-MM-DD found at the start of any value."""
        for value in timestamps:
            if not value:
                continue
            match = cls.TIMESTAMP_REGEX.match(value)
            if match and match.group(1):
                return match.group(1)
        return None

    @classmethod
    def _parse_line(cls, line: str, dates: DateInference) -> Optional[BatteryEvent]:
        """Parse a single text line; None means the line is not a usage row."""
        if '<' in line or 'Report generated' in line or len(line) < cls.MIN_LINE_LENGTH:
            return None

        parts = [part.strip() for part in cls.FIELD_SEPARATOR_REGEX.split(line)]
        parts = [part for part in parts if part]
        if len(parts) < cls.MIN_FIELDS:
            return None

        timestamp_match = cls.TIMESTAMP_REGEX.match(parts[0])
        if not timestamp_match:
            return None

        percent_match = cls.PERCENT_REGEX.search(line)
        if not percent_match:
            return None

        timestamp = dates.resolve(timestamp_match.group(1), timestamp_match.group(2))
        raw_state = parts[1] or "Unknown"

        return BatteryEvent(
            timestamp=timestamp,
            minutes_offset=0,
            state=cls.normalize_state(raw_state),
            percent=int(percent_match.group(1)),
            mwh=cls._parse_mwh(line),
            raw_state=raw_state,
        )

    @classmethod
    def _parse_table_row(cls, row: TableRow, dates: DateInference) -> Optional[BatteryEvent]:
        """Parse a classified HTML table row."""
        if not row.timestamp or not row.percent:
            return None

        timestamp_match = cls.TIMESTAMP_REGEX.match(row.timestamp)
        if not timestamp_match:
            return None

        percent_match = cls.PERCENT_REGEX.search(row.percent)
        if not percent_match:
            return None

        timestamp = dates.resolve(timestamp_match.group(1), timestamp_match.group(2))
        raw_state = row.state or "Unknown"

        return BatteryEvent(
            timestamp=timestamp,
            minutes_offset=0,
            state=cls.normalize_state(raw_state),
            percent=int(percent_match.group(1)),
            mwh=cls._parse_mwh(row.mwh) if row.mwh else None,
            raw_state=raw_state,
        )

    @classmethod
    def _parse_mwh(cls, value: str) -> Optional[int]:
        """Extract an energy reading such as "50,000 mWh"."""
        match = cls.MWH_REGEX.search(value)
        if not match:
            return None
        digits = match.group(1).replace(',', '')
        return int(digits) if digits else None

    @staticmethod
    def _finalize(
        events: List[BatteryEvent],
        errors: List[str],
        start_date: Optional[datetime]
    ) -> ParsedBatteryData:
        """
        Compute minute offsets, then sort.

        Offsets are measured from the first event in parse order and are
        computed before the sort, so a row whose inferred date moves it
        earlier keeps an offset relative to the first parsed row.
        """
        if events:
            first_time = events[0].occurred_at
            for event in events:
                event.minutes_offset = round_half_up(minutes_between(first_time, event.occurred_at))

        events.sort(key=lambda e: e.occurred_at)

        logger.info(f"Parsed {len(events)} battery events ({len(errors)} errors)")
        return ParsedBatteryData.build(events, errors, start_date)

    @classmethod
    def normalize_state(cls, raw_state: str) -> BatteryState:
        """
        Map a free-text report state onto a BatteryState.

        Examples:
            >>> BatteryReportParser.normalize_state("Connected standby")
            <BatteryState.IDLE: 'Idle'>
            >>> BatteryReportParser.normalize_state("AC")
            <BatteryState.CHARGING: 'Charging'>
        """
        state = raw_state.lower()
        for normalized, keywords in cls.STATE_KEYWORDS:
            if any(keyword in state for keyword in keywords):
                return normalized
        return BatteryState.UNKNOWN

    @classmethod
    def validate_data(cls, data: ParsedBatteryData) -> ValidationResult:
        """
        Check parsed data for problems worth surfacing to the user.

        Advisory only; the data is not modified and callers decide whether
        to stop on an invalid result.
        """
        issues = []
        events = data.events

        if not events:
            issues.append("No valid battery events found")

        if len(events) < MIN_MEANINGFUL_EVENTS:
            issues.append("Very few events found - results may not be meaningful")

        if any(e.percent < MIN_BATTERY_PERCENT or e.percent > MAX_BATTERY_PERCENT for e in events):
            issues.append("Invalid battery percentage values detected")

        times = [e.occurred_at for e in events]
        if any(later < earlier for earlier, later in zip(times, times[1:])):
            issues.append("Timestamps are not in chronological order")

        if issues:
            logger.info(f"Validation found {len(issues)} issue(s): {', '.join(issues)}")

        return ValidationResult(is_valid=not issues, issues=issues)
