"""
Tests for the plain-text battery report parser.

Covers:
- Row tokenizing and field extraction
- Date inference for time-only rows
- Noise skipping and per-line error reporting
- Offset computation and ordering
- Byte decoding of uploaded files
"""

from datetime import date, datetime

import pytest

from batteryreport.models import BatteryState
from batteryreport.utils.report_parser import BatteryReportParser, DateInference


class TestParseText:
    """Tests for basic row parsing."""

    def test_parses_dated_rows(self, simple_report_text, report_day):
        """Each usage row becomes one event with all fields populated."""
        data = BatteryReportParser.parse(simple_report_text, today=report_day)

        assert len(data.events) == 2
        assert data.errors == []

        first = data.events[0]
        assert first.timestamp == "2025-08-25 08:00:00"
        assert first.state == BatteryState.ACTIVE
        assert first.raw_state == "Active"
        assert first.percent == 100
        assert first.mwh == 50000
        assert first.minutes_offset == 0

        second = data.events[1]
        assert second.state == BatteryState.IDLE
        assert second.raw_state == "Connected standby"
        assert second.minutes_offset == 60

    def test_metadata(self, simple_report_text, report_day):
        """Metadata summarizes the parsed timeline."""
        data = BatteryReportParser.parse(simple_report_text, today=report_day)

        assert data.metadata.total_events == 2
        assert data.metadata.has_energy_data is True
        assert data.metadata.time_range.start == "2025-08-25 08:00:00"
        assert data.metadata.time_range.end == "2025-08-25 09:00:00"
        assert data.start_date == datetime(2025, 8, 25, 8, 0, 0)

    def test_multi_space_separated_columns(self, report_day):
        """Columns separated by two or more spaces are split like tabs."""
        text = "2025-08-25 08:00:00    Active    Battery    75 %"
        data = BatteryReportParser.parse(text, today=report_day)

        assert len(data.events) == 1
        assert data.events[0].percent == 75
        assert data.events[0].mwh is None

    def test_percent_without_space(self, report_day):
        text = "2025-08-25 08:00:00\tActive\tBattery\t42%"
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events[0].percent == 42

    def test_mwh_with_thousands_separators(self, report_day):
        text = "2025-08-25 08:00:00\tActive\tBattery\t80 %\t1,234,567 mWh"
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events[0].mwh == 1234567

    def test_zero_mwh_counts_as_energy_data(self, report_day):
        """A 0 mWh reading is a reading, not a missing value."""
        text = "2025-08-25 08:00:00\tActive\tBattery\t0 %\t0 mWh"
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events[0].mwh == 0
        assert data.metadata.has_energy_data is True

    def test_single_digit_hour(self, report_day):
        text = "2025-08-25 8:05:00\tActive\tBattery\t80 %"
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events[0].timestamp == "2025-08-25 8:05:00"
        assert data.events[0].occurred_at == datetime(2025, 8, 25, 8, 5, 0)

    def test_empty_input(self, report_day):
        """Empty input yields no events and no errors."""
        data = BatteryReportParser.parse("", today=report_day)

        assert data.events == []
        assert data.errors == []
        assert data.start_date is None
        assert data.metadata.total_events == 0
        assert data.metadata.has_energy_data is False
        assert data.metadata.time_range.start == ""

    def test_whitespace_only_input(self, report_day):
        data = BatteryReportParser.parse("   \n\t\n  ", today=report_day)

        assert data.events == []
        assert data.errors == []


class TestDateInference:
    """Tests for dates on time-only rows."""

    def test_time_only_row_uses_last_seen_date(self, report_day):
        """A time-only row after a dated row takes that row's date."""
        text = (
            "2025-08-25 08:00:00\tActive\t100 %\n"
            "08:30:00\tActive\t95 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert [e.timestamp for e in data.events] == [
            "2025-08-25 08:00:00",
            "2025-08-25 08:30:00",
        ]
        assert data.events[1].minutes_offset == 30

    def test_date_carries_across_many_rows(self, two_cycle_report_text, report_day):
        data = BatteryReportParser.parse(two_cycle_report_text, today=report_day)

        assert len(data.events) == 11
        assert all(e.timestamp.startswith("2025-08-25 ") for e in data.events)

    def test_new_date_replaces_carried_date(self, report_day):
        text = (
            "2025-08-25 23:00:00\tActive\tBattery\t50 %\n"
            "2025-08-26 07:00:00\tActive\tBattery\t45 %\n"
            "07:30:00\tActive\tBattery\t40 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events[2].timestamp == "2025-08-26 07:30:00"

    def test_rows_before_first_date_use_previous_day(self, report_day):
        """Time-only rows before any dated row belong to the day before the first date."""
        text = (
            "23:00:00\tActive\tBattery\t100 %\n"
            "2025-08-25 08:00:00\tActive\tBattery\t95 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events[0].timestamp == "2025-08-24 23:00:00"
        assert data.events[1].minutes_offset == 540

    def test_previous_day_crosses_month_boundary(self, report_day):
        text = (
            "23:00:00\tActive\tBattery\t100 %\n"
            "2025-03-01 08:00:00\tActive\tBattery\t95 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events[0].timestamp == "2025-02-28 23:00:00"

    def test_undated_report_falls_back_to_today(self, report_day):
        text = (
            "08:00:00\tActive\tBattery\t100 %\n"
            "09:00:00\tActive\tBattery\t90 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert [e.timestamp for e in data.events] == [
            "2025-09-01 08:00:00",
            "2025-09-01 09:00:00",
        ]

    def test_row_without_percent_does_not_update_date(self, report_day):
        """A dated row that is skipped for lacking a percentage leaves the carried date alone."""
        text = (
            "2025-08-25 08:00:00\tActive\tBattery\t100 %\n"
            "2025-08-26 08:00:00\tActive\tBattery\tn/a\n"
            "09:00:00\tActive\tBattery\t90 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert len(data.events) == 2
        assert data.events[1].timestamp == "2025-08-25 09:00:00"


class TestDateInferenceResolve:
    """Tests for the DateInference helper directly."""

    def test_explicit_date_wins(self):
        dates = DateInference(today=date(2025, 9, 1), previous_day="2025-08-24")

        assert dates.resolve("2025-08-25", "08:00:00") == "2025-08-25 08:00:00"
        assert dates.last_seen_date == "2025-08-25"

    def test_previous_day_used_before_any_date(self):
        dates = DateInference(today=date(2025, 9, 1), previous_day="2025-08-24")

        assert dates.resolve(None, "23:00:00") == "2025-08-24 23:00:00"
        assert dates.last_seen_date is None

    def test_today_becomes_carried_date(self):
        dates = DateInference(today=date(2025, 9, 1))

        assert dates.resolve(None, "08:00:00") == "2025-09-01 08:00:00"
        assert dates.last_seen_date == "2025-09-01"


class TestNoiseAndErrors:
    """Tests for skipped lines and per-line diagnostics."""

    def test_noise_lines_are_skipped_silently(self, report_day):
        text = "\n".join([
            "BATTERY REPORT",
            "Report generated 2025-08-25 08:00:00\tActive\tBattery\t100 %",
            "<td>2025-08-25 08:00:00</td><td>Active</td><td>100 %</td>",
            "short",
            "2025-08-25 08:00:00\t100 %",
            "2025-08-25 08:00:00\tActive\tBattery",
            "START TIME\tSTATE\tSOURCE\tCAPACITY REMAINING",
            "2025-08-25 09:00:00\tActive\tBattery\t90 %",
        ])
        data = BatteryReportParser.parse(text, today=report_day)

        assert len(data.events) == 1
        assert data.events[0].timestamp == "2025-08-25 09:00:00"
        assert data.errors == []

    def test_invalid_timestamp_is_reported(self, report_day):
        """A well-formed but impossible timestamp records an error and skips the row."""
        text = (
            "2025-08-25 08:00:00\tActive\tBattery\t100 %\n"
            "2025-02-30 08:00:00\tActive\tBattery\t95 %\n"
            "2025-08-25 09:00:00\tActive\tBattery\t90 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert len(data.events) == 2
        assert data.errors == ["Line 2: Invalid timestamp: 2025-02-30 08:00:00"]

    def test_line_numbers_ignore_blank_lines(self, report_day):
        text = (
            "2025-08-25 08:00:00\tActive\tBattery\t100 %\n"
            "\n"
            "\n"
            "2025-02-30 08:00:00\tActive\tBattery\t95 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.errors == ["Line 2: Invalid timestamp: 2025-02-30 08:00:00"]

    def test_unexpected_row_error_is_reported(self, report_day, monkeypatch):
        """Any other failure on a row is reported with its message and parsing continues."""
        def explode(cls, raw_state):
            raise RuntimeError("boom")

        monkeypatch.setattr(BatteryReportParser, "normalize_state", classmethod(explode))
        text = (
            "2025-08-25 08:00:00\tActive\tBattery\t100 %\n"
            "2025-08-25 09:00:00\tActive\tBattery\t90 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.events == []
        assert data.errors == ["Line 1: boom", "Line 2: boom"]

    def test_start_date_skips_failed_rows(self, report_day):
        text = (
            "2025-02-30 07:00:00\tActive\tBattery\t100 %\n"
            "2025-08-25 08:00:00\tActive\tBattery\t95 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert data.start_date == datetime(2025, 8, 25, 8, 0, 0)


class TestOrdering:
    """Tests for offset computation and sorting."""

    def test_events_sorted_by_time(self, report_day):
        text = (
            "2025-08-25 10:00:00\tActive\tBattery\t80 %\n"
            "2025-08-25 08:00:00\tActive\tBattery\t100 %\n"
            "2025-08-25 09:00:00\tActive\tBattery\t90 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert [e.percent for e in data.events] == [100, 90, 80]

    def test_offsets_measured_from_first_row_in_parse_order(self, report_day):
        """Offsets are computed before sorting, relative to the first parsed row."""
        text = (
            "2025-08-25 10:00:00\tActive\tBattery\t80 %\n"
            "2025-08-25 08:00:00\tActive\tBattery\t100 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert [e.minutes_offset for e in data.events] == [-120, 0]
        assert data.start_date == datetime(2025, 8, 25, 10, 0, 0)
        assert data.metadata.time_range.start == "2025-08-25 08:00:00"

    def test_offsets_round_half_up(self, report_day):
        text = (
            "2025-08-25 08:00:00\tActive\tBattery\t100 %\n"
            "2025-08-25 08:00:30\tActive\tBattery\t99 %\n"
            "2025-08-25 08:02:30\tActive\tBattery\t98 %"
        )
        data = BatteryReportParser.parse(text, today=report_day)

        assert [e.minutes_offset for e in data.events] == [0, 1, 3]

    def test_parsing_is_repeatable(self, two_cycle_report_text, report_day):
        first = BatteryReportParser.parse(two_cycle_report_text, today=report_day)
        second = BatteryReportParser.parse(two_cycle_report_text, today=report_day)

        assert first.to_dict() == second.to_dict()


class TestNormalizeState:
    """Tests for state keyword mapping."""

    @pytest.mark.parametrize("raw_state,expected", [
        ("Active", BatteryState.ACTIVE),
        ("Connected standby", BatteryState.IDLE),
        ("Suspended", BatteryState.IDLE),
        ("Sleep", BatteryState.IDLE),
        ("Charging", BatteryState.CHARGING),
        ("Plugged in", BatteryState.CHARGING),
        ("AC", BatteryState.CHARGING),
        ("Report generated", BatteryState.UNKNOWN),
        ("", BatteryState.UNKNOWN),
    ])
    def test_keywords(self, raw_state, expected):
        assert BatteryReportParser.normalize_state(raw_state) == expected

    def test_active_checked_first(self):
        """'Active' wins even though it also contains 'ac'."""
        assert BatteryReportParser.normalize_state("Active (AC)") == BatteryState.ACTIVE

    def test_idle_checked_before_charging(self):
        assert BatteryReportParser.normalize_state("Standby on AC") == BatteryState.IDLE


class TestDecodeContent:
    """Tests for decoding uploaded bytes."""

    def test_str_passthrough(self):
        assert BatteryReportParser.decode_content("abc") == "abc"

    def test_utf8_with_bom(self):
        assert BatteryReportParser.decode_content("\ufeffabc".encode("utf-8")) == "abc"

    def test_utf16_with_bom(self):
        raw = "2025-08-25 08:00:00\tActive\t100 %".encode("utf-16")
        assert BatteryReportParser.decode_content(raw) == "2025-08-25 08:00:00\tActive\t100 %"

    def test_parse_accepts_bytes(self, simple_report_text, report_day):
        data = BatteryReportParser.parse(simple_report_text.encode("utf-8"), today=report_day)

        assert len(data.events) == 2
