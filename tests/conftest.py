"""
Pytest fixtures for battery report analyzer tests.
"""

import os
import sys
from datetime import date

import pytest

# Allow running the suite from a checkout without installing the package
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

os.environ.setdefault('FLASK_ENV', 'testing')

from batteryreport.app import create_app  # noqa: E402
from batteryreport.config import TestingConfig  # noqa: E402


@pytest.fixture
def app():
    """Create application for testing."""
    flask_app = create_app(TestingConfig)
    yield flask_app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def report_day():
    """Fixed 'today' so date fallbacks are deterministic."""
    return date(2025, 9, 1)


@pytest.fixture
def simple_report_text():
    """Two-line report: one hour of screen-on use draining 10%."""
    return (
        "2025-08-25 08:00:00\tActive\tBattery\t100 %\t50,000 mWh\n"
        "2025-08-25 09:00:00\tConnected standby\tBattery\t90 %\t45,000 mWh"
    )


@pytest.fixture
def two_cycle_report_text():
    """
    Report with two charge cycles.

    Charges 60% -> 99%, drains through active/standby use, charges to 100%
    and drains again. Rows after the first carry only a time, as in real
    Windows reports.
    """
    rows = [
        ("2025-08-25 07:00:00", "Charging", "AC", 60, "30,000"),
        ("07:30:00", "Charging", "AC", 99, "49,500"),
        ("08:00:00", "Active", "Battery", 95, "47,500"),
        ("08:30:00", "Active", "Battery", 88, "44,000"),
        ("09:00:00", "Connected standby", "Battery", 85, "42,500"),
        ("09:30:00", "Connected standby", "Battery", 84, "42,000"),
        ("10:00:00", "Active", "Battery", 70, "35,000"),
        ("10:30:00", "Charging", "AC", 80, "40,000"),
        ("11:00:00", "Charging", "AC", 100, "50,000"),
        ("11:30:00", "Active", "Battery", 96, "48,000"),
        ("12:00:00", "Active", "Battery", 90, "45,000"),
    ]
    header = "Battery usage\nSTART TIME\tSTATE\tSOURCE\tCAPACITY REMAINING\n"
    lines = [f"{ts}\t{state}\t{source}\t{pct} %\t{mwh} mWh" for ts, state, source, pct, mwh in rows]
    return header + "\n".join(lines) + "\n"


@pytest.fixture
def html_report():
    """HTML battery report in the layout produced by powercfg /batteryreport."""
    return """<!DOCTYPE html>
<html>
<head><title>Battery report</title></head>
<body>
<h2>Recent usage</h2>
<table>
<thead>
<tr><th>START TIME</th><th>STATE</th><th>SOURCE</th><th colspan="2">CAPACITY REMAINING</th></tr>
</thead>
<tr class="even dc 1"><td class="dateTime"><span class="date">2025-08-25 </span><span class="time">08:00:00</span></td><td class="state">Active</td><td class="acdc">Battery</td><td class="percent">100 %</td><td class="mw">50,000 mWh</td></tr>
<tr class="odd dc 2"><td class="dateTime"><span class="time">09:00:00</span></td><td class="state">Connected standby</td><td class="acdc">Battery</td><td class="percent">90&nbsp;%</td><td class="mw">45,000 mWh</td></tr>
<tr class="even dc 3"><td class="dateTime"><span class="time">10:00:00</span></td><td class="state">Active</td><td class="acdc">AC</td><td class="percent">85 %</td><td class="mw">42,500 mWh</td></tr>
</table>
</body>
</html>
"""
