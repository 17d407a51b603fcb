"""
Report routes for the battery report analyzer.

Handles parsing uploaded battery reports and running session detection.
Reports are processed per request and never stored.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, Response, jsonify, request

from batteryreport.calculations.constants import MAX_THRESHOLD, MIN_THRESHOLD
from batteryreport.calculations.timeline import build_session_timeline, state_segments
from batteryreport.config import Config
from batteryreport.exceptions import (
    EmptyReportError,
    SessionDetectionError,
    UnsupportedFileError,
)
from batteryreport.extensions import RateLimits, limiter
from batteryreport.models import ParsedBatteryData, SessionAnalysis
from batteryreport.services.session_service import detect_sessions
from batteryreport.utils.formatting import (
    format_date_range,
    format_datetime,
    format_duration,
    format_energy,
    format_rate,
)
from batteryreport.utils.report_parser import BatteryReportParser
from batteryreport.utils.wide_events import (
    record_analysis_metrics,
    record_parse_metrics,
    track_operation,
)

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports', __name__)


def _request_value(key: str) -> Optional[Any]:
    """Read a parameter from JSON body, form data or query string."""
    if request.is_json:
        body = request.get_json(silent=True) or {}
        if key in body:
            return body[key]
    if key in request.form:
        return request.form[key]
    return request.args.get(key)


def _read_report() -> Tuple[str, Optional[str]]:
    """
    Get report content from an uploaded file or a `text` field.

    Returns:
        Tuple of (decoded report text, filename or None)

    Raises:
        EmptyReportError: Nothing (or only whitespace) was supplied
        UnsupportedFileError: The upload has an unsupported extension
    """
    if 'file' in request.files:
        file = request.files['file']
        if file.filename == '':
            raise EmptyReportError("No file selected")

        if not file.filename.lower().endswith(Config.ALLOWED_EXTENSIONS):
            raise UnsupportedFileError(
                f"File must be one of: {', '.join(Config.ALLOWED_EXTENSIONS)}",
                filename=file.filename,
            )

        content = BatteryReportParser.decode_content(file.read())
        if not content.strip():
            raise EmptyReportError("Uploaded file is empty", filename=file.filename)
        return content, file.filename

    text = _request_value('text')
    if not isinstance(text, str) or not text.strip():
        raise EmptyReportError()
    return text, None


def _read_threshold() -> float:
    """
    Full-charge threshold from the request, or the configured default.

    Raises:
        SessionDetectionError: Not a number, or outside (0, 100]
    """
    raw = _request_value('threshold')
    if raw is None or raw == '':
        return Config.FULL_CHARGE_THRESHOLD
    try:
        threshold = float(raw)
    except (TypeError, ValueError):
        raise SessionDetectionError(f"Threshold must be a number, got {raw!r}")

    if not MIN_THRESHOLD < threshold <= MAX_THRESHOLD:
        raise SessionDetectionError(
            f"Threshold must be greater than {MIN_THRESHOLD} and at most {MAX_THRESHOLD}",
            threshold=threshold,
        )
    return threshold


def _display_summary(data: ParsedBatteryData, analysis: SessionAnalysis) -> Dict[str, Any]:
    """Human-readable strings for the summary panel."""
    summary = analysis.summary
    time_range = data.metadata.time_range

    return {
        'dateRange': format_date_range(time_range.start, time_range.end) if data.events else None,
        'avgScreenOnTime': format_duration(summary.avg_screen_on_time),
        'avgActiveDrain': format_rate(summary.avg_active_drain),
        'avgIdleDrain': format_rate(summary.avg_idle_drain),
        'sessions': [
            {
                'sessionId': s.session_id,
                'startedAt': format_datetime(s.start_time),
                'duration': format_duration(s.duration_min),
                'screenOnTime': format_duration(s.active_minutes),
                'screenOffTime': format_duration(s.idle_minutes),
                'activeDrain': format_rate(s.active_rate_pct_per_hr),
                'idleDrain': format_rate(s.idle_rate_pct_per_hr),
                'energyUsed': format_energy(s.used_mwh) if s.used_mwh is not None else None,
            }
            for s in analysis.sessions
        ],
    }


@reports_bp.route('/reports/parse', methods=['POST'])
@limiter.limit(RateLimits.REPORT_PARSE)
def parse_report() -> Response:
    """
    Parse a battery report into a timeline.

    Accepts a multipart `file` upload, a `text` form field, or JSON
    {"text": "..."}.

    Returns:
        JSON with parsed data and advisory validation
    """
    content, filename = _read_report()

    with track_operation("report_parse", filename=filename, content_length=len(content)) as event:
        with event.timer("parse"):
            data = BatteryReportParser.parse(content)
        validation = BatteryReportParser.validate_data(data)

        record_parse_metrics(event, data)
        event.add_business_metric("validation_issues", len(validation.issues))

    if data.errors:
        logger.warning(f"Report parsed with {len(data.errors)} errors")

    return jsonify({
        'data': data.to_dict(),
        'validation': validation.to_dict(),
    })


@reports_bp.route('/reports/analyze', methods=['POST'])
@limiter.limit(RateLimits.REPORT_ANALYZE)
def analyze_report() -> Response:
    """
    Parse a battery report and detect drain sessions.

    Input as for /reports/parse, plus an optional `threshold` (default 98).
    Set `include_events=false` to omit per-session event lists.
    """
    content, filename = _read_report()
    threshold = _read_threshold()
    raw_include_events = _request_value('include_events')
    include_events = raw_include_events is None or str(raw_include_events).lower() not in ('false', '0')

    with track_operation("report_analysis", filename=filename, threshold=threshold) as event:
        with event.timer("parse"):
            data = BatteryReportParser.parse(content)
        validation = BatteryReportParser.validate_data(data)

        with event.timer("detect_sessions"):
            analysis = detect_sessions(data, threshold)

        record_parse_metrics(event, data)
        record_analysis_metrics(event, analysis)

    return jsonify({
        'data': data.to_dict(),
        'validation': validation.to_dict(),
        'analysis': analysis.to_dict(include_events=include_events),
        'display': _display_summary(data, analysis),
    })


@reports_bp.route('/reports/timeline', methods=['POST'])
@limiter.limit(RateLimits.REPORT_ANALYZE)
def session_timeline() -> Response:
    """
    Chart series for one detected session.

    Input as for /reports/analyze, plus a required `session_id`.
    """
    content, filename = _read_report()
    threshold = _read_threshold()

    raw_session_id = _request_value('session_id')
    try:
        session_id = int(raw_session_id)
    except (TypeError, ValueError):
        raise SessionDetectionError(f"session_id must be an integer, got {raw_session_id!r}")

    with track_operation(
        "session_timeline",
        filename=filename,
        session_id=session_id,
        threshold=threshold,
    ) as event:
        with event.timer("parse"):
            data = BatteryReportParser.parse(content)

        with event.timer("detect_sessions"):
            analysis = detect_sessions(data, threshold)

        record_parse_metrics(event, data)
        record_analysis_metrics(event, analysis)

        session = analysis.get_session(session_id)
        event.add_business_metric("session_found", session is not None)

    if session is None:
        return jsonify({
            'error': f'Session {session_id} not found',
            'availableSessions': [s.session_id for s in analysis.sessions],
        }), 404

    points = build_session_timeline(session)

    return jsonify({
        'sessionId': session.session_id,
        'points': points,
        'segments': state_segments(points),
        'hasEnergyData': any(p['mWh'] is not None for p in points),
        'duration': format_duration(session.duration_min),
    })
