"""
Wide Events (Canonical Log Lines) - Structured Logging Utility

Emit ONE comprehensive JSON event per report parse or analysis request
instead of scattered log lines:
- Context: filename, input format, threshold
- Business metrics: events parsed, parse errors, sessions detected
- Timings for each stage
- Tail sampling: keep all errors/slow requests, sample successful fast ones
"""

import random
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import structlog

from batteryreport.config import Config

SERVICE_NAME = "battery-report-analyzer"

# Configure structlog for JSON output
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class WideEvent:
    """
    Accumulates context throughout an operation, then emits one log event.

    Usage:
        event = WideEvent("report_analysis")
        event.add_context(filename="battery-report.html", threshold=98)

        with event.timer("parse"):
            data = BatteryReportParser.parse(content)

        event.add_business_metric("events_parsed", len(data.events))
        event.emit()
    """

    def __init__(self, operation: str, request_id: Optional[str] = None, trace_id: Optional[str] = None):
        """
        Args:
            operation: Name of the operation (e.g., "report_parse")
            request_id: Unique ID for this request (auto-generated if not provided)
            trace_id: ID that connects related operations
        """
        self.operation = operation
        self.context: Dict[str, Any] = {
            "operation": operation,
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "start_time": time.time(),
            "request_id": request_id or str(uuid.uuid4()),
        }

        if trace_id:
            self.context["trace_id"] = trace_id

        self.logger = structlog.get_logger()

    def add_context(self, **kwargs) -> "WideEvent":
        """Add high-cardinality context fields (filename, request_id, threshold...)."""
        self.context.update(kwargs)
        return self

    def add_business_metric(self, key: str, value: Any) -> "WideEvent":
        """Add business metrics (events parsed, sessions detected, ...)."""
        self.context.setdefault("business_metrics", {})[key] = value
        return self

    def add_error(self, error: Exception, **kwargs) -> "WideEvent":
        """Add error details to the event."""
        error_info = {
            "type": type(error).__name__,
            "message": str(error),
            "details": kwargs,
        }
        if getattr(error, "details", None):
            error_info["error_details"] = error.details
        self.context["error"] = error_info
        self.context["success"] = False
        return self

    def mark_success(self) -> "WideEvent":
        self.context["success"] = True
        return self

    def mark_failure(self, reason: str) -> "WideEvent":
        self.context["success"] = False
        self.context["failure_reason"] = reason
        return self

    @contextmanager
    def timer(self, operation_name: str):
        """
        Time a stage of the request.

        Usage:
            with event.timer("parse"):
                BatteryReportParser.parse(content)

            # Outputs: {"performance_breakdown": {"parse_ms": 12.4}}
        """
        start = time.time()
        try:
            yield
        finally:
            duration_ms = (time.time() - start) * 1000
            self.context.setdefault("performance_breakdown", {})[f"{operation_name}_ms"] = round(duration_ms, 2)

    def set_duration(self) -> "WideEvent":
        """Calculate and set the duration of the operation."""
        if "start_time" in self.context:
            duration_ms = (time.time() - self.context["start_time"]) * 1000
            self.context["duration_ms"] = round(duration_ms, 2)
            del self.context["start_time"]
        return self

    def should_emit(self, sample_rate: Optional[float] = None, slow_threshold_ms: float = 1000) -> bool:
        """
        Tail sampling:
        - Always emit failures
        - Always emit slow requests (>slow_threshold_ms)
        - Always emit requests whose report produced parse errors
        - Sample the rest at sample_rate (default Config.WIDE_EVENT_SAMPLE_RATE)
        """
        if sample_rate is None:
            sample_rate = Config.WIDE_EVENT_SAMPLE_RATE

        if not self.context.get("success", True):
            return True

        if self.context.get("duration_ms", 0) > slow_threshold_ms:
            return True

        business_metrics = self.context.get("business_metrics", {})
        if business_metrics.get("parse_errors"):
            return True

        return random.random() < sample_rate

    def emit(self, level: str = "info", force: bool = False) -> None:
        """
        Emit the wide event as a single log line.

        Args:
            level: Log level (info, warning, error)
            force: Emit even if sampling says no
        """
        self.set_duration()

        if not force and not self.should_emit():
            return

        log_method = getattr(self.logger, level, self.logger.info)
        log_method(f"{self.operation}_complete", **self.context)


@contextmanager
def track_operation(operation: str, **initial_context):
    """
    Track an operation with a wide event that is emitted on exit.

    Usage:
        with track_operation("report_parse", filename=name) as event:
            event.add_business_metric("events_parsed", 42)
    """
    event = WideEvent(operation)
    event.add_context(**initial_context)

    try:
        yield event
        event.mark_success()
    except Exception as e:
        event.add_error(e)
        event.mark_failure(str(e))
        raise
    finally:
        failed = not event.context.get("success", True)
        event.emit(level="error" if failed else "info", force=failed)


def record_parse_metrics(event: WideEvent, data) -> None:
    """Attach ParsedBatteryData counts to a wide event."""
    event.add_business_metric("events_parsed", data.metadata.total_events)
    event.add_business_metric("parse_errors", len(data.errors))
    event.add_business_metric("has_energy_data", data.metadata.has_energy_data)


def record_analysis_metrics(event: WideEvent, analysis) -> None:
    """Attach SessionAnalysis counts to a wide event."""
    event.add_business_metric("sessions_detected", len(analysis.sessions))
    event.add_business_metric("complete_sessions", analysis.summary.total_sessions)
    event.add_business_metric("full_charge_events", len(analysis.full_charge_events))
