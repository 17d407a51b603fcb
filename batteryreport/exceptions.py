"""
Custom exceptions for the battery report analyzer.

This module provides a hierarchy of exceptions for better error handling
and more informative error messages throughout the application.
"""


class BatteryReportError(Exception):
    """Base exception for all battery report analyzer errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ReportParseError(BatteryReportError):
    """A line or table row of a battery report could not be parsed."""

    def __init__(self, message: str, line_number: int = None, raw_value: str = None):
        details = {}
        if line_number:
            details['line_number'] = line_number
        if raw_value:
            details['raw_value'] = raw_value
        super().__init__(message, details)
        self.line_number = line_number
        self.raw_value = raw_value


class InvalidTimestampError(ReportParseError):
    """A reconstructed timestamp does not resolve to a real instant."""

    def __init__(self, raw_value: str, line_number: int = None):
        super().__init__(f"Invalid timestamp: {raw_value}", line_number, raw_value)


class EmptyReportError(BatteryReportError):
    """No report content was supplied."""

    def __init__(self, message: str = "No data to process", filename: str = None):
        details = {}
        if filename:
            details['filename'] = filename
        super().__init__(message, details)
        self.filename = filename


class SessionDetectionError(BatteryReportError):
    """Session segmentation was requested with unusable settings."""

    def __init__(self, message: str, threshold: float = None, session_id: int = None):
        details = {}
        if threshold is not None:
            details['threshold'] = threshold
        if session_id:
            details['session_id'] = session_id
        super().__init__(message, details)
        self.threshold = threshold
        self.session_id = session_id


class ConfigurationError(BatteryReportError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, config_key: str = None):
        details = {}
        if config_key:
            details['config_key'] = config_key
        super().__init__(message, details)
        self.config_key = config_key


class UnsupportedFileError(BatteryReportError):
    """Uploaded file is not a supported battery report type."""

    def __init__(self, message: str, filename: str = None):
        details = {}
        if filename:
            details['filename'] = filename
        super().__init__(message, details)
        self.filename = filename
