"""Battery Report Analyzer - parse Windows battery reports into drain sessions."""

__version__ = "1.0.0"
