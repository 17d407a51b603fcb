"""
Routes module for battery report analyzer Flask blueprints.

This module contains Flask blueprints that handle different areas of the API.
"""

from batteryreport.routes.reports import reports_bp
from batteryreport.routes.status import status_bp

__all__ = [
    "reports_bp",
    "status_bp",
]


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(status_bp, url_prefix="/api")
    app.register_blueprint(reports_bp, url_prefix="/api")
