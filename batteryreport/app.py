"""
Battery Report Analyzer - Flask Application

Accepts Windows battery reports and returns parsed timelines, drain sessions
and summary statistics as JSON.
"""

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from batteryreport.calculations.constants import MAX_THRESHOLD, MIN_THRESHOLD
from batteryreport.config import Config
from batteryreport.exceptions import BatteryReportError, ConfigurationError
from batteryreport.extensions import limiter
from batteryreport.routes import register_blueprints

logger = logging.getLogger(__name__)


def validate_config(config_object) -> None:
    """Reject configuration values the analyzer cannot work with."""
    threshold = getattr(config_object, 'FULL_CHARGE_THRESHOLD', None)
    if threshold is None or not MIN_THRESHOLD < threshold <= MAX_THRESHOLD:
        raise ConfigurationError(
            f"FULL_CHARGE_THRESHOLD must be in ({MIN_THRESHOLD}, {MAX_THRESHOLD}], got {threshold}",
            config_key='FULL_CHARGE_THRESHOLD',
        )

    if getattr(config_object, 'MAX_CONTENT_LENGTH', 0) <= 0:
        raise ConfigurationError("MAX_UPLOAD_MB must be positive", config_key='MAX_UPLOAD_MB')


def register_error_handlers(app: Flask) -> None:
    """Return JSON bodies for domain and HTTP errors."""

    @app.errorhandler(BatteryReportError)
    def handle_report_error(error: BatteryReportError):
        logger.info(f"Rejected request: {error}")
        return jsonify({'error': error.message, 'details': error.details}), 400

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error: RequestEntityTooLarge):
        max_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return jsonify({'error': f'File size must be less than {max_mb}MB'}), 413

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception(f"Unhandled error: {error}")
        return jsonify({'error': 'Internal server error'}), 500


def create_app(config_object=Config) -> Flask:
    """
    Build the Flask application.

    Args:
        config_object: Config class (or subclass, e.g. TestingConfig)

    Returns:
        Configured Flask app
    """
    validate_config(config_object)

    logging.basicConfig(
        level=getattr(logging, config_object.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    app = Flask(__name__)
    app.config.from_object(config_object)

    limiter.init_app(app)
    register_blueprints(app)
    register_error_handlers(app)

    logger.info(f"Battery report analyzer ready (threshold default {config_object.FULL_CHARGE_THRESHOLD}%)")
    return app


def main() -> None:
    app = create_app()
    app.run(host=Config.FLASK_HOST, port=Config.FLASK_PORT, debug=Config.DEBUG)


if __name__ == '__main__':
    main()
