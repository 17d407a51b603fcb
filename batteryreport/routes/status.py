"""
Status routes for the battery report analyzer.
"""

from flask import Blueprint, Response, jsonify

from batteryreport import __version__
from batteryreport.calculations.constants import DEFAULT_FULL_CHARGE_THRESHOLD
from batteryreport.extensions import RateLimits, limiter

status_bp = Blueprint('status', __name__)


@status_bp.route('/status', methods=['GET'])
@limiter.limit(RateLimits.READ_HEAVY)
def get_status() -> Response:
    """Report service health and the default segmentation settings."""
    return jsonify({
        'status': 'online',
        'version': __version__,
        'defaultFullChargeThreshold': DEFAULT_FULL_CHARGE_THRESHOLD,
    })
