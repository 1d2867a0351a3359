"""
Location API endpoints.

Provides endpoints for:
- GET  /api/locations              - Snapshot of every location
- GET  /api/locations/<key>        - Single location with prediction
- POST /api/updateWifi             - Report a Wi-Fi derived count
- POST /api/checkin                - Register one check-in
- POST /api/manual                 - Report a manual density
- POST /api/addLocation            - Add a new location
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from crowdmap.errors import CrowdMapError, UnknownLocation

logger = logging.getLogger(__name__)

locations_bp = Blueprint('locations', __name__, url_prefix='/api')


def _service():
    return current_app.config['CROWD_SERVICE']


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@locations_bp.errorhandler(CrowdMapError)
def handle_command_error(e: CrowdMapError):
    logger.info(f'Rejected {request.path}: {e}')
    return jsonify(e.to_dict()), 400


@locations_bp.route('/locations', methods=['GET'])
def list_locations():
    """
    Get the full registry snapshot.

    Maps location key to its record, with the current prediction.
    """
    return jsonify(_service().snapshot())


@locations_bp.route('/locations/<key>', methods=['GET'])
def get_location(key: str):
    """Get a single location by key."""
    try:
        return jsonify(_service().location(key))
    except UnknownLocation as e:
        return jsonify(e.to_dict()), 404


@locations_bp.route('/updateWifi', methods=['POST'])
def update_wifi():
    """
    Report a Wi-Fi derived occupancy estimate.

    Body: {"location": str, "count": int}
    """
    data = _body()
    _service().report_wifi(data.get('location'), data.get('count'))
    return jsonify({'success': True})


@locations_bp.route('/checkin', methods=['POST'])
def check_in():
    """
    Register a single check-in.

    Body: {"location": str}
    """
    data = _body()
    _service().report_check_in(data.get('location'))
    return jsonify({'success': True})


@locations_bp.route('/manual', methods=['POST'])
def manual_report():
    """
    Report a manually observed density.

    Body: {"location": str, "density": int}
    """
    data = _body()
    _service().report_manual(data.get('location'), data.get('density'))
    return jsonify({'success': True})


@locations_bp.route('/addLocation', methods=['POST'])
def add_location():
    """
    Add a new location, keyed by its name.

    Body: {"name": str, "lat": float, "lng": float}

    Adding a name that already exists succeeds without changing it.
    """
    data = _body()
    created = _service().add_location(data.get('name'), data.get('lat'), data.get('lng'))
    return jsonify({'success': True, 'created': created})
