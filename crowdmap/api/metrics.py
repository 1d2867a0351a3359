"""
Metrics and analytics API endpoints.

Provides endpoints for:
- GET /api/metrics/status    - Simulation, stream and registry status
- GET /api/metrics/locations - Per-location level, trend and forecast
"""

import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from crowdmap.config import config

metrics_bp = Blueprint('metrics', __name__, url_prefix='/api/metrics')


@metrics_bp.route('/status', methods=['GET'])
def get_system_status():
    """
    Get system health and status information.

    Returns:
    - Registry size and mutation count
    - Broadcast and stream delivery counters
    - Simulation state per location
    - Map-wide occupancy summary
    """
    start_time = time.perf_counter()

    service = current_app.config['CROWD_SERVICE']
    stats = service.stats
    summary = service.summary()

    query_time_ms = (time.perf_counter() - start_time) * 1000

    return jsonify({
        'status': 'healthy' if stats['simulation']['running'] else 'idle',
        **stats,
        'summary': summary,
        'config': {
            'history_capacity': config.history.capacity,
            'prediction_window': config.prediction.window,
            'simulation_enabled': config.simulation.enabled,
        },
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'query_time_ms': round(query_time_ms, 2),
    })


@metrics_bp.route('/locations', methods=['GET'])
def get_location_metrics():
    """
    Get analytics for every location.

    Returns occupancy, crowd level, forecast and history trend.
    """
    service = current_app.config['CROWD_SERVICE']

    return jsonify({
        'locations': service.location_analytics(),
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })
