"""
CrowdMap Flask Application.

Main entry point for the web application. Initializes:
- Crowd service (registry, broadcaster, subscriber hub)
- Simulated check-in traffic
- API routes and the live update stream

Usage:
    python -m crowdmap.app

Or with gunicorn (threaded workers, one process):
    gunicorn --threads 8 'crowdmap.app:create_app()'
"""

import atexit
import logging
from typing import Optional

from flask import Flask
from flask_cors import CORS

from crowdmap.api import locations_bp, metrics_bp, stream_bp
from crowdmap.config import config
from crowdmap.service import CrowdService

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)
logger = logging.getLogger(__name__)


def create_app(
    start_simulation: bool = True,
    service: Optional[CrowdService] = None,
) -> Flask:
    """
    Application factory for Flask.

    Args:
        start_simulation: Whether to start the background check-in
                          simulation. Set to False for testing.
        service: Crowd service to serve (created from config if None).

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = config.secret_key
    app.config['STREAM_KEEPALIVE'] = config.stream.keepalive_seconds

    # Enable CORS for API endpoints
    CORS(app, resources={r'/api/*': {'origins': '*'}})

    service = service or CrowdService()
    app.config['CROWD_SERVICE'] = service
    logger.info(f'Tracking {len(service.registry)} locations')

    # Register API blueprints
    app.register_blueprint(locations_bp)
    app.register_blueprint(stream_bp)
    app.register_blueprint(metrics_bp)

    if start_simulation and config.simulation.enabled:
        service.start()
        atexit.register(service.stop)
    else:
        logger.info('Simulation disabled')

    @app.route('/health')
    def health():
        """Simple health check endpoint."""
        return {'status': 'ok'}

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.errorhandler(404)
    def not_found(e):
        return {'error': 'Not found'}, 404

    @app.errorhandler(500)
    def server_error(e):
        logger.error(f'Server error: {e}')
        return {'error': 'Internal server error'}, 500

    return app


def run_development_server():
    """Run the development server."""
    app = create_app()

    logger.info(f'Starting CrowdMap on http://0.0.0.0:{config.port}')

    app.run(
        host='0.0.0.0',
        port=config.port,
        debug=config.debug,
        threaded=True,
        use_reloader=False,  # Disable reloader to prevent duplicate simulation threads
    )


if __name__ == '__main__':
    run_development_server()
