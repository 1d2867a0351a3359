"""
Live update stream.

GET /api/stream - Server-Sent Events feed for map clients.

On connect the client receives one ``init`` event with the full
snapshot, then one ``update`` event per mutation. A comment line is
sent when nothing happened for a while so proxies keep the connection.
"""

import logging

from flask import Blueprint, Response, current_app

from crowdmap.config import config

logger = logging.getLogger(__name__)

stream_bp = Blueprint('stream', __name__, url_prefix='/api')

KEEPALIVE_FRAME = ': keepalive\n\n'


@stream_bp.route('/stream', methods=['GET'])
def stream():
    """Subscribe to location updates."""
    service = current_app.config['CROWD_SERVICE']
    keepalive = current_app.config.get('STREAM_KEEPALIVE', config.stream.keepalive_seconds)

    subscription = service.subscribe()
    logger.debug(f'Stream opened for {subscription.id}')

    def generate():
        try:
            while True:
                event = subscription.get(timeout=keepalive)
                if event is None:
                    yield KEEPALIVE_FRAME
                    continue
                yield event.to_sse()
        finally:
            service.unsubscribe(subscription)

    return Response(
        generate(),
        mimetype='text/event-stream',
        headers={
            'Cache-Control': 'no-cache',
            'X-Accel-Buffering': 'no',
        },
    )
