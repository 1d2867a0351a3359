"""
API module for CrowdMap.

Provides endpoints for:
- Location snapshots and report commands
- The live update stream
- Analytics and system status
"""

from crowdmap.api.locations import locations_bp
from crowdmap.api.metrics import metrics_bp
from crowdmap.api.stream import stream_bp

__all__ = ['locations_bp', 'metrics_bp', 'stream_bp']
