"""
Data models for CrowdMap.

All state is held in memory:
1. LocationRecord holds the three occupancy counters and the history
2. HistoryTracker maintains the bounded sample buffer
"""

from crowdmap.models.location import (
    CrowdLevel,
    LocationRecord,
    classify_level,
    validate_coords,
)
from crowdmap.models.history import HistoryTracker

__all__ = [
    'CrowdLevel',
    'LocationRecord',
    'classify_level',
    'validate_coords',
    'HistoryTracker',
]
