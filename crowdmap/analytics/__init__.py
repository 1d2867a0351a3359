"""
Analytics module for CrowdMap.

Time-series helpers over occupancy history, using NumPy:
- Moving-average forecast
- Trend detection
- Map-wide statistical summaries
"""

from crowdmap.analytics.prediction import Predictor, predict_next
from crowdmap.analytics.occupancy import TrendDirection, compute_trend, summarize

__all__ = [
    'Predictor',
    'predict_next',
    'TrendDirection',
    'compute_trend',
    'summarize',
]
