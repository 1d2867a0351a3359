"""
Occupancy analytics using NumPy.

Complements the moving-average forecast with:

1. Trend Detection: linear regression over a location's history
2. Aggregate Statistics: totals and spread across all locations
3. Level Breakdown: how many locations sit at each crowd level

Everything here reads plain records and history sequences; nothing
mutates state.
"""

import logging
from enum import Enum
from typing import Dict, Mapping, Sequence

import numpy as np

from crowdmap.models.location import CrowdLevel, LocationRecord

logger = logging.getLogger(__name__)


class TrendDirection(str, Enum):
    """Trend direction classification."""
    INCREASING = 'increasing'
    STABLE = 'stable'
    DECREASING = 'decreasing'
    UNKNOWN = 'unknown'


def compute_trend(
    history: Sequence[int],
    min_samples: int = 5,
    threshold: float = 0.1,
) -> TrendDirection:
    """
    Determine trend direction using linear regression.

    The slope of the best-fit line (per sample) is normalized by the
    history's peak-to-peak range before being compared to ``threshold``.
    """
    values = np.asarray(list(history), dtype=np.float64)

    if values.size < min_samples:
        return TrendDirection.UNKNOWN

    steps = np.arange(values.size, dtype=np.float64)

    try:
        slope, _ = np.polyfit(steps, values, 1)
    except np.linalg.LinAlgError:
        logger.debug(f'Trend fit failed for {values.size} samples')
        return TrendDirection.UNKNOWN

    value_range = np.ptp(values)
    if value_range > 0:
        normalized_slope = slope / value_range
    else:
        normalized_slope = 0

    if normalized_slope > threshold:
        return TrendDirection.INCREASING
    elif normalized_slope < -threshold:
        return TrendDirection.DECREASING
    else:
        return TrendDirection.STABLE


def summarize(records: Mapping[str, LocationRecord]) -> dict:
    """
    Compute aggregate statistics across all locations.

    Returns summary metrics for the whole map.
    """
    by_level: Dict[str, int] = {level.value: 0 for level in CrowdLevel}

    if not records:
        return {
            'count': 0,
            'occupancy': None,
            'busiest': None,
            'by_level': by_level,
        }

    keys = list(records.keys())
    totals = [records[k].occupancy for k in keys]
    occupancy = np.array(totals, dtype=np.float64)

    for key in keys:
        by_level[records[key].level.value] += 1

    busiest = keys[int(np.argmax(occupancy))]

    return {
        'count': len(keys),
        'occupancy': {
            'total': sum(totals),
            'mean': float(np.mean(occupancy)),
            'max': max(totals),
            'std': float(np.std(occupancy)),
        },
        'busiest': busiest,
        'by_level': by_level,
    }
