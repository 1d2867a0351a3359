"""
Short-horizon occupancy forecast.

The forecast is a simple moving average over the most recent samples,
like an SMA over price ticks. No smoothing state is carried between
calls: the result is fully derived from the history passed in, so
recomputing it for the same history always gives the same answer.
"""

import math
from typing import Iterable, Optional, Union

import numpy as np

from crowdmap.config import config
from crowdmap.models.location import LocationRecord


class Predictor:
    """Moving-average predictor over the last ``window`` samples."""

    def __init__(self, window: Optional[int] = None):
        self.window = config.prediction.window if window is None else window
        if self.window < 1:
            raise ValueError('Prediction window must be at least 1')

    def predict_next(self, source: Union[LocationRecord, Iterable[int]]) -> int:
        """
        Forecast the next sample.

        Accepts a record or a bare history. Empty history forecasts 0;
        otherwise the mean of the last min(window, len) samples, with
        halves rounded up.
        """
        history = source.history if isinstance(source, LocationRecord) else source
        samples = np.fromiter(history, dtype=np.float64)

        if samples.size == 0:
            return 0

        recent = samples[-self.window:]
        return int(math.floor(float(np.mean(recent)) + 0.5))


# Shared default instance
predictor = Predictor()


def predict_next(source: Union[LocationRecord, Iterable[int]]) -> int:
    """Forecast with the default window."""
    return predictor.predict_next(source)
