"""
HistoryTracker - rolling occupancy samples per location.

Every mutation appends one sample (the occupancy right after the
mutation) to the record's history. The buffer is append-only from the
back and evicts from the front, so the newest ``capacity`` samples are
always kept in insertion order.
"""

from typing import List, Optional

from crowdmap.config import config
from crowdmap.models.location import LocationRecord


class HistoryTracker:
    """Appends occupancy samples to a bounded per-record history."""

    def __init__(self, capacity: Optional[int] = None):
        self.capacity = config.history.capacity if capacity is None else capacity
        if self.capacity < 1:
            raise ValueError('History capacity must be at least 1')

    def add_sample(self, record: LocationRecord) -> List[int]:
        """
        Record the current occupancy of ``record``.

        Only the given record's history is touched. Returns a copy of
        the updated history.
        """
        history = record.history
        history.append(record.occupancy)

        while len(history) > self.capacity:
            history.popleft()

        return list(history)
