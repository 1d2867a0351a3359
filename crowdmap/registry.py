"""
In-memory location registry.

Holds every LocationRecord keyed by location key and is the single
place where counters change. Every mutation path funnels through one
routine that, under the registry lock:

1. Applies the counter change
2. Appends the resulting occupancy to the history
3. Notifies mutation callbacks (the broadcaster)

so a subscriber always sees a history that already contains the
sample for the mutation it is being told about, and no two mutations
interleave.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Generator, Iterator, List, Optional, Tuple

from crowdmap.errors import InvalidValue, UnknownLocation
from crowdmap.models import HistoryTracker, LocationRecord

logger = logging.getLogger(__name__)

# Counters must fit a signed 64-bit integer for the NumPy analytics
MAX_COUNT = 2 ** 63 - 1


def _require_count(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidValue(f'{name} must be an integer')
    if value < 0:
        raise InvalidValue(f'{name} must be non-negative')
    if value > MAX_COUNT:
        raise InvalidValue(f'{name} is too large')
    return value


class LocationRegistry:
    """
    Thread-safe mapping of location key to LocationRecord.

    A single re-entrant lock serializes all mutations and reads, so
    callbacks invoked during a mutation may read the registry back.
    """

    def __init__(self, tracker: Optional[HistoryTracker] = None):
        self._records: Dict[str, LocationRecord] = {}
        self._lock = threading.RLock()
        self._tracker = tracker or HistoryTracker()

        # Callbacks for external integration
        self._on_mutation_callbacks: List[Callable[[str], None]] = []

        # Statistics
        self._mutations = 0

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._records.keys())

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """
        Hold the registry lock across several operations.

        No mutation (and therefore no broadcast) can happen inside the
        block.
        """
        with self._lock:
            yield

    def add_mutation_callback(self, callback: Callable[[str], None]) -> None:
        """
        Register callback to be invoked after each mutation.

        Callback receives the mutated location key and runs while the
        registry lock is still held.
        """
        self._on_mutation_callbacks.append(callback)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, key: str) -> LocationRecord:
        """Get a record by key, raising UnknownLocation if absent."""
        with self._lock:
            record = self._records.get(key)
        if record is None:
            raise UnknownLocation(key)
        return record

    def list_all(self) -> Dict[str, LocationRecord]:
        """Return a shallow copy of the key -> record mapping."""
        with self._lock:
            return dict(self._records)

    def snapshot(self) -> Dict[str, dict]:
        """Serialize every record in one consistent pass."""
        with self._lock:
            return {key: record.to_dict() for key, record in self._records.items()}

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def create(
        self,
        name: str,
        coords: Tuple[float, float],
        key: Optional[str] = None,
    ) -> bool:
        """
        Insert a new record with zeroed counters and empty history.

        ``key`` defaults to ``name``. Creating an existing key is a
        no-op that still counts as success: returns False and leaves the
        existing record untouched.
        """
        key = key or name

        with self._lock:
            if key in self._records:
                logger.debug(f'Location {key!r} already exists, create ignored')
                return False

            try:
                record = LocationRecord(name=name, coords=coords)
            except ValueError as e:
                raise InvalidValue(str(e)) from e
            self._records[key] = record

        lat, lng = record.coords
        logger.info(f'Location added: {key} at ({lat:.4f}, {lng:.4f})')
        return True

    def set_wifi_count(self, key: str, value: int) -> List[int]:
        """Replace the Wi-Fi occupancy estimate."""
        value = _require_count('wifi count', value)

        def apply(record: LocationRecord) -> None:
            record.wifi_count = value

        return self._mutate(key, apply)

    def increment_check_ins(self, key: str, delta: int) -> List[int]:
        """Add ``delta`` to the check-in count, clamping to [0, MAX_COUNT]."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidValue('check-in delta must be an integer')

        def apply(record: LocationRecord) -> None:
            record.check_ins = min(max(record.check_ins + delta, 0), MAX_COUNT)

        return self._mutate(key, apply)

    def set_manual(self, key: str, value: int) -> List[int]:
        """Replace the manually reported density."""
        value = _require_count('manual density', value)

        def apply(record: LocationRecord) -> None:
            record.manual = value

        return self._mutate(key, apply)

    def _mutate(self, key: str, apply: Callable[[LocationRecord], None]) -> List[int]:
        """
        Apply a change, sample it and notify, as one atomic step.

        Returns the updated history.
        """
        with self._lock:
            record = self._records.get(key)
            if record is None:
                raise UnknownLocation(key)

            apply(record)
            history = self._tracker.add_sample(record)
            self._mutations += 1

            for callback in self._on_mutation_callbacks:
                try:
                    callback(key)
                except Exception as e:
                    logger.error(f'Mutation callback error for {key}: {e}')

        return history

    @property
    def stats(self) -> dict:
        """Get registry statistics."""
        with self._lock:
            return {
                'locations': len(self._records),
                'mutations': self._mutations,
                'history_capacity': self._tracker.capacity,
            }
