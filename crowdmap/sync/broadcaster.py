"""
SyncBroadcaster - turns registry mutations into update events.

Registered as a registry mutation callback, so it runs once per
mutation, after the sample has been appended and before the registry
lock is released. Ordering per mutation is therefore always:

    mutate -> sample -> predict -> emit

Delivery is fire-and-forget. The registry stays authoritative whatever
happens to the event after it is handed to the sink.
"""

import logging
from typing import Dict, Optional

from crowdmap.analytics.prediction import Predictor
from crowdmap.registry import LocationRegistry
from crowdmap.sync.events import INIT_EVENT, UPDATE_EVENT, Event, EventSink

logger = logging.getLogger(__name__)


class SyncBroadcaster:
    """Publishes location-scoped update events to an event sink."""

    def __init__(
        self,
        registry: LocationRegistry,
        sink: EventSink,
        predictor: Optional[Predictor] = None,
    ):
        self.registry = registry
        self.sink = sink
        self.predictor = predictor or Predictor()

        self._published = 0
        self._failed = 0

        registry.add_mutation_callback(self.publish)

    def publish(self, key: str) -> None:
        """Emit ``{location, data, prediction}`` for the current record."""
        record = self.registry.get(key)
        event = Event(UPDATE_EVENT, {
            'location': key,
            'data': record.to_dict(),
            'prediction': self.predictor.predict_next(record),
        })

        try:
            self.sink.publish(event)
            self._published += 1
        except Exception as e:
            self._failed += 1
            logger.warning(f'Failed to publish update for {key}: {e}')

    def snapshot(self) -> Dict[str, dict]:
        """All records with their current prediction attached."""
        snapshot = self.registry.snapshot()
        for data in snapshot.values():
            data['prediction'] = self.predictor.predict_next(data['history'])
        return snapshot

    def snapshot_event(self) -> Event:
        """The one-off event a new subscriber receives."""
        return Event(INIT_EVENT, self.snapshot())

    @property
    def stats(self) -> dict:
        return {
            'published': self._published,
            'failed': self._failed,
        }
