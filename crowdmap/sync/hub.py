"""
SubscriberHub - in-process fan-out of events to connected clients.

Each connected client owns a bounded queue. Publishing never blocks:
if a client's queue is full the event is dropped for that client only
and the publisher is not told. Slow clients can miss updates but will
never stall a mutation.
"""

import logging
import queue
import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from crowdmap.config import config
from crowdmap.sync.events import Event

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    """A single client's view of the event stream."""
    queue: 'queue.Queue[Event]'
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def get(self, timeout: Optional[float] = None) -> Optional[Event]:
        """Next event, or None if nothing arrived within ``timeout``."""
        try:
            return self.queue.get(timeout=timeout)
        except queue.Empty:
            return None


class SubscriberHub:
    """
    Event sink that fans events out to every subscription.

    Implements the ``EventSink`` interface used by the broadcaster.
    """

    def __init__(self, queue_size: Optional[int] = None):
        self.queue_size = config.stream.queue_size if queue_size is None else queue_size
        if self.queue_size < 1:
            raise ValueError('Stream queue size must be at least 1')

        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = threading.Lock()

        # Statistics
        self._delivered = 0
        self._dropped = 0

    def subscribe(self, initial: Optional[Event] = None) -> Subscription:
        """
        Register a new subscription.

        ``initial`` is queued for this subscription only, ahead of any
        broadcast event.
        """
        subscription = Subscription(queue=queue.Queue(maxsize=self.queue_size))
        if initial is not None:
            subscription.queue.put_nowait(initial)

        with self._lock:
            self._subscriptions[subscription.id] = subscription

        logger.info(f'Client connected {subscription.id}')
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
        if removed is not None:
            logger.info(f'Client disconnected {subscription.id}')

    def publish(self, event: Event) -> None:
        """Offer ``event`` to every subscription without blocking."""
        with self._lock:
            subscriptions = list(self._subscriptions.values())

        for subscription in subscriptions:
            try:
                subscription.queue.put_nowait(event)
                self._delivered += 1
            except queue.Full:
                self._dropped += 1
                logger.debug(f'Dropped {event.name} event for slow client {subscription.id}')

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    @property
    def stats(self) -> dict:
        with self._lock:
            return {
                'subscribers': len(self._subscriptions),
                'delivered': self._delivered,
                'dropped': self._dropped,
            }
