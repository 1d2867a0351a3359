"""
Live synchronization between server state and map clients.

- events:      Event value object and the EventSink interface
- broadcaster: turns registry mutations into update events
- hub:         per-client bounded queues behind the stream endpoint
"""

from crowdmap.sync.events import INIT_EVENT, UPDATE_EVENT, Event, EventSink
from crowdmap.sync.broadcaster import SyncBroadcaster
from crowdmap.sync.hub import SubscriberHub, Subscription

__all__ = [
    'INIT_EVENT',
    'UPDATE_EVENT',
    'Event',
    'EventSink',
    'SyncBroadcaster',
    'SubscriberHub',
    'Subscription',
]
