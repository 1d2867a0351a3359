"""
Event value objects and the sink interface the core publishes to.

The core never talks to a transport directly. It hands events to an
``EventSink``; whatever implements the sink decides how (and whether)
they reach clients.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Protocol


INIT_EVENT = 'init'
UPDATE_EVENT = 'update'


@dataclass(frozen=True)
class Event:
    """A named event with a JSON-serializable payload."""
    name: str
    payload: Dict[str, Any]

    def to_sse(self) -> str:
        """Encode as a Server-Sent Events frame."""
        return f'event: {self.name}\ndata: {json.dumps(self.payload)}\n\n'


class EventSink(Protocol):
    """Anything that accepts events for delivery."""

    def publish(self, event: Event) -> None:
        ...
