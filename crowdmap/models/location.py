"""
LocationRecord model - current crowd state of a tracked location.

One record per location key. Counters come from three independent
sources and are summed into the occupancy on every read:

- wifi_count: estimate derived from Wi-Fi associations
- check_ins:  net count of active check-ins (never negative)
- manual:     last density reported by staff

Design notes:
- Counters are validated at construction, never coerced at read time
- Occupancy is derived, never stored
- History is a bounded FIFO maintained by HistoryTracker
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Tuple


class CrowdLevel(str, Enum):
    """
    Crowd level used for marker colouring on the map.

    - LOW:      occupancy <= 10
    - MODERATE: occupancy <= 30
    - HIGH:     anything above
    """
    LOW = 'low'
    MODERATE = 'moderate'
    HIGH = 'high'


LOW_LEVEL_MAX = 10
MODERATE_LEVEL_MAX = 30


def classify_level(occupancy: int) -> CrowdLevel:
    """Map an occupancy value to its crowd level."""
    if occupancy <= LOW_LEVEL_MAX:
        return CrowdLevel.LOW
    if occupancy <= MODERATE_LEVEL_MAX:
        return CrowdLevel.MODERATE
    return CrowdLevel.HIGH


def validate_coords(coords) -> Tuple[float, float]:
    """Return coords as a (lat, lng) float tuple, or raise ValueError."""
    try:
        lat, lng = coords
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        raise ValueError(f'coords must be a (lat, lng) pair, got {coords!r}')

    if not -90 <= lat <= 90:
        raise ValueError('Latitude must be between -90 and 90')
    if not -180 <= lng <= 180:
        raise ValueError('Longitude must be between -180 and 180')
    return (lat, lng)


def _check_counter(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f'{name} must be an integer, got {value!r}')
    if value < 0:
        raise ValueError(f'{name} must be non-negative, got {value}')
    return value


@dataclass
class LocationRecord:
    """
    Crowd state of a single location.

    The registry key is the identity; ``name`` is for display and may
    equal the key.
    """
    name: str
    coords: Tuple[float, float]
    wifi_count: int = 0
    check_ins: int = 0
    manual: int = 0
    history: Deque[int] = field(default_factory=deque)

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError('name must be a non-empty string')
        self.coords = validate_coords(self.coords)
        self.wifi_count = _check_counter('wifi_count', self.wifi_count)
        self.check_ins = _check_counter('check_ins', self.check_ins)
        self.manual = _check_counter('manual', self.manual)
        self.history = deque(self.history)

    def __repr__(self) -> str:
        return f'<LocationRecord {self.name} occupancy={self.occupancy}>'

    @property
    def occupancy(self) -> int:
        """Sum of all three counters at this moment."""
        return self.wifi_count + self.check_ins + self.manual

    @property
    def level(self) -> CrowdLevel:
        return classify_level(self.occupancy)

    def to_dict(self) -> dict:
        """Convert to the JSON shape map clients consume."""
        return {
            'name': self.name,
            'coords': [self.coords[0], self.coords[1]],
            'wifiCount': self.wifi_count,
            'checkIns': self.check_ins,
            'manual': self.manual,
            'history': list(self.history),
            'occupancy': self.occupancy,
            'level': self.level.value,
        }
