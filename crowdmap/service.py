"""
CrowdService - the coordinating service behind the HTTP layer.

Owns every piece of live state and wires it together:

    report -> LocationRegistry -> HistoryTracker -> SyncBroadcaster
           -> SubscriberHub -> stream clients

Transport code never touches the registry directly; it calls the
command/query methods here, which validate raw input and translate it
into registry calls. Invalid input is rejected at this boundary with
MissingFields or InvalidValue, unknown keys with UnknownLocation.
"""

from typing import Any, Dict, Iterable, Optional

from crowdmap.analytics import Predictor, compute_trend, summarize
from crowdmap.config import SeedLocation, config
from crowdmap.errors import InvalidValue, MissingFields
from crowdmap.models import HistoryTracker
from crowdmap.registry import MAX_COUNT, LocationRegistry
from crowdmap.simulation import SimulationDriver
from crowdmap.sync import SubscriberHub, Subscription, SyncBroadcaster


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_count(field_name: str, value: Any) -> int:
    """Coerce a reported count to a non-negative int."""
    if isinstance(value, bool):
        raise InvalidValue(f'{field_name} must be a number')

    if isinstance(value, int):
        number = value
    else:
        try:
            as_float = float(value)
        except (TypeError, ValueError, OverflowError):
            raise InvalidValue(f'{field_name} must be a number')

        if not as_float.is_integer():
            raise InvalidValue(f'{field_name} must be a whole number')
        number = int(as_float)

    if number < 0:
        raise InvalidValue(f'{field_name} must be non-negative')
    if number > MAX_COUNT:
        raise InvalidValue(f'{field_name} is too large')
    return number


def _parse_coordinate(field_name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise InvalidValue(f'Invalid {field_name}')
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidValue(f'Invalid {field_name}')


class CrowdService:
    """
    Single owner of the registry, broadcaster, hub and simulation.

    One instance per process; handed to the Flask app through its config.
    """

    def __init__(
        self,
        seed_locations: Optional[Iterable[SeedLocation]] = None,
        history_capacity: Optional[int] = None,
        prediction_window: Optional[int] = None,
        queue_size: Optional[int] = None,
    ):
        self.registry = LocationRegistry(HistoryTracker(history_capacity))
        self.predictor = Predictor(prediction_window)
        self.hub = SubscriberHub(queue_size)
        self.broadcaster = SyncBroadcaster(self.registry, self.hub, self.predictor)
        self.simulation = SimulationDriver(self.registry)

        seeds = config.seed_locations if seed_locations is None else seed_locations
        for seed in seeds:
            self.registry.create(seed.name, seed.coords, key=seed.key)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def snapshot(self) -> Dict[str, dict]:
        """Every location with its current prediction."""
        return self.broadcaster.snapshot()

    def location(self, key: str) -> dict:
        """One location with its current prediction."""
        with self.registry.atomic():
            record = self.registry.get(key)
            data = record.to_dict()
        data['prediction'] = self.predictor.predict_next(data['history'])
        return data

    def location_analytics(self) -> Dict[str, dict]:
        """Per-location level, trend and forecast."""
        return {
            key: {
                'occupancy': data['occupancy'],
                'level': data['level'],
                'prediction': data['prediction'],
                'trend': compute_trend(data['history']).value,
                'samples': len(data['history']),
            }
            for key, data in self.snapshot().items()
        }

    def summary(self) -> dict:
        with self.registry.atomic():
            return summarize(self.registry.list_all())

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def report_wifi(self, location: Any, count: Any) -> None:
        """Replace the Wi-Fi occupancy estimate for ``location``."""
        self._require(location=location, count=count)
        self.registry.set_wifi_count(location, _parse_count('count', count))

    def report_check_in(self, location: Any) -> None:
        """Register exactly one new check-in at ``location``."""
        self._require(location=location)
        self.registry.increment_check_ins(location, 1)

    def report_manual(self, location: Any, density: Any) -> None:
        """Replace the manually reported density for ``location``."""
        self._require(location=location, density=density)
        self.registry.set_manual(location, _parse_count('density', density))

    def add_location(self, name: Any, lat: Any, lng: Any) -> bool:
        """
        Add a location keyed by its name.

        Returns False (still a success) when the name is already taken;
        the existing location is left unchanged.
        """
        self._require(name=name, lat=lat, lng=lng)
        if not isinstance(name, str):
            raise InvalidValue('name must be a string')

        coords = (_parse_coordinate('lat', lat), _parse_coordinate('lng', lng))
        return self.registry.create(name.strip(), coords)

    @staticmethod
    def _require(**fields: Any) -> None:
        missing = [name for name, value in fields.items() if _is_missing(value)]
        if missing:
            raise MissingFields(*missing)

        location = fields.get('location')
        if location is not None and not isinstance(location, str):
            raise InvalidValue('location must be a string')

    # -------------------------------------------------------------------------
    # Live updates
    # -------------------------------------------------------------------------

    def subscribe(self) -> Subscription:
        """
        Connect a client to the update stream.

        The snapshot is taken and the subscription registered under the
        registry lock, so the client sees every mutation after its
        snapshot exactly once and none before it.
        """
        with self.registry.atomic():
            return self.hub.subscribe(self.broadcaster.snapshot_event())

    def unsubscribe(self, subscription: Subscription) -> None:
        self.hub.unsubscribe(subscription)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        self.simulation.start()

    def stop(self) -> None:
        self.simulation.stop()

    @property
    def stats(self) -> dict:
        return {
            'registry': self.registry.stats,
            'broadcast': self.broadcaster.stats,
            'stream': self.hub.stats,
            'simulation': self.simulation.stats,
        }
