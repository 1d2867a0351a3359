import pytest

from crowdmap.app import create_app
from crowdmap.config import DEFAULT_SEED_LOCATIONS
from crowdmap.models import LocationRecord
from crowdmap.registry import LocationRegistry
from crowdmap.service import CrowdService


class RecordingSink:
    """Event sink that keeps everything it is given."""

    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


@pytest.fixture
def record():
    return LocationRecord(name='College Grounds', coords=(12.9719, 77.5946))


@pytest.fixture
def registry():
    registry = LocationRegistry()
    for seed in DEFAULT_SEED_LOCATIONS:
        registry.create(seed.name, seed.coords, key=seed.key)
    return registry


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def service():
    service = CrowdService()
    yield service
    service.stop()


@pytest.fixture
def client(service):
    app = create_app(start_simulation=False, service=service)
    app.config['TESTING'] = True
    return app.test_client()
