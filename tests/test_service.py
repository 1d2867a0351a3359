import threading

import pytest

from crowdmap.config import SeedLocation
from crowdmap.errors import InvalidValue, MissingFields, UnknownLocation
from crowdmap.models import classify_level
from crowdmap.service import CrowdService
from crowdmap.sync import INIT_EVENT, UPDATE_EVENT


def test_seeds_known_locations(service):
    snapshot = service.snapshot()
    assert set(snapshot) == {'college', 'library', 'canteen'}
    assert all(data['prediction'] == 0 for data in snapshot.values())
    assert all(data['history'] == [] for data in snapshot.values())


def test_custom_seeds():
    service = CrowdService(seed_locations=[SeedLocation('gym', 'Gym', (1.0, 2.0))])
    assert list(service.snapshot()) == ['gym']


def test_end_to_end_reports(service):
    service.report_wifi('college', 15)
    service.report_check_in('college')
    service.report_manual('college', 5)

    data = service.location('college')
    assert data['occupancy'] == 21
    assert data['history'] == [15, 16, 21]
    assert data['prediction'] == 17


def test_unknown_location_leaves_registry_unchanged(service):
    before = service.snapshot()

    with pytest.raises(UnknownLocation):
        service.report_wifi('nowhere', 5)

    assert service.snapshot() == before


@pytest.mark.parametrize('call', [
    lambda s: s.report_wifi(None, 5),
    lambda s: s.report_wifi('college', None),
    lambda s: s.report_check_in(''),
    lambda s: s.report_manual('college', None),
    lambda s: s.add_location(None, 1.0, 2.0),
    lambda s: s.add_location('Gate', None, 2.0),
    lambda s: s.add_location('Gate', 1.0, ''),
])
def test_missing_fields(service, call):
    with pytest.raises(MissingFields):
        call(service)


@pytest.mark.parametrize('call', [
    lambda s: s.report_wifi('college', -1),
    lambda s: s.report_wifi('college', 'lots'),
    lambda s: s.report_wifi('college', 2.5),
    lambda s: s.report_manual('college', True),
    lambda s: s.report_check_in(['college']),
    lambda s: s.add_location('Gate', 'north', 2.0),
    lambda s: s.add_location('Gate', 100.0, 2.0),
    lambda s: s.add_location(42, 1.0, 2.0),
])
def test_invalid_values(service, call):
    with pytest.raises(InvalidValue):
        call(service)
    assert all(data['history'] == [] for data in service.snapshot().values())


def test_numeric_strings_are_accepted(service):
    service.report_wifi('library', '12')
    service.report_manual('library', 3.0)
    assert service.location('library')['history'] == [12, 15]


def test_add_location_then_report(service):
    assert service.add_location('Main Gate', 12.97, 77.59) is True
    service.report_check_in('Main Gate')

    data = service.location('Main Gate')
    assert data['coords'] == [12.97, 77.59]
    assert data['checkIns'] == 1


def test_add_location_accepts_zero_coordinates(service):
    assert service.add_location('Null Island', 0, 0) is True


def test_add_existing_location_is_a_quiet_success(service):
    service.report_wifi('college', 9)

    assert service.add_location('college', 1.0, 1.0) is False

    data = service.location('college')
    assert data['coords'] == [12.9719, 77.5946]
    assert data['history'] == [9]


def test_subscriber_gets_snapshot_then_updates(service):
    service.report_wifi('canteen', 4)
    subscription = service.subscribe()

    service.report_check_in('canteen')

    init = subscription.get(timeout=0)
    assert init.name == INIT_EVENT
    assert init.payload['canteen']['history'] == [4]
    assert init.payload['canteen']['prediction'] == 4

    update = subscription.get(timeout=0)
    assert update.name == UPDATE_EVENT
    assert update.payload['data']['history'] == [4, 5]
    assert subscription.get(timeout=0) is None


def test_snapshot_is_not_broadcast(service):
    existing = service.subscribe()
    service.subscribe()

    existing.get(timeout=0)
    assert existing.get(timeout=0) is None


def test_unsubscribed_client_receives_nothing(service):
    subscription = service.subscribe()
    subscription.get(timeout=0)
    service.unsubscribe(subscription)

    service.report_check_in('college')

    assert subscription.get(timeout=0) is None
    assert service.stats['stream']['subscribers'] == 0


def test_location_analytics(service):
    for value in (2, 4, 6, 8, 10):
        service.report_wifi('library', value)

    analytics = service.location_analytics()['library']
    assert analytics['trend'] == 'increasing'
    assert analytics['prediction'] == 6
    assert analytics['level'] == 'low'
    assert analytics['samples'] == 5
    assert service.location_analytics()['college']['trend'] == 'unknown'


def test_large_integer_counts_are_stored_exactly(service):
    service.report_wifi('college', 2 ** 53 + 1)
    assert service.location('college')['wifiCount'] == 2 ** 53 + 1


@pytest.mark.parametrize('call', [
    lambda s: s.report_wifi('college', 10 ** 400),
    lambda s: s.report_manual('college', 2 ** 63),
    lambda s: s.report_manual('college', '1e400'),
    lambda s: s.add_location('Gate', 10 ** 400, 2.0),
])
def test_oversized_numbers_are_invalid(service, call):
    with pytest.raises(InvalidValue):
        call(service)
    assert service.location('college')['history'] == []


def test_concurrent_check_ins_are_atomic():
    threads_count, per_thread = 8, 200
    total = threads_count * per_thread
    service = CrowdService(queue_size=total + 1)
    subscription = service.subscribe()
    subscription.get(timeout=0)

    def worker():
        for _ in range(per_thread):
            service.report_check_in('college')

    workers = [threading.Thread(target=worker) for _ in range(threads_count)]
    for thread in workers:
        thread.start()
    for thread in workers:
        thread.join()

    data = service.location('college')
    assert data['checkIns'] == total
    assert data['history'][-1] == data['occupancy']
    assert data['history'] == list(range(total - 19, total + 1))

    seen = []
    event = subscription.get(timeout=0)
    while event is not None:
        assert event.payload['data']['history'][-1] == event.payload['data']['occupancy']
        seen.append(event.payload['data']['checkIns'])
        event = subscription.get(timeout=0)
    assert seen == list(range(1, total + 1))


def test_summary_stays_consistent_during_mutations():
    service = CrowdService(
        seed_locations=[SeedLocation('hall', 'Hall', (1.0, 2.0))],
        queue_size=1,
    )
    stop = threading.Event()

    def worker():
        while not stop.is_set():
            service.report_check_in('hall')

    thread = threading.Thread(target=worker)
    thread.start()
    try:
        for _ in range(200):
            summary = service.summary()
            occupancy = summary['occupancy']['total']
            assert summary['by_level'][classify_level(occupancy).value] == 1
    finally:
        stop.set()
        thread.join()
