import pytest

from crowdmap.errors import InvalidValue, UnknownLocation
from crowdmap.models import HistoryTracker
from crowdmap.registry import LocationRegistry


def test_seeded_registry(registry):
    assert sorted(registry.keys()) == ['canteen', 'college', 'library']
    assert registry.get('college').name == 'College Grounds'
    assert len(registry) == 3
    assert 'library' in registry


def test_get_unknown_raises(registry):
    with pytest.raises(UnknownLocation):
        registry.get('nowhere')


def test_list_all_is_a_copy(registry):
    everything = registry.list_all()
    everything.pop('college')
    assert 'college' in registry


def test_create_is_idempotent(registry):
    registry.set_wifi_count('college', 7)

    created = registry.create('Somewhere Else', (1.0, 2.0), key='college')

    assert created is False
    record = registry.get('college')
    assert record.name == 'College Grounds'
    assert record.coords == (12.9719, 77.5946)
    assert record.wifi_count == 7
    assert list(record.history) == [7]


def test_create_defaults_key_to_name():
    registry = LocationRegistry()
    assert registry.create('Main Gate', (12.97, 77.59)) is True
    assert registry.get('Main Gate').coords == (12.97, 77.59)


def test_create_rejects_bad_coords():
    registry = LocationRegistry()
    with pytest.raises(InvalidValue):
        registry.create('Pole', (95.0, 0.0))
    assert len(registry) == 0


def test_every_mutation_samples_current_occupancy(registry):
    registry.set_wifi_count('college', 15)
    registry.increment_check_ins('college', 1)
    registry.set_manual('college', 5)

    record = registry.get('college')
    assert record.occupancy == 21
    assert list(record.history) == [15, 16, 21]
    assert record.history[-1] == record.wifi_count + record.check_ins + record.manual


def test_check_ins_saturate_at_zero(registry):
    registry.increment_check_ins('library', 1)

    counts = []
    for _ in range(3):
        registry.increment_check_ins('library', -1)
        counts.append(registry.get('library').check_ins)

    assert counts == [0, 0, 0]
    assert list(registry.get('library').history) == [1, 0, 0, 0]


def test_mutating_unknown_location_changes_nothing(registry):
    before = registry.snapshot()

    with pytest.raises(UnknownLocation):
        registry.set_wifi_count('nowhere', 5)
    with pytest.raises(UnknownLocation):
        registry.increment_check_ins('nowhere', 1)
    with pytest.raises(UnknownLocation):
        registry.set_manual('nowhere', 5)

    assert registry.snapshot() == before
    assert registry.stats['mutations'] == 0


@pytest.mark.parametrize('value', [-1, 2.5, '3', True, None])
def test_counters_must_be_non_negative_ints(registry, value):
    with pytest.raises(InvalidValue):
        registry.set_wifi_count('college', value)
    assert list(registry.get('college').history) == []


def test_history_is_bounded():
    registry = LocationRegistry(HistoryTracker(capacity=20))
    registry.create('Hall', (0.0, 0.0))
    for value in range(25):
        registry.set_manual('Hall', value)

    assert list(registry.get('Hall').history) == list(range(5, 25))


def test_callbacks_run_after_sample(registry):
    seen = []
    registry.add_mutation_callback(
        lambda key: seen.append((key, list(registry.get(key).history)))
    )

    registry.set_wifi_count('canteen', 4)

    assert seen == [('canteen', [4])]


def test_failing_callback_does_not_fail_mutation(registry):
    def explode(key):
        raise RuntimeError('boom')

    registry.add_mutation_callback(explode)
    history = registry.set_manual('canteen', 2)

    assert history == [2]
    assert registry.get('canteen').manual == 2
