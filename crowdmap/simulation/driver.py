"""
Simulated crowd flow.

Emulates organic movement by nudging each location's check-in count
up or down at irregular intervals. Every location runs on its own
background thread with its own interval and random generator; the
threads share nothing but the registry, whose lock keeps each tick's
mutate -> sample -> broadcast step atomic.

Per-location lifecycle:
1. DORMANT: waiting out the startup delay
2. ACTIVE:  one tick every ``interval`` seconds until shutdown
"""

import logging
import random
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from crowdmap.config import config
from crowdmap.errors import UnknownLocation
from crowdmap.registry import LocationRegistry

logger = logging.getLogger(__name__)


class SimulationState(str, Enum):
    DORMANT = 'dormant'
    ACTIVE = 'active'


@dataclass
class LocationTimer:
    """Independent timer state for one location."""
    key: str
    interval: float
    rng: random.Random
    state: SimulationState = SimulationState.DORMANT
    ticks: int = 0
    thread: Optional[threading.Thread] = field(default=None, repr=False)


class SimulationDriver:
    """
    Runs one background check-in simulation per location.

    Threads are daemons; ``stop()`` wakes and ends all of them at once.
    Individual timers cannot be cancelled.
    """

    def __init__(
        self,
        registry: LocationRegistry,
        startup_delay: Optional[float] = None,
        min_interval: Optional[float] = None,
        max_interval: Optional[float] = None,
        enter_probability: Optional[float] = None,
        max_change: Optional[int] = None,
        rng_factory: Callable[[], random.Random] = random.Random,
    ):
        sim = config.simulation
        self.registry = registry
        self.startup_delay = sim.startup_delay if startup_delay is None else startup_delay
        self.min_interval = sim.min_interval if min_interval is None else min_interval
        self.max_interval = sim.max_interval if max_interval is None else max_interval
        self.enter_probability = sim.enter_probability if enter_probability is None else enter_probability
        self.max_change = sim.max_change if max_change is None else max_change
        self.rng_factory = rng_factory

        if self.max_interval < self.min_interval:
            raise ValueError('max_interval must not be below min_interval')

        self._timers: Dict[str, LocationTimer] = {}
        self._stop_event = threading.Event()
        self._running = False

    def add_location(self, key: str) -> LocationTimer:
        """
        Create the timer for ``key`` with its own generator and interval.

        The interval is drawn once from [min_interval, max_interval).
        """
        if key not in self.registry:
            raise UnknownLocation(key)

        if key in self._timers:
            return self._timers[key]

        rng = self.rng_factory()
        interval = self.min_interval + rng.random() * (self.max_interval - self.min_interval)
        timer = LocationTimer(key=key, interval=interval, rng=rng)
        self._timers[key] = timer
        return timer

    def tick(self, key: str) -> int:
        """
        Apply one random perturbation to ``key``.

        Draws a change of 1..max_change people and a direction that is
        "enter" with probability ``enter_probability``. Returns the new
        check-in count.
        """
        timer = self._timers.get(key) or self.add_location(key)
        rng = timer.rng

        change = rng.randint(1, self.max_change)
        direction = 1 if rng.random() < self.enter_probability else -1

        with self.registry.atomic():
            self.registry.increment_check_ins(key, change * direction)
            total = self.registry.get(key).check_ins
        timer.ticks += 1

        logger.info(
            f'{"Entered" if direction == 1 else "Left"} {change} user(s) at {key}. '
            f'Total: {total}'
        )
        return total

    def _run(self, timer: LocationTimer) -> None:
        if self._stop_event.wait(self.startup_delay):
            return

        timer.state = SimulationState.ACTIVE
        logger.debug(f'Simulation active for {timer.key} (interval={timer.interval:.1f}s)')

        while not self._stop_event.wait(timer.interval):
            try:
                self.tick(timer.key)
            except Exception as e:
                logger.error(f'Simulation tick error at {timer.key}: {e}')

    def start(self, keys: Optional[Iterable[str]] = None) -> None:
        """Start one background thread per location (default: all known)."""
        if self._running:
            logger.warning('Simulation already running')
            return

        self._stop_event.clear()
        self._running = True

        for key in (self.registry.keys() if keys is None else keys):
            timer = self.add_location(key)
            timer.thread = threading.Thread(
                target=self._run,
                args=(timer,),
                name=f'simulation-{key}',
                daemon=True,
            )
            timer.thread.start()

        logger.info(
            f'Simulation started for {len(self._timers)} locations '
            f'(startup delay {self.startup_delay}s)'
        )

    def stop(self) -> None:
        """Stop all simulation threads."""
        self._running = False
        self._stop_event.set()
        for timer in self._timers.values():
            if timer.thread:
                timer.thread.join(timeout=5)
        logger.info('Simulation stopped')

    @property
    def running(self) -> bool:
        return self._running

    @property
    def stats(self) -> dict:
        """Get simulation statistics."""
        return {
            'running': self._running,
            'startup_delay': self.startup_delay,
            'locations': {
                key: {
                    'state': timer.state.value,
                    'interval': round(timer.interval, 2),
                    'ticks': timer.ticks,
                }
                for key, timer in list(self._timers.items())
            },
        }
