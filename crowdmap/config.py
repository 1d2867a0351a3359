"""
Configuration management for CrowdMap.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic numbers scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class SeedLocation:
    """A location known at process start."""
    key: str
    name: str
    coords: Tuple[float, float]


# Campus locations present on every boot
DEFAULT_SEED_LOCATIONS: Tuple[SeedLocation, ...] = (
    SeedLocation('college', 'College Grounds', (12.9719, 77.5946)),
    SeedLocation('library', 'Library', (12.9725, 77.5950)),
    SeedLocation('canteen', 'Canteen', (12.9710, 77.5940)),
)


@dataclass(frozen=True)
class HistoryConfig:
    """Rolling occupancy history settings."""
    capacity: int = int(os.getenv('HISTORY_CAPACITY', '20'))


@dataclass(frozen=True)
class PredictionConfig:
    """Moving-average forecast settings."""
    window: int = int(os.getenv('PREDICTION_WINDOW', '5'))


@dataclass(frozen=True)
class SimulationConfig:
    """Simulated check-in traffic settings."""
    enabled: bool = os.getenv('SIMULATION_ENABLED', '1') == '1'
    startup_delay: float = float(os.getenv('SIMULATION_STARTUP_DELAY', '20'))
    min_interval: float = float(os.getenv('SIMULATION_MIN_INTERVAL', '3'))
    max_interval: float = float(os.getenv('SIMULATION_MAX_INTERVAL', '8'))

    # Crowd flow shape
    enter_probability: float = 0.6
    max_change: int = 3


@dataclass(frozen=True)
class StreamConfig:
    """Live update stream settings."""
    queue_size: int = int(os.getenv('STREAM_QUEUE_SIZE', '100'))
    keepalive_seconds: float = float(os.getenv('STREAM_KEEPALIVE_SECONDS', '15'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    history: HistoryConfig
    prediction: PredictionConfig
    simulation: SimulationConfig
    stream: StreamConfig

    seed_locations: Tuple[SeedLocation, ...] = field(default=DEFAULT_SEED_LOCATIONS)

    # Flask settings
    secret_key: str = 'dev-key-change-in-prod'
    debug: bool = False
    port: int = 3000


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        history=HistoryConfig(),
        prediction=PredictionConfig(),
        simulation=SimulationConfig(),
        stream=StreamConfig(),
        seed_locations=DEFAULT_SEED_LOCATIONS,
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
        port=int(os.getenv('PORT', '3000')),
    )


# Singleton instance
config = load_config()
