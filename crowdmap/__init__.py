"""
CrowdMap Backend Package.

Real-time crowd density dashboard backend built with Flask and NumPy.

Modules:
    api/         REST commands, snapshot queries and the SSE update stream
    models/      LocationRecord and the rolling HistoryTracker
    analytics/   Moving-average forecast, trends and summaries
    sync/        Broadcaster and per-client subscriber queues
    simulation/  Background check-in traffic per location
    registry.py  Thread-safe in-memory location registry
    service.py   Coordinating service with input validation
    config.py    Centralized configuration from environment variables
"""

__version__ = '1.0.0'
