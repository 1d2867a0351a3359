"""
Simulation module for CrowdMap.

Feeds synthetic check-in traffic through the same mutation path as
real reports so the map has something to show without live sources.
"""

from crowdmap.simulation.driver import LocationTimer, SimulationDriver, SimulationState

__all__ = ['LocationTimer', 'SimulationDriver', 'SimulationState']
