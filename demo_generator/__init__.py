"""
Seeded Demo Scenario Generator.

Produces realistic, reproducible chat activity for the collaboration
graph: healthy, siloed and overloaded organisations.
"""

from .exporter import export_scenario, load_exported_events
from .scenario_seeder import (
    SeededScenario,
    UnknownScenarioError,
    list_available_scenarios,
    seed_scenario,
)

__all__ = [
    "SeededScenario",
    "UnknownScenarioError",
    "list_available_scenarios",
    "seed_scenario",
    "export_scenario",
    "load_exported_events",
]
