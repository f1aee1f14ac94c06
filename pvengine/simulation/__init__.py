"""Annual energy-balance simulation, scenario comparison and advisories."""

from .advisories import Advisory, analyze_results
from .scenarios import Scenario, ScenarioOutcome, build_scenarios, run_scenarios
from .simulator import (
    SimulationResult,
    monthly_totals,
    resolve_inputs,
    run_project,
    simulate_year,
)

__all__ = [
    "Advisory",
    "Scenario",
    "ScenarioOutcome",
    "SimulationResult",
    "analyze_results",
    "build_scenarios",
    "monthly_totals",
    "resolve_inputs",
    "run_project",
    "run_scenarios",
    "simulate_year",
]
