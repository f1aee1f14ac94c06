"""Equipment scenario generation and comparison.

Each scenario is a complete, isolated copy of the project with a
different equipment selection.  Scenarios share the resolved climate and
load curve but nothing mutable, so they can be simulated as a plain map,
either serially or across worker processes.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from pvengine.catalog.library import EquipmentCatalog
from pvengine.project import Project
from pvengine.weather.climate import ClimateRecord

from .simulator import SimulationResult, run_project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scenario:
    key: str
    label: str
    description: str
    project: Project


@dataclass
class ScenarioOutcome:
    """A simulated scenario with headline figures for comparison."""

    scenario: Scenario
    result: SimulationResult
    panels: int
    inverter: str
    inverter_count: int
    batteries: int
    power_kw: float

    def to_dict(self) -> dict[str, Any]:
        cfg = self.scenario.project.system_config
        return {
            "key": self.scenario.key,
            "label": self.scenario.label,
            "description": self.scenario.description,
            "panel_id": cfg.panel_id,
            "inverter_id": cfg.inverter_id,
            "battery_id": cfg.battery_id,
            "panels": self.panels,
            "inverter": self.inverter,
            "inverter_count": self.inverter_count,
            "batteries": self.batteries,
            "power_kw": round(self.power_kw, 2),
            "total_production_kwh": round(self.result.total_production_kwh, 2),
            "total_import_kwh": round(self.result.total_import_kwh, 2),
            "total_export_kwh": round(self.result.total_export_kwh, 2),
            "self_consumption_ratio": round(self.result.self_consumption_ratio, 4),
            "autonomy_ratio": round(self.result.autonomy_ratio, 4),
        }


def build_scenarios(project: Project, catalog: EquipmentCatalog) -> list[Scenario]:
    """Derive the standard comparison set from *project*.

    - ``high_efficiency``: most efficient panel with the smallest battery.
    - ``cost_reduced``: cheapest panel per watt, no battery.
    - ``autonomy``: current panel with the largest battery.
    - ``balanced``: current panel with the smallest battery.

    Battery-based scenarios are skipped when the catalog has no battery.
    """
    base = project.system_config
    scenarios: list[Scenario] = []

    smallest_battery = min(catalog.batteries, key=lambda b: b.capacity_kwh, default=None)
    largest_battery = max(catalog.batteries, key=lambda b: b.capacity_kwh, default=None)

    if catalog.panels and smallest_battery is not None:
        best = max(catalog.panels, key=lambda p: p.efficiency)
        scenarios.append(
            Scenario(
                key="high_efficiency",
                label="High efficiency + battery",
                description=f"{best.manufacturer} {best.model} panels with storage for the evening.",
                project=project.with_system_config(
                    replace(base, panel_id=best.id, battery_id=smallest_battery.id, battery_count=1)
                ),
            )
        )

    priced = [p for p in catalog.panels if p.price > 0 and p.power_w > 0]
    if priced:
        budget = min(priced, key=lambda p: p.price / p.power_w)
        scenarios.append(
            Scenario(
                key="cost_reduced",
                label="Cost reduced",
                description=f"{budget.manufacturer} {budget.model} panels without storage, fastest payback.",
                project=project.with_system_config(
                    replace(base, panel_id=budget.id, battery_id=None, battery_count=0)
                ),
            )
        )

    if largest_battery is not None:
        scenarios.append(
            Scenario(
                key="autonomy",
                label="Energy independence",
                description=f"{largest_battery.manufacturer} {largest_battery.model} for maximum autonomy.",
                project=project.with_system_config(
                    replace(base, battery_id=largest_battery.id, battery_count=1)
                ),
            )
        )

    if smallest_battery is not None:
        scenarios.append(
            Scenario(
                key="balanced",
                label="Balanced",
                description="Current panels with a compact hybrid battery.",
                project=project.with_system_config(
                    replace(base, battery_id=smallest_battery.id, battery_count=1)
                ),
            )
        )

    return scenarios


def _simulate_scenario(
    scenario: Scenario,
    catalog: EquipmentCatalog,
    climate: ClimateRecord,
    load_curve: NDArray[np.float64],
) -> ScenarioOutcome:
    project = scenario.project
    cfg = project.system_config
    result = run_project(project, catalog, climate=climate, load_curve=load_curve)
    panel = catalog.panel(cfg.panel_id)
    inverter = catalog.inverter(cfg.inverter_id)
    return ScenarioOutcome(
        scenario=scenario,
        result=result,
        panels=project.total_panels,
        inverter=f"{inverter.manufacturer} {inverter.model}",
        inverter_count=cfg.inverter_count,
        batteries=cfg.battery_count if cfg.battery_id else 0,
        power_kw=project.total_panels * panel.power_kw,
    )


def run_scenarios(
    scenarios: Sequence[Scenario],
    catalog: EquipmentCatalog,
    climate: ClimateRecord,
    load_curve: NDArray[np.float64],
    max_workers: Optional[int] = None,
) -> list[ScenarioOutcome]:
    """Simulate every scenario against the same climate and load curve.

    ``max_workers`` of ``None``, 0 or 1 runs serially in this process;
    larger values fan out over a process pool.  Results keep the order of
    *scenarios*.
    """
    if not scenarios:
        return []

    n = len(scenarios)
    if not max_workers or max_workers <= 1 or n == 1:
        logger.debug("Running %d scenarios serially", n)
        return [_simulate_scenario(s, catalog, climate, load_curve) for s in scenarios]

    logger.debug("Running %d scenarios on %d worker processes", n, max_workers)
    with ProcessPoolExecutor(max_workers=min(max_workers, n)) as pool:
        return list(
            pool.map(
                _simulate_scenario,
                scenarios,
                [catalog] * n,
                [climate] * n,
                [load_curve] * n,
            )
        )
