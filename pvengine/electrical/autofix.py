"""Inverter selection search that makes a project wire up cleanly."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Any, Optional

from pvengine.catalog.library import EquipmentCatalog
from pvengine.project import Project, SystemConfig

from .strings import verify_project, voc_cold

logger = logging.getLogger(__name__)

# Target DC/AC ratios when sizing the inverter count.
SAME_MODEL_DC_AC: float = 1.1
ALTERNATIVE_DC_AC: float = 1.2

# An inverter must hold at least this many cold panels in series.
MIN_STRING_LENGTH: int = 5

MAX_INVERTER_UNITS: int = 20


@dataclass(frozen=True)
class FixSuggestion:
    config: SystemConfig
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "panel_id": self.config.panel_id,
            "inverter_id": self.config.inverter_id,
            "inverter_count": self.config.inverter_count,
            "battery_id": self.config.battery_id,
            "battery_count": self.config.battery_count,
            "reason": self.reason,
        }


def _units_for(dc_kw: float, ac_kw: float, target_ratio: float) -> int:
    if ac_kw <= 0:
        return 1
    return max(1, int(math.ceil(dc_kw / (ac_kw * target_ratio))))


def find_optimal_configuration(
    project: Project,
    catalog: EquipmentCatalog,
) -> Optional[FixSuggestion]:
    """Suggest an inverter model and count under which the project verifies.

    1. Re-size the current model to a DC/AC ratio of about 1.1.  This is
       only offered when it changes the count.
    2. Otherwise scan every catalog inverter that can hold at least
       :data:`MIN_STRING_LENGTH` cold panels in series, starting from a
       DC/AC ratio of about 1.2 and adding units up to
       :data:`MAX_INVERTER_UNITS`.  The best plan has the fewest units,
       then the lowest total price, then the earliest catalog position.

    Returns ``None`` when the panel is unknown or nothing verifies.
    """
    cfg = project.system_config
    panel = catalog.find_panel(cfg.panel_id)
    if panel is None:
        return None

    dc_kw = project.total_panels * panel.power_kw

    current = catalog.find_inverter(cfg.inverter_id)
    if current is not None:
        qty = _units_for(dc_kw, current.max_power_kw, SAME_MODEL_DC_AC)
        if qty != cfg.inverter_count:
            candidate = cfg.with_inverter(current.id, qty)
            if verify_project(project.with_system_config(candidate), catalog).valid:
                logger.debug("Fix: resize %s to %d units", current.id, qty)
                return FixSuggestion(
                    config=candidate,
                    reason=(
                        f"Quantity adjustment: {qty}x {current.model} to handle "
                        f"the array power and voltage."
                    ),
                )

    v_cold = voc_cold(panel)
    best: Optional[tuple[int, float, int, SystemConfig]] = None

    for position, inverter in enumerate(catalog.inverters):
        if inverter.max_dc_voltage < v_cold * MIN_STRING_LENGTH:
            continue
        start = _units_for(dc_kw, inverter.max_power_kw, ALTERNATIVE_DC_AC)
        for qty in range(start, MAX_INVERTER_UNITS + 1):
            candidate = cfg.with_inverter(inverter.id, qty)
            if not verify_project(project.with_system_config(candidate), catalog).valid:
                continue
            key = (qty, inverter.price * qty, position, candidate)
            if best is None or key[:3] < best[:3]:
                best = key
            break

    if best is None:
        logger.info("No inverter in the catalog verifies for project '%s'", project.name)
        return None

    qty, _price, _pos, config = best
    model = catalog.inverter(config.inverter_id).model
    return FixSuggestion(
        config=config,
        reason=f"Recommended inverter: {qty}x {model} (electrically compatible).",
    )


suggest_fix = find_optimal_configuration
