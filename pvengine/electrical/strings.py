"""
String configuration solver and electrical verification.

Panels are shared evenly across inverter units, then across each unit's
MPPT inputs.  Every MPPT target is split into ``num_strings`` parallel
strings of ``panels_per_string`` modules such that

* the cold string Voc stays below the inverter's max DC voltage,
* the hot string Vmp stays above the MPPT window minimum, and
* the parallel Isc stays below the max input current per MPPT.

Infeasible layouts are reported as data (``errors`` / ``warnings``),
never raised.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Sequence

from pvengine.catalog.library import EquipmentCatalog
from pvengine.catalog.models import InverterSpec, PanelSpec
from pvengine.project import Project, RoofSegment, total_panels

from . import protection

logger = logging.getLogger(__name__)

# ======================================================================
# Design temperatures
# ======================================================================

STC_CELL_TEMP: float = 25.0
MIN_CELL_TEMP: float = -10.0   # coldest morning, open circuit
MAX_CELL_TEMP: float = 70.0    # hot cell under load

DC_AC_RATIO_HIGH: float = 1.4
DC_AC_RATIO_LOW: float = 0.7


def voc_cold(panel: PanelSpec) -> float:
    """Module Voc at the minimum design cell temperature (V)."""
    return panel.voc * (1.0 + abs(panel.temp_coeff_voc) / 100.0 * (STC_CELL_TEMP - MIN_CELL_TEMP))


def vmp_hot(panel: PanelSpec) -> float:
    """Module Vmp at the maximum design cell temperature (V)."""
    return panel.vmp * (1.0 - abs(panel.temp_coeff_voc) / 100.0 * (MAX_CELL_TEMP - STC_CELL_TEMP))


# ======================================================================
# Results
# ======================================================================


@dataclass
class StringConfig:
    """Wiring of one MPPT input: ``num_strings`` parallel strings."""

    inverter_index: int
    mppt_id: int
    num_strings: int
    panels_per_string: int
    voc_string: float   # cold open-circuit voltage of one string (V)
    vmp_string: float   # STC maximum-power voltage of one string (V)
    isc_string: float   # total short-circuit current on the MPPT (A)
    imp_string: float   # total maximum-power current on the MPPT (A)
    power_kw: float

    @property
    def panels(self) -> int:
        return self.num_strings * self.panels_per_string

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ElectricalVerification:
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    strings: list[StringConfig] = field(default_factory=list)
    metrics: dict[str, float] = field(default_factory=dict)
    cables: dict[str, float] = field(default_factory=dict)
    protection: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "strings": [s.to_dict() for s in self.strings],
            "metrics": dict(self.metrics),
            "cables": dict(self.cables),
            "protection": dict(self.protection),
        }


@dataclass(frozen=True)
class StringLimits:
    max_series: int
    min_series: int
    max_parallel: int


def string_limits(panel: PanelSpec, inverter: InverterSpec) -> StringLimits:
    """Series and parallel bounds for *panel* on one MPPT of *inverter*.

    A panel without a positive cold Voc or hot Vmp gets bounds no series
    length can meet (``min_series > max_series``).
    """
    v_cold = voc_cold(panel)
    v_hot = vmp_hot(panel)
    max_series = int(math.floor(inverter.max_dc_voltage / v_cold)) if v_cold > 0 else 0
    if v_hot > 0:
        min_series = max(1, int(math.ceil(inverter.mppt_min_voltage / v_hot)))
    else:
        min_series = max(1, max_series + 1)
    max_parallel = int(math.floor(inverter.max_input_current / panel.isc)) if panel.isc > 0 else 0
    return StringLimits(max_series=max_series, min_series=min_series, max_parallel=max(1, max_parallel))


def split_evenly(total: int, parts: int) -> list[int]:
    """Split *total* into *parts* integers differing by at most one, larger first."""
    if parts <= 0:
        return []
    base, remainder = divmod(max(0, total), parts)
    return [base + 1 if k < remainder else base for k in range(parts)]


def solve_mppt(target: int, limits: StringLimits) -> Optional[tuple[int, int]]:
    """Choose ``(num_strings, panels_per_string)`` for one MPPT target.

    Scans ``num_strings`` ascending and takes the first exact divisor whose
    series length fits the voltage window.  Otherwise falls back to the
    longest admissible series length with as many parallel strings as
    fit, leaving the rest unassigned.  ``None`` when not even one string
    can be formed.
    """
    if target <= 0:
        return None

    for num_strings in range(1, limits.max_parallel + 1):
        if target % num_strings:
            continue
        length = target // num_strings
        if limits.min_series <= length <= limits.max_series:
            return num_strings, length

    length = min(target, limits.max_series)
    if length < limits.min_series:
        return None
    return min(limits.max_parallel, target // length), length


# ======================================================================
# Verification
# ======================================================================


def _empty_metrics(total_dc_kw: float = 0.0, total_ac_kw: float = 0.0) -> dict[str, float]:
    return {
        "total_dc_kw": total_dc_kw,
        "total_ac_kw": total_ac_kw,
        "dc_ac_ratio": 0.0,
        "max_string_voltage": 0.0,
        "max_string_current": 0.0,
        "unassigned_panels": 0,
    }


def verify_electrical(
    roof_segments: Sequence[RoofSegment],
    panel: Optional[PanelSpec],
    inverter: Optional[InverterSpec],
    inverter_count: int,
    *,
    cable_dc_meters: float = 20.0,
    cable_ac_meters: float = 10.0,
) -> ElectricalVerification:
    """Build and check a string plan for the selected equipment.

    Parameters
    ----------
    roof_segments : sequence of RoofSegment
        Only the panel counts are used.
    panel, inverter : PanelSpec, InverterSpec or None
        Selected equipment; a missing item makes the plan invalid.
    inverter_count : int
        Number of identical inverter units sharing the panels.
    cable_dc_meters, cable_ac_meters : float
        One-way run lengths for the voltage-drop check.

    Returns
    -------
    ElectricalVerification
        ``valid`` is ``True`` only when ``errors`` is empty.
    """
    if panel is None or inverter is None:
        return ElectricalVerification(
            valid=False,
            errors=["No equipment selected"],
            metrics=_empty_metrics(),
            cables={"dc_string_mm2": 0.0, "ac_mm2": 0.0, "dc_voltage_drop_pct": 0.0, "ac_voltage_drop_pct": 0.0},
            protection={"dc_fuse_a": 0, "ac_breaker_a": 0},
        )

    errors: list[str] = []
    warnings: list[str] = []
    strings: list[StringConfig] = []

    count = max(0, int(inverter_count))
    n_panels = total_panels(roof_segments)
    total_dc_kw = n_panels * panel.power_kw
    total_ac_kw = inverter.max_power_kw * count
    dc_ac_ratio = total_dc_kw / total_ac_kw if total_ac_kw > 0 else 0.0

    limits = string_limits(panel, inverter)
    v_cold = voc_cold(panel)
    v_hot = vmp_hot(panel)

    # ---- Stringing ----
    if count < 1:
        errors.append("At least one inverter is required")
    elif v_cold <= 0 or v_hot <= 0:
        errors.append(
            f"Panel voltage data is unusable (cold Voc {v_cold:.1f} V, hot Vmp {v_hot:.1f} V); "
            f"check Voc, Vmp and the temperature coefficient"
        )
    elif panel.isc > inverter.max_input_current:
        errors.append(
            f"Panel current ({panel.isc:g} A) exceeds the inverter max input "
            f"current ({inverter.max_input_current:g} A per MPPT)"
        )
    else:
        for inv_idx, inverter_panels in enumerate(split_evenly(n_panels, count)):
            for mppt_idx, target in enumerate(split_evenly(inverter_panels, inverter.num_mppts), start=1):
                plan = solve_mppt(target, limits)
                if plan is None:
                    continue
                num_strings, length = plan
                strings.append(
                    StringConfig(
                        inverter_index=inv_idx,
                        mppt_id=mppt_idx,
                        num_strings=num_strings,
                        panels_per_string=length,
                        voc_string=length * v_cold,
                        vmp_string=length * panel.vmp,
                        isc_string=num_strings * panel.isc,
                        imp_string=num_strings * panel.imp,
                        power_kw=num_strings * length * panel.power_kw,
                    )
                )

    unassigned = n_panels - sum(s.panels for s in strings)
    if unassigned > 0:
        errors.append(
            f"{unassigned} panels could not be connected: voltage/current "
            f"limits reached or no feasible configuration"
        )

    # ---- Validation ----
    max_voltage = 0.0
    max_current = 0.0
    for s in strings:
        tag = f"Inverter {s.inverter_index + 1} MPPT {s.mppt_id}"
        if s.voc_string > inverter.max_dc_voltage:
            errors.append(f"{tag}: voltage {s.voc_string:.0f} V exceeds limit {inverter.max_dc_voltage:g} V")
        if s.isc_string > inverter.max_input_current:
            errors.append(f"{tag}: current {s.isc_string:.1f} A exceeds limit {inverter.max_input_current:g} A")
        if s.panels_per_string * v_hot < inverter.start_voltage:
            warnings.append(
                f"{tag}: hot string voltage {s.panels_per_string * v_hot:.0f} V is below "
                f"the start voltage {inverter.start_voltage:g} V; late start-up likely"
            )
        max_voltage = max(max_voltage, s.voc_string)
        max_current = max(max_current, s.isc_string)

    if total_ac_kw > 0:
        if dc_ac_ratio > DC_AC_RATIO_HIGH:
            warnings.append(f"High DC/AC ratio ({dc_ac_ratio:.2f}): severe clipping")
        if dc_ac_ratio < DC_AC_RATIO_LOW:
            warnings.append(f"Oversized inverter (DC/AC ratio {dc_ac_ratio:.2f})")

    # ---- Cables & protection ----
    dc_mm2 = protection.dc_string_section(panel.isc)
    ac_design = protection.ac_current_per_inverter(inverter) * protection.SAFETY_FACTOR
    ac_mm2 = protection.ac_section(ac_design)

    dc_drop = 0.0
    if strings:
        dc_drop = max(
            protection.voltage_drop_pct(
                voltage=s.vmp_string,
                current=panel.imp,
                length_m=cable_dc_meters,
                section_mm2=dc_mm2,
            )
            for s in strings
        )
    ac_drop = protection.ac_voltage_drop_pct(inverter, cable_ac_meters, ac_mm2)
    if dc_drop > protection.MAX_VOLTAGE_DROP_PCT:
        warnings.append(
            f"DC voltage drop {dc_drop:.2f}% exceeds {protection.MAX_VOLTAGE_DROP_PCT:g}%; use a larger section"
        )
    if ac_drop > protection.MAX_VOLTAGE_DROP_PCT:
        warnings.append(
            f"AC voltage drop {ac_drop:.2f}% exceeds {protection.MAX_VOLTAGE_DROP_PCT:g}%; use a larger section"
        )

    metrics = _empty_metrics(total_dc_kw, total_ac_kw)
    metrics.update(
        dc_ac_ratio=dc_ac_ratio,
        max_string_voltage=max_voltage,
        max_string_current=max_current,
        unassigned_panels=max(0, unassigned),
    )

    return ElectricalVerification(
        valid=not errors,
        errors=errors,
        warnings=warnings,
        strings=strings,
        metrics=metrics,
        cables={
            "dc_string_mm2": dc_mm2,
            "ac_mm2": ac_mm2,
            "dc_voltage_drop_pct": dc_drop,
            "ac_voltage_drop_pct": ac_drop,
        },
        protection={
            "dc_fuse_a": protection.dc_fuse_rating(panel.isc),
            "ac_breaker_a": protection.ac_breaker_rating(ac_design),
        },
    )


def verify_project(project: Project, catalog: EquipmentCatalog) -> ElectricalVerification:
    """Verify the project's selected equipment; unknown ids count as not selected."""
    cfg = project.system_config
    return verify_electrical(
        project.roof_segments,
        catalog.find_panel(cfg.panel_id),
        catalog.find_inverter(cfg.inverter_id),
        cfg.inverter_count,
        cable_dc_meters=cfg.cable_dc_meters,
        cable_ac_meters=cfg.cable_ac_meters,
    )
