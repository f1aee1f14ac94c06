"""
Hourly energy-balance simulation for a grid-tied PV system.

Production is computed for every roof segment in a fully vectorised
manner (8760-element numpy arrays), summed, clipped to the inverter AC
rating, and then dispatched hour by hour against the load:

**Surplus priority:** PV -> load -> battery charge -> grid export
**Deficit priority:** PV -> battery discharge -> grid import

The battery pass is a single forward loop with no look-ahead.  The
simulator never raises for physically empty systems (no panels, no
inverter); it returns zero-filled production instead and leaves the
rejection of invalid equipment to :mod:`pvengine.electrical`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from pvengine.battery.storage import BatteryBank
from pvengine.catalog.library import EquipmentCatalog
from pvengine.catalog.models import BatterySpec, InverterSpec, PanelSpec
from pvengine.load.load_model import resolve_load_curve
from pvengine.project import Project, RoofSegment, total_panels
from pvengine.solar.geometry import (
    SHADING_MISMATCH_FACTOR,
    electrical_shading_loss,
    incident_radiation,
    shading_factor,
    sun_position,
)
from pvengine.weather.climate import MONTH_START_DAYS, ClimateRecord, generate_climate

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

HOURS_PER_YEAR: int = 8760

# Cabling, inverter and mismatch losses lumped into one factor.
DEFAULT_SYSTEM_LOSS: float = 0.90

# Power derate per degC of cell temperature above 25 degC.
TEMP_DERATE_PER_DEGREE: float = 0.004
STC_CELL_TEMP: float = 25.0

DEFAULT_NOCT: float = 45.0

_MONTH_START_HOURS = MONTH_START_DAYS * 24


# ======================================================================
# Result container
# ======================================================================


@dataclass
class SimulationResult:
    """Hourly series (kW, one value per hour of the year) and annual totals.

    ``battery_soc`` is in percent of usable capacity and is 0 throughout
    when there is no battery (``battery_capacity_kwh == 0``).
    ``potential_production`` is what the array would deliver without
    inter-row shading, after clipping.
    """

    production: NDArray[np.float64]
    load: NDArray[np.float64]
    grid_import: NDArray[np.float64]
    grid_export: NDArray[np.float64]
    battery_soc: NDArray[np.float64]
    battery_charge: NDArray[np.float64]
    battery_discharge: NDArray[np.float64]
    self_consumption_direct: NDArray[np.float64]
    self_consumption_battery: NDArray[np.float64]
    potential_production: NDArray[np.float64]
    installed_dc_kw: float = 0.0
    inverter_ac_kw: float = 0.0
    battery_capacity_kwh: float = 0.0
    shading_loss_kwh: float = 0.0
    clipping_loss_kwh: float = 0.0
    total_production_kwh: float = field(init=False)
    total_load_kwh: float = field(init=False)
    total_import_kwh: float = field(init=False)
    total_export_kwh: float = field(init=False)

    def __post_init__(self) -> None:
        self.total_production_kwh = float(self.production.sum())
        self.total_load_kwh = float(self.load.sum())
        self.total_import_kwh = float(self.grid_import.sum())
        self.total_export_kwh = float(self.grid_export.sum())

    @property
    def battery_charge_delta(self) -> NDArray[np.float64]:
        """Net energy into the battery each hour (charge minus discharge)."""
        return self.battery_charge - self.battery_discharge

    @property
    def self_consumption(self) -> NDArray[np.float64]:
        return self.self_consumption_direct + self.self_consumption_battery

    @property
    def self_consumption_ratio(self) -> float:
        """Share of production consumed on site: (production - export) / production."""
        if self.total_production_kwh <= 0:
            return 0.0
        return (self.total_production_kwh - self.total_export_kwh) / self.total_production_kwh

    @property
    def autonomy_ratio(self) -> float:
        """Share of load met without the grid: (load - import) / load."""
        if self.total_load_kwh <= 0:
            return 0.0
        return (self.total_load_kwh - self.total_import_kwh) / self.total_load_kwh

    @property
    def dc_ac_ratio(self) -> float:
        if self.inverter_ac_kw <= 0:
            return 0.0
        return self.installed_dc_kw / self.inverter_ac_kw

    @property
    def specific_yield(self) -> float:
        """Annual production per installed kWp (kWh/kWp)."""
        if self.installed_dc_kw <= 0:
            return 0.0
        return self.total_production_kwh / self.installed_dc_kw

    def summary(self) -> dict[str, Any]:
        """Scalar KPIs plus monthly totals, rounded for presentation."""
        return {
            "installed_dc_kw": round(self.installed_dc_kw, 3),
            "inverter_ac_kw": round(self.inverter_ac_kw, 3),
            "dc_ac_ratio": round(self.dc_ac_ratio, 3),
            "battery_capacity_kwh": round(self.battery_capacity_kwh, 3),
            "total_production_kwh": round(self.total_production_kwh, 2),
            "total_load_kwh": round(self.total_load_kwh, 2),
            "total_import_kwh": round(self.total_import_kwh, 2),
            "total_export_kwh": round(self.total_export_kwh, 2),
            "shading_loss_kwh": round(self.shading_loss_kwh, 2),
            "clipping_loss_kwh": round(self.clipping_loss_kwh, 2),
            "self_consumption_ratio": round(self.self_consumption_ratio, 4),
            "autonomy_ratio": round(self.autonomy_ratio, 4),
            "specific_yield_kwh_kwp": round(self.specific_yield, 1),
            "monthly_production_kwh": monthly_totals(self.production).round(2).tolist(),
            "monthly_load_kwh": monthly_totals(self.load).round(2).tolist(),
            "monthly_import_kwh": monthly_totals(self.grid_import).round(2).tolist(),
            "monthly_export_kwh": monthly_totals(self.grid_export).round(2).tolist(),
        }

    def hourly(self) -> dict[str, list[float]]:
        return {
            "production": self.production.tolist(),
            "load": self.load.tolist(),
            "grid_import": self.grid_import.tolist(),
            "grid_export": self.grid_export.tolist(),
            "battery_soc": self.battery_soc.tolist(),
            "self_consumption_direct": self.self_consumption_direct.tolist(),
            "self_consumption_battery": self.self_consumption_battery.tolist(),
        }


# ======================================================================
# Helpers
# ======================================================================


def _hour_of_year_vectors() -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Return ``(day_of_year, hour_of_day)`` arrays each of length 8760.

    ``day_of_year`` ranges from 1 to 365, ``hour_of_day`` from 0.5 to
    23.5 (mid-hour convention).
    """
    hours = np.arange(HOURS_PER_YEAR, dtype=np.float64)
    day_of_year = np.floor(hours / 24.0) + 1.0
    hour_of_day = (hours % 24) + 0.5
    return day_of_year, hour_of_day


def cell_temperature(
    poa: NDArray[np.float64],
    t_amb: NDArray[np.float64],
    noct: float = DEFAULT_NOCT,
) -> NDArray[np.float64]:
    """Cell temperature from the NOCT model: ``T_amb + (NOCT - 20) / 800 * POA``."""
    return np.asarray(t_amb, dtype=np.float64) + (noct - 20.0) / 800.0 * np.asarray(poa, dtype=np.float64)


def monthly_totals(series: NDArray[np.float64]) -> NDArray[np.float64]:
    """Sum an hourly 8760 series into 12 calendar-month totals."""
    series = np.asarray(series, dtype=np.float64)
    if series.shape != (HOURS_PER_YEAR,):
        raise ValueError(
            f"series must have shape ({HOURS_PER_YEAR},), got {series.shape}"
        )
    return np.add.reduceat(series, _MONTH_START_HOURS[:12])


def segment_production(
    segment: RoofSegment,
    panel: PanelSpec,
    latitude: float,
    climate: ClimateRecord,
    *,
    system_loss: float = DEFAULT_SYSTEM_LOSS,
    shading_mismatch_factor: float = SHADING_MISMATCH_FACTOR,
    noct: float = DEFAULT_NOCT,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """DC production of one segment, shaded and unshaded (kW).

    Returns
    -------
    shaded, potential : ndarray, shape (8760,)
    """
    if segment.panels_count <= 0:
        zeros = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
        return zeros, zeros.copy()

    day, hour = _hour_of_year_vectors()
    elevation, azimuth = sun_position(latitude, day, hour)

    poa = incident_radiation(climate.irradiance, elevation, azimuth, segment.tilt, segment.azimuth)
    t_cell = cell_temperature(poa, climate.temperature, noct)
    derate = np.maximum(0.0, (t_cell - STC_CELL_TEMP) * TEMP_DERATE_PER_DEGREE)

    array_kw = segment.panels_count * panel.power_kw
    potential = array_kw * (poa / 1000.0) * (1.0 - derate) * system_loss
    potential = np.maximum(potential, 0.0)

    geometric = shading_factor(latitude, day, hour, segment, panel.height_m)
    loss = electrical_shading_loss(geometric, shading_mismatch_factor)

    return potential * (1.0 - loss), potential


# ======================================================================
# Main entry point
# ======================================================================


def simulate_year(
    roof_segments: Sequence[RoofSegment],
    panel: Optional[PanelSpec],
    inverter: Optional[InverterSpec],
    inverter_count: int,
    battery: Optional[BatterySpec],
    battery_count: int,
    climate: ClimateRecord,
    load_curve: NDArray[np.float64],
    *,
    latitude: Optional[float] = None,
    system_loss: float = DEFAULT_SYSTEM_LOSS,
    shading_mismatch_factor: float = SHADING_MISMATCH_FACTOR,
    noct: float = DEFAULT_NOCT,
) -> SimulationResult:
    """Run the 8760-hour energy balance.

    Parameters
    ----------
    roof_segments : sequence of RoofSegment
        Panel arrays; each is simulated with its own orientation and
        row spacing.
    panel, inverter : PanelSpec, InverterSpec or None
        Selected equipment.  A missing item yields zero production.
    inverter_count : int
        Number of identical inverters; AC capacity is
        ``inverter.max_power_kw * inverter_count``.
    battery : BatterySpec or None
        Battery model, scaled by ``battery_count``.
    climate : ClimateRecord
        Hourly irradiance and temperature.
    load_curve : ndarray, shape (8760,)
        Hourly load in kW, already resolved by
        :func:`~pvengine.load.load_model.resolve_load_curve`.
    latitude : float, optional
        Site latitude.  Defaults to ``climate.latitude``.
    system_loss : float
        Lumped system efficiency factor applied to DC output.
    shading_mismatch_factor : float
        Amplification of the geometric shaded fraction.
    noct : float
        Nominal operating cell temperature (degC).

    Returns
    -------
    SimulationResult

    Raises
    ------
    ValueError
        If the climate series or the load curve are not 8760 long.
    """
    climate.validate()
    load = np.asarray(load_curve, dtype=np.float64)
    if load.shape != (HOURS_PER_YEAR,):
        raise ValueError(
            f"load_curve must have shape ({HOURS_PER_YEAR},), got {load.shape}"
        )
    lat = climate.latitude if latitude is None else latitude

    # ---- Array production ----
    dc = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    dc_potential = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    installed_dc_kw = 0.0

    if panel is not None:
        installed_dc_kw = total_panels(roof_segments) * panel.power_kw
        for segment in roof_segments:
            shaded, potential = segment_production(
                segment,
                panel,
                lat,
                climate,
                system_loss=system_loss,
                shading_mismatch_factor=shading_mismatch_factor,
                noct=noct,
            )
            dc += shaded
            dc_potential += potential

    # ---- Inverter clipping ----
    ac_capacity = 0.0
    if inverter is not None and inverter_count > 0:
        ac_capacity = inverter.max_power_kw * inverter_count

    production = np.minimum(dc, ac_capacity)
    potential_production = np.minimum(dc_potential, ac_capacity)
    clipping_loss = float((dc - production).sum())
    shading_loss = float((potential_production - production).sum())

    # ---- Hourly dispatch ----
    bank = BatteryBank.from_spec(battery, battery_count)

    grid_import = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    grid_export = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    battery_charge = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    battery_discharge = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    battery_soc = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    direct = np.zeros(HOURS_PER_YEAR, dtype=np.float64)

    for t in range(HOURS_PER_YEAR):
        pv = float(production[t])
        demand = float(load[t])
        net = pv - demand

        if net > 0:
            # ----- SURPLUS: PV exceeds load ---------------------------------
            direct[t] = demand
            surplus = net
            if bank is not None:
                charged = bank.charge(surplus)
                battery_charge[t] = charged
                surplus -= charged
            grid_export[t] = surplus
        else:
            # ----- DEFICIT: load exceeds PV ---------------------------------
            direct[t] = pv
            deficit = -net
            if bank is not None:
                delivered = bank.discharge(deficit)
                battery_discharge[t] = delivered
                deficit -= delivered
            grid_import[t] = max(deficit, 0.0)

        if bank is not None:
            battery_soc[t] = bank.soc_percent

    result = SimulationResult(
        production=production,
        load=load.copy(),
        grid_import=grid_import,
        grid_export=grid_export,
        battery_soc=battery_soc,
        battery_charge=battery_charge,
        battery_discharge=battery_discharge,
        self_consumption_direct=direct,
        self_consumption_battery=battery_discharge.copy(),
        potential_production=potential_production,
        installed_dc_kw=installed_dc_kw,
        inverter_ac_kw=ac_capacity,
        battery_capacity_kwh=bank.capacity_kwh if bank is not None else 0.0,
        shading_loss_kwh=shading_loss,
        clipping_loss_kwh=clipping_loss,
    )

    logger.debug(
        "Simulated %.2f kWp / %.2f kW AC: %.0f kWh produced, SC %.2f, autonomy %.2f",
        installed_dc_kw,
        ac_capacity,
        result.total_production_kwh,
        result.self_consumption_ratio,
        result.autonomy_ratio,
    )
    return result


def resolve_climate(project: Project, seed: Optional[int] = None) -> ClimateRecord:
    """The project's own climate record, or one synthesised from its latitude."""
    if project.climate is not None:
        return project.climate
    logger.info(
        "No climate record for project '%s'; synthesising for latitude %.2f",
        project.name,
        project.latitude,
    )
    return generate_climate(project.latitude, seed=seed)


def resolve_inputs(
    project: Project,
    seed: Optional[int] = None,
) -> tuple[ClimateRecord, NDArray[np.float64]]:
    """Climate and load curve for a project, resolved once before simulating."""
    return resolve_climate(project, seed=seed), resolve_load_curve(project.load_profile, seed=seed)


def run_project(
    project: Project,
    catalog: EquipmentCatalog,
    *,
    climate: Optional[ClimateRecord] = None,
    load_curve: Optional[NDArray[np.float64]] = None,
    seed: Optional[int] = None,
    system_loss: float = DEFAULT_SYSTEM_LOSS,
    shading_mismatch_factor: float = SHADING_MISMATCH_FACTOR,
) -> SimulationResult:
    """Resolve equipment and inputs for *project*, then simulate.

    Raises
    ------
    CatalogError
        If the panel, inverter or battery id is not in *catalog*.
    """
    cfg = project.system_config
    panel = catalog.panel(cfg.panel_id)
    inverter = catalog.inverter(cfg.inverter_id)
    battery = catalog.battery(cfg.battery_id) if cfg.battery_id else None

    if climate is None:
        climate = resolve_climate(project, seed=seed)
    if load_curve is None:
        load_curve = resolve_load_curve(project.load_profile, seed=seed)

    return simulate_year(
        project.roof_segments,
        panel,
        inverter,
        cfg.inverter_count,
        battery,
        cfg.battery_count,
        climate,
        load_curve,
        latitude=project.latitude,
        system_loss=system_loss,
        shading_mismatch_factor=shading_mismatch_factor,
    )
