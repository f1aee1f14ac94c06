"""Read-only equipment catalog entries.

Panels, inverters and batteries are selected by the surrounding
application and passed into the engine as immutable values.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class PanelSpec:
    """PV module datasheet values at Standard Test Conditions.

    Parameters
    ----------
    power_w : float
        Rated power (W).
    width_mm, height_mm : float
        Module dimensions (mm).  ``height_mm`` is the long side, which is
        the side that rises when the module is tilted in portrait.
    efficiency : float
        Module efficiency (fraction, 0-1).
    voc, isc, vmp, imp : float
        Open-circuit voltage (V), short-circuit current (A), and voltage
        (V) / current (A) at the maximum power point.
    temp_coeff_voc : float
        Temperature coefficient of Voc in %/degC (usually negative).
    """

    id: str
    manufacturer: str
    model: str
    power_w: float
    width_mm: float
    height_mm: float
    efficiency: float
    voc: float
    isc: float
    vmp: float
    imp: float
    temp_coeff_voc: float
    price: float = 0.0

    @property
    def power_kw(self) -> float:
        return self.power_w / 1000.0

    @property
    def height_m(self) -> float:
        return self.height_mm / 1000.0

    @property
    def width_m(self) -> float:
        return self.width_mm / 1000.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InverterSpec:
    """Grid-tie string inverter.

    ``max_input_current`` is the limit per MPPT input, ``mppt_range`` the
    (min, max) tracking window in volts.
    """

    id: str
    manufacturer: str
    model: str
    max_power_kw: float
    phases: int
    max_dc_voltage: float
    start_voltage: float
    mppt_range: tuple[float, float]
    max_input_current: float
    num_mppts: int
    efficiency: float = 0.97
    price: float = 0.0

    @property
    def mppt_min_voltage(self) -> float:
        return float(self.mppt_range[0])

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["mppt_range"] = list(self.mppt_range)
        return data


@dataclass(frozen=True)
class BatterySpec:
    """Stationary battery unit.

    ``max_charge_kw`` defaults to ``max_discharge_kw`` when not given,
    which is how most residential datasheets quote a single power rating.
    """

    id: str
    manufacturer: str
    model: str
    capacity_kwh: float
    max_discharge_kw: float
    efficiency: float = 0.90
    max_charge_kw: float | None = field(default=None)
    price: float = 0.0

    @property
    def charge_power_kw(self) -> float:
        if self.max_charge_kw is None:
            return self.max_discharge_kw
        return self.max_charge_kw

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["max_charge_kw"] = self.charge_power_kw
        return data
