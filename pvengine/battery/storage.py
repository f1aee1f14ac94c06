"""
Stored-energy tracker for the hourly energy balance.

Tracks the energy held in a bank of identical batteries.  Charging loses
the full round-trip efficiency on the way in; discharging delivers every
stored kWh.  Stored energy stays within ``[0, capacity]``, and both
directions are capped by nameplate power regardless of energy headroom.
"""

from __future__ import annotations

from typing import Optional

from pvengine.catalog.models import BatterySpec


class BatteryBank:
    """Stored-energy tracker for ``count`` identical batteries.

    Parameters
    ----------
    capacity_kwh : float
        Usable energy capacity of the whole bank (kWh).
    max_charge_kw, max_discharge_kw : float
        Power limits of the whole bank (kW).
    efficiency : float
        Round-trip efficiency in (0, 1], applied on charge.
    initial_kwh : float
        Starting stored energy.  Default 0 (empty).
    """

    def __init__(
        self,
        capacity_kwh: float,
        max_charge_kw: float,
        max_discharge_kw: float,
        efficiency: float = 0.90,
        initial_kwh: float = 0.0,
    ) -> None:
        if capacity_kwh < 0:
            raise ValueError(f"capacity_kwh must be >= 0, got {capacity_kwh}")
        if not 0 < efficiency <= 1.0:
            raise ValueError(f"efficiency must be in (0, 1], got {efficiency}")

        self.capacity_kwh: float = float(capacity_kwh)
        self.max_charge_kw: float = max(0.0, float(max_charge_kw))
        self.max_discharge_kw: float = max(0.0, float(max_discharge_kw))
        self.efficiency: float = float(efficiency)

        self._stored: float = min(max(0.0, float(initial_kwh)), self.capacity_kwh)

    @classmethod
    def from_spec(cls, spec: Optional[BatterySpec], count: int) -> Optional[BatteryBank]:
        """Build a bank of ``count`` batteries, or ``None`` when there is none.

        A battery that cannot store anything (no capacity or an efficiency
        of 0 or less) also gives ``None``; efficiencies above 1 are capped.
        """
        if spec is None or count <= 0 or spec.capacity_kwh <= 0 or spec.efficiency <= 0:
            return None
        return cls(
            capacity_kwh=spec.capacity_kwh * count,
            max_charge_kw=spec.charge_power_kw * count,
            max_discharge_kw=spec.max_discharge_kw * count,
            efficiency=min(spec.efficiency, 1.0),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def stored_kwh(self) -> float:
        return self._stored

    @property
    def soc_percent(self) -> float:
        """State of charge as a percentage of usable capacity."""
        if self.capacity_kwh <= 0:
            return 0.0
        return self._stored / self.capacity_kwh * 100.0

    def charge(self, surplus_kw: float, dt_hours: float = 1.0) -> float:
        """Absorb up to ``surplus_kw`` for one step.

        Returns the energy taken from the bus (kWh), before losses.  Only
        ``taken * efficiency`` ends up stored.
        """
        if surplus_kw <= 0 or dt_hours <= 0:
            return 0.0
        taken = min(
            surplus_kw * dt_hours,
            self.max_charge_kw * dt_hours,
            self.capacity_kwh - self._stored,
        )
        taken = max(0.0, taken)
        self._stored = min(self.capacity_kwh, self._stored + taken * self.efficiency)
        return taken

    def discharge(self, deficit_kw: float, dt_hours: float = 1.0) -> float:
        """Deliver up to ``deficit_kw`` for one step.

        Returns the energy delivered (kWh).
        """
        if deficit_kw <= 0 or dt_hours <= 0:
            return 0.0
        delivered = min(
            deficit_kw * dt_hours,
            self.max_discharge_kw * dt_hours,
            self._stored,
        )
        delivered = max(0.0, delivered)
        self._stored = max(0.0, self._stored - delivered)
        return delivered

    def __repr__(self) -> str:
        return (
            f"BatteryBank(capacity_kwh={self.capacity_kwh}, "
            f"efficiency={self.efficiency}, stored_kwh={self._stored:.4f})"
        )
