"""
Rule-based improvement suggestions for a simulated system.

Pure arithmetic over a :class:`SimulationResult`; no catalog access and
no re-simulation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from .simulator import SimulationResult

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------
LOW_SELF_CONSUMPTION = 0.40
HIGH_DC_AC_RATIO = 1.35
LOW_DC_AC_RATIO = 0.70
HIGH_AUTONOMY = 0.90


@dataclass
class Advisory:
    id: str
    type: str          # "success" | "warning" | "info"
    title: str
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


def analyze_results(result: SimulationResult, has_battery: bool) -> list[Advisory]:
    """Return suggestions in a fixed order: self-consumption, DC/AC, autonomy."""
    advisories: list[Advisory] = []

    if result.self_consumption_ratio < LOW_SELF_CONSUMPTION and not has_battery:
        advisories.append(Advisory(
            id="low-self-consumption",
            type="warning",
            title="Low self-consumption (<40%)",
            message=(
                "Most of the energy is exported to the grid. Consider adding "
                "a battery to store the solar surplus."
            ),
        ))

    if result.inverter_ac_kw > 0:
        ratio = result.dc_ac_ratio
        if ratio > HIGH_DC_AC_RATIO:
            advisories.append(Advisory(
                id="high-clipping",
                type="warning",
                title="High DC/AC ratio",
                message=(
                    f"The array ({result.installed_dc_kw:.1f} kW) is much larger than "
                    f"the inverter capacity ({result.inverter_ac_kw:g} kW). "
                    f"Production loss from clipping is likely "
                    f"({result.clipping_loss_kwh:.0f} kWh/year)."
                ),
            ))
        if ratio < LOW_DC_AC_RATIO:
            advisories.append(Advisory(
                id="oversized-inverter",
                type="info",
                title="Oversized inverter",
                message=(
                    "The inverter has far more capacity than the panels. A smaller "
                    "inverter would save money."
                ),
            ))

    if result.autonomy_ratio > HIGH_AUTONOMY:
        advisories.append(Advisory(
            id="high-autonomy",
            type="success",
            title="Excellent independence",
            message="The system covers more than 90% of the energy needs.",
        ))

    return advisories
