"""
Cable section and protection sizing from design current.

Design currents carry a 1.25 safety multiplier and are matched against
fixed section and breaker tables.  Voltage drop uses a resistive copper
model, ``VD% = 100 * I * R / V`` with ``R = rho * L * conductors / S``.
"""

from __future__ import annotations

import math

from pvengine.catalog.models import InverterSpec

SAFETY_FACTOR: float = 1.25

# Copper resistivity (ohm mm2 / m).
COPPER_RESISTIVITY: float = 0.0175

SINGLE_PHASE_VOLTAGE: float = 230.0
THREE_PHASE_VOLTAGE: float = 400.0

DC_STRING_SECTION_MM2: float = 4.0
DC_STRING_SECTION_HIGH_MM2: float = 6.0
DC_HIGH_CURRENT_A: float = 30.0

# (design current strictly above, section mm2), checked in order.
AC_SECTION_STEPS: tuple[tuple[float, float], ...] = (
    (20.0, 4.0),
    (32.0, 6.0),
    (50.0, 10.0),
    (80.0, 16.0),
)
AC_BASE_SECTION_MM2: float = 2.5

BREAKER_RATINGS_A: tuple[int, ...] = (16, 20, 25, 32, 40, 50, 63, 80, 100, 125)

MAX_VOLTAGE_DROP_PCT: float = 1.5


def dc_design_current(isc: float) -> float:
    return isc * SAFETY_FACTOR


def dc_string_section(isc: float) -> float:
    """String cable section (mm2): 4, or 6 above 30 A design current."""
    if dc_design_current(isc) > DC_HIGH_CURRENT_A:
        return DC_STRING_SECTION_HIGH_MM2
    return DC_STRING_SECTION_MM2


def dc_fuse_rating(isc: float) -> int:
    return int(math.ceil(dc_design_current(isc)))


def ac_current_per_inverter(inverter: InverterSpec) -> float:
    """Rated AC output current of one inverter (A)."""
    watts = inverter.max_power_kw * 1000.0
    if inverter.phases == 3:
        return watts / (math.sqrt(3) * THREE_PHASE_VOLTAGE)
    return watts / SINGLE_PHASE_VOLTAGE


def ac_section(design_current: float) -> float:
    section = AC_BASE_SECTION_MM2
    for threshold, mm2 in AC_SECTION_STEPS:
        if design_current > threshold:
            section = mm2
    return section


def ac_breaker_rating(design_current: float) -> int:
    """Smallest standard breaker strictly above the design current, else 125 A."""
    for rating in BREAKER_RATINGS_A:
        if rating > design_current:
            return rating
    return BREAKER_RATINGS_A[-1]


def voltage_drop_pct(
    *,
    voltage: float,
    current: float,
    length_m: float,
    section_mm2: float,
    conductors: float = 2.0,
) -> float:
    """Percentage voltage drop over a copper run.

    ``conductors`` is 2 for a DC or single-phase loop and ``sqrt(3)`` for
    a balanced three-phase line.  Returns 0 for non-positive inputs.
    """
    if voltage <= 0 or current <= 0 or length_m <= 0 or section_mm2 <= 0:
        return 0.0
    resistance = COPPER_RESISTIVITY * length_m * conductors / section_mm2
    return 100.0 * current * resistance / voltage


def ac_voltage_drop_pct(inverter: InverterSpec, length_m: float, section_mm2: float) -> float:
    if inverter.phases == 3:
        return voltage_drop_pct(
            voltage=THREE_PHASE_VOLTAGE,
            current=ac_current_per_inverter(inverter),
            length_m=length_m,
            section_mm2=section_mm2,
            conductors=math.sqrt(3),
        )
    return voltage_drop_pct(
        voltage=SINGLE_PHASE_VOLTAGE,
        current=ac_current_per_inverter(inverter),
        length_m=length_m,
        section_mm2=section_mm2,
    )
