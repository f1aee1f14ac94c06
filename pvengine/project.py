"""Scenario input containers.

A project bundles the roof layout, the equipment selection and the load
description for one site.  Everything here is constructed once per
scenario and passed by value into the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from pvengine.weather.climate import ClimateRecord


@dataclass(frozen=True)
class RoofSegment:
    """One planar array of panels laid out in rows.

    Parameters
    ----------
    tilt : float
        Panel tilt from horizontal (degrees).
    azimuth : float
        Panel azimuth in degrees from south; negative = east,
        positive = west.
    panels_count : int
        Number of panels on the segment.
    edge_margin : float
        Clearance kept free along every edge of the segment (m).
    row_spacing : float
        Gap between consecutive rows, measured along the roof (m).
    column_spacing : float
        Gap between neighbouring panels within a row (m).
    width, height : float
        Usable rectangle of the segment (m).  Only needed for layout
        helpers; the simulation ignores them.
    """

    tilt: float = 30.0
    azimuth: float = 0.0
    panels_count: int = 0
    edge_margin: float = 0.5
    row_spacing: float = 0.05
    column_spacing: float = 0.02
    width: float = 0.0
    height: float = 0.0
    name: str = ""


@dataclass(frozen=True)
class SystemConfig:
    """Equipment selection by catalog id.

    A selected battery counts as at least one unit, so ``battery_count``
    may be left at 0 when ``battery_id`` is set.
    """

    panel_id: str
    inverter_id: str
    inverter_count: int = 1
    battery_id: Optional[str] = None
    battery_count: int = 0
    cable_dc_meters: float = 20.0
    cable_ac_meters: float = 10.0

    def __post_init__(self) -> None:
        if self.battery_id and self.battery_count <= 0:
            object.__setattr__(self, "battery_count", 1)

    def with_inverter(self, inverter_id: str, inverter_count: int) -> SystemConfig:
        return replace(self, inverter_id=inverter_id, inverter_count=inverter_count)


@dataclass(frozen=True)
class LoadProfile:
    """Consumption description resolved into an hourly curve before simulation.

    ``kind == "imported"`` uses ``hourly_kw`` (8760 values); otherwise the
    curve is synthesised from ``base_kw``, ``peak_kw`` and ``behavior``.
    Both paths are scaled to ``annual_kwh``; an imported curve with
    ``annual_kwh=None`` is used unscaled.
    """

    annual_kwh: Optional[float] = 3500.0
    base_kw: float = 0.2
    peak_kw: float = 2.5
    behavior: str = "default"
    kind: str = "simplified"
    hourly_kw: Optional[NDArray[np.float64]] = field(default=None, compare=False)


@dataclass(frozen=True)
class Project:
    """A complete sizing scenario for one site."""

    latitude: float
    roof_segments: tuple[RoofSegment, ...]
    system_config: SystemConfig
    load_profile: LoadProfile = field(default_factory=LoadProfile)
    longitude: float = 0.0
    name: str = ""
    climate: Optional[ClimateRecord] = field(default=None, compare=False)

    @property
    def total_panels(self) -> int:
        return total_panels(self.roof_segments)

    def with_system_config(self, config: SystemConfig) -> Project:
        return replace(self, system_config=config)


def total_panels(roof_segments) -> int:
    """Sum of panels over all segments."""
    return int(sum(max(0, seg.panels_count) for seg in roof_segments))
