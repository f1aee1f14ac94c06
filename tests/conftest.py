"""Shared test fixtures for PV Sizer engine and API tests."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.typing import NDArray

from pvengine.catalog import EquipmentCatalog
from pvengine.project import LoadProfile, Project, RoofSegment, SystemConfig
from pvengine.solar.geometry import recommended_row_spacing, sun_position
from pvengine.weather.climate import ClimateRecord

HOURS_PER_YEAR = 8760

LISBON_LAT = 38.72


# ======================================================================
# Weather fixtures
# ======================================================================

def clear_sky_climate(latitude: float) -> ClimateRecord:
    """Deterministic climate: GHI follows the sun with 75 % clearness.

    Temperature swings 10-20 degC over the day, humidity is constant.
    """
    hours = np.arange(HOURS_PER_YEAR, dtype=np.float64)
    day = np.floor(hours / 24.0) + 1.0
    hour = (hours % 24) + 0.5
    elevation, _ = sun_position(latitude, day, hour)

    ghi = 1000.0 * 0.75 * np.maximum(np.sin(np.radians(elevation)), 0.0)
    temperature = 15.0 + 5.0 * np.sin(2 * np.pi * (hour - 9.0) / 24.0)
    humidity = np.full(HOURS_PER_YEAR, 60.0)

    return ClimateRecord(
        temperature=temperature,
        irradiance=ghi,
        humidity=humidity,
        latitude=latitude,
        source="test",
    )


@pytest.fixture
def lisbon_climate() -> ClimateRecord:
    return clear_sky_climate(LISBON_LAT)


# ======================================================================
# Load fixtures
# ======================================================================

@pytest.fixture
def domestic_load() -> NDArray[np.float64]:
    """Deterministic domestic load profile, 6500 kWh/yr."""
    from pvengine.load.load_model import generate_load_profile

    return generate_load_profile(
        annual_kwh=6500.0,
        base_kw=0.3,
        peak_kw=2.5,
        behavior="default",
        noise_factor=0.0,
    )


# ======================================================================
# Equipment fixtures
# ======================================================================

@pytest.fixture
def catalog() -> EquipmentCatalog:
    return EquipmentCatalog.default()


@pytest.fixture
def panel_400(catalog):
    """400 W module: Voc 41.2 V, Isc 12.28 A, Vmp 34.2 V, -0.25 %/degC."""
    return catalog.panel("p-trina-vertex-400")


@pytest.fixture
def inverter_3k(catalog):
    """3 kW single-phase inverter, 600 V max DC, 12.5 A per MPPT, 2 MPPTs."""
    return catalog.inverter("i-huawei-3ktl-l1")


@pytest.fixture
def battery_5k(catalog):
    return catalog.battery("b-byd-hvs-5")


# ======================================================================
# Project fixtures
# ======================================================================

@pytest.fixture
def lisbon_segment(panel_400) -> RoofSegment:
    """South-facing 30 deg row of 10 panels, spaced to avoid winter shading."""
    spacing = recommended_row_spacing(LISBON_LAT, 30.0, 0.0, panel_400.height_m)
    return RoofSegment(tilt=30.0, azimuth=0.0, panels_count=10, row_spacing=spacing, name="south")


@pytest.fixture
def lisbon_project(lisbon_segment, lisbon_climate) -> Project:
    return Project(
        name="lisbon",
        latitude=LISBON_LAT,
        longitude=-9.14,
        roof_segments=(lisbon_segment,),
        system_config=SystemConfig(
            panel_id="p-trina-vertex-400",
            inverter_id="i-huawei-3ktl-l1",
            inverter_count=1,
        ),
        load_profile=LoadProfile(annual_kwh=6500.0, base_kw=0.3, peak_kw=2.5),
        climate=lisbon_climate,
    )
