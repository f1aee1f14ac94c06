"""Tests for pvengine.simulation.simulator -- the hourly energy balance."""

from __future__ import annotations

from dataclasses import replace

import numpy as np
import pytest

from pvengine.catalog import BatterySpec
from pvengine.errors import CatalogError
from pvengine.project import LoadProfile, Project, RoofSegment, SystemConfig
from pvengine.simulation.simulator import (
    HOURS_PER_YEAR,
    SimulationResult,
    cell_temperature,
    monthly_totals,
    run_project,
    simulate_year,
)
from pvengine.weather.climate import ClimateRecord

LISBON_LAT = 38.72


def _run(segments, panel, inverter, climate, load, battery=None, battery_count=0, inverter_count=1):
    return simulate_year(
        segments,
        panel,
        inverter,
        inverter_count,
        battery,
        battery_count,
        climate,
        load,
        latitude=LISBON_LAT,
    )


# ======================================================================
# Energy balance
# ======================================================================


class TestEnergyBalance:
    def test_hourly_conservation_without_battery(
        self, lisbon_segment, panel_400, inverter_3k, lisbon_climate, domestic_load
    ):
        r = _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load)
        supply = r.production + r.grid_import + r.battery_discharge
        demand = r.load + r.grid_export + r.battery_charge
        np.testing.assert_allclose(supply, demand, atol=1e-9)

    def test_hourly_conservation_with_battery(
        self, lisbon_segment, panel_400, inverter_3k, battery_5k, lisbon_climate, domestic_load
    ):
        r = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=1,
        )
        supply = r.production + r.grid_import + r.battery_discharge
        demand = r.load + r.grid_export + r.battery_charge
        np.testing.assert_allclose(supply, demand, atol=1e-9)
        assert r.battery_charge.sum() > 0
        assert r.battery_discharge.sum() > 0

    def test_flows_non_negative(
        self, lisbon_segment, panel_400, inverter_3k, battery_5k, lisbon_climate, domestic_load
    ):
        r = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=1,
        )
        for series in (r.production, r.grid_import, r.grid_export, r.battery_charge, r.battery_discharge):
            assert np.all(series >= 0)

    def test_no_simultaneous_import_and_export(
        self, lisbon_segment, panel_400, inverter_3k, lisbon_climate, domestic_load
    ):
        r = _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load)
        assert not np.any((r.grid_import > 0) & (r.grid_export > 0))

    def test_self_consumption_bounded_by_load(
        self, lisbon_segment, panel_400, inverter_3k, battery_5k, lisbon_climate, domestic_load
    ):
        r = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=1,
        )
        assert np.all(r.self_consumption <= r.load + 1e-9)
        assert np.all(r.self_consumption_direct <= r.production + 1e-9)

    def test_soc_within_bounds(
        self, lisbon_segment, panel_400, inverter_3k, battery_5k, lisbon_climate, domestic_load
    ):
        r = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=1,
        )
        assert r.battery_soc.min() >= 0.0
        assert r.battery_soc.max() <= 100.0 + 1e-9

    def test_soc_zero_without_battery(
        self, lisbon_segment, panel_400, inverter_3k, lisbon_climate, domestic_load
    ):
        r = _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load)
        assert np.all(r.battery_soc == 0.0)
        assert np.all(r.self_consumption_battery == 0.0)

    def test_battery_improves_autonomy(
        self, lisbon_segment, panel_400, inverter_3k, battery_5k, lisbon_climate, domestic_load
    ):
        without = _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load)
        with_bat = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=1,
        )
        assert with_bat.autonomy_ratio > without.autonomy_ratio
        assert with_bat.self_consumption_ratio > without.self_consumption_ratio
        assert with_bat.total_import_kwh < without.total_import_kwh


# ======================================================================
# Production
# ======================================================================


class TestProduction:
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_lisbon_reference_system(self, lisbon_project, catalog, seed):
        """4 kWp on a 3 kW inverter, south 30 deg at Lisbon, synthesised weather."""
        project = replace(lisbon_project, climate=None)
        r = run_project(project, catalog, seed=seed)
        assert r.installed_dc_kw == pytest.approx(4.0)
        assert r.inverter_ac_kw == pytest.approx(3.0)
        assert r.dc_ac_ratio == pytest.approx(4.0 / 3.0)
        assert 5800.0 <= r.total_production_kwh <= 7200.0
        assert 1400.0 <= r.specific_yield <= 1600.0
        assert 0.0 < r.self_consumption_ratio < 1.0
        assert r.total_load_kwh == pytest.approx(6500.0, rel=1e-9)
        for name, series in r.hourly().items():
            assert min(series) >= 0.0, name

    def test_zero_at_night(self, lisbon_segment, panel_400, inverter_3k, lisbon_climate, domestic_load):
        r = _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load)
        midnight = np.arange(0, HOURS_PER_YEAR, 24)
        assert np.all(r.production[midnight] == 0.0)

    def test_clipped_to_inverter_rating(self, panel_400, catalog, lisbon_climate, domestic_load):
        seg = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=20, row_spacing=5.0)
        small = catalog.inverter("i-growatt-mic-1500")
        r = _run([seg], panel_400, small, lisbon_climate, domestic_load)
        assert r.production.max() <= 1.5 + 1e-9
        assert r.clipping_loss_kwh > 0
        assert r.summary()["clipping_loss_kwh"] > 0

    def test_inverter_count_scales_capacity(self, panel_400, catalog, lisbon_climate, domestic_load):
        seg = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=20, row_spacing=5.0)
        small = catalog.inverter("i-growatt-mic-1500")
        r = _run([seg], panel_400, small, lisbon_climate, domestic_load, inverter_count=3)
        assert r.inverter_ac_kw == pytest.approx(4.5)
        assert r.production.max() <= 4.5 + 1e-9

    def test_tight_rows_lose_to_shading(self, panel_400, inverter_3k, lisbon_climate, domestic_load):
        spaced = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=10, row_spacing=5.0)
        tight = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=10, row_spacing=0.05)
        r_spaced = _run([spaced], panel_400, inverter_3k, lisbon_climate, domestic_load)
        r_tight = _run([tight], panel_400, inverter_3k, lisbon_climate, domestic_load)
        assert r_tight.shading_loss_kwh > r_spaced.shading_loss_kwh
        assert r_tight.total_production_kwh < r_spaced.total_production_kwh
        assert np.all(r_tight.production <= r_tight.potential_production + 1e-9)

    def test_segments_add_up(self, panel_400, catalog, lisbon_climate, domestic_load):
        big = catalog.inverter("i-goodwe-15k-et")
        south = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=6, row_spacing=5.0)
        west = RoofSegment(tilt=20.0, azimuth=90.0, panels_count=4, row_spacing=5.0)
        both = _run([south, west], panel_400, big, lisbon_climate, domestic_load)
        only_south = _run([south], panel_400, big, lisbon_climate, domestic_load)
        only_west = _run([west], panel_400, big, lisbon_climate, domestic_load)
        assert both.total_production_kwh == pytest.approx(
            only_south.total_production_kwh + only_west.total_production_kwh, rel=1e-9
        )

    def test_south_beats_north(self, panel_400, inverter_3k, lisbon_climate, domestic_load):
        south = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=10, row_spacing=5.0)
        north = RoofSegment(tilt=30.0, azimuth=180.0, panels_count=10, row_spacing=5.0)
        r_south = _run([south], panel_400, inverter_3k, lisbon_climate, domestic_load)
        r_north = _run([north], panel_400, inverter_3k, lisbon_climate, domestic_load)
        assert r_south.total_production_kwh > r_north.total_production_kwh

    def test_cell_temperature_noct(self):
        assert float(cell_temperature(800.0, 20.0, noct=45.0)) == pytest.approx(45.0)
        assert float(cell_temperature(0.0, 12.0)) == pytest.approx(12.0)


# ======================================================================
# Degenerate systems
# ======================================================================


class TestDegenerateSystems:
    def test_no_panel(self, lisbon_segment, inverter_3k, lisbon_climate, domestic_load):
        r = _run([lisbon_segment], None, inverter_3k, lisbon_climate, domestic_load)
        assert r.total_production_kwh == 0.0
        assert r.installed_dc_kw == 0.0
        np.testing.assert_allclose(r.grid_import, r.load)
        assert r.self_consumption_ratio == 0.0
        assert r.specific_yield == 0.0

    def test_no_inverter(self, lisbon_segment, panel_400, lisbon_climate, domestic_load):
        r = _run([lisbon_segment], panel_400, None, lisbon_climate, domestic_load)
        assert r.total_production_kwh == 0.0
        assert r.dc_ac_ratio == 0.0
        assert r.autonomy_ratio == 0.0

    def test_zero_panels(self, panel_400, inverter_3k, lisbon_climate, domestic_load):
        seg = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=0)
        r = _run([seg], panel_400, inverter_3k, lisbon_climate, domestic_load)
        assert r.total_production_kwh == 0.0
        assert r.total_export_kwh == 0.0

    def test_zero_load(self, lisbon_segment, panel_400, inverter_3k, lisbon_climate):
        r = _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, np.zeros(HOURS_PER_YEAR))
        assert r.total_import_kwh == 0.0
        assert r.total_export_kwh == pytest.approx(r.total_production_kwh)
        assert r.autonomy_ratio == 0.0

    def test_battery_count_zero_ignored(
        self, lisbon_segment, panel_400, inverter_3k, battery_5k, lisbon_climate, domestic_load
    ):
        r = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=0,
        )
        assert r.battery_charge.sum() == 0.0

    @pytest.mark.parametrize("efficiency", [0.0, -1.0])
    def test_battery_that_cannot_store(
        self, lisbon_segment, panel_400, inverter_3k, lisbon_climate, domestic_load, efficiency
    ):
        dead = BatterySpec("b-dead", "Test", "Dead", 5.0, 2.5, efficiency)
        r = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=dead, battery_count=1,
        )
        plain = _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load)
        assert r.battery_capacity_kwh == 0.0
        assert r.battery_charge.sum() == 0.0
        assert r.total_import_kwh == pytest.approx(plain.total_import_kwh)


# ======================================================================
# Validation and determinism
# ======================================================================


class TestValidation:
    def test_short_load_curve_rejected(self, lisbon_segment, panel_400, inverter_3k, lisbon_climate):
        with pytest.raises(ValueError, match="8760"):
            _run([lisbon_segment], panel_400, inverter_3k, lisbon_climate, np.ones(100))

    def test_short_climate_rejected(self, lisbon_segment, panel_400, inverter_3k, domestic_load):
        bad = ClimateRecord(
            temperature=np.zeros(24),
            irradiance=np.zeros(24),
            humidity=np.zeros(24),
            latitude=LISBON_LAT,
        )
        with pytest.raises(ValueError):
            _run([lisbon_segment], panel_400, inverter_3k, bad, domestic_load)

    def test_deterministic(self, lisbon_segment, panel_400, inverter_3k, battery_5k, lisbon_climate, domestic_load):
        a = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=1,
        )
        b = _run(
            [lisbon_segment], panel_400, inverter_3k, lisbon_climate, domestic_load,
            battery=battery_5k, battery_count=1,
        )
        np.testing.assert_array_equal(a.production, b.production)
        np.testing.assert_array_equal(a.battery_soc, b.battery_soc)
        assert a.summary() == b.summary()

    def test_synthetic_inputs_reproducible_with_seed(self, lisbon_project, catalog):
        project = Project(
            latitude=lisbon_project.latitude,
            roof_segments=lisbon_project.roof_segments,
            system_config=lisbon_project.system_config,
            load_profile=lisbon_project.load_profile,
        )
        a = run_project(project, catalog, seed=7)
        b = run_project(project, catalog, seed=7)
        assert a.total_production_kwh == b.total_production_kwh
        assert a.total_load_kwh == pytest.approx(6500.0)


# ======================================================================
# run_project and result helpers
# ======================================================================


class TestRunProject:
    def test_unknown_panel(self, lisbon_project, catalog):
        cfg = SystemConfig(panel_id="p-missing", inverter_id="i-huawei-3ktl-l1")
        with pytest.raises(CatalogError, match="p-missing"):
            run_project(lisbon_project.with_system_config(cfg), catalog)

    def test_unknown_battery(self, lisbon_project, catalog):
        cfg = SystemConfig(
            panel_id="p-trina-vertex-400",
            inverter_id="i-huawei-3ktl-l1",
            battery_id="b-missing",
            battery_count=1,
        )
        with pytest.raises(CatalogError):
            run_project(lisbon_project.with_system_config(cfg), catalog)

    def test_selected_battery_counts_as_one_unit(self, lisbon_project, catalog):
        cfg = SystemConfig(
            panel_id="p-trina-vertex-400",
            inverter_id="i-huawei-3ktl-l1",
            battery_id="b-byd-hvs-5",
        )
        assert cfg.battery_count == 1
        r = run_project(lisbon_project.with_system_config(cfg), catalog)
        assert r.battery_capacity_kwh == pytest.approx(5.12)
        assert r.battery_charge.sum() > 0.0
        assert r.summary()["battery_capacity_kwh"] == pytest.approx(5.12)

    def test_no_battery_keeps_zero_count(self):
        cfg = SystemConfig(panel_id="p-trina-vertex-400", inverter_id="i-huawei-3ktl-l1")
        assert cfg.battery_count == 0

    def test_imported_load_curve_used(self, lisbon_project, catalog):
        hourly = np.full(HOURS_PER_YEAR, 0.5)
        project = Project(
            latitude=lisbon_project.latitude,
            roof_segments=lisbon_project.roof_segments,
            system_config=lisbon_project.system_config,
            load_profile=LoadProfile(annual_kwh=None, kind="imported", hourly_kw=hourly),
            climate=lisbon_project.climate,
        )
        r = run_project(project, catalog)
        assert r.total_load_kwh == pytest.approx(0.5 * HOURS_PER_YEAR)

    def test_summary_shape(self, lisbon_project, catalog):
        summary = run_project(lisbon_project, catalog).summary()
        assert len(summary["monthly_production_kwh"]) == 12
        assert sum(summary["monthly_load_kwh"]) == pytest.approx(6500.0, abs=0.1)
        assert 0.0 <= summary["self_consumption_ratio"] <= 1.0
        assert 0.0 <= summary["autonomy_ratio"] <= 1.0

    def test_hourly_export(self, lisbon_project, catalog):
        hourly = run_project(lisbon_project, catalog).hourly()
        assert set(hourly) == {
            "production",
            "load",
            "grid_import",
            "grid_export",
            "battery_soc",
            "self_consumption_direct",
            "self_consumption_battery",
        }
        assert all(len(v) == HOURS_PER_YEAR for v in hourly.values())


class TestMonthlyTotals:
    def test_constant_series(self):
        months = monthly_totals(np.ones(HOURS_PER_YEAR))
        assert months.shape == (12,)
        assert months[0] == 744.0
        assert months[1] == 672.0
        assert months.sum() == HOURS_PER_YEAR

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            monthly_totals(np.ones(100))

    def test_result_totals_match_series(self):
        zeros = np.zeros(HOURS_PER_YEAR)
        ones = np.ones(HOURS_PER_YEAR)
        r = SimulationResult(
            production=ones,
            load=ones * 2,
            grid_import=ones,
            grid_export=zeros,
            battery_soc=zeros,
            battery_charge=zeros,
            battery_discharge=zeros,
            self_consumption_direct=ones,
            self_consumption_battery=zeros,
            potential_production=ones,
            installed_dc_kw=1.0,
            inverter_ac_kw=1.0,
        )
        assert r.total_production_kwh == HOURS_PER_YEAR
        assert r.self_consumption_ratio == 1.0
        assert r.autonomy_ratio == pytest.approx(0.5)
