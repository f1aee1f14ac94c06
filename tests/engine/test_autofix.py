"""Tests for the inverter selection search."""

from __future__ import annotations

from pvengine.catalog import EquipmentCatalog, InverterSpec
from pvengine.electrical.autofix import find_optimal_configuration, suggest_fix
from pvengine.electrical.strings import verify_project
from pvengine.project import Project, RoofSegment, SystemConfig


def _with_panels(project, n):
    seg = RoofSegment(tilt=30.0, azimuth=0.0, panels_count=n, row_spacing=2.0)
    return Project(
        latitude=project.latitude,
        roof_segments=(seg,),
        system_config=project.system_config,
        load_profile=project.load_profile,
        climate=project.climate,
    )


class TestFindOptimalConfiguration:
    def test_quantity_adjustment(self, lisbon_project, catalog):
        """30 panels overload one 3 kW unit; four units wire up."""
        project = _with_panels(lisbon_project, 30)
        assert not verify_project(project, catalog).valid

        fix = find_optimal_configuration(project, catalog)
        assert fix is not None
        assert fix.config.inverter_id == "i-huawei-3ktl-l1"
        assert fix.config.inverter_count == 4
        assert fix.reason.startswith("Quantity adjustment: 4x SUN2000-3KTL-L1")
        assert verify_project(project.with_system_config(fix.config), catalog).valid

    def test_alternative_model(self, lisbon_project, catalog):
        """Two 3 kW units would leave MPPTs with two panels; a single 5 kW fits."""
        fix = find_optimal_configuration(lisbon_project, catalog)
        assert fix is not None
        assert fix.config.inverter_id == "i-huawei-5ktl-l1"
        assert fix.config.inverter_count == 1
        assert fix.reason == "Recommended inverter: 1x SUN2000-5KTL-L1 (electrically compatible)."

    def test_keeps_other_selections(self, lisbon_project, catalog):
        cfg = SystemConfig(
            panel_id="p-trina-vertex-400",
            inverter_id="i-huawei-3ktl-l1",
            battery_id="b-byd-hvs-5",
            battery_count=1,
            cable_dc_meters=35.0,
        )
        fix = find_optimal_configuration(lisbon_project.with_system_config(cfg), catalog)
        assert fix is not None
        assert fix.config.battery_id == "b-byd-hvs-5"
        assert fix.config.cable_dc_meters == 35.0

    def test_unknown_panel(self, lisbon_project, catalog):
        cfg = SystemConfig(panel_id="p-missing", inverter_id="i-huawei-3ktl-l1")
        assert find_optimal_configuration(lisbon_project.with_system_config(cfg), catalog) is None

    def test_nothing_fits(self, lisbon_project, panel_400):
        weak = InverterSpec(
            id="i-weak",
            manufacturer="Test",
            model="Weak",
            max_power_kw=3.0,
            phases=1,
            max_dc_voltage=600,
            start_voltage=100,
            mppt_range=(90, 560),
            max_input_current=5.0,
            num_mppts=1,
        )
        catalog = EquipmentCatalog(panels=(panel_400,), inverters=(weak,))
        cfg = SystemConfig(panel_id=panel_400.id, inverter_id="i-weak")
        assert suggest_fix(lisbon_project.with_system_config(cfg), catalog) is None

    def test_to_dict(self, lisbon_project, catalog):
        data = find_optimal_configuration(lisbon_project, catalog).to_dict()
        assert data["inverter_id"] == "i-huawei-5ktl-l1"
        assert data["panel_id"] == "p-trina-vertex-400"
        assert "reason" in data
