"""Equipment catalog: a read-only registry passed into the engine.

The built-in library lists common residential and small commercial
equipment.  Deployments can load their own catalog from a JSON file with
``EquipmentCatalog.from_json``; engine functions always receive the
catalog as an explicit argument.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pvengine.errors import CatalogError

from .models import BatterySpec, InverterSpec, PanelSpec

logger = logging.getLogger(__name__)


PANEL_LIBRARY: list[PanelSpec] = [
    #          id                        manufacturer      model                    W    width   height  eff     Voc    Isc    Vmp    Imp    dVoc   price
    PanelSpec("p-maxeon-6-425", "SunPower", "Maxeon 6 425", 425, 1032, 1872, 0.222, 48.6, 11.10, 40.6, 10.47, -0.27, 310.0),
    PanelSpec("p-longi-himo6-430", "LONGi", "Hi-MO 6 430", 430, 1134, 1722, 0.220, 39.05, 13.95, 32.65, 13.17, -0.23, 150.0),
    PanelSpec("p-jinko-neo-440", "Jinko", "Tiger Neo 440", 440, 1134, 1762, 0.220, 39.34, 14.05, 32.92, 13.37, -0.25, 145.0),
    PanelSpec("p-trina-vertex-400", "Trina", "Vertex S 400", 400, 1096, 1754, 0.208, 41.2, 12.28, 34.2, 11.70, -0.25, 120.0),
    PanelSpec("p-canadian-hiku6-455", "Canadian Solar", "HiKu6 455", 455, 1134, 1903, 0.211, 41.1, 14.00, 34.5, 13.19, -0.26, 130.0),
    PanelSpec("p-eco-mono-370", "EcoSun", "Mono 370", 370, 1038, 1755, 0.203, 40.6, 11.50, 33.8, 10.95, -0.30, 95.0),
]

INVERTER_LIBRARY: list[InverterSpec] = [
    InverterSpec("i-growatt-mic-1500", "Growatt", "MIC 1500TL-X", 1.5, 1, 500, 50, (50, 500), 13.0, 1, 0.965, 420.0),
    InverterSpec("i-huawei-3ktl-l1", "Huawei", "SUN2000-3KTL-L1", 3.0, 1, 600, 120, (90, 560), 12.5, 2, 0.974, 800.0),
    InverterSpec("i-huawei-5ktl-l1", "Huawei", "SUN2000-5KTL-L1", 5.0, 1, 600, 120, (90, 560), 12.5, 2, 0.976, 1050.0),
    InverterSpec("i-fronius-primo-6", "Fronius", "Primo 6.0-1", 6.0, 1, 1000, 80, (80, 800), 18.0, 2, 0.968, 1500.0),
    InverterSpec("i-sma-stp-10", "SMA", "Sunny Tripower 10.0", 10.0, 3, 1000, 188, (150, 800), 20.0, 2, 0.981, 2100.0),
    InverterSpec("i-goodwe-15k-et", "GoodWe", "GW15K-ET", 15.0, 3, 1000, 180, (200, 850), 16.0, 2, 0.978, 2600.0),
]

BATTERY_LIBRARY: list[BatterySpec] = [
    BatterySpec("b-pylontech-us5000", "Pylontech", "US5000", 4.8, 2.4, 0.95, None, 1400.0),
    BatterySpec("b-byd-hvs-5", "BYD", "Battery-Box HVS 5.1", 5.12, 5.12, 0.95, None, 2300.0),
    BatterySpec("b-tesla-powerwall-2", "Tesla", "Powerwall 2", 13.5, 5.0, 0.90, None, 8500.0),
]


@dataclass(frozen=True)
class EquipmentCatalog:
    """Immutable registry of panels, inverters and batteries."""

    panels: tuple[PanelSpec, ...]
    inverters: tuple[InverterSpec, ...]
    batteries: tuple[BatterySpec, ...] = ()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> EquipmentCatalog:
        """Catalog built from the bundled library."""
        return cls(
            panels=tuple(PANEL_LIBRARY),
            inverters=tuple(INVERTER_LIBRARY),
            batteries=tuple(BATTERY_LIBRARY),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EquipmentCatalog:
        try:
            panels = tuple(PanelSpec(**p) for p in data.get("panels", []))
            inverters = tuple(
                InverterSpec(**{**i, "mppt_range": tuple(i["mppt_range"])})
                for i in data.get("inverters", [])
            )
            batteries = tuple(BatterySpec(**b) for b in data.get("batteries", []))
        except (KeyError, TypeError) as exc:
            raise CatalogError(f"Malformed catalog entry: {exc}") from exc
        return cls(panels=panels, inverters=inverters, batteries=batteries)

    @classmethod
    def from_json(cls, path: str | Path) -> EquipmentCatalog:
        """Load a catalog from a JSON file with ``panels``, ``inverters``
        and ``batteries`` lists."""
        path = Path(path)
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
        catalog = cls.from_dict(data)
        logger.info(
            "Loaded catalog %s: %d panels, %d inverters, %d batteries",
            path.name,
            len(catalog.panels),
            len(catalog.inverters),
            len(catalog.batteries),
        )
        return catalog

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find_panel(self, panel_id: str) -> PanelSpec | None:
        for p in self.panels:
            if p.id == panel_id:
                return p
        return None

    def find_inverter(self, inverter_id: str) -> InverterSpec | None:
        for i in self.inverters:
            if i.id == inverter_id:
                return i
        return None

    def find_battery(self, battery_id: str | None) -> BatterySpec | None:
        if battery_id is None:
            return None
        for b in self.batteries:
            if b.id == battery_id:
                return b
        return None

    def panel(self, panel_id: str) -> PanelSpec:
        """Return the panel with ``panel_id`` or raise :class:`CatalogError`."""
        found = self.find_panel(panel_id)
        if found is None:
            raise CatalogError(f"Unknown panel '{panel_id}'")
        return found

    def inverter(self, inverter_id: str) -> InverterSpec:
        found = self.find_inverter(inverter_id)
        if found is None:
            raise CatalogError(f"Unknown inverter '{inverter_id}'")
        return found

    def battery(self, battery_id: str) -> BatterySpec:
        found = self.find_battery(battery_id)
        if found is None:
            raise CatalogError(f"Unknown battery '{battery_id}'")
        return found

    def to_dict(self) -> dict[str, list[dict]]:
        """Return the catalog as plain dicts for API responses."""
        return {
            "panels": [p.to_dict() for p in self.panels],
            "inverters": [i.to_dict() for i in self.inverters],
            "batteries": [b.to_dict() for b in self.batteries],
        }
