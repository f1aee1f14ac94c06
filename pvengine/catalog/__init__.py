"""Equipment catalog -- immutable datasheet entries and the injected registry."""

from .models import BatterySpec, InverterSpec, PanelSpec
from .library import (
    BATTERY_LIBRARY,
    INVERTER_LIBRARY,
    PANEL_LIBRARY,
    EquipmentCatalog,
)

__all__ = [
    "PanelSpec",
    "InverterSpec",
    "BatterySpec",
    "EquipmentCatalog",
    "PANEL_LIBRARY",
    "INVERTER_LIBRARY",
    "BATTERY_LIBRARY",
]
