from .geometry import (
    SHADING_MISMATCH_FACTOR,
    electrical_shading_loss,
    incident_radiation,
    recommended_row_spacing,
    shading_factor,
    sun_position,
)
from .layout import auto_fill, max_panels

__all__ = [
    "SHADING_MISMATCH_FACTOR",
    "auto_fill",
    "electrical_shading_loss",
    "incident_radiation",
    "max_panels",
    "recommended_row_spacing",
    "shading_factor",
    "sun_position",
]
