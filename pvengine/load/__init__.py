"""Load-curve synthesis, scaling and import."""

from .load_model import (
    available_behaviors,
    generate_load_profile,
    parse_hourly_csv,
    resolve_load_curve,
    scale_profile,
)

__all__ = [
    "available_behaviors",
    "generate_load_profile",
    "parse_hourly_csv",
    "resolve_load_curve",
    "scale_profile",
]
