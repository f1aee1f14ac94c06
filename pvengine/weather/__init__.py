"""Weather data module (climate records, latitude synthesis, EPW/CSV parsing)."""

from .climate import ClimateRecord, generate_climate
from .epw_parser import parse_epw, parse_generic_csv

__all__ = [
    "ClimateRecord",
    "generate_climate",
    "parse_epw",
    "parse_generic_csv",
]
