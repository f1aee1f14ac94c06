"""String sizing, protection and inverter auto-fix."""

from .autofix import FixSuggestion, find_optimal_configuration, suggest_fix
from .strings import (
    ElectricalVerification,
    StringConfig,
    verify_electrical,
    verify_project,
)

__all__ = [
    "ElectricalVerification",
    "FixSuggestion",
    "StringConfig",
    "find_optimal_configuration",
    "suggest_fix",
    "verify_electrical",
    "verify_project",
]
