"""Battery storage for the energy balance."""

from .storage import BatteryBank

__all__ = ["BatteryBank"]
