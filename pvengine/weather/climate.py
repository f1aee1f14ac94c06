"""Hourly climate records and latitude-based synthesis.

A :class:`ClimateRecord` holds three aligned 8760-hour series (ambient
temperature, global horizontal irradiance, relative humidity) for a
365-day year.  Index ``i`` is hour ``i % 24`` of day ``i // 24``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.typing import NDArray

HOURS_PER_YEAR: int = 8760
DAYS_PER_YEAR: int = 365

# Cumulative days at the start of each month (non-leap year).
MONTH_START_DAYS = np.array(
    [0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334, 365],
    dtype=np.int64,
)

# Synthesis reference: a sunny southern-European site at 37 deg N.
_REFERENCE_LATITUDE = 37.0
_TEMP_DROP_PER_DEGREE = 1.0        # degC per degree of latitude poleward
_RADIATION_DROP_PER_DEGREE = 0.025  # fraction per degree of latitude poleward
_REFERENCE_MEAN_TEMP = 18.0        # degC

# Haurwitz clear-sky GHI: A * sin(el) * exp(-B / sin(el)).
_CLEAR_SKY_GHI = 1098.0            # W/m2
_CLEAR_SKY_EXTINCTION = 0.057
_CLOUD_PROBABILITY = 0.2
_CLOUD_ATTENUATION = 0.2


@dataclass
class ClimateRecord:
    """Container for one year of hourly weather (8760 values per series)."""

    temperature: NDArray[np.float64]  # ambient dry-bulb (degC)
    irradiance: NDArray[np.float64]   # global horizontal irradiance (W/m2)
    humidity: NDArray[np.float64]     # relative humidity (%)
    latitude: float = 0.0
    source: str = "synthetic"

    def __post_init__(self) -> None:
        self.temperature = np.asarray(self.temperature, dtype=np.float64)
        self.irradiance = np.asarray(self.irradiance, dtype=np.float64)
        self.humidity = np.asarray(self.humidity, dtype=np.float64)

    def validate(self) -> None:
        """Validate that all three series have 8760 elements."""
        for name in ("temperature", "irradiance", "humidity"):
            arr = getattr(self, name)
            if arr.shape != (HOURS_PER_YEAR,):
                raise ValueError(
                    f"{name} has {arr.shape[0] if arr.ndim else 0} values, "
                    f"expected {HOURS_PER_YEAR}"
                )

    # ------------------------------------------------------------------
    # Monthly aggregates
    # ------------------------------------------------------------------

    @property
    def monthly_temperature(self) -> NDArray[np.float64]:
        """Mean ambient temperature per calendar month (degC)."""
        return _monthly_mean(self.temperature)

    @property
    def monthly_irradiance(self) -> NDArray[np.float64]:
        """Mean daily horizontal irradiation per month (kWh/m2/day)."""
        daily = self.irradiance.reshape(DAYS_PER_YEAR, 24).sum(axis=1) / 1000.0
        return np.array(
            [
                daily[MONTH_START_DAYS[m]:MONTH_START_DAYS[m + 1]].mean()
                for m in range(12)
            ],
            dtype=np.float64,
        )

    @property
    def monthly_humidity(self) -> NDArray[np.float64]:
        """Mean relative humidity per calendar month (%)."""
        return _monthly_mean(self.humidity)

    @property
    def annual_irradiation_kwh_m2(self) -> float:
        return float(self.irradiance.sum() / 1000.0)

    def summary(self) -> dict:
        return {
            "latitude": self.latitude,
            "source": self.source,
            "annual_irradiation_kwh_m2": round(self.annual_irradiation_kwh_m2, 1),
            "monthly_temperature": self.monthly_temperature.round(2).tolist(),
            "monthly_irradiance": self.monthly_irradiance.round(3).tolist(),
            "monthly_humidity": self.monthly_humidity.round(1).tolist(),
        }


def _monthly_mean(hourly: NDArray[np.float64]) -> NDArray[np.float64]:
    daily = hourly.reshape(DAYS_PER_YEAR, 24).mean(axis=1)
    return np.array(
        [daily[MONTH_START_DAYS[m]:MONTH_START_DAYS[m + 1]].mean() for m in range(12)],
        dtype=np.float64,
    )


def generate_climate(latitude: float, seed: Optional[int] = None) -> ClimateRecord:
    """Synthesise a plausible year of hourly weather from latitude alone.

    Irradiance follows the sun: each hour gets the Haurwitz clear-sky
    GHI for the mid-hour solar elevation, so it is zero exactly when
    :func:`~pvengine.solar.geometry.sun_position` puts the sun below the
    horizon.  Temperature falls by 1 degC and radiation by 2.5 % for every
    degree poleward of 37 deg.  Seasons are mirrored for the southern
    hemisphere.  Each hour gets +/-1 degC of temperature noise, +/-20 %
    radiation noise and a 20 % chance of heavy cloud.

    Parameters
    ----------
    latitude : float
        Site latitude in degrees (positive north).
    seed : int, optional
        Random seed.  The same seed always yields the same record.

    Returns
    -------
    ClimateRecord
    """
    # pvengine.solar imports the project model, which imports this module.
    from pvengine.solar.geometry import sun_position

    rng = np.random.default_rng(seed)

    lat_diff = max(0.0, abs(latitude) - _REFERENCE_LATITUDE)
    temp_reduction = lat_diff * _TEMP_DROP_PER_DEGREE
    rad_scale = max(0.0, 1.0 - lat_diff * _RADIATION_DROP_PER_DEGREE)
    base_temp = _REFERENCE_MEAN_TEMP - temp_reduction

    days = np.arange(DAYS_PER_YEAR, dtype=np.float64)[:, np.newaxis]
    hours = np.arange(24, dtype=np.float64)[np.newaxis, :]

    # Season: 0 in winter, 1 in summer; shifted half a year in the south.
    shift = 10.0 if latitude >= 0 else 10.0 + DAYS_PER_YEAR / 2.0
    season_norm = (-np.cos(2.0 * np.pi * (days + shift) / DAYS_PER_YEAR) + 1.0) / 2.0

    daily_avg_temp = base_temp - 5.0 + season_norm * 12.0
    daily_avg_hum = 80.0 - season_norm * 30.0

    hour_cycle = -np.cos(2.0 * np.pi * (hours - 4.0) / 24.0)

    temperature = daily_avg_temp + 5.0 * hour_cycle + rng.uniform(-1.0, 1.0, (DAYS_PER_YEAR, 24))

    # Same mid-hour convention as the simulator.
    elevation, _ = sun_position(latitude, days + 1.0, hours + 0.5)
    sin_elev = np.sin(np.radians(elevation))
    sun_up = sin_elev > 0.0
    sin_elev_safe = np.where(sun_up, sin_elev, 1.0)
    clear_sky = np.where(
        sun_up,
        _CLEAR_SKY_GHI * sin_elev * np.exp(-_CLEAR_SKY_EXTINCTION / sin_elev_safe),
        0.0,
    )
    irradiance = rad_scale * clear_sky * rng.uniform(0.8, 1.2, (DAYS_PER_YEAR, 24))
    cloudy = rng.random((DAYS_PER_YEAR, 24)) < _CLOUD_PROBABILITY
    irradiance = np.where(cloudy, irradiance * _CLOUD_ATTENUATION, irradiance)
    irradiance = np.maximum(irradiance, 0.0)

    humidity = daily_avg_hum - 10.0 * hour_cycle + rng.uniform(-5.0, 5.0, (DAYS_PER_YEAR, 24))
    humidity = np.clip(humidity, 20.0, 100.0)

    record = ClimateRecord(
        temperature=temperature.ravel(),
        irradiance=irradiance.ravel(),
        humidity=humidity.ravel(),
        latitude=latitude,
        source="synthetic",
    )
    record.validate()
    return record
