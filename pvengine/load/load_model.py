"""Hourly load curves for the energy-balance simulator.

Creates 8760-element (one year, hourly resolution) load curves from
base/peak parameters and a behaviour template with day-type shaping, or
takes an imported curve, and scales either to a requested annual total.
:func:`resolve_load_curve` is the single step that turns a
:class:`~pvengine.project.LoadProfile` into the array the simulator uses.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from pvengine.errors import LoadProfileError

logger = logging.getLogger(__name__)

HOURS_PER_YEAR = 8760
DAYS_PER_YEAR = 365

# Lowest hourly demand before scaling (kW); stand-by never drops to zero.
MIN_HOURLY_KW = 0.1


def _hourly(default: float, *spans: tuple[int, int, float]) -> NDArray[np.float64]:
    """Build a 24-value factor template: ``default`` everywhere except the
    inclusive hour spans ``(first, last, factor)``, applied in order."""
    shape = np.full(24, default, dtype=np.float64)
    for first, last, factor in spans:
        shape[first:last + 1] = factor
    return shape


# ======================================================================
# Behaviour templates: fraction of the way from base to peak load
# ======================================================================

_PROFILES: dict[str, dict[str, NDArray[np.float64]]] = {
    # Domestic: morning and evening peaks on workdays, broad daytime at weekends.
    "default": {
        "workday": _hourly(0.1, (10, 17, 0.4), (7, 9, 0.9), (18, 22, 0.9)),
        "weekend": _hourly(0.1, (10, 21, 0.6)),
    },
    # School: classes 08-17, after-school 18-19, closed weekends and Jul/Aug.
    "school": {
        "workday": _hourly(0.1, (18, 19, 0.3), (8, 17, 0.9)),
        "weekend": _hourly(0.05),
        "summer": _hourly(0.05),
    },
    "office": {
        "workday": _hourly(0.1, (19, 20, 0.3), (8, 18, 0.9)),
        "weekend": _hourly(0.05),
    },
    # Hospital: 24/7 with a high night base.
    "hospital": {
        "workday": _hourly(0.6, (7, 20, 0.9)),
        "weekend": _hourly(0.6, (7, 20, 0.9)),
    },
    # Mall: seven days a week, long opening hours.
    "mall": {
        "workday": _hourly(0.2, (8, 9, 0.5), (10, 23, 0.95)),
        "weekend": _hourly(0.2, (8, 9, 0.5), (10, 23, 0.95)),
    },
    # Industrial: two shifts on workdays, idle weekends.
    "industrial": {
        "workday": _hourly(0.3, (6, 22, 0.9)),
        "weekend": _hourly(0.1),
    },
}

_ALIASES = {"domestic": "default", "residential": "default"}


# ======================================================================
# Public API
# ======================================================================


def available_behaviors() -> list[str]:
    return sorted(_PROFILES)


def generate_load_profile(
    annual_kwh: float,
    base_kw: float = 0.2,
    peak_kw: float = 2.5,
    behavior: str = "default",
    noise_factor: float = 0.075,
    seed: Optional[int] = None,
) -> NDArray[np.float64]:
    """Create an 8760-element hourly load curve.

    Parameters
    ----------
    annual_kwh : float
        Total energy consumption target for the year (kWh).
    base_kw, peak_kw : float
        Idle and peak demand (kW) that shape the curve before scaling.
    behavior : str
        One of :func:`available_behaviors` (``'default'`` is domestic).
    noise_factor : float
        Half-width of the uniform multiplicative noise applied to every
        hour.  ``0.0`` produces a deterministic curve.
    seed : int, optional
        Random seed for reproducibility.

    Returns
    -------
    NDArray[np.float64]
        Shape ``(8760,)`` array of hourly loads in kW whose sum equals
        ``annual_kwh``.

    Raises
    ------
    LoadProfileError
        If *behavior* is not recognised or *annual_kwh* is negative.
    """
    if annual_kwh < 0:
        raise LoadProfileError(f"annual_kwh must be >= 0, got {annual_kwh}")

    key = _ALIASES.get(behavior.lower(), behavior.lower())
    if key not in _PROFILES:
        raise LoadProfileError(
            f"Unknown behavior '{behavior}'. Choose from: {available_behaviors()}"
        )
    templates = _PROFILES[key]

    rng = np.random.default_rng(seed)

    # Day 0 is a Saturday; month approximated as 30.5 days.
    profile = np.empty(HOURS_PER_YEAR, dtype=np.float64)
    for day in range(DAYS_PER_YEAR):
        day_of_week = (day + 6) % 7  # 0 = Sunday, 6 = Saturday
        is_weekend = day_of_week in (0, 6)
        month = int(day // 30.5)
        is_summer = month in (6, 7)

        if is_summer and "summer" in templates:
            factors = templates["summer"]
        elif is_weekend:
            factors = templates["weekend"]
        else:
            factors = templates["workday"]

        profile[day * 24:(day + 1) * 24] = base_kw + (peak_kw - base_kw) * factors

    if noise_factor > 0:
        profile *= 1.0 + rng.uniform(-noise_factor, noise_factor, HOURS_PER_YEAR)

    profile = np.maximum(profile, MIN_HOURLY_KW)

    return scale_profile(profile, annual_kwh)


def scale_profile(
    base_profile: NDArray[np.float64],
    target_annual_kwh: float,
) -> NDArray[np.float64]:
    """Rescale an 8760-hour curve to sum to *target_annual_kwh*.

    The shape of the curve is kept; an all-zero or wrong-length curve
    raises :class:`LoadProfileError`.
    """
    curve = np.asarray(base_profile, dtype=np.float64)
    if curve.shape != (HOURS_PER_YEAR,):
        raise LoadProfileError(f"Load curve needs {HOURS_PER_YEAR} hourly values, got {curve.size}")
    total = float(curve.sum())
    if total == 0:
        raise LoadProfileError("Cannot rescale an all-zero load curve")
    return curve * (target_annual_kwh / total)


def resolve_load_curve(profile, seed: Optional[int] = None) -> NDArray[np.float64]:
    """Turn a :class:`~pvengine.project.LoadProfile` into an 8760-hour curve.

    An imported profile must carry exactly 8760 hourly values; it is
    scaled to ``annual_kwh`` when that is set and kept as-is otherwise.
    A simplified profile is synthesised from its base/peak parameters.
    This runs once per scenario, before the simulator.
    """
    hourly = profile.hourly_kw
    if profile.kind == "imported" or hourly is not None:
        if hourly is None:
            raise LoadProfileError("Imported load profile has no hourly data")
        hourly = np.asarray(hourly, dtype=np.float64)
        if hourly.shape != (HOURS_PER_YEAR,):
            raise LoadProfileError(
                f"Imported load profile has {hourly.size} values, expected {HOURS_PER_YEAR}"
            )
        if np.any(hourly < 0):
            raise LoadProfileError("Imported load profile contains negative values")
        if profile.annual_kwh is None or profile.annual_kwh <= 0:
            return hourly.copy()
        return scale_profile(hourly, profile.annual_kwh)

    if profile.annual_kwh is None:
        raise LoadProfileError("Simplified load profile needs annual_kwh")

    logger.debug(
        "Synthesising '%s' load curve: %.0f kWh/yr, base %.2f kW, peak %.2f kW",
        profile.behavior,
        profile.annual_kwh,
        profile.base_kw,
        profile.peak_kw,
    )
    return generate_load_profile(
        annual_kwh=profile.annual_kwh,
        base_kw=profile.base_kw,
        peak_kw=profile.peak_kw,
        behavior=profile.behavior,
        seed=seed,
    )


def parse_hourly_csv(csv_text: str, column: Optional[str] = None) -> NDArray[np.float64]:
    """Read an hourly load column (kW) from CSV text.

    Uses ``column`` when given, otherwise the last column of each row.
    A header row and non-numeric cells are skipped.

    Raises
    ------
    LoadProfileError
        If fewer than 8760 numeric values are found.
    """
    values: list[float] = []
    if column is not None:
        for row in csv.DictReader(io.StringIO(csv_text)):
            try:
                values.append(float(row[column]))
            except (KeyError, ValueError, TypeError):
                continue
    else:
        for row in csv.reader(io.StringIO(csv_text)):
            if not row:
                continue
            try:
                values.append(float(row[-1]))
            except ValueError:
                continue

    if len(values) < HOURS_PER_YEAR:
        raise LoadProfileError(
            f"Insufficient data: got {len(values)} hourly values, need {HOURS_PER_YEAR}"
        )
    return np.array(values[:HOURS_PER_YEAR], dtype=np.float64)
