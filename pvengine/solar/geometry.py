"""
Solar geometry and plane-of-array irradiance.

Sun position from the Cooper declination approximation, transposition of
global horizontal irradiance onto a tilted plane with an isotropic sky,
and a two-dimensional inter-row shading model for panels mounted in rows.

Angle conventions
-----------------
- Elevation: degrees above the horizon.
- Azimuth (sun and panel): degrees from south, negative towards east,
  positive towards west.
- Tilt: degrees from horizontal.

All functions accept scalars or numpy arrays and broadcast like numpy
ufuncs.

References
----------
- Cooper P.I., "The absorption of radiation in solar stills", Solar
  Energy, 12(3):333-346, 1969.
- Duffie J.A., Beckman W.A., "Solar Engineering of Thermal Processes",
  Wiley, 2013 (isotropic-sky model, profile angle).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

# ---------------------------------------------------------------------------
# Model constants
# ---------------------------------------------------------------------------

# Fraction of GHI that is diffuse with the sun at zenith; rises to 1.0 at
# the horizon as (1 - sin(elevation))**DIFFUSE_FRACTION_EXPONENT.
DIFFUSE_FRACTION_ZENITH: float = 0.1
DIFFUSE_FRACTION_EXPONENT: float = 2.0

# Upper bound on cos(AOI) / sin(elevation).  Keeps beam transposition
# finite at grazing sun angles where GHI is tiny anyway.
MAX_BEAM_GAIN: float = 5.0

# Electrical mismatch amplification applied to the geometric shaded
# fraction.  A shaded cell drags its whole bypass-diode substring (and in
# series strings the whole string current) down, so the power loss is
# disproportionate to the shaded area.  Approximation only: real losses
# depend on the diode topology of each module.
SHADING_MISMATCH_FACTOR: float = 2.0

# Design condition for row spacing: winter solstice, 10:00 solar time.
DESIGN_HOUR: float = 10.0
WINTER_SOLSTICE_NORTH: int = 355
WINTER_SOLSTICE_SOUTH: int = 172

# Floor for the design profile angle where the winter sun barely rises.
MIN_DESIGN_PROFILE_ANGLE: float = 5.0


def declination(day_of_year: ArrayLike) -> NDArray[np.float64]:
    """Solar declination (degrees): 23.45 * sin(360/365 * (day - 81))."""
    day = np.asarray(day_of_year, dtype=np.float64)
    return 23.45 * np.sin(np.radians(360.0 / 365.0 * (day - 81.0)))


def sun_position(
    latitude: float,
    day_of_year: ArrayLike,
    hour: ArrayLike,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Compute solar elevation and azimuth.

    Parameters
    ----------
    latitude : float
        Site latitude in degrees (positive north).
    day_of_year : array_like
        Day of year (1-365).
    hour : array_like
        Solar time in hours (12 = solar noon).

    Returns
    -------
    elevation : ndarray
        Degrees above the horizon (negative at night).
    azimuth : ndarray
        Degrees from south in [-180, 180]; negative = east (morning),
        positive = west.  Computed as
        ``asin(cos(decl) * sin(hour_angle) / cos(elevation))`` and folded
        past +/-90 when the sun is on the polar side of the east-west
        line (summer mornings and evenings, or the whole day near the
        equator and in the southern hemisphere).
    """
    hour = np.asarray(hour, dtype=np.float64)

    decl_r = np.radians(declination(day_of_year))
    lat_r = np.radians(latitude)
    # Hour angle: solar noon = 0, morning negative
    ha_r = np.radians(15.0 * (hour - 12.0))

    sin_elev = (
        np.sin(lat_r) * np.sin(decl_r)
        + np.cos(lat_r) * np.cos(decl_r) * np.cos(ha_r)
    )
    elev_r = np.arcsin(np.clip(sin_elev, -1.0, 1.0))

    cos_elev = np.cos(elev_r)
    cos_elev_safe = np.where(np.abs(cos_elev) < 1e-9, 1e-9, cos_elev)
    sin_az = np.cos(decl_r) * np.sin(ha_r) / cos_elev_safe
    az_r = np.arcsin(np.clip(sin_az, -1.0, 1.0))

    # arcsin only covers the equator side of the east-west line; fold
    # into |azimuth| > 90 when the sun is on the polar side.
    cos_lat = np.cos(lat_r)
    cos_lat_safe = cos_lat if abs(cos_lat) > 1e-9 else 1e-9
    cos_az = (np.sin(elev_r) * np.sin(lat_r) - np.sin(decl_r)) / (cos_elev_safe * cos_lat_safe)
    polar_side = cos_az < 0.0
    folded = np.where(ha_r < 0.0, -np.pi, np.pi) - az_r
    az_r = np.where(polar_side, folded, az_r)

    return np.degrees(elev_r), np.degrees(az_r)


def cos_incidence(
    sun_elevation: ArrayLike,
    sun_azimuth: ArrayLike,
    tilt: float,
    panel_azimuth: float,
) -> NDArray[np.float64]:
    """Cosine of the angle of incidence between the sun and the panel normal.

    Negative values mean the sun is behind the panel plane.
    """
    el_r = np.radians(np.asarray(sun_elevation, dtype=np.float64))
    saz_r = np.radians(np.asarray(sun_azimuth, dtype=np.float64))
    tilt_r = np.radians(tilt)
    paz_r = np.radians(panel_azimuth)

    return (
        np.sin(el_r) * np.cos(tilt_r)
        + np.cos(el_r) * np.sin(tilt_r) * np.cos(saz_r - paz_r)
    )


def incident_radiation(
    ghi: ArrayLike,
    sun_elevation: ArrayLike,
    sun_azimuth: ArrayLike,
    tilt: float,
    panel_azimuth: float,
) -> NDArray[np.float64]:
    """Transpose global horizontal irradiance onto a tilted plane.

    The diffuse share of GHI grows as the sun drops
    (``kd = 0.1 + 0.9 * (1 - sin(elevation))**2``).  The beam part is
    projected with ``cos(AOI) / sin(elevation)``; the diffuse part uses an
    isotropic sky, weighted by the sky view factor ``(1 + cos(tilt)) / 2``.

    Parameters
    ----------
    ghi : array_like
        Global horizontal irradiance (W/m^2).
    sun_elevation, sun_azimuth : array_like
        Sun position from :func:`sun_position` (degrees).
    tilt, panel_azimuth : float
        Panel orientation (degrees).

    Returns
    -------
    ndarray
        Plane-of-array irradiance (W/m^2).  Zero at night and whenever
        the sun is behind the panel plane.
    """
    ghi = np.maximum(np.asarray(ghi, dtype=np.float64), 0.0)
    elev = np.asarray(sun_elevation, dtype=np.float64)

    sin_elev = np.sin(np.radians(elev))
    cos_aoi = cos_incidence(elev, sun_azimuth, tilt, panel_azimuth)

    kd = DIFFUSE_FRACTION_ZENITH + (1.0 - DIFFUSE_FRACTION_ZENITH) * (
        1.0 - np.clip(sin_elev, 0.0, 1.0)
    ) ** DIFFUSE_FRACTION_EXPONENT
    beam_horizontal = ghi * (1.0 - kd)
    diffuse_horizontal = ghi * kd

    sin_elev_safe = np.where(sin_elev > 1e-6, sin_elev, 1e-6)
    beam_gain = np.minimum(np.maximum(cos_aoi, 0.0) / sin_elev_safe, MAX_BEAM_GAIN)

    sky_view = (1.0 + np.cos(np.radians(tilt))) / 2.0
    poa = beam_horizontal * beam_gain + diffuse_horizontal * sky_view

    visible = (elev > 0.0) & (cos_aoi >= 0.0)
    return np.where(visible, poa, 0.0)


def profile_angle(
    sun_elevation: ArrayLike,
    sun_azimuth: ArrayLike,
    row_azimuth: float,
) -> NDArray[np.float64]:
    """Sun elevation projected onto the plane perpendicular to the rows.

    Returns degrees in (0, 90] while the sun is in front of the rows and
    up; 0 otherwise.
    """
    elev = np.asarray(sun_elevation, dtype=np.float64)
    cos_daz = np.cos(np.radians(np.asarray(sun_azimuth, dtype=np.float64) - row_azimuth))

    in_front = (elev > 0.0) & (cos_daz > 1e-9)
    cos_daz_safe = np.where(in_front, cos_daz, 1.0)
    angle = np.degrees(np.arctan(np.tan(np.radians(np.clip(elev, 0.0, 89.999))) / cos_daz_safe))
    return np.where(in_front, angle, 0.0)


def shadow_length(
    sun_elevation: ArrayLike,
    sun_azimuth: ArrayLike,
    tilt: float,
    row_azimuth: float,
    panel_height: float,
) -> NDArray[np.float64]:
    """Horizontal shadow cast behind a row by its vertical rise (m).

    Zero when the sun is down or behind the row.
    """
    rise = panel_height * np.sin(np.radians(tilt))
    p = profile_angle(sun_elevation, sun_azimuth, row_azimuth)
    lit = p > 0.0
    tan_p = np.tan(np.radians(np.where(lit, p, 45.0)))
    return np.where(lit, rise / tan_p, 0.0)


def shading_factor(
    latitude: float,
    day_of_year: ArrayLike,
    hour: ArrayLike,
    segment,
    panel_height: float,
) -> NDArray[np.float64]:
    """Geometric fraction of a row shaded by the row in front of it.

    The shadow cast by one row's vertical rise is compared with the
    segment's inter-row gap.  When the gap is longer than the shadow the
    factor is 0; otherwise it is the overlap divided by the panel height,
    capped at 1.  The sun behind the panel plane (azimuth difference of
    90 degrees or more) yields 0: self-shading by the panel's own tilt is
    already covered by :func:`incident_radiation` returning 0.

    Parameters
    ----------
    latitude : float
        Site latitude (degrees).
    day_of_year, hour : array_like
        Day of year (1-365) and solar hour.
    segment : RoofSegment
        Provides ``tilt``, ``azimuth`` and ``row_spacing``.
    panel_height : float
        Slant length of a panel along the tilt direction (m).

    Returns
    -------
    ndarray
        Shaded fraction in [0, 1].
    """
    if panel_height <= 0:
        return np.zeros(np.broadcast(np.asarray(day_of_year), np.asarray(hour)).shape)

    elev, az = sun_position(latitude, day_of_year, hour)
    shadow = shadow_length(elev, az, segment.tilt, segment.azimuth, panel_height)
    overlap = shadow - max(0.0, segment.row_spacing)
    return np.clip(overlap / panel_height, 0.0, 1.0)


def electrical_shading_loss(
    geometric_fraction: ArrayLike,
    mismatch_factor: float = SHADING_MISMATCH_FACTOR,
) -> NDArray[np.float64]:
    """Production loss fraction caused by a geometric shaded fraction.

    ``min(1, geometric_fraction * mismatch_factor)``; see
    :data:`SHADING_MISMATCH_FACTOR`.
    """
    frac = np.asarray(geometric_fraction, dtype=np.float64)
    return np.clip(frac * mismatch_factor, 0.0, 1.0)


def recommended_row_spacing(
    latitude: float,
    tilt: float,
    azimuth: float,
    panel_height: float,
) -> float:
    """Row gap (m) that avoids inter-row shading on the design day.

    The design condition is the winter solstice (day 355 in the northern
    hemisphere, day 172 in the southern) at 10:00 solar time.  Where the
    sun is behind the rows at that moment no gap is needed and 0 is
    returned.  At polar latitudes the profile angle is floored at
    :data:`MIN_DESIGN_PROFILE_ANGLE`.
    """
    day = WINTER_SOLSTICE_NORTH if latitude >= 0 else WINTER_SOLSTICE_SOUTH
    elev, az = sun_position(latitude, day, DESIGN_HOUR)

    cos_daz = float(np.cos(np.radians(float(az) - azimuth)))
    if float(elev) > 0.0 and cos_daz <= 0.0:
        return 0.0

    rise = panel_height * np.sin(np.radians(tilt))
    p = max(float(profile_angle(elev, az, azimuth)), MIN_DESIGN_PROFILE_ANGLE)
    return float(rise / np.tan(np.radians(p)))
