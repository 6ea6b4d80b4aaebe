# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Heliospheric reference geometry.

Physical constants plus a circular-orbit approximation of Earth's
heliocentric longitude. Accuracy is ~2 degrees (eccentricity ignored),
sufficient for deciding whether a CME cone sweeps over Earth.

No external dependencies beyond numpy: only stdlib datetime.
"""
from datetime import datetime, timezone

import numpy as np

AU_KM: float = 149_597_870.7  # Astronomical unit in km

EARTH_ORBITAL_PERIOD_DAYS: float = 365.25

# Heliocentric mean longitude of Earth at J2000.0: the Sun's geocentric
# mean longitude (280.4665 deg) plus 180 deg.
EARTH_LONGITUDE_J2000_DEG: float = 100.4665

_J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
_SECONDS_PER_DAY = 86400.0


def _as_utc(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware (treat naive as UTC)."""
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def earth_heliocentric_longitude_deg(epoch: datetime) -> float:
    """Earth's heliocentric ecliptic longitude on a circular orbit.

    Args:
        epoch: UTC datetime (naive values are treated as UTC).

    Returns:
        Longitude in degrees, normalized to [0, 360).
    """
    days = (_as_utc(epoch) - _J2000).total_seconds() / _SECONDS_PER_DAY
    mean_motion_deg_per_day = 360.0 / EARTH_ORBITAL_PERIOD_DAYS
    return (EARTH_LONGITUDE_J2000_DEG + mean_motion_deg_per_day * days) % 360.0


def angular_separation_deg(
    lon1_deg: float,
    lat1_deg: float,
    lon2_deg: float,
    lat2_deg: float,
) -> float:
    """Great-circle angle between two directions on the unit sphere.

    Uses the Vincenty form, which stays well conditioned for both tiny
    and near-antipodal separations.
    """
    lon1, lat1, lon2, lat2 = np.radians([lon1_deg, lat1_deg, lon2_deg, lat2_deg])
    dlon = lon2 - lon1
    num = np.hypot(
        np.cos(lat2) * np.sin(dlon),
        np.cos(lat1) * np.sin(lat2) - np.sin(lat1) * np.cos(lat2) * np.cos(dlon),
    )
    den = np.sin(lat1) * np.sin(lat2) + np.cos(lat1) * np.cos(lat2) * np.cos(dlon)
    return float(np.degrees(np.arctan2(num, den)))


def km_to_au(distance_km: float) -> float:
    """Convert km to astronomical units."""
    return distance_km / AU_KM
