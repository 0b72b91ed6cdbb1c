"""Low-precision solar position for twilight classification.

Accurate to a few tenths of a degree, which is enough to tell civil
twilight from daylight when deciding whether a sunlit satellite stands out
against a dark sky.
"""

import math
from datetime import datetime, timezone
from typing import Optional

from ..models.observer import Observer

DARK_SKY_SUN_ALTITUDE_DEG = -6.0

J2000_JD = 2451545.0
UNIX_EPOCH_JD = 2440587.5
OBLIQUITY_DEG = 23.439


def julian_date(when: datetime) -> float:
    """Julian date of a datetime (naive values are taken as UTC)."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.timestamp() / 86400.0 + UNIX_EPOCH_JD


def _days_since_j2000(when: datetime) -> float:
    return julian_date(when) - J2000_JD


def greenwich_sidereal_hours(when: datetime) -> float:
    """Greenwich mean sidereal time in hours, [0, 24)."""
    n = _days_since_j2000(when)
    return (18.697374558 + 24.06570982441908 * n) % 24.0


def _ecliptic_longitude_rad(n: float) -> float:
    mean_longitude = (280.460 + 0.9856474 * n) % 360.0
    mean_anomaly = math.radians((357.528 + 0.9856003 * n) % 360.0)
    return math.radians(
        mean_longitude
        + 1.915 * math.sin(mean_anomaly)
        + 0.020 * math.sin(2.0 * mean_anomaly)
    )


def solar_position(when: datetime) -> tuple[float, float]:
    """Geocentric right ascension and declination of the Sun.

    Returns:
        (right_ascension_deg in [0, 360), declination_deg)
    """
    n = _days_since_j2000(when)
    ecliptic_lon = _ecliptic_longitude_rad(n)
    eps = math.radians(OBLIQUITY_DEG)

    declination = math.asin(math.sin(eps) * math.sin(ecliptic_lon))
    right_ascension = math.atan2(
        math.cos(eps) * math.sin(ecliptic_lon), math.cos(ecliptic_lon)
    )
    return math.degrees(right_ascension) % 360.0, math.degrees(declination)


def sun_altitude(when: datetime, latitude: float, longitude: float) -> float:
    """Altitude of the Sun above the horizon in degrees.

    Args:
        when: Instant (timezone-aware, or naive UTC)
        latitude: Observer latitude in degrees
        longitude: Observer longitude in degrees (east positive)

    Returns:
        Solar altitude; negative below the horizon
    """
    ra_deg, dec_deg = solar_position(when)
    local_sidereal_hours = greenwich_sidereal_hours(when) + longitude / 15.0
    hour_angle = math.radians(local_sidereal_hours * 15.0 - ra_deg)

    lat = math.radians(latitude)
    dec = math.radians(dec_deg)
    sin_alt = math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(
        dec
    ) * math.cos(hour_angle)
    return math.degrees(math.asin(min(1.0, max(-1.0, sin_alt))))


def is_dark_enough(
    when: datetime, observer: Observer, threshold: Optional[float] = None
) -> bool:
    """True when the Sun is below the dark-sky threshold (civil twilight or darker)."""
    if threshold is None:
        threshold = DARK_SKY_SUN_ALTITUDE_DEG
    return sun_altitude(when, observer.latitude, observer.longitude) < threshold
