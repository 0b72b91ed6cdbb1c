"""Great-circle geometry on a spherical Earth."""

import math
from typing import Union

from ..models.geo import GeoPoint
from ..models.observer import Observer

EARTH_RADIUS_KM = 6371.0

Location = Union[GeoPoint, Observer]

COMPASS_16 = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)
COMPASS_8 = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def normalize_degrees(angle_deg: float) -> float:
    """Wrap an angle into [0, 360).

    Python's modulo of a tiny negative value can round up to exactly 360.0,
    so that case is folded back to 0.
    """
    wrapped = angle_deg % 360.0
    if wrapped >= 360.0:
        return 0.0
    return wrapped


def normalize_longitude(lon_deg: float) -> float:
    """Wrap a longitude into [-180, 180)."""
    return (lon_deg + 180.0) % 360.0 - 180.0


def angular_difference(target_deg: float, reference_deg: float) -> float:
    """Shortest signed turn from reference to target, in (-180, 180]."""
    diff = (target_deg - reference_deg) % 360.0
    if diff > 180.0:
        diff -= 360.0
    return diff


def distance(p1: Location, p2: Location) -> float:
    """Haversine great-circle distance in kilometres.

    Args:
        p1: First point (anything with latitude/longitude in degrees)
        p2: Second point

    Returns:
        Surface distance in km on a sphere of radius EARTH_RADIUS_KM
    """
    lat1 = math.radians(p1.latitude)
    lat2 = math.radians(p2.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(p2.longitude - p1.longitude)

    a = (
        math.sin(d_lat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2.0) ** 2
    )
    a = min(1.0, max(0.0, a))
    return EARTH_RADIUS_KM * 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


def destination_point(
    origin: Location, heading_deg: float, distance_km: float
) -> GeoPoint:
    """Point reached by travelling a great circle from origin.

    Args:
        origin: Start point
        heading_deg: Initial bearing, any value (normalized to [0, 360))
        distance_km: Distance along the surface in km

    Returns:
        GeoPoint with the origin's altitude
    """
    angular = distance_km / EARTH_RADIUS_KM
    bearing = math.radians(normalize_degrees(heading_deg))
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)

    sin_lat2 = math.sin(lat1) * math.cos(angular) + math.cos(lat1) * math.sin(
        angular
    ) * math.cos(bearing)
    lat2 = math.asin(min(1.0, max(-1.0, sin_lat2)))
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )

    latitude = min(90.0, max(-90.0, math.degrees(lat2)))
    return GeoPoint(
        latitude=latitude,
        longitude=normalize_longitude(math.degrees(lon2)),
        altitude_km=getattr(origin, "altitude_km", 0.0),
    )


def initial_bearing(p1: Location, p2: Location) -> float:
    """Initial great-circle bearing from p1 toward p2 in [0, 360)."""
    lat1 = math.radians(p1.latitude)
    lat2 = math.radians(p2.latitude)
    d_lon = math.radians(p2.longitude - p1.longitude)

    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        d_lon
    )
    return normalize_degrees(math.degrees(math.atan2(y, x)))


def bearing_to_cardinal(bearing_deg: float, points: int = 16) -> str:
    """Compass name for a bearing (16 or 8 point rose)."""
    if points == 16:
        names = COMPASS_16
    elif points == 8:
        names = COMPASS_8
    else:
        raise ValueError("points must be 8 or 16")

    sector = 360.0 / len(names)
    return names[int(round(normalize_degrees(bearing_deg) / sector)) % len(names)]
