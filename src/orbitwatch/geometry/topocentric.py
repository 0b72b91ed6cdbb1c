"""Observer-relative look angles for a body with a known geographic fix."""

import logging
import math
from datetime import datetime
from typing import Callable, Optional

import numpy as np

from ..errors import NoEphemerisSolutionError
from ..models.geo import GeoPoint, LookAngle
from ..models.observer import Observer
from .geodesy import EARTH_RADIUS_KM, distance, normalize_degrees

logger = logging.getLogger(__name__)

Ephemeris = Callable[[datetime], Optional[GeoPoint]]


def azimuth(observer: Observer, body: GeoPoint) -> float:
    """Azimuth from the observer to the body's sub-point, [0, 360), 0 = north."""
    obs_lat = math.radians(observer.latitude)
    body_lat = math.radians(body.latitude)
    d_lon = math.radians(body.longitude - observer.longitude)

    y = math.sin(d_lon) * math.cos(body_lat)
    x = math.cos(obs_lat) * math.sin(body_lat) - math.sin(obs_lat) * math.cos(
        body_lat
    ) * math.cos(d_lon)
    return normalize_degrees(math.degrees(math.atan2(y, x)))


def elevation(observer: Observer, body: GeoPoint) -> float:
    """Elevation angle from a flat triangle of altitude difference over ground distance.

    Valid while the ground distance is small compared to the Earth's radius,
    which holds for every pass bright enough to spot.
    """
    altitude_diff = body.altitude_km - observer.altitude_km
    ground_distance = distance(observer, body)
    return math.degrees(math.atan2(altitude_diff, ground_distance))


def _to_cartesian(latitude: float, longitude: float, altitude_km: float) -> np.ndarray:
    r = EARTH_RADIUS_KM + altitude_km
    lat = np.radians(latitude)
    lon = np.radians(longitude)
    return np.array(
        [
            r * np.cos(lat) * np.cos(lon),
            r * np.cos(lat) * np.sin(lon),
            r * np.sin(lat),
        ],
        dtype=np.float64,
    )


def slant_range(observer: Observer, body: GeoPoint) -> float:
    """Straight-line distance in km between observer and body."""
    o = _to_cartesian(observer.latitude, observer.longitude, observer.altitude_km)
    s = _to_cartesian(body.latitude, body.longitude, body.altitude_km)
    return float(np.linalg.norm(s - o))


def look_angle(observer: Observer, body: GeoPoint, when: datetime) -> LookAngle:
    """Azimuth, elevation and slant range of the body at one instant."""
    return LookAngle(
        azimuth_deg=azimuth(observer, body),
        elevation_deg=elevation(observer, body),
        range_km=slant_range(observer, body),
        timestamp=when,
    )


class TopocentricProjector:
    """Binds an observer to an ephemeris and yields look angles per instant."""

    def __init__(self, observer: Observer, ephemeris: Ephemeris):
        self.observer = observer
        self.ephemeris = ephemeris

    def at(self, when: datetime) -> Optional[LookAngle]:
        """Look angle at `when`, or None when the ephemeris has no solution."""
        try:
            body = self.ephemeris(when)
        except NoEphemerisSolutionError as e:
            logger.debug("No ephemeris solution: %s", e.message)
            return None

        if body is None:
            return None

        return look_angle(self.observer, body, when)
