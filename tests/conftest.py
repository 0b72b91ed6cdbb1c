import math
from datetime import datetime, timedelta, timezone

import pytest

from orbitwatch.config import ScanConfig
from orbitwatch.geometry.geodesy import destination_point
from orbitwatch.models import GeoPoint, LookAngle, Observer, Pass

# Local midnight (PST) in Mountain View, Sun well below -6°
NIGHT = datetime(2026, 1, 15, 8, 0, tzinfo=timezone.utc)
# Local solar noon in Mountain View around the June solstice
NOON = datetime(2026, 6, 21, 20, 8, tzinfo=timezone.utc)

GROUND_RANGE_KM = 500.0


def body_at(observer, az, el, ground_km=GROUND_RANGE_KM):
    """GeoPoint that the flat-triangle elevation puts at exactly (az, el)."""
    ground = destination_point(observer, az, ground_km)
    altitude = observer.altitude_km + ground_km * math.tan(math.radians(el))
    return GeoPoint(ground.latitude, ground.longitude, altitude)


def profile_ephemeris(observer, origin, profile):
    """Ephemeris driven by a (seconds since origin) -> (az, el) or None profile."""

    def ephemeris(when):
        sample = profile((when - origin).total_seconds())
        if sample is None:
            return None
        return body_at(observer, *sample)

    return ephemeris


def arc_profile(duration_s=360.0, peak_el=52.0, az=180.0):
    """Elevation rising from 0 to `peak_el` and back over `duration_s`, -10 outside."""

    def profile(t):
        if 0.0 <= t <= duration_s:
            return az, peak_el * math.sin(math.pi * t / duration_s)
        return az, -10.0

    return profile


def short_window(minutes=20.0, **kwargs):
    return ScanConfig(horizon_days=minutes * 60.0 / 86400.0, **kwargs)


def make_pass(rise, duration_s=300.0, max_el=52.0, rise_az=200.0, set_az=80.0, n=11):
    step = duration_s / (n - 1)
    points = tuple(
        LookAngle(
            azimuth_deg=(rise_az + (set_az - rise_az) * i / (n - 1)) % 360.0,
            elevation_deg=10.0 + (max_el - 10.0) * math.sin(math.pi * i / (n - 1)),
            range_km=800.0,
            timestamp=rise + timedelta(seconds=step * i),
        )
        for i in range(n)
    )
    peak = points[n // 2]
    return Pass(
        rise_time=rise,
        rise_az=rise_az,
        max_el_time=peak.timestamp,
        max_el=max_el,
        max_el_az=peak.azimuth_deg,
        set_time=rise + timedelta(seconds=duration_s),
        set_az=set_az,
        points=points,
    )


@pytest.fixture
def observer():
    """Mountain View, CA."""
    return Observer(latitude=37.386, longitude=-122.084, altitude_km=0.04)


@pytest.fixture
def sample_pass():
    return make_pass(NIGHT + timedelta(minutes=5))
